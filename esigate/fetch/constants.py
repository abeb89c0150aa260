"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Codes
HTTP_STATUS_OK = 200
HTTP_STATUS_NOT_MODIFIED = 304
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_ESI_ERROR_LIMITED = 420
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Request limits
MAX_AFFILIATION_IDS = 1000

# Upstream defaults
DEFAULT_BASE_URL = "https://esi.evetech.net"
DEFAULT_USER_AGENT = "esigate/0.1.0 contact@example.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3

# Cache expiry
DEFAULT_CACHE_SECONDS = 5
MIN_REDIS_TTL_SECONDS = 5
REDIS_KEY_PREFIX = "esi:cache:"
# Expired entries with validators are kept this long for 304 revalidation
EXPIRED_ENTRY_GRACE_SECONDS = 60 * 60

# Backoff caps (seconds)
TRANSPORT_BACKOFF_CAP_SECONDS = 10
SERVER_ERROR_BACKOFF_CAP_SECONDS = 30
TOO_MANY_REQUESTS_BACKOFF_CAP_SECONDS = 60
ERROR_LIMITED_BACKOFF_UNIT_SECONDS = 60
ERROR_LIMITED_BACKOFF_CAP_SECONDS = 10 * 60

# Error budget thresholds
BUDGET_WARNING_THRESHOLD = 50
BUDGET_GATE_THRESHOLD = 10

# Response headers
HEADER_ERROR_LIMIT_REMAIN = "X-ESI-Error-Limit-Remain"
HEADER_ERROR_LIMIT_RESET = "X-ESI-Error-Limit-Reset"
HEADER_ERROR_LIMIT_WINDOW = "X-ESI-Error-Limit-Window"
HEADER_PAGES = "X-Pages"
