"""Redaction helpers for headers, URLs and cache keys."""

import hashlib
import re


# Headers that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "set-cookie",
    }
)

REDACTED_VALUE = "[REDACTED]"

_TOKEN_PARAM_PATTERN = re.compile(r"([?&]token=)[^&]*")


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Original headers dictionary.

    Returns:
        New dictionary with sensitive values redacted.
    """
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_token(value: str) -> str:
    """Redact a ``token=`` query parameter from a URL or cache key.

    Args:
        value: URL or cache key that may embed a bearer token.

    Returns:
        The value with the token replaced by [REDACTED].
    """
    return _TOKEN_PARAM_PATTERN.sub(rf"\1{REDACTED_VALUE}", value)


def token_fingerprint(token: str) -> str:
    """Hash a bearer token for use in cache keys.

    Args:
        token: Bearer token.

    Returns:
        Hex SHA-256 digest of the token.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
