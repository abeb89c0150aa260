"""Shared upstream error-budget tracking.

ESI allows a limited number of error responses per rolling window and
reports what is left through response headers. One tracker is built per
process and injected into every component that sends requests.
"""

import threading
from datetime import UTC, datetime

import httpx

from esigate.fetch.cache import HeaderMap
from esigate.fetch.constants import (
    BUDGET_GATE_THRESHOLD,
    HEADER_ERROR_LIMIT_REMAIN,
    HEADER_ERROR_LIMIT_RESET,
    HEADER_ERROR_LIMIT_WINDOW,
)
from esigate.fetch.errors import ErrorBudgetExhaustedError
from esigate.fetch.models import ErrorBudget


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class ErrorBudgetTracker:
    """Thread-safe holder of the current error budget.

    Only the upstream's own headers ever change the budget; nothing resets
    it locally.
    """

    def __init__(self, gate_threshold: int = BUDGET_GATE_THRESHOLD) -> None:
        """Initialize the tracker.

        Args:
            gate_threshold: ``check`` raises when fewer errors than this
                remain.
        """
        self._budget = ErrorBudget()
        self._gate_threshold = gate_threshold
        self._lock = threading.Lock()

    def snapshot(self) -> ErrorBudget:
        """Return the current budget."""
        with self._lock:
            return self._budget

    def check(self) -> None:
        """Advisory gate for bulk callers.

        Raises:
            ErrorBudgetExhaustedError: If the budget is known and nearly
                spent.
        """
        with self._lock:
            budget = self._budget
        if 0 < budget.remain < self._gate_threshold:
            reset = budget.reset.isoformat() if budget.reset else "unknown"
            raise ErrorBudgetExhaustedError(budget.remain, reset)

    def update_from_headers(self, headers: HeaderMap) -> ErrorBudget | None:
        """Update the budget from ``X-ESI-Error-Limit-*`` headers.

        Args:
            headers: Response headers.

        Returns:
            The new budget if the remain header was present and valid,
            otherwise None.
        """
        normalized = httpx.Headers(headers)
        remain = _parse_int(normalized.get(HEADER_ERROR_LIMIT_REMAIN))
        reset = _parse_int(normalized.get(HEADER_ERROR_LIMIT_RESET))
        window = _parse_int(normalized.get(HEADER_ERROR_LIMIT_WINDOW))

        with self._lock:
            updates: dict[str, object] = {}
            if remain is not None:
                updates["remain"] = remain
            if reset is not None:
                updates["reset"] = datetime.fromtimestamp(reset, UTC)
            if window is not None:
                updates["window"] = window
            if updates:
                self._budget = self._budget.model_copy(update=updates)
            current = self._budget

        return current if remain is not None else None
