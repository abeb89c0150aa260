"""Retry client with status-differentiated exponential backoff.

The backoff policy lives in ``classify``, a pure function of the outcome
and attempt index, so timing is testable without real sleeps. The
``RetryClient`` applies it around an ``httpx.Client`` and keeps the shared
error budget up to date from every chargeable response.
"""

from collections.abc import Callable

import httpx
import structlog

from esigate.fetch.budget import ErrorBudgetTracker
from esigate.fetch.constants import (
    BUDGET_WARNING_THRESHOLD,
    ERROR_LIMITED_BACKOFF_CAP_SECONDS,
    ERROR_LIMITED_BACKOFF_UNIT_SECONDS,
    HTTP_STATUS_ESI_ERROR_LIMITED,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    SERVER_ERROR_BACKOFF_CAP_SECONDS,
    TOO_MANY_REQUESTS_BACKOFF_CAP_SECONDS,
    TRANSPORT_BACKOFF_CAP_SECONDS,
)
from esigate.fetch.context import CallContext, cancellable_sleep
from esigate.fetch.errors import (
    RequestCancelledError,
    RetryExhaustedError,
    TransportError,
)
from esigate.fetch.metrics import FetchMetrics
from esigate.fetch.models import ErrorBudget, FetchErrorClass, RetryDecision
from esigate.fetch.redact import redact_headers, redact_token


logger = structlog.get_logger()

Sleeper = Callable[[float, CallContext | None], None]


def classify(outcome: int | BaseException, attempt: int) -> RetryDecision:
    """Decide whether and when to retry.

    Args:
        outcome: Response status code, or the transport exception raised.
        attempt: Current attempt number (0-indexed).

    Returns:
        Terminal decision, or a retry after the backoff for this outcome.
    """
    factor = 2**attempt

    if isinstance(outcome, BaseException):
        return RetryDecision.after(min(factor, TRANSPORT_BACKOFF_CAP_SECONDS))

    if outcome == HTTP_STATUS_ESI_ERROR_LIMITED:
        # ESI's own hard throttle backs off in minutes
        return RetryDecision.after(
            min(
                factor * ERROR_LIMITED_BACKOFF_UNIT_SECONDS,
                ERROR_LIMITED_BACKOFF_CAP_SECONDS,
            )
        )
    if outcome >= HTTP_STATUS_SERVER_ERROR_MIN:
        return RetryDecision.after(min(factor, SERVER_ERROR_BACKOFF_CAP_SECONDS))
    if outcome == HTTP_STATUS_TOO_MANY_REQUESTS:
        return RetryDecision.after(min(factor, TOO_MANY_REQUESTS_BACKOFF_CAP_SECONDS))

    return RetryDecision.terminal()


def clone_request(request: httpx.Request) -> httpx.Request:
    """Copy a request so every attempt sends unconsumed headers and body."""
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=request.content,
        extensions=dict(request.extensions),
    )


class RetryClient:
    """Executes requests with bounded retries and error-budget tracking."""

    def __init__(
        self,
        http_client: httpx.Client,
        budget: ErrorBudgetTracker,
        *,
        enforce_error_budget: bool = False,
        budget_warning_threshold: int = BUDGET_WARNING_THRESHOLD,
        sleeper: Sleeper = cancellable_sleep,
    ) -> None:
        """Initialize the retry client.

        Args:
            http_client: Client used to send each attempt.
            budget: Process-wide error budget tracker.
            enforce_error_budget: Run the advisory budget gate before every
                attempt instead of leaving it to callers.
            budget_warning_threshold: Log a warning when the remaining
                budget falls to this value or below.
            sleeper: Cancellable sleep used for backoff.
        """
        self._http = http_client
        self._budget = budget
        self._enforce_error_budget = enforce_error_budget
        self._warning_threshold = budget_warning_threshold
        self._sleep = sleeper
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="retry")

    @property
    def budget(self) -> ErrorBudgetTracker:
        """The error budget tracker this client updates."""
        return self._budget

    def do_with_retry(
        self,
        request: httpx.Request,
        max_retries: int,
        ctx: CallContext | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transport errors and 420/429/5xx.

        Args:
            request: Request to send; it is cloned for every attempt.
            max_retries: Retries allowed after the first attempt.
            ctx: Call context for cancellation and caller identity.

        Returns:
            The first response with a non-retryable status (2xx, 304 or
            other 4xx). Interpreting it is up to the caller.

        Raises:
            TransportError: Network failure on the last attempt.
            RetryExhaustedError: Retryable status on the last attempt.
            RequestCancelledError: Context cancelled during backoff.
            ErrorBudgetExhaustedError: Budget gate tripped (only when
                ``enforce_error_budget`` is set).
        """
        endpoint = redact_token(str(request.url))
        log = self._log.bind(method=request.method, url=endpoint)
        log.debug("request_start", headers=redact_headers(dict(request.headers)))
        attempt = 0

        while True:
            if self._enforce_error_budget:
                self._budget.check()

            try:
                response = self._http.send(clone_request(request))
            except httpx.TransportError as e:
                if attempt >= max_retries:
                    self._metrics.record_failure(FetchErrorClass.TRANSPORT)
                    log.error("request_failed", attempts=attempt + 1, error=str(e))
                    raise TransportError(endpoint, attempt + 1, str(e)) from e
                self._backoff(classify(e, attempt), attempt, ctx, endpoint, log)
                attempt += 1
                continue

            status = response.status_code
            self._metrics.record_request(status)

            # 404s do not count against the error budget; 403s do
            if status != HTTP_STATUS_NOT_FOUND:
                self._update_budget(response.headers, ctx, log)

            decision = classify(status, attempt)
            if not decision.retry:
                return response

            response.close()
            if attempt >= max_retries:
                self._metrics.record_failure(FetchErrorClass.RETRY_EXHAUSTED)
                log.error("retries_exhausted", status_code=status, attempts=attempt + 1)
                raise RetryExhaustedError(endpoint, status, attempt + 1)

            log.warning(
                "retry_backoff",
                status_code=status,
                attempt=attempt,
                delay_seconds=decision.delay_seconds,
            )
            self._backoff(decision, attempt, ctx, endpoint, log)
            attempt += 1

    def _backoff(
        self,
        decision: RetryDecision,
        attempt: int,
        ctx: CallContext | None,
        endpoint: str,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Sleep for a retry decision, honouring cancellation."""
        self._metrics.record_retry()
        log.debug(
            "retry_attempt", attempt=attempt + 1, delay_seconds=decision.delay_seconds
        )
        try:
            self._sleep(decision.delay_seconds, ctx)
        except RequestCancelledError as e:
            self._metrics.record_failure(FetchErrorClass.CANCELLED)
            raise RequestCancelledError(endpoint) from e

    def _update_budget(
        self,
        headers: httpx.Headers,
        ctx: CallContext | None,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Update the shared budget and flag a nearly exhausted one."""
        budget = self._budget.update_from_headers(headers)
        if budget is None or budget.remain > self._warning_threshold:
            return
        self._log_low_budget(budget, ctx, log)

    @staticmethod
    def _log_low_budget(
        budget: ErrorBudget,
        ctx: CallContext | None,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        user = ctx.user if ctx is not None else None
        log.error(
            "esi_error_limit_low",
            x_esi_error_limit_remain=budget.remain,
            user_id=user.user_id if user else "unknown",
            character_id=user.character_id if user else 0,
            character_name=user.character_name if user else "unknown",
            reset_time=budget.reset.isoformat() if budget.reset else None,
            window=budget.window,
        )
