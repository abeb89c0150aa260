"""Per-call context: caller identity and cancellation.

A ``CallContext`` travels with a single upstream call. It identifies the
tenant on whose behalf the call is made, so error-budget warnings can be
attributed, and it owns the event used to cancel backoff sleeps.
"""

import threading
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from esigate.fetch.errors import RequestCancelledError


class AuthenticatedUser(BaseModel):
    """Identity of the user and character behind a call."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    character_id: int = 0
    character_name: str = ""


@dataclass
class CallContext:
    """Caller identity plus a cancellation signal.

    Attributes:
        user: Authenticated caller, if known.
        cancel_event: Set to abort any pending backoff sleep.
    """

    user: AuthenticatedUser | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def cancel(self) -> None:
        """Signal cancellation to every sleep waiting on this context."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        """Check whether the context has been cancelled."""
        return self.cancel_event.is_set()


def cancellable_sleep(seconds: float, ctx: CallContext | None) -> None:
    """Sleep for ``seconds`` unless the context is cancelled first.

    Args:
        seconds: Delay in seconds.
        ctx: Call context whose cancel event is raced against the timer.

    Raises:
        RequestCancelledError: If the context was cancelled before the
            delay elapsed.
    """
    event = ctx.cancel_event if ctx is not None else threading.Event()
    if event.wait(timeout=seconds):
        raise RequestCancelledError
