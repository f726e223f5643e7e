"""Deadline and cancellation carried through provider calls."""
import threading
import time
from typing import Optional

from cluster_hibernation.domain.core.exceptions import DeadlineExceededError, OperationCancelledError

# Upper bound for any single external call.
DEFAULT_CALL_TIMEOUT_SECONDS = 60.0


class CallContext:
    """
    Caller-supplied deadline and cancellation signal.

    Adapters call ``check`` before every external call and use
    ``call_timeout`` as the transport timeout, so a call never outlives the
    context's deadline or the per-call bound.
    """

    def __init__(self,
                 timeout: Optional[float] = None,
                 per_call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS,
                 cancel_event: Optional[threading.Event] = None):
        """
        Initialize call context.

        Args:
            timeout: Overall budget in seconds, None for no overall deadline
            per_call_timeout: Bound for each individual external call
            cancel_event: Event set by the caller to cancel the operation
        """
        if per_call_timeout <= 0:
            raise ValueError("per_call_timeout must be positive")
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.per_call_timeout = per_call_timeout
        self._cancel_event = cancel_event or threading.Event()

    @classmethod
    def background(cls) -> "CallContext":
        """Context without an overall deadline."""
        return cls()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        self._cancel_event.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str) -> None:
        """
        Raise if the context is cancelled or past its deadline.

        Raises:
            OperationCancelledError: If the caller cancelled
            DeadlineExceededError: If the deadline passed
        """
        if self.cancelled:
            raise OperationCancelledError(operation)
        if self.expired():
            raise DeadlineExceededError(operation)

    def call_timeout(self) -> float:
        """Timeout to use for the next external call."""
        remaining = self.remaining()
        if remaining is None:
            return self.per_call_timeout
        return min(self.per_call_timeout, remaining)
