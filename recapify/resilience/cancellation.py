import threading

from recapify.resilience.exceptions import OperationCancelledError


class CancellationToken:
    """Cooperative cancellation shared between a caller and its waits.

    Waits go through `sleep`, which returns early once the token is
    cancelled, so a polling loop stops within one backoff interval.
    Cancelling a token also cancels every child created from it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: list["CancellationToken"] = []

    def cancel(self) -> None:
        with self._lock:
            self._event.set()
            children = list(self._children)
        for child in children:
            child.cancel()

    def child(self) -> "CancellationToken":
        token = CancellationToken()
        with self._lock:
            if not self._event.is_set():
                self._children.append(token)
                return token
        token.cancel()
        return token

    def detach(self, child: "CancellationToken") -> None:
        """Stop propagating cancellation to a finished child."""
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation cancelled")

    def sleep(self, seconds: float) -> None:
        """Block for `seconds` unless cancelled first.

        Raises:
            OperationCancelledError: if the token is or becomes cancelled.
        """
        if self._event.wait(timeout=max(seconds, 0.0)):
            raise OperationCancelledError("Operation cancelled while waiting")


NEVER_CANCELLED = CancellationToken()
