import threading
from collections.abc import Iterator
from contextlib import contextmanager

from recapify.processor.exceptions import StateConflictError


class DocumentLocks:
    """Single in-flight operation per document id within this process.

    Acquisition never blocks: a second caller for a held id is rejected.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._held: set[str] = set()

    def try_acquire(self, document_id: str) -> bool:
        with self._lock:
            if document_id in self._held:
                return False
            self._held.add(document_id)
            return True

    def release(self, document_id: str) -> None:
        with self._lock:
            self._held.discard(document_id)

    @contextmanager
    def hold(self, document_id: str) -> Iterator[None]:
        """Raises:
        StateConflictError: if another operation holds this document.
        """
        if not self.try_acquire(document_id):
            raise StateConflictError(
                f"Document {document_id} already has a summarization in flight"
            )
        try:
            yield
        finally:
            self.release(document_id)
