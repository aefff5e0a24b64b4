import re
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class StoredObject:
    """Where an uploaded object lives: public URL plus backend reference."""

    url: str
    ref: str
    size_bytes: int


def build_object_path(owner_id: str, suggested_name: str, folder: str = "") -> str:
    """`{folder/}{owner_id}/{millis}-{random}-{sanitized name}`."""
    sanitized = _UNSAFE_CHARS.sub("_", suggested_name) or "file"
    owner = _UNSAFE_CHARS.sub("_", owner_id)
    path = f"{owner}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{sanitized}"
    return f"{folder}/{path}" if folder else path


class BaseStorage(ABC):
    """Contract for object storage backends."""

    @abstractmethod
    def store(
        self,
        data: bytes,
        suggested_name: str,
        owner_id: str,
        content_type: str,
        folder: str = "",
    ) -> StoredObject:
        """Persist bytes and return their location.

        Raises:
            StorageError: if the upload fails.
        """

    @abstractmethod
    def load(self, ref: str) -> bytes:
        """Read back a stored object.

        Raises:
            StorageError: if the object is missing or unreadable.
        """

    @abstractmethod
    def delete(self, ref: str) -> bool:
        """Remove an object. Idempotent: returns False instead of raising when
        the object is already gone or the backend refuses."""
