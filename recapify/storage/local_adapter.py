from pathlib import Path

from recapify.logging.logger import Log
from recapify.storage.base import BaseStorage, StoredObject, build_object_path
from recapify.storage.exceptions import StorageError


class LocalStorage(BaseStorage):
    """Stores objects under a directory on the local filesystem."""

    def __init__(self, root: Path, public_base_url: str) -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")

    def store(
        self,
        data: bytes,
        suggested_name: str,
        owner_id: str,
        content_type: str,
        folder: str = "",
    ) -> StoredObject:
        ref = build_object_path(owner_id, suggested_name, folder)
        path = self._resolve(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {ref}: {exc}") from exc
        Log.info(f"Stored {suggested_name} ({len(data)} bytes, {content_type}) at {ref}")
        return StoredObject(url=f"{self._public_base_url}/{ref}", ref=ref, size_bytes=len(data))

    def load(self, ref: str) -> bytes:
        path = self._resolve(ref)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {ref}: {exc}") from exc

    def delete(self, ref: str) -> bool:
        path = self._resolve(ref)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            Log.warning(f"Failed to delete {ref}: {exc}")
            return False
        Log.info(f"Deleted {ref}")
        return True

    def _resolve(self, ref: str) -> Path:
        path = (self._root / ref).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise StorageError(f"Reference escapes storage root: {ref}")
        return path
