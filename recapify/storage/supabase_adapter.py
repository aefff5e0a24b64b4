import httpx

from recapify.logging.logger import Log
from recapify.storage.base import BaseStorage, StoredObject, build_object_path
from recapify.storage.exceptions import StorageError


class SupabaseStorage(BaseStorage):
    """Stores objects in a Supabase Storage bucket through its REST API."""

    def __init__(
        self,
        *,
        url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: int = 60,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._bucket = bucket
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
            "X-Client-Info": "recapify-worker",
        }

    def store(
        self,
        data: bytes,
        suggested_name: str,
        owner_id: str,
        content_type: str,
        folder: str = "",
    ) -> StoredObject:
        ref = build_object_path(owner_id, suggested_name, folder)
        Log.info(
            f"Uploading {suggested_name} ({round(len(data) / 1024)} KB) to {self._bucket}/{ref}"
        )
        try:
            response = self._client.post(
                f"{self._url}/storage/v1/object/{self._bucket}/{ref}",
                headers={**self._headers, "Content-Type": content_type, "x-upsert": "false"},
                content=data,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to upload {ref}: {exc}") from exc
        return StoredObject(url=self.public_url(ref), ref=ref, size_bytes=len(data))

    def load(self, ref: str) -> bytes:
        try:
            response = self._client.get(
                f"{self._url}/storage/v1/object/{self._bucket}/{ref}",
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to download {ref}: {exc}") from exc
        return response.content

    def delete(self, ref: str) -> bool:
        try:
            response = self._client.request(
                "DELETE",
                f"{self._url}/storage/v1/object/{self._bucket}",
                headers=self._headers,
                json={"prefixes": [ref]},
            )
            response.raise_for_status()
            removed = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            Log.warning(f"Failed to delete {ref}: {exc}")
            return False
        if not removed:
            return False
        Log.info(f"Deleted {self._bucket}/{ref}")
        return True

    def public_url(self, ref: str) -> str:
        return f"{self._url}/storage/v1/object/public/{self._bucket}/{ref}"
