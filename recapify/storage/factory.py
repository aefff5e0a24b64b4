from pathlib import Path

from recapify.config.settings import Settings
from recapify.storage.base import BaseStorage
from recapify.storage.local_adapter import LocalStorage
from recapify.storage.supabase_adapter import SupabaseStorage


class StorageFactory:
    """Creates the configured storage backend."""

    @classmethod
    def create(cls, settings: Settings) -> BaseStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalStorage(
                root=Path(settings.storage_local_root),
                public_base_url=settings.storage_public_base_url,
            )
        if backend == "supabase":
            if not settings.supabase_url or not settings.supabase_service_key:
                raise ValueError("supabase_url and supabase_service_key are required")
            return SupabaseStorage(
                url=settings.supabase_url,
                service_key=settings.supabase_service_key,
                bucket=settings.supabase_bucket,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: ['local', 'supabase']"
        )
