from abc import ABC, abstractmethod

from recapify.summarization.models import RemoteFile


class BaseSummarizationClient(ABC):
    """Contract for provider-specific summarization AI clients."""

    @abstractmethod
    def generate_from_text(self, *, model: str, prompt: str) -> str:
        """Return the model's reply to a text prompt."""

    @abstractmethod
    def upload_file(self, *, data: bytes, filename: str, mime_type: str) -> RemoteFile:
        """Upload a file to the provider's file store."""

    @abstractmethod
    def get_file(self, file_id: str) -> RemoteFile:
        """Fetch the current processing state of an uploaded file."""

    @abstractmethod
    def generate_from_file(self, *, model: str, file: RemoteFile, prompt: str) -> str:
        """Return the model's reply to a prompt that references an uploaded file."""

    @abstractmethod
    def delete_file(self, file_id: str) -> None:
        """Remove an uploaded file from the provider's file store."""
