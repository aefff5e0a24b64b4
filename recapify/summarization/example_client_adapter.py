"""Offline summarization client for local development and tests."""

from typing import ClassVar

from recapify.summarization.client_base import BaseSummarizationClient
from recapify.summarization.models import RemoteFile, RemoteFileState


class ExampleClientAdapter(BaseSummarizationClient):
    """Returns a fixed summary without any network calls."""

    DEFAULT_RESPONSE: ClassVar[str] = (
        "This document was summarized by the offline example client.\n\n"
        "Key points:\n"
        "- The pipeline extracted the document text\n"
        "- The summary was produced without calling a model\n"
    )

    def __init__(self) -> None:
        self._files: dict[str, RemoteFile] = {}

    def generate_from_text(self, *, model: str, prompt: str) -> str:
        _ = model, prompt
        return self.DEFAULT_RESPONSE

    def upload_file(self, *, data: bytes, filename: str, mime_type: str) -> RemoteFile:
        _ = data
        remote = RemoteFile(
            id=f"files/{filename}", state=RemoteFileState.ACTIVE, mime_type=mime_type
        )
        self._files[remote.id] = remote
        return remote

    def get_file(self, file_id: str) -> RemoteFile:
        return self._files[file_id]

    def generate_from_file(self, *, model: str, file: RemoteFile, prompt: str) -> str:
        _ = model, file, prompt
        return self.DEFAULT_RESPONSE

    def delete_file(self, file_id: str) -> None:
        self._files.pop(file_id, None)
