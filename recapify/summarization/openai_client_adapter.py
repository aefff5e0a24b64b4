import httpx
import openai

from recapify.logging.logger import Log
from recapify.summarization.client_base import BaseSummarizationClient
from recapify.summarization.exceptions import (
    InputTooLargeError,
    MalformedModelResponseError,
    ModelUnavailableError,
    SummarizationError,
)
from recapify.summarization.models import RemoteFile, RemoteFileState

_FILE_STATES = {
    "uploaded": RemoteFileState.PROCESSING,
    "processing": RemoteFileState.PROCESSING,
    "processed": RemoteFileState.ACTIVE,
    "active": RemoteFileState.ACTIVE,
    "error": RemoteFileState.FAILED,
    "failed": RemoteFileState.FAILED,
}


class OpenAIClientAdapter(BaseSummarizationClient):
    """Summarization client built on the OpenAI-compatible chat and files API.

    Gemini is reached through its OpenAI-compatible endpoint.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def generate_from_text(self, *, model: str, prompt: str) -> str:
        return self._complete(model, [{"type": "text", "text": prompt}])

    def upload_file(self, *, data: bytes, filename: str, mime_type: str) -> RemoteFile:
        try:
            uploaded = self._client.files.create(
                file=(filename, data, mime_type),
                purpose="user_data",
            )
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ModelUnavailableError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ModelUnavailableError(f"AI provider API error: {exc}") from exc
        try:
            return self._to_remote_file(uploaded.id, uploaded.status, mime_type)
        except SummarizationError:
            # The caller never sees this id, so it cannot delete the upload itself.
            self._discard_upload(uploaded.id)
            raise

    def get_file(self, file_id: str) -> RemoteFile:
        try:
            info = self._client.files.retrieve(file_id)
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ModelUnavailableError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ModelUnavailableError(f"AI provider API error: {exc}") from exc
        return self._to_remote_file(info.id, info.status, None)

    def generate_from_file(self, *, model: str, file: RemoteFile, prompt: str) -> str:
        return self._complete(
            model,
            [
                {"type": "file", "file": {"file_id": file.id}},
                {"type": "text", "text": prompt},
            ],
        )

    def delete_file(self, file_id: str) -> None:
        try:
            self._client.files.delete(file_id)
        except (openai.APIError, httpx.TransportError) as exc:
            raise ModelUnavailableError(f"Failed to delete remote file {file_id}: {exc}") from exc

    def _discard_upload(self, file_id: str) -> None:
        try:
            self.delete_file(file_id)
        except ModelUnavailableError as exc:
            Log.warning(f"Failed to discard upload {file_id}: {exc}")

    def _complete(self, model: str, content: list[dict[str, object]]) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],  # type: ignore[list-item]
            )
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ModelUnavailableError(f"AI provider network error: {exc}") from exc
        except openai.BadRequestError as exc:
            if "context_length" in str(exc) or "too large" in str(exc).lower():
                raise InputTooLargeError(f"AI provider rejected input size: {exc}") from exc
            raise SummarizationError(f"AI provider rejected the request: {exc}") from exc
        except openai.APIError as exc:
            raise ModelUnavailableError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise MalformedModelResponseError("AI returned no choices")
        content_out = response.choices[0].message.content
        if not isinstance(content_out, str):
            raise MalformedModelResponseError("AI returned a non-text response")
        return content_out

    @staticmethod
    def _to_remote_file(file_id: str, status: str, mime_type: str | None) -> RemoteFile:
        state = _FILE_STATES.get(status.lower())
        if state is None:
            raise SummarizationError(f"Unknown remote file status '{status}'")
        return RemoteFile(id=file_id, state=state, mime_type=mime_type)
