from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import httpx

from recapify.logging.logger import Log
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import PollTimeoutError, RetryExhaustedError
from recapify.resilience.retry import BackoffPolicy, poll_until, retry_call
from recapify.summarization.base import BaseSummarizer
from recapify.summarization.client_base import BaseSummarizationClient
from recapify.summarization.exceptions import ModelUnavailableError, SummarizationError
from recapify.summarization.models import (
    RemoteFile,
    RemoteFileState,
    SummarizationOutput,
    SummarizationSource,
)
from recapify.summarization.prompt_loader import load_prompt

T = TypeVar("T")

MIME_TYPES_BY_EXTENSION: dict[str, str] = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
}


def mime_type_from_url(url: str) -> str:
    extension = url.rsplit("/", 1)[-1].rsplit(".", 1)[-1].lower() if "." in url else ""
    return MIME_TYPES_BY_EXTENSION.get(extension, "application/pdf")


class FileModeSummarizer(BaseSummarizer):
    """Summarizes the original file by handing it to the model's file store.

    Flow: download -> upload -> poll until processed -> generate -> delete.
    The remote copy is deleted whatever the outcome of generation.
    """

    requires_text = False

    def __init__(
        self,
        *,
        client: BaseSummarizationClient,
        model: str,
        retry_policy: BackoffPolicy,
        poll_policy: BackoffPolicy,
        http_client: httpx.Client,
        prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._retry_policy = retry_policy
        self._poll_policy = poll_policy
        self._http = http_client
        self._prompt = load_prompt("file_prompt", prompt_path)

    def summarize(
        self,
        source: SummarizationSource,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> SummarizationOutput:
        if not source.file_url:
            raise SummarizationError("File-mode summarization needs a file URL")

        file_url = source.file_url
        data = self._with_retries(
            lambda: self._download(file_url), f"Download of {file_url}", cancel_token
        )
        mime_type = source.mime_type or mime_type_from_url(file_url)
        filename = file_url.rsplit("/", 1)[-1] or "document.pdf"
        Log.info(f"Downloaded {filename} ({round(len(data) / 1024)} KB) for summarization")

        remote = self._with_retries(
            lambda: self._client.upload_file(data=data, filename=filename, mime_type=mime_type),
            f"Upload of {filename}",
            cancel_token,
        )
        Log.info(f"Uploaded {filename} to AI file store as {remote.id}")
        try:
            ready = self._wait_until_processed(remote, cancel_token)
            raw = self._generate(ready, cancel_token)
        finally:
            self._cleanup(remote.id)

        Log.info(f"Summarization response received for file {filename}")
        return SummarizationOutput(raw_text=raw, truncated=False, text_length=None)

    def _download(self, url: str) -> bytes:
        try:
            response = self._http.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ModelUnavailableError(f"Failed to fetch file {url}: {exc}") from exc
        return response.content

    def _wait_until_processed(
        self, remote: RemoteFile, cancel_token: CancellationToken
    ) -> RemoteFile:
        if remote.state is RemoteFileState.ACTIVE:
            return remote
        try:
            ready = poll_until(
                lambda: self._with_retries(
                    lambda: self._client.get_file(remote.id),
                    f"Status check of {remote.id}",
                    cancel_token,
                ),
                lambda info: info.state is not RemoteFileState.PROCESSING,
                self._poll_policy,
                description=f"Remote file {remote.id}",
                cancel_token=cancel_token,
            )
        except PollTimeoutError as exc:
            raise ModelUnavailableError(str(exc)) from exc
        if ready.state is RemoteFileState.FAILED:
            raise ModelUnavailableError(f"AI backend failed to process file {remote.id}")
        return RemoteFile(id=ready.id, state=ready.state, mime_type=remote.mime_type)

    def _generate(self, remote: RemoteFile, cancel_token: CancellationToken) -> str:
        return self._with_retries(
            lambda: self._client.generate_from_file(
                model=self._model, file=remote, prompt=self._prompt
            ),
            "Summarization request",
            cancel_token,
        )

    def _with_retries(
        self, operation: Callable[[], T], description: str, cancel_token: CancellationToken
    ) -> T:
        try:
            return retry_call(
                operation,
                self._retry_policy,
                retry_on=(ModelUnavailableError,),
                description=description,
                cancel_token=cancel_token,
            )
        except RetryExhaustedError as exc:
            raise ModelUnavailableError(str(exc)) from exc

    def _cleanup(self, file_id: str) -> None:
        try:
            self._client.delete_file(file_id)
        except SummarizationError as exc:
            Log.warning(f"Failed to delete remote file {file_id}: {exc}")
            return
        Log.info(f"Cleaned up remote file {file_id}")
