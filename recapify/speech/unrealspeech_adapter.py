from typing import Any, ClassVar

import httpx

from recapify.logging.logger import Log
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import PollTimeoutError
from recapify.resilience.retry import BackoffPolicy, poll_until
from recapify.speech.base import BaseSpeechBackend, send_request
from recapify.speech.exceptions import (
    SpeechSynthesisError,
    SpeechTaskFailedError,
    SpeechTimeoutError,
)


class UnrealSpeechBackend(BaseSpeechBackend):
    """Asynchronous backend: submit a synthesis task, poll it, then fetch the output."""

    VOICES: ClassVar[dict[str, str]] = {
        "female-1": "Scarlett",
        "female-2": "Liv",
        "female-3": "Amy",
        "male-1": "Dan",
        "male-2": "Will",
    }

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_seconds: int,
        poll_policy: BackoffPolicy,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._poll_policy = poll_policy
        self._client = http_client or httpx.Client(
            timeout=timeout_seconds, follow_redirects=True, max_redirects=5
        )

    @property
    def name(self) -> str:
        return f"UnrealSpeech({self._base_url})"

    def synthesize(
        self,
        text: str,
        voice_id: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> bytes:
        cancel_token.raise_if_cancelled()
        task_id = self._submit(text, voice_id)
        Log.debug(f"Submitted synthesis task {task_id} ({len(text)} chars)")
        try:
            task = poll_until(
                lambda: self._fetch_task(task_id),
                self._is_finished,
                self._poll_policy,
                description=f"Synthesis task {task_id}",
                cancel_token=cancel_token,
            )
        except PollTimeoutError as exc:
            raise SpeechTimeoutError(str(exc)) from exc
        return self._download(self._output_uri(task, task_id))

    def _submit(self, text: str, voice_id: str) -> str:
        response = send_request(
            self._client,
            "POST",
            f"{self._base_url}/synthesisTasks",
            headers=self._headers(),
            json={
                "Text": text,
                "VoiceId": voice_id,
                "Bitrate": "192k",
                "AudioFormat": self.AUDIO_FORMAT,
                "OutputFormat": "uri",
            },
        )
        task = self._task_from(response)
        task_id = task.get("TaskId")
        if not task_id:
            raise SpeechSynthesisError("Synthesis task response has no TaskId")
        return str(task_id)

    def _fetch_task(self, task_id: str) -> dict[str, Any]:
        response = send_request(
            self._client,
            "GET",
            f"{self._base_url}/synthesisTasks",
            headers=self._headers(),
            params={"TaskId": task_id},
        )
        return self._task_from(response)

    @staticmethod
    def _is_finished(task: dict[str, Any]) -> bool:
        status = str(task.get("TaskStatus", "")).lower()
        if status == "failed":
            raise SpeechTaskFailedError(f"Synthesis task {task.get('TaskId')} failed")
        return status == "completed"

    @staticmethod
    def _output_uri(task: dict[str, Any], task_id: str) -> str:
        uri = task.get("OutputUri")
        if isinstance(uri, list):
            uri = uri[0] if uri else None
        if not uri:
            raise SpeechSynthesisError(f"Completed task {task_id} has no OutputUri")
        return str(uri)

    def _download(self, uri: str) -> bytes:
        return send_request(self._client, "GET", uri).content

    @staticmethod
    def _task_from(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise SpeechSynthesisError(f"Invalid JSON from synthesis API: {exc}") from exc
        task = payload.get("SynthesisTask") if isinstance(payload, dict) else None
        if not isinstance(task, dict):
            raise SpeechSynthesisError("Synthesis API response has no SynthesisTask")
        return task

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}
