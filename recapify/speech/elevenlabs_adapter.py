from typing import ClassVar

import httpx

from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.speech.base import BaseSpeechBackend, send_request


class ElevenLabsBackend(BaseSpeechBackend):
    """Synchronous backend: the response body is the audio itself."""

    VOICES: ClassVar[dict[str, str]] = {
        "female-1": "21m00Tcm4TlvDq8ikWAM",
        "female-2": "AZnzlk1XvdvUeBnXmlld",
        "male-1": "pNInz6obpgDQGcFmaJgB",
        "male-2": "ErXwobaYiN019PkySvjV",
    }
    MODEL_ID: ClassVar[str] = "eleven_monolingual_v1"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_seconds: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.Client(
            timeout=timeout_seconds, follow_redirects=True, max_redirects=5
        )

    @property
    def name(self) -> str:
        return f"ElevenLabs({self._base_url})"

    def synthesize(
        self,
        text: str,
        voice_id: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> bytes:
        cancel_token.raise_if_cancelled()
        response = send_request(
            self._client,
            "POST",
            f"{self._base_url}/text-to-speech/{voice_id}",
            headers={
                "Content-Type": "application/json",
                "xi-api-key": self._api_key,
                "Accept": "audio/mpeg",
            },
            json={
                "text": text,
                "model_id": self.MODEL_ID,
                "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
            },
        )
        return response.content
