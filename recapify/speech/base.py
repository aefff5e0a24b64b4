from abc import ABC, abstractmethod
from typing import ClassVar

import httpx

from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.speech.exceptions import (
    EndpointMismatchError,
    SpeechSynthesisError,
    TransientSpeechError,
)


class BaseSpeechBackend(ABC):
    """Contract for text-to-speech backends.

    `VOICES` maps logical voice names ("female-1", "male-1", ...) to the
    identifiers the backend expects.
    """

    VOICES: ClassVar[dict[str, str]] = {}
    DEFAULT_VOICE: ClassVar[str] = "female-1"
    AUDIO_FORMAT: ClassVar[str] = "mp3"

    @property
    def name(self) -> str:
        return type(self).__name__

    def resolve_voice(self, voice: str) -> str:
        """Map a logical voice to a backend id; unknown voices get the default."""
        if voice in self.VOICES:
            return self.VOICES[voice]
        if voice in self.VOICES.values():
            return voice
        return self.VOICES[self.DEFAULT_VOICE]

    @abstractmethod
    def synthesize(
        self,
        text: str,
        voice_id: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> bytes:
        """Synthesize one chunk of text into audio bytes.

        Raises:
            TransientSpeechError: on network errors, rate limits, or 5xx.
            EndpointMismatchError: on redirect loops or a missing versioned endpoint.
            SpeechTaskFailedError / SpeechTimeoutError: for asynchronous tasks.
            SpeechSynthesisError: on any other backend rejection.
        """


def send_request(client: httpx.Client, method: str, url: str, **kwargs: object) -> httpx.Response:
    """Send a request and classify failures into the speech error taxonomy."""
    try:
        response = client.request(method, url, **kwargs)  # type: ignore[arg-type]
    except httpx.TooManyRedirects as exc:
        raise EndpointMismatchError(f"Redirect loop at {url}: {exc}") from exc
    except httpx.TransportError as exc:
        raise TransientSpeechError(f"Network error calling {url}: {exc}") from exc

    status = response.status_code
    if status == 404 or status == 410:
        raise EndpointMismatchError(f"Endpoint {url} returned {status}")
    if status == 429 or status >= 500:
        raise TransientSpeechError(f"Backend returned {status} for {url}")
    if status >= 400:
        raise SpeechSynthesisError(
            f"Backend rejected request to {url} with {status}: {response.text[:200]}"
        )
    return response
