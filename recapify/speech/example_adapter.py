"""Offline speech backend for local development and tests."""

from typing import ClassVar

from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.speech.base import BaseSpeechBackend


class ExampleSpeechBackend(BaseSpeechBackend):
    """Returns deterministic placeholder bytes instead of real audio."""

    VOICES: ClassVar[dict[str, str]] = {
        "female-1": "example-female-1",
        "male-1": "example-male-1",
    }

    def synthesize(
        self,
        text: str,
        voice_id: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> bytes:
        cancel_token.raise_if_cancelled()
        return f"[{voice_id}]{text}".encode()
