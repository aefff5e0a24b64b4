from recapify.config.settings import Settings
from recapify.resilience.retry import BackoffPolicy
from recapify.speech.base import BaseSpeechBackend
from recapify.speech.elevenlabs_adapter import ElevenLabsBackend
from recapify.speech.example_adapter import ExampleSpeechBackend
from recapify.speech.synthesizer import SpeechSynthesizer
from recapify.speech.unrealspeech_adapter import UnrealSpeechBackend


class SpeechSynthesizerFactory:
    """Creates the configured speech synthesizer."""

    @classmethod
    def create(cls, settings: Settings) -> SpeechSynthesizer:
        provider = settings.speech_provider.lower()
        primary, fallback = cls._create_backends(provider, settings)
        return SpeechSynthesizer(
            backend=primary,
            fallback_backend=fallback,
            retry_policy=BackoffPolicy(
                initial_delay=settings.speech_retry_initial_delay_seconds,
                max_attempts=settings.speech_max_attempts,
            ),
            chunk_size=settings.speech_chunk_size,
            max_parallel_chunks=settings.speech_max_parallel_chunks,
        )

    @classmethod
    def _create_backends(
        cls, provider: str, settings: Settings
    ) -> tuple[BaseSpeechBackend, BaseSpeechBackend | None]:
        if provider == "example":
            return ExampleSpeechBackend(), None
        if provider == "elevenlabs":
            if not settings.elevenlabs_api_key:
                raise ValueError("elevenlabs_api_key is required for speech_provider=elevenlabs")

            def elevenlabs(base_url: str) -> BaseSpeechBackend:
                return ElevenLabsBackend(
                    api_key=settings.elevenlabs_api_key,
                    base_url=base_url,
                    timeout_seconds=settings.speech_timeout_seconds,
                )

            fallback_url = settings.elevenlabs_fallback_base_url
            return (
                elevenlabs(settings.elevenlabs_base_url),
                elevenlabs(fallback_url) if fallback_url else None,
            )
        if provider == "unrealspeech":
            if not settings.unrealspeech_api_key:
                raise ValueError(
                    "unrealspeech_api_key is required for speech_provider=unrealspeech"
                )
            poll_policy = BackoffPolicy(
                initial_delay=settings.speech_poll_initial_delay_seconds,
                max_delay=settings.speech_poll_max_delay_seconds,
                max_attempts=settings.speech_poll_max_attempts,
            )

            def unrealspeech(base_url: str) -> BaseSpeechBackend:
                return UnrealSpeechBackend(
                    api_key=settings.unrealspeech_api_key,
                    base_url=base_url,
                    timeout_seconds=settings.speech_timeout_seconds,
                    poll_policy=poll_policy,
                )

            fallback_url = settings.unrealspeech_fallback_base_url
            return (
                unrealspeech(settings.unrealspeech_base_url),
                unrealspeech(fallback_url) if fallback_url else None,
            )
        raise ValueError(
            f"Unknown speech provider '{provider}'. "
            "Choose from: ['elevenlabs', 'example', 'unrealspeech']"
        )
