from typing import ClassVar

import httpx

from recapify.config.settings import Settings
from recapify.resilience.retry import BackoffPolicy
from recapify.summarization.base import BaseSummarizer
from recapify.summarization.client_base import BaseSummarizationClient
from recapify.summarization.example_client_adapter import ExampleClientAdapter
from recapify.summarization.file_summarizer import FileModeSummarizer
from recapify.summarization.openai_client_adapter import OpenAIClientAdapter
from recapify.summarization.text_summarizer import TextModeSummarizer


class SummarizerFactory:
    """Creates the configured summarization strategy."""

    BASE_URLS: ClassVar[dict[str, str | None]] = {
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "openai": None,
    }
    MODES: ClassVar[tuple[str, ...]] = ("text", "file")

    @classmethod
    def create(cls, settings: Settings) -> BaseSummarizer:
        provider = settings.summarization_provider.lower()
        mode = settings.summarization_mode.lower()
        if mode not in cls.MODES:
            raise ValueError(
                f"Unknown summarization mode '{mode}'. Choose from: {list(cls.MODES)}"
            )

        client = cls._create_client(provider, settings)
        model = cls._resolve_model_name(provider, settings)
        retry_policy = BackoffPolicy(
            initial_delay=settings.summarization_retry_initial_delay_seconds,
            max_attempts=settings.summarization_max_attempts,
        )
        if mode == "text":
            return TextModeSummarizer(
                client=client,
                model=model,
                retry_policy=retry_policy,
                max_chars=settings.summarization_max_chars or None,
            )
        return FileModeSummarizer(
            client=client,
            model=model,
            retry_policy=retry_policy,
            poll_policy=BackoffPolicy(
                initial_delay=settings.summarization_file_poll_interval_seconds,
                max_attempts=settings.summarization_file_poll_max_attempts,
                multiplier=1.0,
            ),
            http_client=httpx.Client(
                timeout=settings.summarization_timeout_seconds,
                follow_redirects=True,
            ),
        )

    @classmethod
    def _create_client(cls, provider: str, settings: Settings) -> BaseSummarizationClient:
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=settings.summarization_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai_compatible":
            url = (settings.summarization_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "summarization_openai_compatible_base_url is required for "
                    "summarization_provider=openai_compatible"
                )
            return url
        if provider in cls.BASE_URLS:
            return cls.BASE_URLS[provider]
        supported = ["example", "openai_compatible", *sorted(cls.BASE_URLS)]
        raise ValueError(
            f"Unknown summarization provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "gemini": settings.summarization_gemini_api_key,
            "openai": settings.summarization_openai_api_key,
            "openai_compatible": settings.summarization_openai_compatible_api_key,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "example": "example",
            "gemini": settings.summarization_gemini_model_name,
            "openai": settings.summarization_openai_model_name,
            "openai_compatible": settings.summarization_openai_compatible_model_name,
        }
        return key_map.get(provider, "") or ""
