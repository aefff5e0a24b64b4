from pathlib import Path

from recapify.logging.logger import Log
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import RetryExhaustedError
from recapify.resilience.retry import BackoffPolicy, retry_call
from recapify.summarization.base import BaseSummarizer
from recapify.summarization.client_base import BaseSummarizationClient
from recapify.summarization.exceptions import ModelUnavailableError, SummarizationError
from recapify.summarization.models import SummarizationOutput, SummarizationSource
from recapify.summarization.prompt_loader import load_prompt


class TextModeSummarizer(BaseSummarizer):
    """Summarizes already-extracted text, truncated to `max_chars` when set."""

    requires_text = True

    def __init__(
        self,
        *,
        client: BaseSummarizationClient,
        model: str,
        retry_policy: BackoffPolicy,
        max_chars: int | None = 1_000_000,
        prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._retry_policy = retry_policy
        self._max_chars = max_chars
        self._prompt_template = load_prompt("text_prompt", prompt_path)

    def summarize(
        self,
        source: SummarizationSource,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> SummarizationOutput:
        if source.text is None:
            raise SummarizationError("Text-mode summarization needs extracted text")

        text = source.text
        truncated = False
        if self._max_chars is not None and len(text) > self._max_chars:
            text = text[: self._max_chars]
            truncated = True
            Log.warning(
                f"Input truncated from {len(source.text)} to {self._max_chars} chars"
            )

        prompt = self._prompt_template.format(document_text=text)
        Log.debug(f"Summarization prompt is {len(prompt)} chars")

        try:
            raw = retry_call(
                lambda: self._client.generate_from_text(model=self._model, prompt=prompt),
                self._retry_policy,
                retry_on=(ModelUnavailableError,),
                description="Summarization request",
                cancel_token=cancel_token,
            )
        except RetryExhaustedError as exc:
            raise ModelUnavailableError(str(exc)) from exc

        Log.info(f"Summarization response received for {len(text)} input chars")
        return SummarizationOutput(raw_text=raw, truncated=truncated, text_length=len(text))
