from abc import ABC, abstractmethod

from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.summarization.models import SummarizationOutput, SummarizationSource


class BaseSummarizer(ABC):
    """Summarization strategy, chosen once at startup."""

    #: True when the strategy summarizes extracted text, False when it sends the file.
    requires_text: bool = True

    @abstractmethod
    def summarize(
        self,
        source: SummarizationSource,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> SummarizationOutput:
        """Return the raw model output for a document.

        Raises:
            ModelUnavailableError: if the backend keeps failing or times out.
            InputTooLargeError: if the backend rejects the input size.
            MalformedModelResponseError: if the output is not text.
            OperationCancelledError: if cancelled during a wait.
        """
