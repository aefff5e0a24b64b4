from abc import ABC, abstractmethod
from dataclasses import dataclass

from recapify.database.models import DocumentRecord, SummaryRecord
from recapify.processor.models import FormattedSummary
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.summarization.models import SummarizationOutput, SummarizationSource


@dataclass(slots=True)
class PipelineContext:
    """State carried through the summarization steps of one attempt."""

    document_id: str
    cancel_token: CancellationToken = NEVER_CANCELLED
    document: DocumentRecord | None = None
    source: SummarizationSource | None = None
    output: SummarizationOutput | None = None
    formatted: FormattedSummary | None = None
    summary: SummaryRecord | None = None
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
