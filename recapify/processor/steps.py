import uuid

from recapify.database.models import DocumentRecord
from recapify.database.repositories.document_repository import DocumentRepository
from recapify.database.repositories.summary_repository import SummaryRepository
from recapify.extraction.exceptions import (
    CorruptFileError,
    ExtractionError,
    UnsupportedFormatError,
)
from recapify.extraction.extractor import TextExtractor
from recapify.logging.logger import Log
from recapify.processor.exceptions import (
    BackendFailureError,
    InputError,
    StateConflictError,
)
from recapify.processor.models import Cleanup
from recapify.processor.pipeline import PipelineContext, PipelineStep
from recapify.processor.summary_formatter import SummaryFormatter
from recapify.storage.base import BaseStorage
from recapify.storage.exceptions import StorageError
from recapify.summarization.base import BaseSummarizer
from recapify.summarization.models import SummarizationSource


def _require_document(context: PipelineContext) -> DocumentRecord:
    if context.document is None:
        raise ValueError("PipelineContext.document must be set by LoadSourceStep")
    return context.document


class MarkFailedStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            self._doc_repo.mark_failed(context.document_id)
        except StateConflictError as exc:
            Log.warning(f"Could not mark document {context.document_id} failed: {exc}")
            return context
        Log.error(f"Document {context.document_id} marked FAILED: {context.error_message}")
        return context


class LoadSourceStep(PipelineStep):
    """Loads the document and assembles what the summarizer needs.

    Text mode uses the cached extracted text, extracting lazily from the raw
    file when the cache is empty. File mode uses the raw file's URL.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        storage: BaseStorage,
        extractor: TextExtractor,
        cleanup: Cleanup,
        requires_text: bool,
    ) -> None:
        self._doc_repo = doc_repo
        self._storage = storage
        self._extractor = extractor
        self._cleanup = cleanup
        self._requires_text = requires_text

    def run(self, context: PipelineContext) -> PipelineContext:
        document = self._doc_repo.find_by_id(context.document_id)
        context.document = document

        if not self._requires_text:
            if not document.raw_file_url:
                raise InputError(f"Document {document.id} has no raw file to summarize")
            context.source = SummarizationSource(
                text=document.extracted_text,
                file_url=document.raw_file_url,
                mime_type=document.file_type,
            )
            return context

        text = document.extracted_text
        if text is None:
            text = self._extract_from_raw_file(document)
        context.source = SummarizationSource(
            text=text,
            file_url=document.raw_file_url,
            mime_type=document.file_type,
        )
        Log.info(f"Loaded {len(text)} chars of text for document {document.id}")
        return context

    def _extract_from_raw_file(self, document: DocumentRecord) -> str:
        if not document.raw_file_ref:
            raise InputError(f"Document {document.id} has neither cached text nor a raw file")
        try:
            raw_bytes = self._storage.load(document.raw_file_ref)
        except StorageError as exc:
            raise BackendFailureError(f"Could not read raw file: {exc}") from exc

        try:
            text = self._extractor.extract(raw_bytes, document.file_type)
        except (UnsupportedFormatError, CorruptFileError) as exc:
            self._discard_raw_file(document)
            raise InputError(f"Text extraction failed: {exc}") from exc
        except ExtractionError as exc:
            raise BackendFailureError(f"Text extraction backend failed: {exc}") from exc

        self._doc_repo.update_extracted_text(document.id, text)
        Log.info(f"Extracted {len(text)} chars from document {document.id}")
        return text

    def _discard_raw_file(self, document: DocumentRecord) -> None:
        if document.raw_file_ref and not self._cleanup(document.raw_file_ref):
            Log.warning(f"Raw file {document.raw_file_ref} was not deleted")
        self._doc_repo.clear_raw_file(document.id)


class SummarizeStep(PipelineStep):
    def __init__(self, summarizer: BaseSummarizer) -> None:
        self._summarizer = summarizer

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.source is None:
            raise ValueError("PipelineContext.source must be set before summarization")
        context.output = self._summarizer.summarize(context.source, context.cancel_token)
        if context.output.truncated:
            Log.warning(f"Summary of document {context.document_id} may be incomplete")
        return context


class FormatSummaryStep(PipelineStep):
    def __init__(self, formatter: SummaryFormatter) -> None:
        self._formatter = formatter

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.output is None:
            raise ValueError("PipelineContext.output must be set before formatting")
        context.formatted = self._formatter.format(context.output.raw_text)
        Log.info(
            f"Summary for document {context.document_id}: "
            f"{len(context.formatted.key_points)} key points"
        )
        return context


class PersistSummaryStep(PipelineStep):
    def __init__(self, summary_repo: SummaryRepository) -> None:
        self._summary_repo = summary_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.output is None or context.formatted is None:
            raise ValueError("PipelineContext.formatted must be set before persist")
        source_text = context.source.text if context.source is not None else None
        text_length = context.output.text_length
        if text_length is None:
            text_length = len(source_text or "")
        context.summary = self._summary_repo.replace_for_document(
            summary_id=str(uuid.uuid4()),
            document_id=context.document_id,
            content=context.formatted.content,
            short_summary=context.formatted.short_summary,
            key_points=context.formatted.key_points,
            was_truncated=context.output.truncated,
            text_length=text_length,
        )
        Log.info(f"Persisted summary {context.summary.id} for document {context.document_id}")
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._doc_repo.mark_completed(context.document_id)
        Log.info(f"Document {context.document_id} marked COMPLETED")
        return context


class CleanupRawFileStep(PipelineStep):
    """Deletes the now-unneeded raw file. Failures are logged, never raised."""

    def __init__(self, cleanup: Cleanup) -> None:
        self._cleanup = cleanup

    def run(self, context: PipelineContext) -> PipelineContext:
        document = _require_document(context)
        ref = document.raw_file_ref
        if not ref:
            return context
        try:
            deleted = self._cleanup(ref)
        except Exception as exc:
            Log.warning(f"Cleanup of raw file {ref} failed: {exc}")
            return context
        if deleted:
            Log.info(f"Cleaned up raw file {ref} for document {document.id}")
        else:
            Log.warning(f"Raw file {ref} for document {document.id} was not deleted")
        return context
