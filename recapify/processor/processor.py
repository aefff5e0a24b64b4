import uuid
from collections.abc import Callable

from recapify.config.settings import Settings
from recapify.database.models import AudioTrackRecord, DocumentRecord, DocumentStatus
from recapify.database.repositories.audio_track_repository import AudioTrackRepository
from recapify.database.repositories.document_repository import DocumentRepository
from recapify.database.repositories.summary_repository import SummaryRepository
from recapify.extraction.exceptions import (
    CorruptFileError,
    ExtractionError,
    UnsupportedFormatError,
)
from recapify.extraction.extractor import TextExtractor
from recapify.extraction.factory import TextExtractorFactory
from recapify.logging.logger import Log
from recapify.processor.exceptions import (
    BackendFailureError,
    DocumentNotFoundError,
    InputError,
    NothingToRetryError,
    ProcessorError,
    StateConflictError,
)
from recapify.processor.locks import DocumentLocks
from recapify.processor.models import Cleanup, Scheduler
from recapify.processor.pipeline import PipelineContext, PipelineStep
from recapify.processor.steps import (
    CleanupRawFileStep,
    FormatSummaryStep,
    LoadSourceStep,
    MarkCompletedStep,
    MarkFailedStep,
    PersistSummaryStep,
    SummarizeStep,
)
from recapify.processor.summary_formatter import SummaryFormatter
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import OperationCancelledError
from recapify.speech.exceptions import SpeechSynthesisError
from recapify.speech.factory import SpeechSynthesizerFactory
from recapify.speech.synthesizer import SpeechSynthesizer
from recapify.storage.base import BaseStorage
from recapify.storage.exceptions import StorageError
from recapify.storage.factory import StorageFactory
from recapify.summarization.base import BaseSummarizer
from recapify.summarization.exceptions import InputTooLargeError, SummarizationError
from recapify.summarization.factory import SummarizerFactory

AUDIO_FOLDER = "audios"
AUDIO_CONTENT_TYPE = "audio/mpeg"
#: Rough bytes-per-second of the synthesized mp3 stream.
AUDIO_BYTES_PER_SECOND = 4000

#: Queues an audio job for (document_id, voice).
AudioScheduler = Callable[[str, str], None]


class DocumentPipeline:
    """Orchestrates the document state machine.

    upload -> extract -> summarize -> persist summary -> COMPLETED -> cleanup.
    Any failure during summarization moves the document to FAILED and keeps
    the raw file and cached text, so `retry` can re-enter at summarization.
    `generate_audio` is a repeatable side operation on COMPLETED documents.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        summary_repo: SummaryRepository,
        audio_repo: AudioTrackRepository,
        storage: BaseStorage,
        extractor: TextExtractor,
        summarizer: BaseSummarizer,
        formatter: SummaryFormatter,
        synthesizer: SpeechSynthesizer,
        cleanup: Cleanup | None = None,
        schedule: Scheduler | None = None,
        schedule_audio: AudioScheduler | None = None,
        default_voice: str = "female-1",
        locks: DocumentLocks | None = None,
    ) -> None:
        self._doc_repo = doc_repo
        self._summary_repo = summary_repo
        self._audio_repo = audio_repo
        self._storage = storage
        self._extractor = extractor
        self._summarizer = summarizer
        self._synthesizer = synthesizer
        self._cleanup = cleanup if cleanup is not None else storage.delete
        self._schedule = schedule
        self._schedule_audio = schedule_audio
        self._default_voice = default_voice
        self._locks = locks if locks is not None else DocumentLocks()

        self._steps: list[PipelineStep] = [
            LoadSourceStep(
                doc_repo=doc_repo,
                storage=storage,
                extractor=extractor,
                cleanup=self._cleanup,
                requires_text=summarizer.requires_text,
            ),
            SummarizeStep(summarizer),
            FormatSummaryStep(formatter),
            PersistSummaryStep(summary_repo),
            MarkCompletedStep(doc_repo),
        ]
        self._after_success_step = CleanupRawFileStep(self._cleanup)
        self._failed_step = MarkFailedStep(doc_repo)

    def upload(
        self,
        file_bytes: bytes,
        filename: str,
        mime_type: str,
        owner_id: str,
    ) -> DocumentRecord:
        """Store a new document and start its summarization.

        With a scheduler configured the summarization is queued and the
        returned record is PROCESSING; otherwise it runs inline and the
        record is COMPLETED or FAILED. Once the document exists, failures
        are reported through its status rather than raised.

        Raises:
            InputError: for an empty, nameless or unsupported file.
            BackendFailureError: if the raw file cannot be stored or the
                summarization cannot be queued.
        """
        self._validate_upload(file_bytes, filename, mime_type, owner_id)

        try:
            stored = self._storage.store(file_bytes, filename, owner_id, mime_type)
        except StorageError as exc:
            raise BackendFailureError(f"Could not store uploaded file: {exc}") from exc
        Log.info(f"Stored upload {filename} ({len(file_bytes)} bytes) as {stored.ref}")

        document_id = str(uuid.uuid4())
        try:
            self._doc_repo.create(
                document_id=document_id,
                filename=filename,
                file_type=mime_type,
                owner_id=owner_id,
                raw_file_ref=stored.ref,
                raw_file_url=stored.url,
                extracted_text=None,
                status=DocumentStatus.PENDING,
            )
        except Exception:
            self._discard_object(stored.ref)
            raise
        self._doc_repo.transition_status(
            document_id, DocumentStatus.PENDING, DocumentStatus.PROCESSING
        )
        Log.info(f"Document {document_id} created for owner {owner_id}, status PROCESSING")

        if self._summarizer.requires_text and not self._extract_on_upload(
            document_id, file_bytes, mime_type, stored.ref
        ):
            return self._doc_repo.find_by_id(document_id)

        self._start_summarization(document_id)
        return self._doc_repo.find_by_id(document_id)

    def summarize(
        self,
        document_id: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> DocumentRecord:
        """Run summarization for a PROCESSING document.

        Raises:
            StateConflictError: if the document is not PROCESSING, or another
                summarization for it is already running in this process.
            InputError: if the stored file cannot yield text.
            BackendFailureError: if the model or storage failed for good.
            OperationCancelledError: if cancelled during a wait.
        """
        with self._locks.hold(document_id), Log.document_scope(document_id):
            document = self._doc_repo.find_by_id(document_id)
            if document.status is not DocumentStatus.PROCESSING:
                raise StateConflictError(
                    f"Document {document_id} is {document.status.value}, expected PROCESSING"
                )

            Log.info(f"Summarizing document {document_id}")
            context = PipelineContext(document_id=document_id, cancel_token=cancel_token)
            try:
                for step in self._steps:
                    context = step.run(context)
            except Exception as exc:
                context.error_message = str(exc)
                self._failed_step.run(context)
                failure = self._classify_failure(exc)
                if failure is exc:
                    raise
                raise failure from exc

            self._after_success_step.run(context)
            return self._doc_repo.find_by_id(document_id)

    def retry(self, document_id: str, owner_id: str) -> DocumentRecord:
        """User-triggered retry of a FAILED document, re-entering at summarization.

        Raises:
            DocumentNotFoundError: if the document does not exist for this owner.
            StateConflictError: if the document is not FAILED.
            NothingToRetryError: if neither the raw file nor cached text survives.
        """
        document = self._find_owned(document_id, owner_id)
        if document.status is not DocumentStatus.FAILED:
            raise StateConflictError(
                f"Only FAILED documents can be retried; {document_id} is {document.status.value}"
            )
        if not document.raw_file_ref and not document.extracted_text:
            raise NothingToRetryError(
                f"Document {document_id} has no raw file or text left; re-upload required"
            )

        self._doc_repo.transition_status(
            document_id, DocumentStatus.FAILED, DocumentStatus.PROCESSING
        )
        Log.info(f"Retrying document {document_id}")
        self._start_summarization(document_id)
        return self._doc_repo.find_by_id(document_id)

    def request_audio(
        self, document_id: str, owner_id: str, voice: str | None = None
    ) -> AudioTrackRecord | None:
        """Queue audio generation when a scheduler is configured, else run it inline.

        Returns the new track when run inline, None when queued.
        """
        voice = voice or self._default_voice
        document = self._find_owned(document_id, owner_id)
        self._require_completed(document)
        if self._schedule_audio is None:
            return self.generate_audio(document_id, owner_id, voice)
        self._schedule_audio(document_id, voice)
        Log.info(f"Queued audio for document {document_id} with voice {voice}")
        return None

    def generate_audio(
        self,
        document_id: str,
        owner_id: str,
        voice: str | None = None,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> AudioTrackRecord:
        """Synthesize the document's summary and persist a new AudioTrack.

        Never mutates the document status. Each call adds a track.

        Raises:
            DocumentNotFoundError: if the document does not exist for this owner.
            StateConflictError: if the document is not COMPLETED.
            SummaryNotFoundError: if the summary row is missing.
            BackendFailureError: if synthesis or the audio upload fails.
        """
        voice = voice or self._default_voice
        document = self._find_owned(document_id, owner_id)
        self._require_completed(document)
        summary = self._summary_repo.find_by_document_id(document_id)

        Log.info(f"Generating audio for summary {summary.id} with voice {voice}")
        try:
            audio = self._synthesizer.synthesize(summary.content, voice, cancel_token)
        except SpeechSynthesisError as exc:
            raise BackendFailureError(f"Speech synthesis failed: {exc}") from exc

        try:
            stored = self._storage.store(
                audio.data,
                f"{document.filename}.{audio.format}",
                owner_id,
                AUDIO_CONTENT_TYPE,
                folder=AUDIO_FOLDER,
            )
        except StorageError as exc:
            raise BackendFailureError(f"Could not store audio: {exc}") from exc

        track = AudioTrackRecord(
            id=str(uuid.uuid4()),
            summary_id=summary.id,
            document_id=document_id,
            owner_id=owner_id,
            title=f"{document.filename} - Audio Summary",
            duration_seconds=stored.size_bytes // AUDIO_BYTES_PER_SECOND,
            file_url=stored.url,
            file_ref=stored.ref,
            file_size_bytes=stored.size_bytes,
            format=audio.format,
            voice_id=audio.voice_id,
        )
        try:
            created = self._audio_repo.create(track)
        except Exception:
            self._discard_object(stored.ref)
            raise
        Log.info(
            f"Audio track {created.id} created for document {document_id}: "
            f"{audio.chunk_count} chunk(s), {stored.size_bytes} bytes"
        )
        return created

    def _validate_upload(
        self, file_bytes: bytes, filename: str, mime_type: str, owner_id: str
    ) -> None:
        if not owner_id:
            raise InputError("owner_id is required")
        if not filename:
            raise InputError("filename is required")
        if not file_bytes:
            raise InputError("Uploaded file is empty")
        normalized = mime_type.split(";", 1)[0].strip().lower()
        if normalized not in self._extractor.supported_types:
            raise InputError(f"Unsupported file type: {mime_type}")

    def _extract_on_upload(
        self, document_id: str, file_bytes: bytes, mime_type: str, raw_file_ref: str
    ) -> bool:
        try:
            text = self._extractor.extract(file_bytes, mime_type)
        except (UnsupportedFormatError, CorruptFileError) as exc:
            # Nothing salvageable: drop the raw file so a retry is refused.
            self._discard_object(raw_file_ref)
            self._doc_repo.clear_raw_file(document_id)
            self._doc_repo.mark_failed(document_id)
            Log.error(f"Extraction failed for document {document_id}: {exc}")
            return False
        except ExtractionError as exc:
            self._doc_repo.mark_failed(document_id)
            Log.error(f"Extraction backend failed for document {document_id}: {exc}")
            return False

        self._doc_repo.update_extracted_text(document_id, text)
        Log.info(f"Extracted {len(text)} chars from document {document_id}")
        return True

    def _start_summarization(self, document_id: str) -> None:
        if self._schedule is None:
            try:
                self.summarize(document_id)
            except ProcessorError as exc:
                Log.error(f"Summarization of document {document_id} failed: {exc}")
            return
        try:
            self._schedule(document_id)
        except Exception as exc:
            self._doc_repo.mark_failed(document_id)
            raise BackendFailureError(f"Could not schedule summarization: {exc}") from exc
        Log.info(f"Summarization of document {document_id} scheduled")

    def _find_owned(self, document_id: str, owner_id: str) -> DocumentRecord:
        document = self._doc_repo.find_by_id(document_id)
        if document.owner_id != owner_id:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    @staticmethod
    def _require_completed(document: DocumentRecord) -> None:
        if document.status is not DocumentStatus.COMPLETED:
            raise StateConflictError(
                f"Document {document.id} is {document.status.value}; audio needs a summary"
            )

    def _discard_object(self, ref: str) -> None:
        try:
            if not self._cleanup(ref):
                Log.warning(f"Stored object {ref} was not deleted")
        except Exception as exc:
            Log.warning(f"Could not delete stored object {ref}: {exc}")

    @staticmethod
    def _classify_failure(exc: Exception) -> Exception:
        if isinstance(exc, (ProcessorError, OperationCancelledError)):
            return exc
        if isinstance(exc, InputTooLargeError):
            return InputError(f"Document is too large for the model: {exc}")
        if isinstance(exc, (SummarizationError, ExtractionError, StorageError)):
            return BackendFailureError(f"Summarization failed: {exc}")
        return exc


def build_pipeline(
    settings: Settings,
    schedule: Scheduler | None = None,
    schedule_audio: AudioScheduler | None = None,
) -> DocumentPipeline:
    """Build a DocumentPipeline with all configured adapters."""
    storage = StorageFactory.create(settings)
    return DocumentPipeline(
        doc_repo=DocumentRepository(),
        summary_repo=SummaryRepository(),
        audio_repo=AudioTrackRepository(),
        storage=storage,
        extractor=TextExtractorFactory.create(settings),
        summarizer=SummarizerFactory.create(settings),
        formatter=SummaryFormatter(
            short_max_chars=settings.short_summary_max_chars,
            always_append_ellipsis=settings.short_summary_always_ellipsis,
        ),
        synthesizer=SpeechSynthesizerFactory.create(settings),
        cleanup=storage.delete,
        schedule=schedule,
        schedule_audio=schedule_audio,
        default_voice=settings.speech_default_voice,
    )
