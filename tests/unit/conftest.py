"""In-memory stand-ins for the repositories, used by the pipeline tests."""

import dataclasses
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from recapify.database.models import (
    AudioTrackRecord,
    DocumentRecord,
    DocumentStatus,
    SummaryRecord,
)
from recapify.extraction.extractor import TextExtractor
from recapify.extraction.pdfplumber_adapter import PdfPlumberAdapter
from recapify.extraction.plain_text_adapter import PlainTextAdapter
from recapify.processor.exceptions import (
    DocumentNotFoundError,
    StateConflictError,
    SummaryNotFoundError,
)
from recapify.processor.processor import DocumentPipeline
from recapify.processor.summary_formatter import SummaryFormatter
from recapify.resilience.retry import BackoffPolicy
from recapify.speech.example_adapter import ExampleSpeechBackend
from recapify.speech.synthesizer import SpeechSynthesizer
from recapify.storage.local_adapter import LocalStorage
from recapify.summarization.text_summarizer import TextModeSummarizer

MODEL_SUMMARY = (
    "The report reviews ten topics across ten pages.\n\n"
    "Key points:\n"
    "- Topic one is introduced first\n"
    "- Topic ten closes the report\n"
)


class InMemoryDocumentRepository:
    def __init__(self) -> None:
        self.rows: dict[str, DocumentRecord] = {}
        self.history: dict[str, list[DocumentStatus]] = {}

    def create(self, *, document_id: str, status: DocumentStatus, **fields: Any) -> DocumentRecord:
        record = DocumentRecord(
            id=document_id,
            status=status,
            uploaded_at=datetime.now(timezone.utc),
            **fields,
        )
        self.rows[document_id] = record
        self.history[document_id] = [status]
        return dataclasses.replace(record)

    def find_by_id(self, document_id: str) -> DocumentRecord:
        if document_id not in self.rows:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return dataclasses.replace(self.rows[document_id])

    def transition_status(
        self, document_id: str, expected: DocumentStatus, new: DocumentStatus
    ) -> None:
        record = self.rows[document_id]
        if record.status is not expected:
            raise StateConflictError(
                f"Document {document_id} is not {expected.value}; cannot move it to {new.value}"
            )
        record.status = new
        self.history[document_id].append(new)

    def mark_completed(self, document_id: str) -> None:
        self.transition_status(document_id, DocumentStatus.PROCESSING, DocumentStatus.COMPLETED)
        record = self.rows[document_id]
        record.processed_at = datetime.now(timezone.utc)
        record.extracted_text = None
        record.raw_file_ref = None
        record.raw_file_url = None

    def mark_failed(self, document_id: str) -> None:
        self.transition_status(document_id, DocumentStatus.PROCESSING, DocumentStatus.FAILED)

    def update_extracted_text(self, document_id: str, extracted_text: str) -> None:
        self.rows[document_id].extracted_text = extracted_text

    def clear_raw_file(self, document_id: str) -> None:
        record = self.rows[document_id]
        record.raw_file_ref = None
        record.raw_file_url = None
        record.extracted_text = None


class InMemorySummaryRepository:
    def __init__(self) -> None:
        self.rows: dict[str, SummaryRecord] = {}

    def replace_for_document(
        self, *, summary_id: str, document_id: str, **fields: Any
    ) -> SummaryRecord:
        existing = self.rows.get(document_id)
        record = SummaryRecord(
            id=existing.id if existing else summary_id, document_id=document_id, **fields
        )
        self.rows[document_id] = record
        return record

    def find_by_document_id(self, document_id: str) -> SummaryRecord:
        if document_id not in self.rows:
            raise SummaryNotFoundError(f"No summary for document {document_id}")
        return self.rows[document_id]

    def count_for_document(self, document_id: str) -> int:
        return 1 if document_id in self.rows else 0


class InMemoryAudioTrackRepository:
    def __init__(self) -> None:
        self.rows: list[AudioTrackRecord] = []
        self.fail_next = False

    def create(self, track: AudioTrackRecord) -> AudioTrackRecord:
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("database unavailable")
        self.rows.append(track)
        return track

    def find_by_summary_id(self, summary_id: str) -> list[AudioTrackRecord]:
        return [t for t in self.rows if t.summary_id == summary_id]


@dataclasses.dataclass
class PipelineEnv:
    pipeline: DocumentPipeline
    docs: InMemoryDocumentRepository
    summaries: InMemorySummaryRepository
    audio: InMemoryAudioTrackRepository
    storage: LocalStorage
    model: MagicMock
    storage_root: Path


@pytest.fixture()
def make_env(tmp_path: Path) -> Callable[..., PipelineEnv]:
    """Build a pipeline over in-memory repositories and real local storage.

    `model` is the summarization client double; its default answer is
    MODEL_SUMMARY. Keyword overrides are passed to DocumentPipeline.
    """

    def _make(**overrides: Any) -> PipelineEnv:
        docs = InMemoryDocumentRepository()
        summaries = InMemorySummaryRepository()
        audio = InMemoryAudioTrackRepository()
        storage = LocalStorage(root=tmp_path / "files", public_base_url="http://files.local")
        model = MagicMock()
        model.generate_from_text.return_value = MODEL_SUMMARY
        no_wait = BackoffPolicy(initial_delay=0.0, max_attempts=3)
        kwargs: dict[str, Any] = {
            "doc_repo": docs,
            "summary_repo": summaries,
            "audio_repo": audio,
            "storage": storage,
            "extractor": TextExtractor(
                {"application/pdf": PdfPlumberAdapter(), "text/plain": PlainTextAdapter()}
            ),
            "summarizer": TextModeSummarizer(client=model, model="m", retry_policy=no_wait),
            "formatter": SummaryFormatter(),
            "synthesizer": SpeechSynthesizer(
                backend=ExampleSpeechBackend(), retry_policy=no_wait, chunk_size=40
            ),
        }
        kwargs.update(overrides)
        return PipelineEnv(
            pipeline=DocumentPipeline(**kwargs),
            docs=docs,
            summaries=summaries,
            audio=audio,
            storage=storage,
            model=model,
            storage_root=tmp_path / "files",
        )

    return _make
