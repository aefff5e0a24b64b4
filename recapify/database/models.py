from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class JobKind(str, Enum):
    SUMMARIZE = "summarize"
    GENERATE_AUDIO = "generate_audio"


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    filename: str
    file_type: str
    owner_id: str
    status: DocumentStatus
    raw_file_ref: str | None = None
    raw_file_url: str | None = None
    extracted_text: str | None = None
    uploaded_at: datetime | None = None
    processed_at: datetime | None = None


@dataclass
class SummaryRecord:
    """Represents a row from the summaries table."""

    id: str
    document_id: str
    content: str
    short_summary: str
    key_points: list[str] = field(default_factory=list)
    was_truncated: bool = False
    text_length: int = 0
    created_at: datetime | None = None


@dataclass
class AudioTrackRecord:
    """Represents a row from the audio_tracks table."""

    id: str
    summary_id: str
    document_id: str
    owner_id: str
    title: str
    duration_seconds: int
    file_url: str
    file_ref: str
    file_size_bytes: int
    format: str
    voice_id: str
    created_at: datetime | None = None


@dataclass
class JobRecord:
    """Represents a row from the processing_jobs table."""

    id: int
    document_id: str
    kind: JobKind
    status: str
    voice: str | None = None
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
