from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SummarizationSource:
    """What the orchestrator hands to a summarizer: cached text and/or a file URL."""

    text: str | None = None
    file_url: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class SummarizationOutput:
    """Raw model output plus what was actually sent to the model."""

    raw_text: str
    truncated: bool = False
    text_length: int | None = None


class RemoteFileState(str, Enum):
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class RemoteFile:
    """A file held in the AI backend's own file store."""

    id: str
    state: RemoteFileState
    mime_type: str | None = None
