from collections.abc import Callable
from dataclasses import dataclass, field

#: Deletes a stored object by reference; returns False when nothing was removed.
Cleanup = Callable[[str], bool]

#: Hands a document id to whatever runs its summarization asynchronously.
Scheduler = Callable[[str], None]


@dataclass(frozen=True)
class FormattedSummary:
    """Model output split into the parts persisted on a Summary."""

    content: str
    short_summary: str
    key_points: list[str] = field(default_factory=list)
