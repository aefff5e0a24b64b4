import re

from recapify.processor.models import FormattedSummary
from recapify.summarization.exceptions import MalformedModelResponseError

ELLIPSIS = "..."
_KEY_POINT_LINE = re.compile(r"^- (.+)$", re.MULTILINE)


class SummaryFormatter:
    """Derives the short summary and key points from raw model output."""

    def __init__(self, short_max_chars: int = 300, always_append_ellipsis: bool = False) -> None:
        self._short_max_chars = short_max_chars
        self._always_append_ellipsis = always_append_ellipsis

    def format(self, raw_output: object) -> FormattedSummary:
        """Raises:
        MalformedModelResponseError: if the output cannot be coerced to text.
        """
        content = coerce_model_output(raw_output)
        return FormattedSummary(
            content=content,
            short_summary=self.create_short_summary(content),
            key_points=extract_key_points(content),
        )

    def create_short_summary(self, content: str) -> str:
        """First paragraph, capped at `short_max_chars` with a trailing ellipsis when cut."""
        first_paragraph = content.split("\n\n", 1)[0]
        if len(first_paragraph) > self._short_max_chars:
            return first_paragraph[: self._short_max_chars] + ELLIPSIS
        if self._always_append_ellipsis:
            return first_paragraph + ELLIPSIS
        return first_paragraph


def extract_key_points(content: str) -> list[str]:
    """Every line starting with "- ", marker stripped, in order."""
    points = [match.group(1).strip() for match in _KEY_POINT_LINE.finditer(content)]
    return [point for point in points if point]


def coerce_model_output(raw_output: object) -> str:
    if isinstance(raw_output, str):
        return raw_output
    if isinstance(raw_output, bytes):
        try:
            return raw_output.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedModelResponseError(f"Model output is not UTF-8: {exc}") from exc
    raise MalformedModelResponseError(
        f"Model output of type {type(raw_output).__name__} is not text"
    )
