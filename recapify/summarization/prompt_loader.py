from pathlib import Path

from recapify.summarization.exceptions import SummarizationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, path: Path | None = None) -> str:
    """Load a summarization prompt template.

    Args:
        name: Bundled template name without extension ("text_prompt", "file_prompt").
        path: Explicit template file; overrides `name`.

    Raises:
        SummarizationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SummarizationError(f"Failed to load prompt template: {exc}") from exc
