"""Tests for summarization prompt loading."""

from pathlib import Path

import pytest

from recapify.summarization.exceptions import SummarizationError
from recapify.summarization.prompt_loader import load_prompt


class TestLoadPrompt:
    def test_loads_default_text_prompt(self) -> None:
        template = load_prompt("text_prompt")
        assert "{document_text}" in template
        assert "bullet points starting with -" in template

    def test_loads_default_file_prompt(self) -> None:
        template = load_prompt("file_prompt")
        assert "comprehensive summary" in template
        assert "{document_text}" not in template

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Summarize {document_text}")
        assert load_prompt("text_prompt", custom) == "Summarize {document_text}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(SummarizationError, match="Failed to load prompt"):
            load_prompt("text_prompt", Path("/nonexistent/file.txt"))
