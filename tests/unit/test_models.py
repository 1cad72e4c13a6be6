"""Tests for data models."""

from pathlib import Path

import pytest

from bugbuddy.models.context import CodeContext
from bugbuddy.models.document import SourceDocument, language_for_path
from bugbuddy.models.error import ErrorMatch
from bugbuddy.models.result import SimplifyOutcome, SimplifyReport


class TestSourceDocument:
    """Tests for SourceDocument."""

    @pytest.mark.parametrize(
        ("text", "lines"),
        [
            ("a\nb", ("a", "b")),
            ("a\r\nb\rc", ("a", "b", "c")),
            ("a\n", ("a", "")),
            ("", ("",)),
        ],
    )
    def test_line_splitting(self, text: str, lines: tuple[str, ...]) -> None:
        """Test editor-style line splitting."""
        document = SourceDocument(file_name="f", language="python", text=text)

        assert document.lines == lines
        assert document.line_count == len(lines)

    def test_line_at(self) -> None:
        """Test reading single lines."""
        document = SourceDocument(file_name="f", language="python", text="a\nb")

        assert document.line_at(1) == "b"
        with pytest.raises(IndexError):
            document.line_at(2)

    def test_immutable(self) -> None:
        """Test that documents cannot be modified."""
        document = SourceDocument(file_name="f", language="python", text="a")

        with pytest.raises(AttributeError):
            document.text = "b"  # type: ignore[misc]

    def test_from_path(self, tmp_path: Path) -> None:
        """Test loading from disk with language inference."""
        path = tmp_path / "index.ts"
        path.write_text("let a = 1;\n")

        document = SourceDocument.from_path(path)

        assert document.file_name == str(path)
        assert document.language == "typescript"
        assert document.text == "let a = 1;\n"

    def test_from_path_language_override(self, tmp_path: Path) -> None:
        """Test that an explicit language wins."""
        path = tmp_path / "script"
        path.write_text("x")

        assert SourceDocument.from_path(path, "python").language == "python"

    def test_from_path_invalid_utf8(self, tmp_path: Path) -> None:
        """Test that undecodable bytes do not abort loading."""
        path = tmp_path / "bad.py"
        path.write_bytes(b"x = '\xff'\n")

        assert "�" in SourceDocument.from_path(path).text

    @pytest.mark.parametrize(
        ("name", "language"),
        [
            ("a.py", "python"),
            ("a.JS", "javascript"),
            ("a.mjs", "javascript"),
            ("a.tsx", "typescript"),
            ("Main.java", "java"),
            ("notes.txt", "plaintext"),
            ("Makefile", "plaintext"),
        ],
    )
    def test_language_for_path(self, name: str, language: str) -> None:
        """Test extension mapping."""
        assert language_for_path(name) == language


class TestSmallModels:
    """Tests for ErrorMatch, CodeContext and SimplifyReport."""

    def test_error_first_line(self) -> None:
        """Test the one-line summary of a multi-line match."""
        match = ErrorMatch(message="Traceback (most recent call last):\n  File", full_context="")
        assert match.first_line == "Traceback (most recent call last):"

    def test_context_line_count(self, sample_context: CodeContext) -> None:
        """Test the inclusive line span."""
        assert sample_context.line_count == 3

    def test_report_ok(self) -> None:
        """Test that only success counts as ok."""
        assert SimplifyReport(SimplifyOutcome.SUCCESS, "done", "text").ok is True
        assert SimplifyReport(SimplifyOutcome.FAILED, "no").ok is False
