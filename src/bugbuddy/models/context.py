"""Data models for gathered code context."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodeContext:
    """Source lines surrounding an error, plus file metadata.

    Line numbers are 1-based, as shown to users.
    """

    code: str
    file_name: str
    language: str
    error_line: int
    start_line: int
    end_line: int
    full_file_content: str
    imports: tuple[str, ...] = ()  # Only populated for languages with an import rule

    @property
    def line_count(self) -> int:
        """Number of lines in this code context."""
        return self.end_line - self.start_line + 1
