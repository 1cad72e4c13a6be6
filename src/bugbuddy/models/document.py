"""Data models for source documents."""

import re
from dataclasses import dataclass, field
from pathlib import Path

# Line terminators recognised by editors
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

EXTENSION_LANGUAGES = {
    ".py": "python",
    ".pyw": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
}

PLAINTEXT = "plaintext"


def language_for_path(path: str | Path) -> str:
    """Infer a language id from a file extension."""
    return EXTENSION_LANGUAGES.get(Path(path).suffix.lower(), PLAINTEXT)


@dataclass(frozen=True)
class SourceDocument:
    """An open source file: what the editor would hand us as its document."""

    file_name: str
    language: str
    text: str
    lines: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # An empty document still has one (empty) line
        object.__setattr__(self, "lines", tuple(_LINE_BREAK.split(self.text)))

    @classmethod
    def from_path(cls, path: str | Path, language: str | None = None) -> "SourceDocument":
        """Load a document from disk.

        Args:
            path: File to read (decoded as UTF-8, undecodable bytes replaced)
            language: Language id; inferred from the extension when omitted

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8", errors="replace")
        return cls(
            file_name=str(path),
            language=language or language_for_path(path),
            text=text,
        )

    @property
    def line_count(self) -> int:
        """Number of lines in the document."""
        return len(self.lines)

    def line_at(self, index: int) -> str:
        """Text of the 0-based line ``index``, without its terminator."""
        if not 0 <= index < self.line_count:
            raise IndexError(f"Line {index} out of range (document has {self.line_count})")
        return self.lines[index]
