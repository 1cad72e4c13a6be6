"""Data models for detected errors."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorMatch:
    """An error signature found in a piece of text."""

    message: str  # The matched text, e.g. "TypeError: x is not a function"
    full_context: str  # The unfiltered text that was scanned

    @property
    def first_line(self) -> str:
        """First line of the match (tracebacks span several lines)."""
        return self.message.splitlines()[0] if self.message else ""
