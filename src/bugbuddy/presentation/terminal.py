"""Terminal presentation: output panel, status indicator, line marker.

Everything here is cosmetic. The panel and notifier render through a rich
Console; the status indicator and line highlighter only hold the state that
decides what gets drawn.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

import structlog
from rich.console import Console, Group, RenderableType
from rich.rule import Rule
from rich.text import Text

from bugbuddy.models.context import CodeContext
from bugbuddy.models.document import SourceDocument

log = structlog.get_logger()

BUG = "🐛"


def make_console(stream: TextIO) -> Console:
    """Console that prints text as-is: no markup, emoji codes or highlighting."""
    return Console(
        file=stream,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


def render_explanation(original_error: str, explanation: str) -> Group:
    """Build the panel block for an error and its explanation.

    Both texts come from outside (terminal output, model reply), so escape
    sequences are decoded away and control codes dropped.
    """
    return Group(
        Text(),
        Text("🔍 Original Error:"),
        Text.from_ansi(original_error or "No error message available"),
        Text(),
        Text("💡 Simplified Explanation:"),
        Text.from_ansi(explanation),
        Text(),
        Rule(),
    )


class BugBuddyTerminal:
    """Output panel for explanations.

    The panel is opened lazily: the banner is printed just before the first
    explanation.

    Example:
        terminal = BugBuddyTerminal()
        terminal.show_simplified_error("TypeError: ...", explanation)
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the terminal.

        Args:
            stream: Where to write. Defaults to stdout.
        """
        self.console = make_console(stream or sys.stdout)
        self._opened = False

    @property
    def is_open(self) -> bool:
        """True once the banner has been printed."""
        return self._opened

    def open(self) -> None:
        """Print the banner (once)."""
        if self._opened:
            return
        self._opened = True
        self.console.print(f"{BUG} BugBuddy Terminal Active")
        self.console.print("Ready to analyze code errors")
        self.console.print()

    def print(self, *renderables: RenderableType) -> None:
        """Print to the panel's stream without opening the panel."""
        self.console.print(*renderables)

    def show_simplified_error(self, original_error: str, explanation: str) -> None:
        """Render an error and its explanation into the panel."""
        self.open()
        self.console.print(render_explanation(original_error, explanation))


@dataclass
class StatusIndicator:
    """Two-state label for the "simplify" trigger."""

    text: str = f"{BUG} BugBuddy"
    tooltip: str = "Click to analyze code"
    is_error_detected: bool = False

    def mark_error_detected(self) -> None:
        """Switch to the "error detected" label."""
        self.text = f"{BUG} Simplify Error"
        self.tooltip = "Click to get help with the detected error"
        self.is_error_detected = True

    def reset(self) -> None:
        """Switch back to the idle label."""
        self.text = f"{BUG} BugBuddy"
        self.tooltip = "Click to analyze code"
        self.is_error_detected = False

    def render(self) -> str:
        """One-line rendering for a status bar."""
        return f"[{self.text}] {self.tooltip}"


class LineHighlighter:
    """Marks a single line of a document as the error location.

    Highlighting replaces any previous mark, so applying the same mark twice
    is the same as applying it once.
    """

    def __init__(self) -> None:
        self._file_name: str | None = None
        self._line: int | None = None

    @property
    def highlighted_line(self) -> int | None:
        """0-based highlighted line, or None."""
        return self._line

    def highlight(self, document: SourceDocument, line: int) -> bool:
        """Mark ``line`` (0-based) in ``document``.

        Returns:
            False if the line is outside the document; the mark is then cleared
        """
        if not 0 <= line < document.line_count:
            log.debug("highlight_out_of_range", line=line, line_count=document.line_count)
            self.clear()
            return False

        self._file_name = document.file_name
        self._line = line
        return True

    def clear(self) -> None:
        """Remove the mark."""
        self._file_name = None
        self._line = None

    def render(self, context: CodeContext) -> str:
        """Numbered listing of the context with the marked line flagged."""
        width = len(str(context.end_line))
        marked = None
        if self._line is not None and self._file_name == context.file_name:
            marked = self._line + 1

        rows = []
        for number, text in enumerate(context.code.split("\n"), start=context.start_line):
            suffix = f" {BUG}" if number == marked else ""
            rows.append(f"{number:>{width}} | {text}{suffix}")
        return "\n".join(rows)


class Notifier:
    """User-visible messages, optionally with a suggested follow-up action."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.console = make_console(stream or sys.stderr)

    def show_error(self, message: str, action: str | None = None) -> None:
        """Report a failure."""
        self._emit("✖", message, action)

    def show_info(self, message: str, action: str | None = None) -> None:
        """Report an informational message."""
        self._emit("ℹ", message, action)

    def _emit(self, icon: str, message: str, action: str | None) -> None:
        line = Text(f"{icon} ")
        line.append_text(Text.from_ansi(message))
        if action:
            line.append(f" (run: {action})")
        self.console.print(line)
