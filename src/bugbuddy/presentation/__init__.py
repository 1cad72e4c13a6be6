"""Terminal panel, status indicator and line highlighting."""

from .terminal import (
    BugBuddyTerminal,
    LineHighlighter,
    Notifier,
    StatusIndicator,
    render_explanation,
)

__all__ = [
    "BugBuddyTerminal",
    "LineHighlighter",
    "Notifier",
    "StatusIndicator",
    "render_explanation",
]
