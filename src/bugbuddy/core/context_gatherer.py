"""Gathering of source context around an error line.

This module implements the CodeContextGatherer class that slices a window of
lines around a target line and, for JavaScript and TypeScript, collects the
file's import/require lines. There is no parsing: the window is a line range
and imports come from a single regex sweep.
"""

from __future__ import annotations

import re
from collections.abc import Callable

import structlog

from bugbuddy.config.schema import AnalysisConfig
from bugbuddy.models.context import CodeContext
from bugbuddy.models.document import SourceDocument
from bugbuddy.utils.async_helpers import SettingsError
from bugbuddy.utils.logging import LogEventNames

log = structlog.get_logger()

IMPORT_PATTERN = re.compile(r"^import.*from.*$|^const.*require\(.*\).*$", re.MULTILINE)
IMPORT_LANGUAGES = frozenset({"javascript", "typescript"})


def extract_imports(content: str, language: str) -> tuple[str, ...]:
    """Collect import/require statement lines in source order.

    Args:
        content: Full file content
        language: Language id; only JavaScript and TypeScript have a rule

    Returns:
        Matching lines, empty for other languages
    """
    if language not in IMPORT_LANGUAGES:
        return ()
    return tuple(match.group(0) for match in IMPORT_PATTERN.finditer(content))


def context_window(line: int, width: int, line_count: int) -> tuple[int, int]:
    """Return the inclusive 0-based ``(start, end)`` window around ``line``.

    The window is ``width`` lines either side, clamped to the document.
    """
    start = max(0, line - width)
    end = min(line_count - 1, line + width)
    return start, end


class CodeContextGatherer:
    """Extracts the code surrounding an error line.

    The window width is read from ``settings`` on every call, so a change to
    the configuration takes effect on the next gather.

    Example:
        gatherer = CodeContextGatherer(lambda: load_config().analysis)
        context = gatherer.get_context(document, line=41)
    """

    def __init__(self, settings: Callable[[], AnalysisConfig] | None = None) -> None:
        """Initialize the gatherer.

        Args:
            settings: Callable returning the current analysis settings
        """
        self._settings = settings or AnalysisConfig

    @property
    def context_lines(self) -> int:
        """Current window width, read fresh from the settings source.

        Raises:
            SettingsError: If the settings cannot be read or are invalid
        """
        try:
            return self._settings().context_lines
        except (OSError, ValueError) as e:
            log.warning(LogEventNames.SETTINGS_UNREADABLE, error=str(e))
            raise SettingsError(str(e)) from e

    def get_context(
        self,
        document: SourceDocument | None,
        line: int,
        context_lines: int | None = None,
    ) -> CodeContext | None:
        """Get the code surrounding a line.

        Args:
            document: Open document, or None if there is none
            line: 0-based line to center the window on; clamped into the document
            context_lines: Lines before/after (default from settings)

        Returns:
            CodeContext with the window and metadata, or None without a document
        """
        if document is None:
            return None

        if context_lines is None:
            context_lines = self.context_lines

        line_count = document.line_count
        line = min(max(0, line), line_count - 1)
        start, end = context_window(line, context_lines, line_count)

        context = CodeContext(
            code="\n".join(document.lines[start : end + 1]),
            file_name=document.file_name,
            language=document.language,
            error_line=line + 1,
            start_line=start + 1,
            end_line=end + 1,
            full_file_content=document.text,
            imports=extract_imports(document.text, document.language),
        )

        log.debug(
            LogEventNames.CONTEXT_GATHERED,
            file_name=context.file_name,
            start_line=context.start_line,
            end_line=context.end_line,
            imports_count=len(context.imports),
        )
        return context
