"""Detection of runtime error signatures in text.

This module implements the ErrorDetector class that scans editor or terminal
text for the first error signature of a given language. It supports:
- JavaScript errors (TypeError, ReferenceError, SyntaxError, generic Error)
- Python tracebacks and "...Error: ..." lines
- Java "Exception in thread" and "...Exception: ..." lines

Comment stripping before matching is a best-effort regex filter, not a parser.
"""

from __future__ import annotations

import re

import structlog

from bugbuddy.models.error import ErrorMatch
from bugbuddy.utils.logging import LogEventNames

log = structlog.get_logger()

DEFAULT_LANGUAGE = "javascript"


class ErrorDetector:
    """Finds the first error signature in a block of text.

    Responsibilities:
    - Strip comments so error-like text inside them is ignored
    - Try each of the language's patterns in order; first match wins
    - Locate the source line an error message points at

    Example:
        detector = ErrorDetector()
        match = detector.detect_error(terminal_output, "python")
        if match:
            print(match.message)
    """

    ERROR_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
        "javascript": (
            re.compile(r"TypeError:.*$", re.MULTILINE),
            re.compile(r"ReferenceError:.*$", re.MULTILINE),
            re.compile(r"SyntaxError:.*$", re.MULTILINE),
            re.compile(r"Error:.*$", re.MULTILINE),
        ),
        "python": (
            re.compile(r"Traceback \(most recent call last\):[\s\S]*?(?=\n\n|\Z)"),
            re.compile(r".*Error:.*$", re.MULTILINE),
        ),
        "java": (
            re.compile(r"Exception in thread.*$", re.MULTILINE),
            re.compile(r".*Exception:.*$", re.MULTILINE),
        ),
    }

    LINE_COMMENT_PATTERN = re.compile(r"//.*$", re.MULTILINE)
    BLOCK_COMMENT_PATTERN = re.compile(r"/\*[\s\S]*?\*/")
    HASH_COMMENT_PATTERN = re.compile(r"#.*$", re.MULTILINE)
    LINE_REFERENCE_PATTERN = re.compile(r"line (\d+)", re.IGNORECASE)
    NEWLINE_PATTERN = re.compile(r"\r\n?")

    SLASH_COMMENT_LANGUAGES = frozenset({"javascript", "typescript", "java"})
    LINE_REFERENCE_LANGUAGES = frozenset({"javascript", "python"})

    def patterns_for(self, language: str) -> tuple[re.Pattern[str], ...]:
        """Return the ordered patterns for a language (JavaScript if unknown)."""
        return self.ERROR_PATTERNS.get(language, self.ERROR_PATTERNS[DEFAULT_LANGUAGE])

    def strip_comments(self, text: str, language: str) -> str:
        """Remove comments in the syntax of ``language``.

        Args:
            text: Text to filter
            language: Language id

        Returns:
            Text with line and block comments removed
        """
        if language in self.SLASH_COMMENT_LANGUAGES:
            text = self.LINE_COMMENT_PATTERN.sub("", text)
            text = self.BLOCK_COMMENT_PATTERN.sub("", text)
        elif language == "python":
            text = self.HASH_COMMENT_PATTERN.sub("", text)
        return text

    def detect_error(self, text: str, language: str) -> ErrorMatch | None:
        """Find the first error signature in ``text``.

        CR and CRLF line endings are treated as LF when matching;
        ``full_context`` keeps the text as given.

        Args:
            text: Editor or terminal text to scan
            language: Language id selecting the pattern list

        Returns:
            ErrorMatch for the first pattern that matches, or None
        """
        if not text:
            return None

        filtered = self.strip_comments(self.NEWLINE_PATTERN.sub("\n", text), language)

        for pattern in self.patterns_for(language):
            match = pattern.search(filtered)
            if match:
                log.debug(
                    LogEventNames.ERROR_DETECTED,
                    language=language,
                    pattern=pattern.pattern,
                    message=match.group(0)[:200],
                )
                return ErrorMatch(message=match.group(0), full_context=text)

        log.debug(LogEventNames.ERROR_NOT_FOUND, language=language)
        return None

    def locate_line(self, match: ErrorMatch, language: str) -> int | None:
        """Find the 0-based source line an error message refers to.

        Only JavaScript and Python messages are searched, for a
        ``line N`` phrase.

        Args:
            match: Detected error
            language: Language id

        Returns:
            0-based line index, or None if the message names no line
        """
        if language not in self.LINE_REFERENCE_LANGUAGES:
            return None

        line_match = self.LINE_REFERENCE_PATTERN.search(match.message)
        if not line_match:
            return None

        return max(0, int(line_match.group(1)) - 1)
