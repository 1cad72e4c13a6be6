"""The detect → gather → simplify → render pipeline.

This module implements the BugBuddySession class that wires the detector,
context gatherer, simplifier and presentation together. It owns the only
mutable state in the pipeline: the last detected error and whether the
"Simplify Error" trigger is showing.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from bugbuddy.models.result import SimplifyOutcome, SimplifyReport
from bugbuddy.presentation.terminal import (
    BugBuddyTerminal,
    LineHighlighter,
    Notifier,
    StatusIndicator,
)
from bugbuddy.utils.async_helpers import MissingCredentialError, SettingsError, SimplifyError
from bugbuddy.utils.logging import LogEventNames
from bugbuddy.utils.security import mask_secret

if TYPE_CHECKING:
    from bugbuddy.config.credentials import CredentialStore
    from bugbuddy.core.context_gatherer import CodeContextGatherer
    from bugbuddy.core.error_detector import ErrorDetector
    from bugbuddy.core.simplifier import ErrorSimplifier
    from bugbuddy.models.document import SourceDocument
    from bugbuddy.models.error import ErrorMatch

log = structlog.get_logger()

UPDATE_KEY_ACTION = "bugbuddy update-key"
FALLBACK_ERROR_MESSAGE = "Error in selected code"


class BugBuddySession:
    """Coordinates error detection and explanation for one user.

    The pipeline follows this flow:
    1. check_for_errors(): detect an error signature, remember it, flip the
       status label and mark the error line
    2. simplify_current_error(): check the credential, gather context around
       the cursor, ask the completion provider, render the answer

    Example:
        session = BugBuddySession(detector, gatherer, simplifier)
        session.check_for_errors(document)
        report = await session.simplify_current_error(document, cursor_line=0)
    """

    def __init__(
        self,
        detector: ErrorDetector,
        gatherer: CodeContextGatherer,
        simplifier: ErrorSimplifier,
        credentials: CredentialStore | None = None,
        terminal: BugBuddyTerminal | None = None,
        status: StatusIndicator | None = None,
        highlighter: LineHighlighter | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            detector: ErrorDetector for finding error signatures
            gatherer: CodeContextGatherer for the code window
            simplifier: ErrorSimplifier for explanations
            credentials: Where updated API keys are persisted
            terminal: Panel explanations are written to
            status: Two-state trigger label
            highlighter: Error line marker
            notifier: Sink for user-visible messages
        """
        self._detector = detector
        self._gatherer = gatherer
        self._simplifier = simplifier
        self._credentials = credentials
        self.terminal = terminal or BugBuddyTerminal()
        self.status = status or StatusIndicator()
        self.highlighter = highlighter or LineHighlighter()
        self.notifier = notifier or Notifier()
        self.error_buffer = ""

    @property
    def gatherer(self) -> CodeContextGatherer:
        """Context gatherer used for simplify requests."""
        return self._gatherer

    @property
    def is_error_detected(self) -> bool:
        """True while the "Simplify Error" trigger is showing."""
        return self.status.is_error_detected

    def check_for_errors(
        self,
        document: SourceDocument | None,
        cursor_line: int = 0,
        text: str | None = None,
    ) -> ErrorMatch | None:
        """Scan a document and update the status and highlight.

        Failures are logged, never raised: a detection pass must not break
        the caller's event loop.

        Args:
            document: Document to scan, or None
            cursor_line: 0-based line to highlight when the error names none
            text: Terminal output to scan instead of the document text; the
                highlight still applies to the document

        Returns:
            The detected error, or None
        """
        if document is None:
            return None

        self.highlighter.clear()
        scanned = document.text if text is None else text

        try:
            match = self._detector.detect_error(scanned, document.language)
        except Exception as e:
            log.exception(LogEventNames.DETECTION_FAILED, file_name=document.file_name, error=str(e))
            return None

        if match is None:
            if self.status.is_error_detected:
                self.status.reset()
            return None

        self.error_buffer = match.message
        self.status.mark_error_detected()

        line = self._detector.locate_line(match, document.language)
        self.highlighter.highlight(document, cursor_line if line is None else line)

        log.info(
            LogEventNames.ERROR_DETECTED,
            file_name=document.file_name,
            language=document.language,
            line=self.highlighter.highlighted_line,
        )
        return match

    async def simplify_current_error(
        self,
        document: SourceDocument | None,
        cursor_line: int = 0,
    ) -> SimplifyReport:
        """Explain the last detected error using the code around the cursor.

        Args:
            document: Active document, or None if there is none
            cursor_line: 0-based line the context window is centred on

        Returns:
            SimplifyReport describing what happened
        """
        start_time = time.time()
        label = self._simplifier.provider_label

        if not self._simplifier.has_api_key:
            message = f"{label} API key is required to analyze errors."
            self.notifier.show_info(message, action=UPDATE_KEY_ACTION)
            return SimplifyReport(SimplifyOutcome.MISSING_CREDENTIAL, message)

        if document is None:
            message = "No active editor"
            self.notifier.show_error(message)
            return SimplifyReport(SimplifyOutcome.NO_ACTIVE_DOCUMENT, message)

        try:
            context = self._gatherer.get_context(document, cursor_line)
        except SettingsError as e:
            message = f"Could not read settings: {e}"
            self.notifier.show_error(message)
            return SimplifyReport(SimplifyOutcome.NO_CONTEXT, message)
        if context is None:
            message = "Could not gather code context"
            self.notifier.show_error(message)
            return SimplifyReport(SimplifyOutcome.NO_CONTEXT, message)

        try:
            explanation = await self._simplifier.simplify_error(
                self.error_buffer or FALLBACK_ERROR_MESSAGE,
                context,
            )
        except MissingCredentialError as e:
            message = str(e)
            self.notifier.show_info(message, action=UPDATE_KEY_ACTION)
            return SimplifyReport(SimplifyOutcome.MISSING_CREDENTIAL, message)
        except SimplifyError as e:
            message = f"Error: {e}"
            self.notifier.show_error(
                message,
                action=UPDATE_KEY_ACTION if e.credential_problem else None,
            )
            return SimplifyReport(SimplifyOutcome.FAILED, str(e))

        self.terminal.show_simplified_error(self.error_buffer, explanation)

        log.info(
            "simplify_request_complete",
            file_name=context.file_name,
            duration_seconds=round(time.time() - start_time, 2),
        )
        return SimplifyReport(SimplifyOutcome.SUCCESS, "Explanation ready", explanation)

    async def update_api_key(self, api_key: str) -> None:
        """Store a new API key and use it from now on.

        Raises:
            ValueError: If the key is empty
            CredentialStoreError: If the key cannot be persisted
        """
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be empty")

        if self._credentials is not None:
            self._credentials.store(self._simplifier.provider_name, api_key)
        await self._simplifier.set_api_key(api_key)
        label = self._simplifier.provider_label
        self.notifier.show_info(f"{label} API key updated successfully ({mask_secret(api_key)})")

    async def aclose(self) -> None:
        """Release network resources."""
        await self._simplifier.aclose()
