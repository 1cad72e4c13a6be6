"""Polling file watcher that feeds the detection pass.

Stands in for an editor's change events: the file's modification time is
polled, and bursts of changes are coalesced by a Debouncer so that at most
one detection pass runs per quiet period.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from bugbuddy.models.document import SourceDocument
from bugbuddy.utils.async_helpers import Debouncer
from bugbuddy.utils.logging import LogEventNames

if TYPE_CHECKING:
    from bugbuddy.core.session import BugBuddySession

log = structlog.get_logger()


class DocumentWatcher:
    """Re-runs error detection whenever a file changes.

    Example:
        watcher = DocumentWatcher(Path("app.py"), session)
        await watcher.run(stop_event)
    """

    def __init__(
        self,
        path: Path,
        session: BugBuddySession,
        language: str | None = None,
        debounce_seconds: float = 0.5,
        poll_interval: float = 0.25,
    ) -> None:
        """Initialize the watcher.

        Args:
            path: File to watch
            session: Session whose check_for_errors() is called
            language: Language id; inferred from the extension when omitted
            debounce_seconds: Quiet period before a detection pass
            poll_interval: Seconds between modification-time checks
        """
        self._path = path
        self._session = session
        self._language = language
        self._poll_interval = poll_interval
        self._debouncer = Debouncer(debounce_seconds, self.check_now)
        self._last_mtime: float | None = None
        self.passes = 0

    def _mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except FileNotFoundError:
            return None

    def check_now(self) -> None:
        """Run one detection pass on the current file contents."""
        try:
            document = SourceDocument.from_path(self._path, self._language)
        except OSError as e:
            log.warning("watched_file_unreadable", path=str(self._path), error=str(e))
            return

        self.passes += 1
        match = self._session.check_for_errors(document)
        if match is not None:
            self._session.notifier.show_info(
                f"{self._session.status.text}: {match.first_line}",
                action="bugbuddy simplify " + str(self._path),
            )

    def poll(self) -> bool:
        """Check the modification time once; schedule a pass if it changed.

        Returns:
            True if a change was seen
        """
        mtime = self._mtime()
        if mtime == self._last_mtime:
            return False

        self._last_mtime = mtime
        if mtime is not None:
            log.debug(LogEventNames.DOCUMENT_CHANGED, path=str(self._path))
            self._debouncer.trigger()
        return True

    async def run(self, stop: asyncio.Event) -> None:
        """Watch until ``stop`` is set. An initial pass runs immediately."""
        log.info(LogEventNames.WATCH_STARTED, path=str(self._path))
        self._last_mtime = self._mtime()
        self.check_now()

        try:
            while not stop.is_set():
                try:
                    await asyncio.wait_for(stop.wait(), timeout=self._poll_interval)
                except TimeoutError:
                    self.poll()
        finally:
            self._debouncer.cancel()
