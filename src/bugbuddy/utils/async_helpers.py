"""Async utilities and the shared exception hierarchy.

This module provides:
- Custom exceptions for the simplify pipeline
- A debouncer that coalesces bursts of change events
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

import structlog

log = structlog.get_logger()


# =============================================================================
# Custom Exceptions
# =============================================================================


class BugBuddyError(Exception):
    """Base exception for all BugBuddy errors."""


class SettingsError(BugBuddyError):
    """The configuration could not be read while the pipeline was running."""


class MissingCredentialError(BugBuddyError):
    """No API key is available for the configured provider."""


class InvalidCredentialError(BugBuddyError):
    """The provider rejected the API key."""


class LLMRequestError(BugBuddyError):
    """Network or HTTP failure talking to the completion endpoint."""


class RateLimitError(LLMRequestError):
    """Rate limit exceeded.

    Attributes:
        retry_after: Number of seconds the provider asked us to wait, if known.
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class MalformedResponseError(BugBuddyError):
    """The completion endpoint answered without the expected fields."""


class SimplifyError(BugBuddyError):
    """Simplifying an error failed.

    Attributes:
        credential_problem: True when updating the API key may fix the failure.
    """

    def __init__(self, message: str, credential_problem: bool = False) -> None:
        super().__init__(message)
        self.credential_problem = credential_problem


# =============================================================================
# Debouncing
# =============================================================================


class Debouncer:
    """Run a callback once after a quiet period.

    Every call to ``trigger`` restarts the timer, so a burst of events results
    in a single invocation ``delay`` seconds after the last one.

    Example:
        debouncer = Debouncer(0.5, lambda: session.check_for_errors(doc))

        debouncer.trigger()
        debouncer.trigger()  # only this one fires
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None] | None],
    ) -> None:
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds.
            callback: Sync or async callable run when the timer expires.
        """
        if delay < 0:
            raise ValueError(f"Debounce delay must be non-negative, got {delay}")
        self._delay = delay
        self._callback = callback
        self._pending: asyncio.Task[None] | None = None

    @property
    def delay(self) -> float:
        """Return the quiet period in seconds."""
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a callback is scheduled but has not started."""
        return self._pending is not None and not self._pending.done()

    def trigger(self) -> None:
        """Schedule the callback, replacing any pending one."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def flush(self) -> None:
        """Wait for the pending callback to finish."""
        if self._pending is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._pending

    async def _fire(self) -> None:
        await asyncio.sleep(self._delay)
        try:
            result = self._callback()
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            log.exception("debounced_callback_failed", error=str(e))
