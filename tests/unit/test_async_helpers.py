"""Tests for async utility functions."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from bugbuddy.utils.async_helpers import (
    BugBuddyError,
    Debouncer,
    InvalidCredentialError,
    LLMRequestError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
    SimplifyError,
)


class TestCustomExceptions:
    """Test custom exception classes."""

    @pytest.mark.parametrize(
        "cls",
        [MissingCredentialError, InvalidCredentialError, LLMRequestError, MalformedResponseError],
    )
    def test_inherits_from_base(self, cls: type[Exception]) -> None:
        """Test that pipeline errors share a base class."""
        assert issubclass(cls, BugBuddyError)

    def test_rate_limit_error(self) -> None:
        """Test RateLimitError with retry_after."""
        error = RateLimitError("rate limited", retry_after=60)
        assert error.retry_after == 60
        assert isinstance(error, LLMRequestError)

    def test_rate_limit_error_no_retry(self) -> None:
        """Test RateLimitError without retry_after."""
        assert RateLimitError("rate limited").retry_after is None

    def test_simplify_error_flag(self) -> None:
        """Test the credential_problem flag."""
        assert SimplifyError("x").credential_problem is False
        assert SimplifyError("x", credential_problem=True).credential_problem is True


class TestDebouncer:
    """Test Debouncer class."""

    def test_negative_delay_rejected(self) -> None:
        """Test that the delay must be non-negative."""
        with pytest.raises(ValueError, match="non-negative"):
            Debouncer(-1, lambda: None)

    @pytest.mark.asyncio
    async def test_burst_runs_once(self) -> None:
        """Test that rapid triggers collapse into one call."""
        callback = MagicMock(return_value=None)
        debouncer = Debouncer(0.05, callback)

        for _ in range(5):
            debouncer.trigger()
        await debouncer.flush()

        callback.assert_called_once()

    @pytest.mark.asyncio
    async def test_separate_bursts_run_separately(self) -> None:
        """Test that triggers after the quiet period fire again."""
        callback = MagicMock(return_value=None)
        debouncer = Debouncer(0.01, callback)

        debouncer.trigger()
        await debouncer.flush()
        debouncer.trigger()
        await debouncer.flush()

        assert callback.call_count == 2

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self) -> None:
        """Test coroutine callbacks."""
        callback = AsyncMock()
        debouncer = Debouncer(0, callback)

        debouncer.trigger()
        await debouncer.flush()

        callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Test that a cancelled trigger never fires."""
        callback = MagicMock(return_value=None)
        debouncer = Debouncer(0.05, callback)

        debouncer.trigger()
        assert debouncer.pending is True
        debouncer.cancel()
        await asyncio.sleep(0.1)

        assert debouncer.pending is False
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_callback_failure_is_contained(self) -> None:
        """Test that a failing callback does not break the debouncer."""
        callback = MagicMock(side_effect=[RuntimeError("boom"), None])
        debouncer = Debouncer(0, callback)

        debouncer.trigger()
        await debouncer.flush()
        debouncer.trigger()
        await debouncer.flush()

        assert callback.call_count == 2

    def test_delay_property(self) -> None:
        """Test delay property."""
        assert Debouncer(0.5, lambda: None).delay == 0.5
