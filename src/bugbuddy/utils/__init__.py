"""Utility functions and helpers.

This module provides various utilities for BugBuddy:
- async_helpers: Exception hierarchy, debouncing
- security: Secret redaction, key masking
- logging: Structured logging with secret sanitization
"""

from bugbuddy.utils.async_helpers import (
    BugBuddyError,
    Debouncer,
    InvalidCredentialError,
    LLMRequestError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
    SettingsError,
    SimplifyError,
)
from bugbuddy.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from bugbuddy.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
    mask_secret,
)

__all__ = [
    "BugBuddyError",
    "Debouncer",
    "InvalidCredentialError",
    "LLMRequestError",
    # Logging
    "LogFormat",
    "LogLevel",
    "MalformedResponseError",
    "MissingCredentialError",
    "RateLimitError",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "SettingsError",
    "SimplifyError",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "mask_secret",
]
