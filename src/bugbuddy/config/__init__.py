"""Configuration loading, validation and credential lookup."""

from .credentials import CredentialStore, CredentialStoreError
from .loader import analysis_settings, load_config
from .schema import (
    AnalysisConfig,
    AnthropicConfig,
    BugBuddyConfig,
    CredentialsConfig,
    GeminiConfig,
    LLMConfig,
    LoggingConfig,
    WatchConfig,
)

__all__ = [
    # Loader
    "analysis_settings",
    "load_config",
    # Root config
    "BugBuddyConfig",
    # Sections
    "AnalysisConfig",
    "CredentialsConfig",
    "LLMConfig",
    "LoggingConfig",
    "WatchConfig",
    # Provider-specific configs
    "AnthropicConfig",
    "GeminiConfig",
    # Credentials
    "CredentialStore",
    "CredentialStoreError",
]
