"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "bugbuddy"


class GeminiConfig(BaseModel):
    """Gemini-specific configuration."""

    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    max_tokens: int = Field(1000, ge=1, le=32768)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    timeout: float | None = Field(None, gt=0, description="Seconds; None keeps the client default")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require HTTPS for the hosted endpoint."""
        if not v.startswith("https://"):
            raise ValueError("Gemini base_url must use https://")
        return v.rstrip("/")


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = Field(1000, ge=1, le=8192)
    temperature: float = Field(0.7, ge=0.0, le=1.0)
    timeout: float | None = Field(None, gt=0, description="Seconds; None keeps the client default")


class LLMConfig(BaseModel):
    """Completion provider configuration."""

    provider: Literal["gemini", "anthropic"] = "gemini"
    gemini: GeminiConfig = GeminiConfig()
    anthropic: AnthropicConfig = AnthropicConfig()


class AnalysisConfig(BaseModel):
    """Code context configuration."""

    context_lines: int = Field(5, ge=0, le=100, description="Lines before/after the error line")


class CredentialsConfig(BaseModel):
    """Where API keys are looked up."""

    secrets_path: Path = DEFAULT_CONFIG_DIR / "secrets.json"
    env_file: Path = Path(".env")


class WatchConfig(BaseModel):
    """File watching configuration."""

    debounce_seconds: float = Field(0.5, ge=0.0, le=10.0)
    poll_interval: float = Field(0.25, gt=0.0, le=10.0)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = DEFAULT_CONFIG_DIR / "bugbuddy.log"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class BugBuddyConfig(BaseSettings):
    """Root configuration for BugBuddy."""

    analysis: AnalysisConfig = AnalysisConfig()
    llm: LLMConfig = LLMConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    watch: WatchConfig = WatchConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="BUGBUDDY_",
        env_nested_delimiter="__",
        extra="ignore",
    )
