"""API key storage and lookup.

Keys are looked up in order:
1. The secret store (a JSON file readable only by the user)
2. The process environment / ``.env`` file
3. An interactive prompt, when the caller allows one

A key found in the environment is copied into the secret store so later runs
do not depend on the ``.env`` file being present.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from pathlib import Path

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

from bugbuddy.config.schema import CredentialsConfig
from bugbuddy.utils.async_helpers import BugBuddyError
from bugbuddy.utils.logging import LogEventNames

log = structlog.get_logger()

PROVIDER_LABELS = {
    "gemini": "Gemini",
    "anthropic": "Anthropic",
}


class CredentialStoreError(BugBuddyError):
    """The secret store could not be read or written."""


class EnvCredentials(BaseSettings):
    """API keys from the environment or a ``.env`` file."""

    gemini_api_key: str | None = None
    anthropic_api_key: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def secret_name(provider: str) -> str:
    """Name under which a provider's key is kept in the secret store."""
    return f"{provider}-api-key"


class CredentialStore:
    """Resolves and persists API keys for completion providers.

    Example:
        store = CredentialStore(config.credentials)
        api_key = store.resolve("gemini", prompt=getpass.getpass)
    """

    def __init__(self, config: CredentialsConfig | None = None) -> None:
        """Initialize the store.

        Args:
            config: Locations of the secret store and environment file
        """
        self._config = config or CredentialsConfig()

    @property
    def secrets_path(self) -> Path:
        """Location of the secret store."""
        return self._config.secrets_path

    def get_secret(self, provider: str) -> str | None:
        """Read a key from the secret store."""
        value = self._read_secrets().get(secret_name(provider))
        return value or None

    def get_from_env(self, provider: str) -> str | None:
        """Read a key from the environment or the configured ``.env`` file."""
        env = EnvCredentials(_env_file=self._config.env_file)  # type: ignore[call-arg]
        value = getattr(env, f"{provider}_api_key", None)
        return value.strip() if value and value.strip() else None

    def store(self, provider: str, api_key: str) -> None:
        """Save a key to the secret store.

        Raises:
            ValueError: If the key is empty
            CredentialStoreError: If the store cannot be written
        """
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be empty")

        secrets = self._read_secrets()
        secrets[secret_name(provider)] = api_key
        self._write_secrets(secrets)
        log.info(LogEventNames.CREDENTIAL_UPDATED, provider=provider)

    def resolve(
        self,
        provider: str,
        prompt: Callable[[str], str] | None = None,
    ) -> str | None:
        """Find a key for ``provider``, asking the user as a last resort.

        Args:
            provider: Provider name, e.g. "gemini"
            prompt: Callable that asks the user for a key; skipped when None

        Returns:
            The API key, or None if no source produced one
        """
        api_key = self.get_secret(provider)
        if api_key:
            log.debug(LogEventNames.CREDENTIAL_LOADED, provider=provider, source="secret_store")
            return api_key

        api_key = self.get_from_env(provider)
        if api_key:
            log.debug(LogEventNames.CREDENTIAL_LOADED, provider=provider, source="env")
            try:
                self.store(provider, api_key)
                log.info(LogEventNames.CREDENTIAL_MIGRATED, provider=provider)
            except CredentialStoreError as e:
                log.warning("credential_migration_failed", provider=provider, error=str(e))
            return api_key

        if prompt is not None:
            label = PROVIDER_LABELS.get(provider, provider.title())
            entered = prompt(f"Enter your {label} API key: ").strip()
            if entered:
                self.store(provider, entered)
                return entered

        log.info(LogEventNames.CREDENTIAL_MISSING, provider=provider)
        return None

    def _read_secrets(self) -> dict[str, str]:
        path = self._config.secrets_path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialStoreError(f"Cannot read secret store {path}: {e}") from e
        if not isinstance(data, dict):
            raise CredentialStoreError(f"Secret store {path} is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def _write_secrets(self, secrets: dict[str, str]) -> None:
        path = self._config.secrets_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Create with owner-only permissions before any key is written
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(secrets, f, indent=2)
            os.chmod(path, 0o600)
        except OSError as e:
            raise CredentialStoreError(f"Cannot write secret store {path}: {e}") from e
