"""Tests for API key storage and lookup."""

import json
import stat
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from bugbuddy.config.credentials import CredentialStore, CredentialStoreError, secret_name
from bugbuddy.config.schema import CredentialsConfig


@pytest.fixture
def store(credentials_config: CredentialsConfig) -> CredentialStore:
    """Create a store inside a temporary directory."""
    return CredentialStore(credentials_config)


class TestStore:
    """Tests for saving keys."""

    def test_round_trip(self, store: CredentialStore) -> None:
        """Test that a stored key is read back."""
        store.store("gemini", "AIza-one")

        assert store.get_secret("gemini") == "AIza-one"
        assert store.get_secret("anthropic") is None

    def test_file_layout(self, store: CredentialStore) -> None:
        """Test the key names in the secret file."""
        store.store("gemini", "AIza-one")
        store.store("anthropic", "sk-ant-two")

        data = json.loads(store.secrets_path.read_text())
        assert data == {"gemini-api-key": "AIza-one", "anthropic-api-key": "sk-ant-two"}
        assert secret_name("gemini") == "gemini-api-key"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_owner_only_permissions(self, store: CredentialStore) -> None:
        """Test that the secret file is not readable by others."""
        store.store("gemini", "AIza-one")

        mode = stat.S_IMODE(store.secrets_path.stat().st_mode)
        assert mode == 0o600

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_key_rejected(self, store: CredentialStore, value: str) -> None:
        """Test that blank keys are never stored."""
        with pytest.raises(ValueError, match="must not be empty"):
            store.store("gemini", value)
        assert not store.secrets_path.exists()

    def test_overwrite(self, store: CredentialStore) -> None:
        """Test that updating replaces the old key."""
        store.store("gemini", "old")
        store.store("gemini", "new")

        assert store.get_secret("gemini") == "new"

    def test_corrupt_store(self, store: CredentialStore) -> None:
        """Test that an unreadable store raises CredentialStoreError."""
        store.secrets_path.parent.mkdir(parents=True)
        store.secrets_path.write_text("{not json")

        with pytest.raises(CredentialStoreError):
            store.get_secret("gemini")


class TestResolve:
    """Tests for the lookup order."""

    def test_secret_store_first(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the secret store beats the environment."""
        store.store("gemini", "from-store")
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        assert store.resolve("gemini") == "from-store"

    def test_env_key_is_migrated(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that an environment key is copied into the store."""
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        assert store.resolve("gemini") == "from-env"
        assert store.get_secret("gemini") == "from-env"

    def test_env_file(self, store: CredentialStore, credentials_config: CredentialsConfig) -> None:
        """Test reading the key from the configured .env file."""
        Path(credentials_config.env_file).write_text("GEMINI_API_KEY=from-dotenv\n")

        assert store.resolve("gemini") == "from-dotenv"

    def test_prompt_last(self, store: CredentialStore) -> None:
        """Test that the prompt is used only when nothing else has a key."""
        prompt = MagicMock(return_value="  typed-key  ")

        assert store.resolve("gemini", prompt=prompt) == "typed-key"
        prompt.assert_called_once_with("Enter your Gemini API key: ")
        assert store.get_secret("gemini") == "typed-key"

    def test_prompt_not_called_when_key_found(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a found key skips the prompt."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        prompt = MagicMock()

        assert store.resolve("anthropic", prompt=prompt) == "sk-ant-env"
        prompt.assert_not_called()

    def test_nothing_found(self, store: CredentialStore) -> None:
        """Test the no-key result."""
        assert store.resolve("gemini") is None

    def test_blank_prompt_answer(self, store: CredentialStore) -> None:
        """Test that an empty answer means no key."""
        assert store.resolve("gemini", prompt=lambda message: "") is None
        assert not store.secrets_path.exists()
