"""Unit tests for CredentialStore persistence rules."""

import logging
import stat
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from heypanel.credentials import CredentialStore


class TestCredentialPersistence:
    """Test in-memory and durable storage behaviour across restarts."""

    def test_session_only_credential_is_gone_after_restart(self, tmp_path) -> None:
        """Test set(x, persist=False) followed by a restart yields None."""
        path = tmp_path / "credential"
        store = CredentialStore(path)
        store.set("secret-key", persist=False)

        assert store.get() == "secret-key"
        assert store.is_persisted() is False

        restarted = CredentialStore(path)
        assert restarted.get() is None
        assert restarted.is_persisted() is False

    def test_remembered_credential_survives_restart(self, tmp_path) -> None:
        """Test set(x, persist=True) followed by a restart yields x."""
        path = tmp_path / "credential"
        CredentialStore(path).set("secret-key", persist=True)

        restarted = CredentialStore(path)
        assert restarted.get() == "secret-key"
        assert restarted.is_persisted() is True

    def test_set_without_persist_removes_durable_copy(self, tmp_path) -> None:
        path = tmp_path / "credential"
        store = CredentialStore(path)
        store.set("first", persist=True)

        store.set("second", persist=False)

        assert not path.exists()
        assert store.get() == "second"

    def test_clear_wipes_memory_and_disk(self, tmp_path) -> None:
        path = tmp_path / "credential"
        store = CredentialStore(path)
        store.set("secret-key", persist=True)

        store.clear()

        assert store.get() is None
        assert store.is_persisted() is False
        assert not path.exists()
        assert CredentialStore(path).get() is None

    def test_clear_without_durable_copy(self, tmp_path) -> None:
        store = CredentialStore(tmp_path / "credential")

        store.clear()

        assert store.get() is None

    def test_durable_file_is_private(self, tmp_path) -> None:
        path = tmp_path / "credential"
        CredentialStore(path).set("secret-key", persist=True)

        mode = stat.S_IMODE(path.stat().st_mode)
        assert mode == 0o600


class TestCredentialValidation:
    """Test input handling and secrecy."""

    def test_credential_is_stripped(self, tmp_path) -> None:
        store = CredentialStore(tmp_path / "credential")
        store.set("  secret-key \n")

        assert store.get() == "secret-key"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_credential_rejected(self, tmp_path, value: str) -> None:
        store = CredentialStore(tmp_path / "credential")

        with pytest.raises(ValueError, match="Credential cannot be empty"):
            store.set(value)

    def test_repr_masks_value(self, tmp_path) -> None:
        store = CredentialStore(tmp_path / "credential")
        store.set("secret-key")

        assert "secret-key" not in repr(store)

    def test_value_never_logged(self, tmp_path, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="heypanel")
        path = tmp_path / "credential"
        store = CredentialStore(path)
        store.set("secret-key", persist=True)
        CredentialStore(path)
        store.clear()

        assert "secret-key" not in caplog.text

    def test_default_location_uses_data_dir(self) -> None:
        store = CredentialStore()

        assert store.storage_path.name == "credential"
        assert "heypanel" in str(store.storage_path.parent)
