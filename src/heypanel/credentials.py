"""Holds the API credential in memory with an optional durable copy.

Policies:
- The key is always held in memory
- If persist=True, the key is also written to a 0600 file in the data dir
- clear() wipes both
- The key value is never logged
"""

import logging
import os
from pathlib import Path

from .paths import get_data_dir

logger = logging.getLogger(__name__)

CREDENTIAL_FILENAME = "credential"


class CredentialStore:
    """Single-slot credential holder for the remote API key."""

    def __init__(self, storage_path: Path | None = None) -> None:
        """Initialize the store, loading a remembered credential if one exists.

        Args:
            storage_path: File holding the durable copy. Defaults to
                         <data dir>/credential.
        """
        self.storage_path = storage_path or get_data_dir() / CREDENTIAL_FILENAME
        self._credential: str | None = None
        self._persisted = False

        if self.storage_path.exists():
            saved = self.storage_path.read_text().strip()
            if saved:
                self._credential = saved
                self._persisted = True
                logger.debug("Loaded remembered credential from disk")

    def __repr__(self) -> str:
        state = "set" if self._credential else "empty"
        return f"CredentialStore({state}, persisted={self._persisted})"

    def get(self) -> str | None:
        """Return the in-memory credential, or None when locked."""
        return self._credential

    def set(self, credential: str, persist: bool = False) -> None:
        """Store a credential.

        Args:
            credential: API key as entered by the operator
            persist: Whether to mirror the key to durable storage

        Raises:
            ValueError: If the credential is blank
        """
        credential = credential.strip() if credential else ""
        if not credential:
            raise ValueError("Credential cannot be empty")

        self._credential = credential
        self._persisted = persist

        if persist:
            self._write(credential)
            logger.debug("Credential stored and remembered on this device")
        else:
            self._remove()
            logger.debug("Credential stored for this session only")

    def clear(self) -> None:
        """Wipe the credential from memory and durable storage."""
        self._credential = None
        self._persisted = False
        self._remove()
        logger.debug("Credential cleared")

    def is_persisted(self) -> bool:
        """Whether the current credential is mirrored to durable storage."""
        return self._persisted

    def _write(self, credential: str) -> None:
        self.storage_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        fd = os.open(str(self.storage_path), os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o600)
        try:
            os.write(fd, credential.encode("utf-8"))
        finally:
            os.close(fd)

    def _remove(self) -> None:
        try:
            self.storage_path.unlink()
        except FileNotFoundError:
            pass
