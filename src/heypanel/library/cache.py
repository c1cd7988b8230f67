"""SQLite storage for discovered libraries with a time-to-live."""

import json
import logging
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .models import LibraryAsset

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass(frozen=True)
class CacheEntry:
    """A cached discovery result.

    Attributes:
        key: Target group id the result was discovered for
        payload: Ordered assets
        captured_at: Epoch seconds when the result was stored
    """

    key: str
    payload: tuple[LibraryAsset, ...]
    captured_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.captured_at < ttl


class DiscoveryCache:
    """SQLite-backed cache of discovery results keyed by target group id.

    Entries older than the TTL are treated as missing and refetched.
    """

    def __init__(
        self,
        cache_dir: Path,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache storage with database in given directory.

        Args:
            cache_dir: Directory containing the cache database
            ttl_seconds: How long an entry stays valid
            clock: Source of the current epoch time
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        cache_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = cache_dir / "library.db"
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS discovery (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    captured_at REAL NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> CacheEntry | None:
        """Return the fresh entry for key, or None if missing or expired."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT key, payload, captured_at FROM discovery WHERE key = ?",
                (key,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        try:
            payload = tuple(LibraryAsset.from_dict(item) for item in json.loads(row["payload"]))
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry for {key}: {e}")
            self.delete(key)
            return None

        entry = CacheEntry(key=row["key"], payload=payload, captured_at=row["captured_at"])
        if not entry.is_fresh(self.clock(), self.ttl_seconds):
            logger.debug(f"Cache entry for {key} expired")
            self.delete(key)
            return None
        return entry

    def put(self, key: str, assets: tuple[LibraryAsset, ...] | list[LibraryAsset]) -> CacheEntry:
        """Store assets under key with the current timestamp."""
        entry = CacheEntry(key=key, payload=tuple(assets), captured_at=self.clock())
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO discovery (key, payload, captured_at) VALUES (?, ?, ?)",
                (
                    entry.key,
                    json.dumps([asset.to_dict() for asset in entry.payload]),
                    entry.captured_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return entry

    def delete(self, key: str | None = None) -> None:
        """Remove one entry, or every entry when key is None."""
        conn = self._get_connection()
        try:
            if key is None:
                conn.execute("DELETE FROM discovery")
            else:
                conn.execute("DELETE FROM discovery WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
