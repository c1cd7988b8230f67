"""Unit tests for the SQLite discovery cache."""

import sqlite3
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from heypanel.library.cache import CacheEntry, DiscoveryCache
from heypanel.library.models import LibraryAsset


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


ASSETS = (
    LibraryAsset(asset_id="a1", display_name="Julian", is_priority_target=True, group_id="g1", source="look"),
    LibraryAsset(asset_id="a2", display_name="Stock", is_stock=True, source="avatar"),
)


class TestDiscoveryCache:
    """Test storage and TTL behaviour."""

    def test_roundtrip_preserves_order_and_fields(self, tmp_path) -> None:
        cache = DiscoveryCache(tmp_path)
        cache.put("g1", ASSETS)

        entry = cache.get("g1")

        assert entry is not None
        assert entry.payload == ASSETS

    def test_missing_key(self, tmp_path) -> None:
        assert DiscoveryCache(tmp_path).get("nope") is None

    def test_fresh_before_ttl(self, tmp_path) -> None:
        clock = FakeClock()
        cache = DiscoveryCache(tmp_path, ttl_seconds=1800, clock=clock)
        cache.put("g1", ASSETS)

        clock.now += 1799

        assert cache.get("g1") is not None

    def test_expired_at_ttl(self, tmp_path) -> None:
        clock = FakeClock()
        cache = DiscoveryCache(tmp_path, ttl_seconds=1800, clock=clock)
        cache.put("g1", ASSETS)

        clock.now += 1800

        assert cache.get("g1") is None

    def test_expired_row_deleted_on_read(self, tmp_path) -> None:
        clock = FakeClock()
        cache = DiscoveryCache(tmp_path, ttl_seconds=60, clock=clock)
        cache.put("g1", ASSETS)
        cache.put("g2", ASSETS)
        clock.now += 61

        cache.get("g1")

        conn = sqlite3.connect(str(cache.db_path))
        keys = [row[0] for row in conn.execute("SELECT key FROM discovery")]
        conn.close()
        assert keys == ["g2"]

    def test_put_replaces_entry(self, tmp_path) -> None:
        cache = DiscoveryCache(tmp_path)
        cache.put("g1", ASSETS)
        cache.put("g1", ASSETS[:1])

        entry = cache.get("g1")
        assert entry is not None
        assert entry.payload == ASSETS[:1]

    def test_persists_across_instances(self, tmp_path) -> None:
        DiscoveryCache(tmp_path).put("g1", ASSETS)

        assert DiscoveryCache(tmp_path).get("g1") is not None

    def test_delete_one_and_all(self, tmp_path) -> None:
        cache = DiscoveryCache(tmp_path)
        cache.put("g1", ASSETS)
        cache.put("g2", ASSETS)

        cache.delete("g1")
        assert cache.get("g1") is None
        assert cache.get("g2") is not None

        cache.delete()
        assert cache.get("g2") is None

    def test_unreadable_entry_discarded(self, tmp_path) -> None:
        cache = DiscoveryCache(tmp_path)
        conn = sqlite3.connect(str(cache.db_path))
        conn.execute(
            "INSERT INTO discovery (key, payload, captured_at) VALUES (?, ?, ?)",
            ("g1", "not json", 0.0),
        )
        conn.commit()
        conn.close()

        assert cache.get("g1") is None

    def test_invalid_ttl_rejected(self, tmp_path) -> None:
        with pytest.raises(ValueError, match="ttl_seconds must be positive"):
            DiscoveryCache(tmp_path, ttl_seconds=0)


class TestCacheEntry:
    """Test the freshness rule."""

    def test_is_fresh(self) -> None:
        entry = CacheEntry(key="k", payload=(), captured_at=100.0)

        assert entry.is_fresh(now=129.0, ttl=30) is True
        assert entry.is_fresh(now=130.0, ttl=30) is False
