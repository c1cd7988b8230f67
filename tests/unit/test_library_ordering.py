"""Unit tests for deduplication and prioritization."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from heypanel.library.aggregator import dedupe, prioritize
from heypanel.library.models import LibraryAsset


def asset(asset_id: str, name: str | None = None, **kwargs) -> LibraryAsset:
    return LibraryAsset(asset_id=asset_id, display_name=name or asset_id, **kwargs)


class TestDedupe:
    """Test first-occurrence-wins deduplication."""

    def test_first_listed_source_wins(self) -> None:
        from_looks = asset("same", "From looks", source="look")
        from_assets = asset("same", "From assets", source="asset")

        result = dedupe([from_looks, asset("other"), from_assets])

        assert [a.asset_id for a in result] == ["same", "other"]
        assert result[0] is from_looks

    def test_no_duplicates(self) -> None:
        items = [asset("a"), asset("b"), asset("c")]

        assert dedupe(items) == items


class TestPrioritize:
    """Test tagging and stable ordering."""

    def test_priority_then_non_stock_then_stock(self) -> None:
        """Test A(priority, stock), B(non-priority, non-stock), C(non-priority, stock)."""
        c = asset("C", is_stock=True)
        b = asset("B", is_stock=False)
        a = asset("A", "Julian", is_stock=True)

        result = prioritize([c, b, a], keywords=["julian"])

        assert [x.asset_id for x in result] == ["A", "B", "C"]
        assert result[0].is_priority_target is True
        assert result[1].is_priority_target is False

    def test_keyword_match_is_case_insensitive_substring(self) -> None:
        result = prioritize([asset("x", "Podcast JULIAN v2")], keywords=["julian"])

        assert result[0].is_priority_target is True

    def test_target_group_id_matches_id_and_group(self) -> None:
        result = prioritize(
            [asset("x"), asset("look1", group_id="g1"), asset("g1")],
            target_group_id="g1",
        )

        assert [x.asset_id for x in result] == ["look1", "g1", "x"]
        assert all(x.is_priority_target for x in result[:2])

    def test_target_asset_id(self) -> None:
        result = prioritize([asset("a"), asset("b")], target_asset_id="b")

        assert [x.asset_id for x in result] == ["b", "a"]

    def test_ties_keep_prior_order(self) -> None:
        items = [asset(str(i), is_stock=i % 2 == 0) for i in range(6)]

        result = prioritize(items)

        assert [x.asset_id for x in result] == ["1", "3", "5", "0", "2", "4"]

    def test_truncates_to_max_results(self) -> None:
        items = [asset(str(i)) for i in range(80)]

        result = prioritize(items)

        assert len(result) == 50
        assert result[0].asset_id == "0"
        assert result[-1].asset_id == "49"

    def test_blank_keywords_ignored(self) -> None:
        result = prioritize([asset("a", "Anything")], keywords=["", "  "])

        assert result[0].is_priority_target is False

    def test_stale_priority_flag_is_recomputed(self) -> None:
        result = prioritize([asset("a", is_priority_target=True)])

        assert result[0].is_priority_target is False
