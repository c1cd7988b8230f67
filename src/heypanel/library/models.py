"""Data models for library discovery."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class LibraryAsset:
    """A visual subject usable as a video's visual input.

    Attributes:
        asset_id: Identifier, unique within a discovery result
        display_name: Human-readable name
        preview_image_url: Thumbnail URL, empty when the source has none
        is_stock: Whether the asset comes from the public stock catalog
        is_priority_target: Whether the asset is the operator's expected subject
        group_id: Avatar group the asset belongs to, if any
        source: Listing that produced the asset (look, avatar, talking_photo, asset)
    """

    asset_id: str
    display_name: str
    preview_image_url: str = ""
    is_stock: bool = False
    is_priority_target: bool = False
    group_id: str | None = None
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LibraryAsset":
        return cls(**data)


@dataclass(frozen=True)
class DiscoveryOptions:
    """Knobs for a single discovery run.

    Attributes:
        include_groups: Enumerate every avatar group and fetch its looks
        force_refresh: Ignore any cached result
        priority_keywords: Name fragments that mark an asset as priority
        target_asset_id: Specific asset id to surface first
        max_results: Maximum number of assets returned
    """

    include_groups: bool = True
    force_refresh: bool = False
    priority_keywords: tuple[str, ...] = ()
    target_asset_id: str | None = None
    max_results: int = 50


@dataclass(frozen=True)
class DiscoveryResult:
    """Outcome of a discovery run.

    Attributes:
        assets: Deduplicated, prioritized assets
        status: Human-readable summary
        from_cache: Whether the assets came from the cache
        degraded: Whether the target group could not be loaded
        failed_sources: Listings that failed and contributed nothing
    """

    assets: tuple[LibraryAsset, ...]
    status: str
    from_cache: bool = False
    degraded: bool = False
    failed_sources: tuple[str, ...] = ()
