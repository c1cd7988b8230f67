"""Library discovery across the avatar, photo, asset and group listings.

Orchestrates several ApiClient listing calls, normalizes their record
shapes into LibraryAsset, removes duplicates, puts the operator's expected
subject first and caches the result per target group.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Iterable

from ..api.client import ApiClient
from ..api.errors import CredentialRejected, PanelError
from .cache import DiscoveryCache
from .fields import (
    GROUP_ID_FIELDS,
    SOURCE_ASSET,
    SOURCE_AVATAR,
    SOURCE_LOOK,
    SOURCE_TALKING_PHOTO,
    first_value,
    normalize_records,
)
from .models import DiscoveryOptions, DiscoveryResult, LibraryAsset

logger = logging.getLogger(__name__)

ALL_GROUPS_KEY = "*"


def cache_key(target_group_id: str | None, include_groups: bool = True) -> str:
    """Cache key for one target group and group-enumeration mode."""
    mode = "groups" if include_groups else "no-groups"
    return f"{target_group_id or ALL_GROUPS_KEY}|{mode}"


def dedupe(assets: Iterable[LibraryAsset]) -> list[LibraryAsset]:
    """Collapse assets by asset_id, keeping the first occurrence."""
    seen: dict[str, LibraryAsset] = {}
    for asset in assets:
        if asset.asset_id not in seen:
            seen[asset.asset_id] = asset
    return list(seen.values())


def prioritize(
    assets: Iterable[LibraryAsset],
    target_group_id: str | None = None,
    target_asset_id: str | None = None,
    keywords: Iterable[str] = (),
    max_results: int = 50,
) -> list[LibraryAsset]:
    """Tag priority targets and order priority, then own, then stock assets.

    The sort is stable, so ties keep their combination order.

    Args:
        assets: Deduplicated assets in combination order
        target_group_id: Requested group; its looks and the group id itself match
        target_asset_id: Specific requested asset id
        keywords: Case-insensitive name fragments marking priority assets
        max_results: Number of assets kept after sorting

    Returns:
        Ordered, truncated assets with is_priority_target set
    """
    target_ids = {i for i in (target_group_id, target_asset_id) if i}
    needles = [k.casefold() for k in keywords if k and k.strip()]

    def is_priority(asset: LibraryAsset) -> bool:
        if asset.asset_id in target_ids:
            return True
        if target_group_id and asset.group_id == target_group_id:
            return True
        name = asset.display_name.casefold()
        return any(needle in name for needle in needles)

    tagged = [dataclasses.replace(a, is_priority_target=is_priority(a)) for a in assets]
    ordered = sorted(tagged, key=lambda a: (not a.is_priority_target, a.is_stock))
    return ordered[:max_results]


class LibraryAggregator:
    """Merges every library listing into one prioritized, cached catalog.

    Example:
        aggregator = LibraryAggregator(client, DiscoveryCache(cache_dir))

        # First call fans out to the API and caches the merged result
        result = await aggregator.discover("group-123")

        # Within the TTL the same call is served without network traffic
        result = await aggregator.discover("group-123")
        assert result.from_cache
    """

    def __init__(
        self,
        client: ApiClient,
        cache: DiscoveryCache,
        default_options: DiscoveryOptions | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.default_options = default_options or DiscoveryOptions()

    async def discover(
        self, target_group_id: str | None = None, options: DiscoveryOptions | None = None
    ) -> DiscoveryResult:
        """Discover library assets, surfacing the target group first.

        Args:
            target_group_id: Avatar group the operator expects to use
            options: Discovery knobs (defaults to the aggregator's defaults)

        Returns:
            DiscoveryResult; degraded and empty if the target group could
            not be loaded

        Raises:
            AuthenticationMissing: If no credential is stored and the cache
                                  cannot answer
            CredentialRejected: If the API rejected the credential
        """
        options = options or self.default_options
        key = cache_key(target_group_id, options.include_groups)

        if not options.force_refresh:
            entry = self.cache.get(key)
            if entry is not None:
                logger.debug(f"Discovery cache hit for {key}")
                ordered = self._order(entry.payload, target_group_id, options)
                return DiscoveryResult(
                    assets=ordered,
                    status=f"Loaded {len(ordered)} assets from cache",
                    from_cache=True,
                )

        self.client.require_credential()

        fetches = {
            SOURCE_AVATAR: self.client.list_avatars(),
            SOURCE_TALKING_PHOTO: self.client.list_legacy_talking_photos(),
            SOURCE_ASSET: self.client.list_assets(),
        }
        if target_group_id:
            fetches["target_group"] = self.client.get_group_detail(target_group_id)
        if options.include_groups:
            fetches["groups"] = self._fetch_group_looks(exclude=target_group_id)

        results = await asyncio.gather(*fetches.values(), return_exceptions=True)
        outcome = dict(zip(fetches, results))

        failed = []
        for name, result in outcome.items():
            if isinstance(result, CredentialRejected):
                raise result
            if isinstance(result, BaseException):
                if not isinstance(result, PanelError):
                    raise result
                logger.warning(f"Listing {name} failed: {result}")
                failed.append(name)

        if "target_group" in failed:
            error = outcome["target_group"]
            return DiscoveryResult(
                assets=(),
                status=f"Could not load avatar group {target_group_id}: {error}",
                degraded=True,
                failed_sources=tuple(failed),
            )

        def records(name: str) -> list:
            result = outcome.get(name)
            return [] if result is None or isinstance(result, BaseException) else result

        combined = (
            normalize_records(SOURCE_LOOK, records("target_group"), target_group_id)
            + records("groups")
            + normalize_records(SOURCE_AVATAR, records(SOURCE_AVATAR))
            + normalize_records(SOURCE_TALKING_PHOTO, records(SOURCE_TALKING_PHOTO))
            + normalize_records(SOURCE_ASSET, records(SOURCE_ASSET))
        )
        # The full merge is cached; ordering depends on per-call options
        unique = dedupe(combined)
        self.cache.put(key, unique)
        ordered = self._order(unique, target_group_id, options)

        status = f"Discovered {len(ordered)} assets"
        if failed:
            status += f" ({', '.join(failed)} unavailable)"
        logger.info(f"{status} for {key}")
        return DiscoveryResult(assets=ordered, status=status, failed_sources=tuple(failed))

    @staticmethod
    def _order(
        assets: Iterable[LibraryAsset], target_group_id: str | None, options: DiscoveryOptions
    ) -> tuple[LibraryAsset, ...]:
        return tuple(
            prioritize(
                assets,
                target_group_id=target_group_id,
                target_asset_id=options.target_asset_id,
                keywords=options.priority_keywords,
                max_results=options.max_results,
            )
        )

    async def _fetch_group_looks(self, exclude: str | None = None) -> list[LibraryAsset]:
        """Enumerate avatar groups and collect each group's looks.

        Detail calls run one after another; a failing group contributes no
        looks.
        """
        groups = await self.client.list_avatar_groups()
        looks: list[LibraryAsset] = []
        for group in groups:
            group_id = first_value(group, GROUP_ID_FIELDS)
            if not group_id or group_id == exclude:
                continue
            try:
                records = await self.client.get_group_detail(group_id)
            except CredentialRejected:
                raise
            except PanelError as e:
                logger.warning(f"Skipping avatar group {group_id}: {e}")
                continue
            looks.extend(normalize_records(SOURCE_LOOK, records, group_id))
        return looks

    def invalidate(self, target_group_id: str | None = None) -> None:
        """Forget the cached results for one target, or all when None."""
        if target_group_id is None:
            self.cache.delete()
            return
        for include_groups in (True, False):
            self.cache.delete(cache_key(target_group_id, include_groups))
