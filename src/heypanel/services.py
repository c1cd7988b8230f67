"""Process-scoped services shared by every panel operation."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import httpx

from .activity import ActivityLog
from .api.client import ApiClient
from .config import PanelConfig, load_config
from .credentials import CredentialStore
from .library.aggregator import LibraryAggregator
from .library.cache import DiscoveryCache
from .library.models import DiscoveryOptions
from .paths import get_cache_dir

logger = logging.getLogger(__name__)


@dataclass
class PanelServices:
    """Handles to the credential store, activity log, client and aggregator."""

    config: PanelConfig
    credentials: CredentialStore
    activity: ActivityLog
    client: ApiClient
    library: LibraryAggregator

    async def aclose(self) -> None:
        await self.client.aclose()


def build_services(
    config: PanelConfig | None = None,
    credentials: CredentialStore | None = None,
    activity: ActivityLog | None = None,
    cache_dir: Path | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> PanelServices:
    """Wire up the panel services.

    Args:
        config: Configuration (loaded from the config file when omitted)
        credentials: Credential store (default location when omitted)
        activity: Transparency log (a fresh one when omitted)
        cache_dir: Directory for the discovery cache database
        http_client: httpx client to use instead of a new one

    Returns:
        Ready-to-use PanelServices; call aclose() when done
    """
    config = config or load_config()
    credentials = credentials or CredentialStore()
    if credentials.get() is None and os.getenv("HEYPANEL_API_KEY"):
        # Session-only key from the environment
        credentials.set(os.environ["HEYPANEL_API_KEY"], persist=False)
    if activity is None:
        activity = ActivityLog()

    client = ApiClient(credentials, activity, config.api, http_client=http_client)
    cache = DiscoveryCache(
        cache_dir or get_cache_dir(), ttl_seconds=config.library.cache_ttl_seconds
    )
    library = LibraryAggregator(
        client,
        cache,
        DiscoveryOptions(
            priority_keywords=config.library.priority_keywords,
            max_results=config.library.max_results,
        ),
    )
    logger.debug(f"Services ready for {config.api.base_url}")
    return PanelServices(config, credentials, activity, client, library)


@asynccontextmanager
async def open_services(**kwargs) -> AsyncIterator[PanelServices]:
    """Async context manager around build_services() with teardown."""
    services = build_services(**kwargs)
    try:
        yield services
    finally:
        await services.aclose()
