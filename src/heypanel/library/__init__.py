"""Library discovery for heypanel."""

from .aggregator import LibraryAggregator
from .cache import DiscoveryCache
from .models import DiscoveryOptions, DiscoveryResult, LibraryAsset

__all__ = [
    "DiscoveryCache",
    "DiscoveryOptions",
    "DiscoveryResult",
    "LibraryAggregator",
    "LibraryAsset",
]
