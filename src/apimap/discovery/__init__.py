"""
Route discovery backends.
"""

from apimap.discovery.base import (
    DiscoveredRoute,
    DiscoveryBackend,
    DiscoveryContext,
    ProgressSink,
    build_index,
    combine_routes,
)
from apimap.discovery.registry import BackendRegistry, default_registry

__all__ = [
    "DiscoveredRoute",
    "DiscoveryBackend",
    "DiscoveryContext",
    "ProgressSink",
    "build_index",
    "combine_routes",
    "BackendRegistry",
    "default_registry",
]
