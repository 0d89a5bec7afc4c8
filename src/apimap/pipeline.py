"""
Load-or-discover orchestration.

Ties the index store, the backend registry and discovery together. When no
cache exists, a caller-supplied resolver picks the backend, so the CLI can
prompt while tests inject a fixed choice.
"""

import threading
from typing import Callable, Optional

from loguru import logger

from apimap.discovery.base import (
    DiscoveryBackend,
    DiscoveryContext,
    ProgressSink,
    discard_progress,
)
from apimap.discovery.registry import BackendRegistry
from apimap.exceptions import IndexNotFoundError
from apimap.index.store import IndexStore
from apimap.schemas.route_index import RouteIndex


# Picks a backend when no index is cached; None means "give up"
MissingIndexResolver = Callable[[BackendRegistry], Optional[DiscoveryBackend]]


def discover_and_save(
    store: IndexStore,
    backend: DiscoveryBackend,
    progress: Optional[ProgressSink] = None,
    cancel_event: Optional[threading.Event] = None
) -> RouteIndex:
    """
    Run discovery and persist the result.

    Args:
        store: Index store for the repository
        backend: Discovery backend to run
        progress: Progress message sink
        cancel_event: Set to cancel discovery; nothing is saved then

    Returns:
        Newly discovered RouteIndex

    Raises:
        DiscoveryCancelledError: Discovery was cancelled
        CacheWriteError: The index could not be saved
    """
    context = DiscoveryContext(
        repository_root=store.repository_root,
        progress=progress or discard_progress,
        cancel_event=cancel_event
    )

    logger.info(f"Running {backend.name} discovery in {context.repository_root}")
    index = backend.discover(context)
    store.save(index)
    logger.success(f"Route index saved with {len(index.routes)} routes")
    return index


def resolve_backend(
    registry: BackendRegistry,
    hint: Optional[str],
    resolver: Optional[MissingIndexResolver] = None
) -> DiscoveryBackend:
    """
    Pick a discovery backend from an explicit hint or the resolver.

    Raises:
        UnsupportedProjectTypeError: Hint matches no backend
        IndexNotFoundError: No hint and the resolver gave no backend
    """
    if hint:
        return registry.get(hint)

    backend = resolver(registry) if resolver is not None else None
    if backend is None:
        raise IndexNotFoundError("No project type selected; nothing to discover")
    return backend


def load_or_discover(
    store: IndexStore,
    registry: BackendRegistry,
    resolver: Optional[MissingIndexResolver] = None,
    progress: Optional[ProgressSink] = None
) -> RouteIndex:
    """
    Load the cached index, discovering and saving one if none exists.

    A corrupt cache is an error, never a reason to rediscover silently.

    Raises:
        IndexNotFoundError: No cache and the resolver gave no backend
        CacheCorruptError: Cache present but unreadable
    """
    if store.exists():
        return store.load()

    logger.info(f"No route index at {store.index_path}")
    backend = resolve_backend(registry, None, resolver)
    return discover_and_save(store, backend, progress)
