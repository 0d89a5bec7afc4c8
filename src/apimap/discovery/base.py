"""
Discovery backend interface and shared helpers.

A backend scans a repository for one language/framework pair and returns a
complete RouteIndex. Backends recover from per-sub-project failures on their
own; the index they return reflects everything that was scanned successfully.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Callable, Iterable, Iterator, List, Optional, Sequence
from loguru import logger

from apimap.exceptions import DiscoveryCancelledError, DiscoveryError
from apimap.schemas.route_index import (
    SCHEMA_VERSION,
    HttpMethod,
    ProjectInfo,
    RouteIndex,
    RouteKind,
    RouteRecord,
    RouteSymbols,
    SourceLocation,
)
from apimap.utils.hashing import compute_route_id


ProgressSink = Callable[[str], None]

# Directories never worth scanning
IGNORED_DIRECTORIES = frozenset({
    ".git", ".hg", ".svn", ".apimap", ".idea", ".vs", ".vscode",
    "node_modules", "bin", "obj", "__pycache__", ".venv", "venv", "env",
    ".tox", ".nox", ".mypy_cache", ".pytest_cache", "build", "dist",
    "site-packages",
})


def discard_progress(message: str) -> None:
    pass


@dataclass
class DiscoveryContext:
    """Everything a backend needs for one discovery pass."""

    repository_root: Path
    progress: ProgressSink = discard_progress
    cancel_event: Optional[threading.Event] = None

    def __post_init__(self):
        self.repository_root = Path(self.repository_root).resolve()

    def report(self, message: str) -> None:
        """Send a progress message to the sink and the debug log"""
        logger.debug(message.strip())
        self.progress(message)

    def check_cancelled(self) -> None:
        """
        Raise if cancellation was requested.

        Raises:
            DiscoveryCancelledError: The cancel event is set
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise DiscoveryCancelledError("Discovery cancelled")


@dataclass
class DiscoveredRoute:
    """A route found by a backend, before identifiers are assigned."""

    kind: RouteKind
    path: str
    file: str
    line: int
    controller: str
    http_method: Optional[HttpMethod] = None
    action: Optional[str] = None

    def route_id(self, ordinal: int = 0) -> str:
        return compute_route_id(
            kind=self.kind.value,
            file=self.file,
            line=self.line,
            http_method=self.http_method.value if self.http_method else None,
            path=self.path,
            controller=self.controller,
            action=self.action,
            ordinal=ordinal
        )


class DiscoveryBackend(ABC):
    """Abstract base class for discovery backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name (e.g., "ASP.NET Web API")"""
        pass

    @property
    @abstractmethod
    def language(self) -> str:
        """Language tag (e.g., "csharp")"""
        pass

    @property
    @abstractmethod
    def framework(self) -> str:
        """Framework tag (e.g., "aspnet")"""
        pass

    @abstractmethod
    def discover(self, context: DiscoveryContext) -> RouteIndex:
        """
        Discover all routes under the repository root.

        Args:
            context: Repository root, progress sink and cancellation event

        Returns:
            RouteIndex with everything scanned successfully

        Raises:
            DiscoveryCancelledError: Cancellation was requested
        """
        pass

    def build_index(self, context: DiscoveryContext, routes: Iterable[DiscoveredRoute]) -> RouteIndex:
        """Assemble a RouteIndex tagged with this backend's language and framework"""
        return build_index(
            repository_root=context.repository_root,
            language=self.language,
            framework=self.framework,
            routes=routes
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(framework={self.framework!r})"


def build_index(
    repository_root: Path,
    language: str,
    framework: str,
    routes: Iterable[DiscoveredRoute],
    generated_at: Optional[datetime] = None
) -> RouteIndex:
    """
    Assemble a RouteIndex with deterministic, collision-free identifiers.

    Identical routes (same kind, file, line, method, path and symbols) are
    disambiguated by re-hashing with an increasing ordinal, so the result only
    depends on the input order.

    Args:
        repository_root: Absolute repository root
        language: Language tag
        framework: Framework tag
        routes: Discovered routes in discovery order
        generated_at: Timestamp override (defaults to now, UTC)

    Returns:
        Validated RouteIndex
    """
    records = []
    used_ids = set()

    for route in routes:
        ordinal = 0
        route_id = route.route_id()
        while route_id in used_ids:
            ordinal += 1
            route_id = route.route_id(ordinal)
        used_ids.add(route_id)

        records.append(RouteRecord(
            id=route_id,
            kind=route.kind,
            http_method=route.http_method,
            path=route.path,
            source=SourceLocation(file=route.file, line=route.line),
            symbols=RouteSymbols(controller=route.controller, action=route.action)
        ))

    timestamp = (generated_at or datetime.now(timezone.utc)).isoformat()

    return RouteIndex(
        version=SCHEMA_VERSION,
        generated_at=timestamp,
        project=ProjectInfo(
            root=str(repository_root),
            language=language,
            framework=framework
        ),
        routes=tuple(records)
    )


def ensure_leading_slash(path: str) -> str:
    if not path:
        return "/"
    return path if path.startswith("/") else f"/{path}"


def combine_routes(prefix: Optional[str], route: Optional[str]) -> str:
    """
    Join a controller/router prefix with an action route.

    An action route starting with "/" is absolute and replaces the prefix.
    The result always starts with "/"; two empty parts give "/".
    """
    prefix = prefix or ""
    route = route or ""

    if not prefix and not route:
        return "/"
    if not prefix:
        return ensure_leading_slash(route)
    if not route:
        return ensure_leading_slash(prefix)
    if route.startswith("/"):
        return route

    return ensure_leading_slash(f"{prefix.rstrip('/')}/{route.lstrip('/')}")


def relative_source(path: Path, repository_root: Path) -> str:
    """Source path relative to the repository root, with forward slashes."""
    try:
        return PurePath(Path(path).resolve().relative_to(repository_root)).as_posix()
    except ValueError:
        return PurePath(path).as_posix()


def iter_source_files(
    root: Path,
    suffixes: Sequence[str],
    ignored: Iterable[str] = IGNORED_DIRECTORIES
) -> Iterator[Path]:
    """
    Walk ``root`` yielding files with one of ``suffixes``, in sorted order.

    Ignored directory names are pruned anywhere in the tree.
    """
    ignored = set(ignored)
    root = Path(root)

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise DiscoveryError(f"Cannot list {root}: {e}") from e

    for entry in entries:
        if entry.is_dir():
            if entry.name in ignored or entry.is_symlink():
                continue
            yield from iter_source_files(entry, suffixes, ignored)
        elif entry.suffix in suffixes:
            yield entry


def read_source(path: Path) -> str:
    """
    Read a source file as text.

    Raises:
        DiscoveryError: The file cannot be read or decoded
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise DiscoveryError(f"Cannot read {path}: {e}") from e


@dataclass
class DiscoveryReport:
    """Counts from one discovery pass, for progress output."""

    scanned: int = 0
    skipped: List[str] = field(default_factory=list)

    def skip(self, context: DiscoveryContext, unit: str, error: Exception) -> None:
        """Record a failed sub-project and report it"""
        self.skipped.append(unit)
        logger.warning(f"Skipping {unit}: {error}")
        context.report(f"  Skipped {unit}: {error}")
