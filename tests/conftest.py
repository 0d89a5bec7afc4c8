"""
pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from pathlib import Path
from typing import List, Optional

import pytest

from apimap.config import Settings
from apimap.discovery.base import DiscoveredRoute, build_index
from apimap.index.store import IndexStore
from apimap.schemas.route_index import HttpMethod, RouteIndex, RouteKind, RouteRecord


FIXED_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def controller(name: str, path: str = "", file: Optional[str] = None, line: int = 1) -> DiscoveredRoute:
    return DiscoveredRoute(
        kind=RouteKind.CONTROLLER,
        path=path,
        file=file or f"Controllers/{name}.cs",
        line=line,
        controller=name,
    )


def endpoint(
    name: str,
    method: str,
    path: str,
    action: str,
    file: Optional[str] = None,
    line: int = 10
) -> DiscoveredRoute:
    return DiscoveredRoute(
        kind=RouteKind.ENDPOINT,
        http_method=HttpMethod(method),
        path=path,
        file=file or f"Controllers/{name}.cs",
        line=line,
        controller=name,
        action=action,
    )


def make_index(routes: List[DiscoveredRoute], root: Path = Path("/repo")) -> RouteIndex:
    return build_index(
        repository_root=root,
        language="csharp",
        framework="aspnet",
        routes=routes,
        generated_at=FIXED_TIME
    )


@pytest.fixture
def settings_routes() -> List[DiscoveredRoute]:
    """SettingsController with three endpoints"""
    return [
        controller("SettingsController", "/api/settings"),
        endpoint("SettingsController", "GET", "/api/settings", "GetAll", line=12),
        endpoint("SettingsController", "GET", "/api/settings/{id}", "GetById", line=18),
        endpoint("SettingsController", "PUT", "/api/settings/{id}", "Update", line=25),
    ]


@pytest.fixture
def settings_index(settings_routes) -> RouteIndex:
    """Index with one controller and three endpoints"""
    return make_index(settings_routes)


@pytest.fixture
def mixed_index(settings_routes) -> RouteIndex:
    """Index spanning several controllers and methods"""
    return make_index(settings_routes + [
        controller("UsersController", "/api/users"),
        endpoint("UsersController", "GET", "/api/users", "List", line=14),
        endpoint("UsersController", "POST", "/api/users", "Create", line=20),
        endpoint("UsersController", "DELETE", "/api/users/{id}", "Delete", line=30),
        endpoint("UsersController", "GET", "/api/users/{id}/orders", "GetOrders", line=40),
        controller("ReportsController", "/api/reports"),
        endpoint("ReportsController", "GET", "/api/reports", "Index", line=11),
        endpoint("ReportsController", "GET", "/api/v1/user", "CurrentUser", line=22),
    ])


@pytest.fixture
def mixed_routes(mixed_index) -> List[RouteRecord]:
    return list(mixed_index.routes)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment"""
    return Settings(_env_file=None)


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def store(repo_root: Path, test_settings: Settings) -> IndexStore:
    return IndexStore(repo_root, test_settings)


@pytest.fixture
def routes():
    """Route builders: routes.controller(), routes.endpoint(), routes.index()"""
    return SimpleNamespace(controller=controller, endpoint=endpoint, index=make_index)
