"""
Unit tests for the discovery backend registry.
"""

import pytest

from apimap.discovery.aspnet import AspNetDiscoveryBackend
from apimap.discovery.base import DiscoveryBackend, DiscoveryContext, combine_routes
from apimap.discovery.python_web import PythonWebDiscoveryBackend
from apimap.discovery.registry import BackendRegistry, default_registry
from apimap.exceptions import UnsupportedProjectTypeError


class StubBackend(DiscoveryBackend):
    """Backend returning an empty index."""

    def __init__(self, framework: str = "stub"):
        self._framework = framework

    @property
    def name(self) -> str:
        return f"Stub {self._framework}"

    @property
    def language(self) -> str:
        return "none"

    @property
    def framework(self) -> str:
        return self._framework

    def discover(self, context: DiscoveryContext):
        return self.build_index(context, [])


class TestBackendRegistry:
    """Tests for BackendRegistry."""

    def test_default_registry(self):
        """Test the bundled backends are registered in order."""
        registry = default_registry()

        assert registry.names() == ["aspnet", "python"]
        assert isinstance(registry.get("aspnet"), AspNetDiscoveryBackend)
        assert isinstance(registry.get("python"), PythonWebDiscoveryBackend)

    def test_lookup_by_display_name(self):
        """Test lookup by display name, case-insensitive."""
        registry = default_registry()

        assert registry.get("asp.net web api").framework == "aspnet"
        assert registry.get("  ASPNET ").framework == "aspnet"

    def test_unknown_type(self):
        """Test unknown names list the available types."""
        registry = BackendRegistry([StubBackend("one"), StubBackend("two")])

        with pytest.raises(UnsupportedProjectTypeError) as exc_info:
            registry.get("rails")

        assert exc_info.value.available == ["one", "two"]
        assert "Available types: one, two" in str(exc_info.value)

    def test_duplicate_framework(self):
        """Test registering the same framework twice fails."""
        registry = BackendRegistry([StubBackend()])

        with pytest.raises(ValueError):
            registry.register(StubBackend())

    def test_contains_and_len(self):
        """Test membership helpers."""
        registry = BackendRegistry([StubBackend()])

        assert "stub" in registry
        assert "other" not in registry
        assert len(registry) == 1

    def test_empty_registry(self):
        """Test an empty registry reports no types."""
        with pytest.raises(UnsupportedProjectTypeError, match="none"):
            BackendRegistry().get("aspnet")


class TestCombineRoutes:
    """Tests for controller/action route composition."""

    @pytest.mark.parametrize("prefix,route,expected", [
        (None, None, "/"),
        ("", "", "/"),
        ("api/users", "", "/api/users"),
        ("", "health", "/health"),
        ("api/users", "{id}", "/api/users/{id}"),
        ("api/users/", "/admin/{id}", "/admin/{id}"),
        ("/api/users/", "{id}", "/api/users/{id}"),
    ])
    def test_combine(self, prefix, route, expected):
        """Test prefix joining and absolute action routes."""
        assert combine_routes(prefix, route) == expected
