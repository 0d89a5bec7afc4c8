"""
Registry of discovery backends.

Built once at startup and passed to whatever needs to resolve a project type,
so tests can register fake backends.
"""

from typing import Dict, List, Optional

from loguru import logger

from apimap.discovery.base import DiscoveryBackend
from apimap.exceptions import UnsupportedProjectTypeError


class BackendRegistry:
    """Ordered collection of discovery backends, looked up by name or framework."""

    def __init__(self, backends: Optional[List[DiscoveryBackend]] = None):
        self._backends: Dict[str, DiscoveryBackend] = {}
        for backend in backends or []:
            self.register(backend)

    def register(self, backend: DiscoveryBackend) -> None:
        """
        Add a backend.

        Raises:
            ValueError: A backend with the same framework is already registered
        """
        key = backend.framework.lower()
        if key in self._backends:
            raise ValueError(f"Backend already registered for framework: {backend.framework}")

        self._backends[key] = backend
        logger.debug(f"Registered discovery backend: {backend.name} ({backend.framework})")

    def get(self, name: str) -> DiscoveryBackend:
        """
        Find a backend by display name or framework tag, case-insensitive.

        Raises:
            UnsupportedProjectTypeError: No backend matches
        """
        wanted = name.strip().lower()
        for backend in self._backends.values():
            if wanted in (backend.framework.lower(), backend.name.lower()):
                return backend

        raise UnsupportedProjectTypeError(name, self.names())

    def backends(self) -> List[DiscoveryBackend]:
        """Backends in registration order"""
        return list(self._backends.values())

    def names(self) -> List[str]:
        """Framework tags in registration order"""
        return [backend.framework for backend in self._backends.values()]

    def __len__(self) -> int:
        return len(self._backends)

    def __contains__(self, name: str) -> bool:
        try:
            self.get(name)
        except UnsupportedProjectTypeError:
            return False
        return True


def default_registry() -> BackendRegistry:
    """Registry with the bundled backends"""
    from apimap.discovery.aspnet import AspNetDiscoveryBackend
    from apimap.discovery.python_web import PythonWebDiscoveryBackend

    return BackendRegistry([
        AspNetDiscoveryBackend(),
        PythonWebDiscoveryBackend(),
    ])
