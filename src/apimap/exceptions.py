"""
Custom exception hierarchy for apimap.

All exceptions inherit from ApimapError base class.
"""


class ApimapError(Exception):
    """Base exception for all apimap errors"""
    pass


class FileHandlerError(ApimapError):
    """Error during file operations"""
    pass


class IndexNotFoundError(ApimapError):
    """No route index is cached for the repository"""
    pass


class UnsupportedProjectTypeError(ApimapError):
    """Project type hint matches no registered discovery backend"""

    def __init__(self, project_type: str, available: list[str]):
        self.project_type = project_type
        self.available = available
        super().__init__(
            f"Unknown project type: {project_type}. "
            f"Available types: {', '.join(available) or 'none'}"
        )


class InvalidPatternError(ApimapError):
    """Malformed regular expression in literal search mode"""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern '{pattern}': {reason}")


class DiscoveryError(ApimapError):
    """A sub-project could not be scanned during discovery"""
    pass


class DiscoveryCancelledError(ApimapError):
    """Discovery was cancelled before completion"""
    pass


class CacheCorruptError(ApimapError):
    """Stored route index cannot be parsed or validated"""
    pass


class SchemaVersionError(CacheCorruptError):
    """Stored route index carries a schema version this build does not read"""

    def __init__(self, found, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(
            f"Unsupported index schema version: {found!r} (expected {expected})"
        )


class CacheWriteError(ApimapError):
    """Route index could not be written; the previous cache is preserved"""
    pass
