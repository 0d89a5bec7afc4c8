"""
Route index persistence.

One JSON document per repository under ``<root>/.apimap/index.json``. The
document is loaded and saved as a single unit; saves never leave a truncated
file behind.
"""

from pathlib import Path
from typing import Optional
from loguru import logger
from pydantic import ValidationError

from apimap.config import Settings, settings as default_settings
from apimap.exceptions import (
    CacheCorruptError,
    CacheWriteError,
    FileHandlerError,
    IndexNotFoundError,
    SchemaVersionError,
)
from apimap.schemas.route_index import SCHEMA_VERSION, RouteIndex
from apimap.utils.file_handler import read_json, write_json_atomic


class IndexStore:
    """
    Loads and saves the route index for one repository.

    Version policy is exact match: a cache written with any other schema
    version is rejected rather than parsed best-effort.
    """

    schema_version = SCHEMA_VERSION

    def __init__(self, repository_root: Path, settings: Optional[Settings] = None):
        """
        Initialize index store.

        Args:
            repository_root: Absolute path to the repository root
            settings: Settings override (defaults to global settings)
        """
        self.repository_root = Path(repository_root)
        self.settings = settings or default_settings

    @property
    def index_path(self) -> Path:
        """Full path to the index file"""
        return self.settings.index_path(self.repository_root)

    def exists(self) -> bool:
        """Check if the index file exists"""
        return self.index_path.is_file()

    def load(self) -> RouteIndex:
        """
        Load the route index from disk.

        Returns:
            Loaded RouteIndex

        Raises:
            IndexNotFoundError: No cache present
            SchemaVersionError: Cache written with an unsupported schema version
            CacheCorruptError: Cache unreadable or invalid
        """
        if not self.exists():
            raise IndexNotFoundError(f"No route index at {self.index_path}")

        try:
            data = read_json(self.index_path)
        except FileHandlerError as e:
            raise CacheCorruptError(str(e)) from e

        if not isinstance(data, dict):
            raise CacheCorruptError(
                f"Route index {self.index_path} is not a JSON object"
            )

        version = data.get("version")
        if isinstance(version, bool) or version != self.schema_version:
            raise SchemaVersionError(version, self.schema_version)

        try:
            index = RouteIndex.from_document(data)
        except ValidationError as e:
            raise CacheCorruptError(
                f"Route index {self.index_path} failed validation: "
                f"{e.error_count()} error(s)\n{e}"
            ) from e

        logger.debug(f"Loaded route index ({len(index.routes)} routes) from {self.index_path}")
        return index

    def save(self, index: RouteIndex) -> None:
        """
        Save the route index, replacing any previous content.

        Args:
            index: Route index to persist

        Raises:
            CacheWriteError: The file could not be replaced; prior cache kept
        """
        try:
            write_json_atomic(index.to_document(), self.index_path)
        except FileHandlerError as e:
            raise CacheWriteError(str(e)) from e

        logger.info(f"Saved route index ({len(index.routes)} routes) to {self.index_path}")
