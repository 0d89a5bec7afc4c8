"""
Application settings using pydantic-settings.

All configuration loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Load from .env file or APIMAP_* environment variables.
    """

    # Cache location (relative to the repository root)
    index_dir_name: str = ".apimap"
    index_file_name: str = "index.json"

    # Result shaping
    adaptive_cutoff_ratio: float = Field(0.4, gt=0.0, lt=1.0)
    adaptive_max_results: int = Field(10, ge=1)

    # Display
    display_path_width: int = Field(50, ge=8)

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="APIMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def index_path(self, repository_root: Path) -> Path:
        """Path of the cached route index for a repository."""
        return Path(repository_root) / self.index_dir_name / self.index_file_name


# Global settings instance
settings = Settings()
