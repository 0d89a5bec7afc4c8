"""Config package exports"""

from apimap.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
