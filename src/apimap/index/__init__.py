"""
Route index persistence.
"""

from apimap.index.store import IndexStore

__all__ = [
    "IndexStore",
]
