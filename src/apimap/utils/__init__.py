"""Utils package exports"""

from apimap.utils.logger import setup_logger
from apimap.utils.hashing import compute_content_hash, compute_route_id
from apimap.utils.file_handler import (
    ensure_directory,
    read_json,
    atomic_write,
    write_json_atomic,
)

__all__ = [
    "setup_logger",
    "compute_content_hash",
    "compute_route_id",
    "ensure_directory",
    "read_json",
    "atomic_write",
    "write_json_atomic",
]
