"""
File handling utilities using pathlib.

JSON documents are written through a temporary sibling file and swapped into
place, so readers only ever see the previous or the new content.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, TextIO
from loguru import logger

from apimap.exceptions import FileHandlerError


def default_file_mode() -> int:
    """Permission bits a plain 'open' would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def ensure_directory(path: Path) -> Path:
    """
    Ensure directory exists, create if needed.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_json(file_path: Path) -> Dict[str, Any]:
    """
    Read JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON document
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileHandlerError(f"File not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise FileHandlerError(f"Invalid JSON in {file_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise FileHandlerError(f"Failed to read {file_path}: {e}") from e


@contextmanager
def atomic_write(file_path: Path, encoding: str = "utf-8") -> Iterator[TextIO]:
    """
    Open a temporary file next to ``file_path`` and replace the target on success.

    The temporary file is removed on every failure path, leaving any existing
    target untouched.

    Args:
        file_path: Final destination
        encoding: Text encoding

    Yields:
        Writable text stream
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    # mkstemp creates 0600; keep the target's mode or fall back to the umask default
    try:
        mode = file_path.stat().st_mode & 0o777
    except FileNotFoundError:
        mode = default_file_mode()

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{file_path.name}.",
        suffix=".tmp",
        dir=file_path.parent
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            os.chmod(temp_path, mode)
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    logger.debug(f"Replaced {file_path}")


def write_json_atomic(data: Dict[str, Any], file_path: Path, indent: int = 2) -> None:
    """
    Write JSON file atomically.

    Args:
        data: Data to write
        file_path: Path to JSON file
        indent: JSON indentation
    """
    try:
        with atomic_write(file_path) as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
            f.write("\n")
    except (OSError, TypeError, ValueError) as e:
        raise FileHandlerError(f"Failed to write {file_path}: {e}") from e
