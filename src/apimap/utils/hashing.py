"""
Hashing utilities for deterministic route identifiers.

Route ids are derived from stable content so that repeated discovery on
unchanged source yields identical ids.
"""

import hashlib
from typing import Optional, Union


ROUTE_ID_LENGTH = 16


def compute_content_hash(content: Union[str, bytes]) -> str:
    """
    Compute SHA-256 hash of content.

    Args:
        content: String or bytes content to hash.

    Returns:
        Hex-encoded SHA-256 hash string.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    return hashlib.sha256(content).hexdigest()


def compute_route_id(
    kind: str,
    file: str,
    line: int,
    http_method: Optional[str],
    path: str,
    controller: str = "",
    action: Optional[str] = None,
    ordinal: int = 0
) -> str:
    """
    Compute a deterministic identifier for a route record.

    Args:
        kind: Record kind ("controller" or "endpoint").
        file: Source file relative to the repository root.
        line: 1-indexed source line.
        http_method: HTTP method, None for controllers.
        path: Route template.
        controller: Controller name.
        action: Action name, None for controllers.
        ordinal: Collision counter; 0 for the first occurrence.

    Returns:
        Truncated hex digest.
    """
    components = [
        f"kind:{kind}",
        f"file:{file}",
        f"line:{line}",
        f"method:{http_method or ''}",
        f"path:{path}",
        f"controller:{controller}",
        f"action:{action or ''}",
    ]
    if ordinal:
        components.append(f"ordinal:{ordinal}")

    return compute_content_hash("|".join(components))[:ROUTE_ID_LENGTH]
