"""IO helpers for whole-file reads of asset resources."""

from __future__ import annotations
from pathlib import Path

from ..constants import MAX_RESOURCE_SIZE
from ..errors import E_RESOURCE, ResourceNotFoundError

__all__ = ["safe_read_file"]


def safe_read_file(path: Path, max_size: int = MAX_RESOURCE_SIZE) -> bytes:
    """Read ``path`` fully, mapping filesystem failures to ResourceNotFound."""
    try:
        size = path.stat().st_size
    except OSError as e:
        raise ResourceNotFoundError(
            E_RESOURCE, f"File not found: {path}", {"path": str(path)}
        ) from e
    if size > max_size:
        raise ResourceNotFoundError(
            E_RESOURCE,
            f"File too large: {size}>{max_size}",
            {"path": str(path), "size": size},
        )
    try:
        return path.read_bytes()
    except OSError as e:
        raise ResourceNotFoundError(
            E_RESOURCE, f"Cannot read {path}: {e}", {"path": str(path)}
        ) from e
