"""High-level API for gltfload."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import LoadOptions
from .container import split_container
from .errors import E_DOCUMENT, DocumentError, GltfError
from .logging import get_logger
from .model import Asset, index_of
from .resolver import resolve_document
from .utils.io import safe_read_file

__all__ = [
    "load",
    "loads",
    "index_of",
    "summarize",
    "verify",
    "LoadOptions",
]

_SUMMARY_COLLECTIONS = (
    "scenes",
    "nodes",
    "meshes",
    "cameras",
    "materials",
    "textures",
    "images",
    "samplers",
    "accessors",
    "bufferViews",
    "buffers",
    "skins",
    "animations",
)


def _decode_document(document: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentError(E_DOCUMENT, f"Invalid JSON document: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError(E_DOCUMENT, "Root of a glTF document must be an object")
    return data


def loads(
    data: bytes,
    base_path: str | Path | None = None,
    options: Optional[LoadOptions] = None,
) -> Asset:
    """Load an asset from in-memory bytes (JSON or binary container).

    ``base_path`` is the directory relative file URIs are resolved against.
    """
    parts = split_container(data)
    document = _decode_document(parts.document)
    return resolve_document(
        document,
        blob=parts.blob,
        binary=parts.binary,
        base_path=Path(base_path) if base_path is not None else None,
        options=options,
    )


def load(path: str | Path, options: Optional[LoadOptions] = None) -> Asset:
    logger = get_logger()
    options = options or LoadOptions()
    p = Path(path)
    data = safe_read_file(p, options.max_resource_size)
    asset = loads(data, base_path=p.parent, options=options)
    logger.info(
        "Load summary: file=%s container=%s bytes=%d nodes=%d meshes=%d accessors=%d",
        p.name,
        "binary" if asset.binary else "json",
        len(data),
        len(asset.nodes),
        len(asset.meshes),
        len(asset.accessors),
    )
    return asset


def summarize(asset: Asset) -> Dict[str, Any]:
    info = asset.asset
    summary: Dict[str, Any] = {
        "version": info.version,
        "generator": info.generator,
        "binary": asset.binary,
        "scene": asset.scene.index if asset.scene is not None else None,
        "primitives": sum(len(m.primitives) for m in asset.meshes),
        "extensionsUsed": list(asset.extensionsUsed),
    }
    for name in _SUMMARY_COLLECTIONS:
        summary[name] = len(getattr(asset, name))
    return summary


def verify(asset: Asset) -> List[str]:
    """Force every lazy accessor once and collect the failures."""
    issues: List[str] = []
    for name in ("buffers", "bufferViews", "accessors", "images"):
        for entity in getattr(asset, name):
            try:
                entity.get()
            except GltfError as e:
                issues.append(f"{name}[{entity.index}]: {e}")
    return issues
