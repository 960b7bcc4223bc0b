"""Helpers to assemble glTF documents and binary containers for tests.

Usage:
    from gltf_builder import make_glb, document, floats
    data = make_glb(document(buffers=[{"byteLength": 8}]), floats(1.0, 2.0))
"""

from __future__ import annotations

import base64
import json
import struct
from pathlib import Path
from typing import Any, Iterable


def document(**collections: Any) -> dict:
    doc: dict = {"asset": {"version": "2.0", "generator": "gltf_builder"}}
    doc.update(collections)
    return doc


def floats(*values: float) -> bytes:
    return struct.pack(f"<{len(values)}f", *values)


def pack(fmt: str, *values: Any) -> bytes:
    return struct.pack("<" + fmt, *values)


def pad4(data: bytes, fill: bytes = b"\x00") -> bytes:
    return data + fill * (-len(data) % 4)


def data_uri(payload: bytes, media: str = "application/octet-stream") -> str:
    return f"data:{media};base64," + base64.b64encode(payload).decode("ascii")


def chunk(chunk_type: bytes, data: bytes) -> bytes:
    return struct.pack("<I4s", len(data), chunk_type) + data


def make_glb(
    doc: dict,
    blob: bytes | None = None,
    *,
    extra_chunks: Iterable[bytes] = (),
    version: int = 2,
    length_delta: int = 0,
) -> bytes:
    """Build a binary container; ``length_delta`` corrupts the declared length."""
    body = chunk(b"JSON", pad4(json.dumps(doc).encode("utf-8"), b" "))
    for extra in extra_chunks:
        body += extra
    if blob is not None:
        body += chunk(b"BIN\x00", blob)
    total = 12 + len(body)
    return struct.pack("<4sII", b"glTF", version, total + length_delta) + body


def write_gltf(directory: Path, doc: dict, name: str = "asset.gltf") -> Path:
    path = directory / name
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def single_buffer_doc(blob: bytes, views: list[dict], accessors: list[dict], **extra: Any) -> dict:
    """Document whose only buffer is the embedded blob of a GLB."""
    return document(
        buffers=[{"byteLength": len(blob)}],
        bufferViews=[{"buffer": 0, **v} for v in views],
        accessors=accessors,
        **extra,
    )
