"""Binary container (GLB) detection and chunk splitting.

Public functions:
- is_binary_container(data) -> bool
- split_container(data) -> ContainerParts

A file that does not start with the GLB magic is returned whole as the
document with no binary blob.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import struct

from .constants import (
    CHUNK_TYPE_BIN,
    CHUNK_TYPE_JSON,
    GLB_CHUNK_HEADER_SIZE,
    GLB_HEADER_SIZE,
    GLB_MAGIC,
    GLB_VERSION,
)
from .errors import (
    E_CONTAINER,
    E_TRUNCATED,
    E_VERSION,
    IncompatibleVersionError,
    MalformedContainerError,
    TruncatedFileError,
)
from .logging import get_logger

__all__ = ["ContainerParts", "is_binary_container", "split_container"]


@dataclass(slots=True, frozen=True)
class ContainerParts:
    document: bytes
    blob: Optional[bytes] = None
    binary: bool = False


def is_binary_container(data: bytes) -> bool:
    return data[: len(GLB_MAGIC)] == GLB_MAGIC


def split_container(data: bytes) -> ContainerParts:
    if not is_binary_container(data):
        return ContainerParts(document=bytes(data))

    if len(data) < GLB_HEADER_SIZE:
        raise TruncatedFileError(
            E_TRUNCATED,
            f"Binary container header needs {GLB_HEADER_SIZE} bytes, got {len(data)}",
        )
    _, version, total_length = struct.unpack_from("<4sII", data, 0)
    if version != GLB_VERSION:
        raise IncompatibleVersionError(
            E_VERSION,
            f"Unsupported binary container version {version}",
            {"version": version},
        )
    if total_length != len(data):
        raise TruncatedFileError(
            E_TRUNCATED,
            f"Declared length {total_length} does not match file size {len(data)}",
            {"declared": total_length, "actual": len(data)},
        )
    if total_length < GLB_HEADER_SIZE + GLB_CHUNK_HEADER_SIZE:
        raise TruncatedFileError(
            E_TRUNCATED, "Binary container has no room for a chunk header"
        )

    document: Optional[bytes] = None
    blob: Optional[bytes] = None
    head = GLB_HEADER_SIZE
    chunk_no = 0
    while head < total_length:
        if total_length - head < GLB_CHUNK_HEADER_SIZE:
            raise TruncatedFileError(
                E_TRUNCATED,
                f"Truncated chunk header at offset {head}",
                {"offset": head},
            )
        length, chunk_type = struct.unpack_from("<I4s", data, head)
        start = head + GLB_CHUNK_HEADER_SIZE
        end = start + length
        if end > total_length:
            raise TruncatedFileError(
                E_TRUNCATED,
                f"Chunk at offset {head} runs past end of file ({end}>{total_length})",
                {"offset": head, "length": length},
            )
        if chunk_type == CHUNK_TYPE_JSON:
            if chunk_no != 0 or document is not None:
                raise MalformedContainerError(
                    E_CONTAINER, "JSON chunk must appear exactly once, first"
                )
            document = data[start:end]
        elif chunk_type == CHUNK_TYPE_BIN:
            if blob is not None:
                raise MalformedContainerError(
                    E_CONTAINER, "Binary container has more than one BIN chunk"
                )
            blob = data[start:end]
        else:
            get_logger().debug(
                "Skipping unknown chunk type %r at offset %d", chunk_type, head
            )
        head = end
        chunk_no += 1

    if document is None:
        raise MalformedContainerError(
            E_CONTAINER, "Binary container has no JSON chunk"
        )
    return ContainerParts(document=document, blob=blob, binary=True)
