"""Error definitions for gltfload.

Every failure raised while loading or decoding an asset is a ``GltfError``
carrying a stable ``code`` plus optional structured ``context``.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_VERSION = "E_VERSION"
E_CONTAINER = "E_CONTAINER"
E_TRUNCATED = "E_TRUNCATED"
E_URI = "E_URI"
E_MEDIA_TYPE = "E_MEDIA_TYPE"
E_RESOURCE = "E_RESOURCE"
E_REF = "E_REF"
E_PARENT = "E_PARENT"
E_BUFFER_LENGTH = "E_BUFFER_LENGTH"
E_SPARSE = "E_SPARSE"
E_BOUNDS = "E_BOUNDS"
E_DOCUMENT = "E_DOCUMENT"
E_DECODE = "E_DECODE"


@dataclass
class GltfError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class IncompatibleVersionError(GltfError):
    pass


class MalformedContainerError(GltfError):
    pass


class TruncatedFileError(MalformedContainerError):
    pass


class InvalidUriError(GltfError):
    pass


class UnsupportedMediaTypeError(GltfError):
    pass


class ResourceNotFoundError(GltfError):
    pass


class BrokenReferenceError(GltfError):
    pass


class InconsistentParentError(GltfError):
    pass


class BufferLengthMismatchError(GltfError):
    pass


class SparseOverflowError(GltfError):
    pass


class OutOfBoundsError(GltfError):
    pass


class DocumentError(GltfError):
    pass


class DecodeError(GltfError):
    pass


__all__ = [
    "GltfError",
    "IncompatibleVersionError",
    "MalformedContainerError",
    "TruncatedFileError",
    "InvalidUriError",
    "UnsupportedMediaTypeError",
    "ResourceNotFoundError",
    "BrokenReferenceError",
    "InconsistentParentError",
    "BufferLengthMismatchError",
    "SparseOverflowError",
    "OutOfBoundsError",
    "DocumentError",
    "DecodeError",
    "E_VERSION",
    "E_CONTAINER",
    "E_TRUNCATED",
    "E_URI",
    "E_MEDIA_TYPE",
    "E_RESOURCE",
    "E_REF",
    "E_PARENT",
    "E_BUFFER_LENGTH",
    "E_SPARSE",
    "E_BOUNDS",
    "E_DOCUMENT",
    "E_DECODE",
]
