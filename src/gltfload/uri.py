"""Resource URI resolution: data URIs and relative file references."""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from urllib.parse import unquote_to_bytes

from .constants import DATA_URI_PREFIXES, MAX_RESOURCE_SIZE
from .errors import (
    E_MEDIA_TYPE,
    E_URI,
    InvalidUriError,
    UnsupportedMediaTypeError,
)
from .logging import get_logger
from .utils.io import safe_read_file

__all__ = ["resolve_uri", "decode_data_uri", "relative_uri_path"]


def decode_data_uri(uri: str) -> bytes:
    for prefix in DATA_URI_PREFIXES:
        if uri.startswith(prefix):
            payload = uri[len(prefix) :]
            break
    else:
        media_type = uri[5:].split(",", 1)[0]
        raise UnsupportedMediaTypeError(
            E_MEDIA_TYPE,
            f"Unsupported data URI media type '{media_type}'",
            {"media_type": media_type},
        )
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidUriError(E_URI, f"Invalid base64 payload: {e}") from e


def relative_uri_path(uri: str) -> str:
    """Percent-decode ``uri`` and check it is a relative path reference."""
    try:
        decoded = unquote_to_bytes(uri).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUriError(
            E_URI, f"URI is not valid UTF-8 once decoded: {uri!r}"
        ) from e
    if not decoded:
        raise InvalidUriError(E_URI, "Empty URI")
    first_slash = decoded.find("/")
    first_colon = decoded.find(":")
    # A scheme (or drive letter) before the first path segment ends
    if first_colon != -1 and (first_slash == -1 or first_colon < first_slash):
        raise InvalidUriError(
            E_URI, f"Expected data URI or relative path: {uri!r}"
        )
    if first_slash == 0:
        raise InvalidUriError(
            E_URI, f"Absolute paths are not allowed: {uri!r}"
        )
    return decoded


def resolve_uri(
    uri: str,
    base_path: str | Path | None,
    *,
    max_size: int = MAX_RESOURCE_SIZE,
) -> bytes:
    """Return the bytes ``uri`` designates.

    ``base_path`` is the directory holding the asset file; relative
    references are joined to it (the current directory when ``None``).
    """
    if not isinstance(uri, str):
        raise InvalidUriError(E_URI, f"URI must be a string, got {uri!r}")
    if uri.startswith("data:"):
        return decode_data_uri(uri)
    rel = relative_uri_path(uri)
    path = Path(base_path or ".") / rel
    get_logger().debug("Reading external resource %s", path)
    return safe_read_file(path, max_size)
