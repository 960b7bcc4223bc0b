from pathlib import Path

import pytest

from gltfload.errors import (
    InvalidUriError,
    ResourceNotFoundError,
    UnsupportedMediaTypeError,
)
from gltfload.uri import resolve_uri


def test_octet_stream_data_uri():
    assert resolve_uri("data:application/octet-stream;base64,AAEC", None) == b"\x00\x01\x02"


@pytest.mark.parametrize(
    "media",
    ["application/octet-stream", "application/gltf-buffer", "image/png", "image/jpeg"],
)
def test_allowed_media_types(media):
    assert resolve_uri(f"data:{media};base64,/w==", None) == b"\xff"


def test_unsupported_media_type():
    with pytest.raises(UnsupportedMediaTypeError) as exc:
        resolve_uri("data:text/plain;base64,AAEC", None)
    assert exc.value.context == {"media_type": "text/plain;base64"}


def test_invalid_base64_payload():
    with pytest.raises(InvalidUriError):
        resolve_uri("data:application/octet-stream;base64,@@@", None)


def test_relative_file_with_percent_escape(tmp_path: Path):
    (tmp_path / "my file.bin").write_bytes(b"abc")
    assert resolve_uri("my%20file.bin", tmp_path) == b"abc"


def test_relative_file_in_subdirectory(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "data.bin").write_bytes(b"\x01\x02")
    assert resolve_uri("sub/data.bin", tmp_path) == b"\x01\x02"


def test_colon_after_first_segment_is_a_path(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "a:b.bin").write_bytes(b"\x07")
    assert resolve_uri("sub/a:b.bin", tmp_path) == b"\x07"


@pytest.mark.parametrize(
    "uri",
    ["", "/abs/data.bin", "http://example.com/data.bin", "c:data.bin", "file:data.bin"],
)
def test_rejected_uris(uri, tmp_path: Path):
    with pytest.raises(InvalidUriError):
        resolve_uri(uri, tmp_path)


def test_missing_file(tmp_path: Path):
    with pytest.raises(ResourceNotFoundError):
        resolve_uri("missing.bin", tmp_path)


def test_size_cap(tmp_path: Path):
    (tmp_path / "big.bin").write_bytes(b"\x00" * 32)
    with pytest.raises(ResourceNotFoundError):
        resolve_uri("big.bin", tmp_path, max_size=16)
