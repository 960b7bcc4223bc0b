import json
import struct

import pytest

from gltfload.container import is_binary_container, split_container
from gltfload.errors import (
    E_CONTAINER,
    E_TRUNCATED,
    IncompatibleVersionError,
    MalformedContainerError,
    TruncatedFileError,
)
from gltf_builder import chunk, document, make_glb


def test_plain_json_is_whole_document():
    raw = json.dumps(document()).encode("utf-8")
    parts = split_container(raw)
    assert parts.document == raw
    assert parts.blob is None
    assert not parts.binary
    assert not is_binary_container(raw)


def test_binary_container_splits_json_and_bin():
    blob = bytes(range(8))
    data = make_glb(document(), blob)
    parts = split_container(data)
    assert parts.binary
    assert json.loads(parts.document)["asset"]["version"] == "2.0"
    assert parts.blob == blob


def test_binary_container_without_bin_chunk():
    parts = split_container(make_glb(document()))
    assert parts.blob is None


def test_declared_length_mismatch_is_malformed():
    data = make_glb(document(), b"\x00" * 4, length_delta=4)
    with pytest.raises(MalformedContainerError) as exc:
        split_container(data)
    assert exc.value.code == E_TRUNCATED


def test_version_other_than_two_rejected():
    with pytest.raises(IncompatibleVersionError):
        split_container(make_glb(document(), version=1))


def test_unknown_chunks_are_skipped():
    extra = chunk(b"XTRA", b"\x01\x02\x03\x04")
    parts = split_container(make_glb(document(), b"\xff" * 4, extra_chunks=[extra]))
    assert parts.blob == b"\xff" * 4


def test_trailing_bytes_shorter_than_chunk_header():
    body = chunk(b"JSON", b'{"asset":{"version":"2.0"}}  ') + b"\x00" * 4
    data = struct.pack("<4sII", b"glTF", 2, 12 + len(body)) + body
    with pytest.raises(TruncatedFileError):
        split_container(data)


def test_chunk_running_past_end():
    body = struct.pack("<I4s", 64, b"JSON") + b"{}  "
    data = struct.pack("<4sII", b"glTF", 2, 12 + len(body)) + body
    with pytest.raises(TruncatedFileError):
        split_container(data)


def test_header_only_file_is_truncated():
    data = struct.pack("<4sII", b"glTF", 2, 12)
    with pytest.raises(TruncatedFileError):
        split_container(data)


def test_missing_json_chunk():
    body = chunk(b"BIN\x00", b"\x00" * 4)
    data = struct.pack("<4sII", b"glTF", 2, 12 + len(body)) + body
    with pytest.raises(MalformedContainerError) as exc:
        split_container(data)
    assert exc.value.code == E_CONTAINER


def test_duplicate_bin_chunk():
    extra = chunk(b"BIN\x00", b"\x00" * 4)
    data = make_glb(document(), b"\x00" * 4, extra_chunks=[extra])
    with pytest.raises(MalformedContainerError):
        split_container(data)


def test_error_serializes_code_and_context():
    with pytest.raises(IncompatibleVersionError) as exc:
        split_container(make_glb(document(), version=3))
    data = exc.value.to_dict()
    assert data["code"] == "E_VERSION"
    assert data["context"]["version"] == 3
    assert str(exc.value).startswith("E_VERSION: ")
