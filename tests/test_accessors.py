"""Accessor decoding: element layout, strides, sparse overlay, bounds."""

from __future__ import annotations

import struct

import numpy as np
import pytest

from gltfload import loads
from gltfload.constants import COMPONENT_FORMATS, TYPE_COMPONENT_COUNT
from gltfload.errors import OutOfBoundsError, SparseOverflowError
from gltfload.pipeline import unpack_elements
from gltfload.vector import Vector
from gltf_builder import floats, make_glb, pack, pad4, single_buffer_doc


def _load(blob: bytes, views: list[dict], accessors: list[dict]):
    return loads(make_glb(single_buffer_doc(blob, views, accessors), blob))


@pytest.mark.parametrize("component_type", sorted(COMPONENT_FORMATS))
@pytest.mark.parametrize("accessor_type", sorted(TYPE_COMPONENT_COUNT))
def test_every_layout_yields_count_elements(component_type, accessor_type):
    fmt, size = COMPONENT_FORMATS[component_type]
    n = TYPE_COMPONENT_COUNT[accessor_type]
    count = 3
    blob = pad4(bytes(range(count * n * size)))
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [
            {
                "bufferView": 0,
                "componentType": component_type,
                "type": accessor_type,
                "count": count,
            }
        ],
    )
    elements = asset.accessors[0].get()
    assert len(elements) == count
    for e in elements:
        if accessor_type == "SCALAR":
            assert isinstance(e, (int, float))
        else:
            assert len(e) == n


def test_vec3_float_positions():
    blob = floats(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 2}],
    )
    first, second = asset.accessors[0].get()
    assert isinstance(first, Vector)
    assert first == (1.0, 2.0, 3.0)
    assert second.z == 6.0


def test_interleaved_attributes_use_byte_stride():
    # position (VEC3) followed by uv (VEC2) per vertex, stride 20
    blob = floats(1, 2, 3, 0.5, 0.25) + floats(4, 5, 6, 0.75, 1.0)
    asset = _load(
        blob,
        [{"byteLength": len(blob), "byteStride": 20}],
        [
            {"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 2},
            {"bufferView": 0, "byteOffset": 12, "componentType": 5126, "type": "VEC2", "count": 2},
        ],
    )
    positions = asset.accessors[0].get()
    uvs = asset.accessors[1].get()
    assert positions == [(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)]
    assert [uv.u for uv in uvs] == [0.5, 0.75]
    assert [uv.v for uv in uvs] == [0.25, 1.0]


def test_matrix_elements_ignore_stride():
    values = [float(i) for i in range(8)]
    blob = floats(*values) + b"\x00" * 16
    asset = _load(
        blob,
        [{"byteLength": len(blob), "byteStride": 32}],
        [{"bufferView": 0, "componentType": 5126, "type": "MAT2", "count": 2}],
    )
    assert asset.accessors[0].get() == [(0.0, 1.0, 2.0, 3.0), (4.0, 5.0, 6.0, 7.0)]


def test_signed_and_unsigned_integers():
    blob = pack("bbhh", -1, 5, -300, 300)
    asset = _load(
        blob,
        [{"byteLength": 2}, {"byteOffset": 2, "byteLength": 4}],
        [
            {"bufferView": 0, "componentType": 5120, "type": "SCALAR", "count": 2},
            {"bufferView": 1, "componentType": 5122, "type": "SCALAR", "count": 2},
            {"bufferView": 1, "componentType": 5123, "type": "SCALAR", "count": 2},
        ],
    )
    assert asset.accessors[0].get() == [-1, 5]
    assert asset.accessors[1].get() == [-300, 300]
    assert asset.accessors[2].get() == [65236, 300]


def test_accessor_byte_offset():
    blob = pack("4H", 9, 9, 1, 2)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [{"bufferView": 0, "byteOffset": 4, "componentType": 5123, "type": "SCALAR", "count": 2}],
    )
    assert asset.accessors[0].get() == [1, 2]


def test_accessor_without_view_is_zero_filled():
    asset = _load(
        b"\x00" * 4,
        [],
        [{"componentType": 5126, "type": "VEC3", "count": 3}],
    )
    assert asset.accessors[0].get() == [(0.0, 0.0, 0.0)] * 3
    assert asset.accessors[0].get(packed=True) == b"\x00" * 36


def test_packed_returns_view_tail_from_byte_offset():
    blob = pack("4H", 1, 2, 3, 4)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [
            {"bufferView": 0, "componentType": 5123, "type": "SCALAR", "count": 3},
            {"bufferView": 0, "byteOffset": 2, "componentType": 5123, "type": "SCALAR", "count": 1},
        ],
    )
    assert asset.accessors[0].get(packed=True) == blob
    assert asset.accessors[1].get(packed=True) == blob[2:]
    assert asset.accessors[1].get() == [2]


def test_sparse_overlay_on_zero_base():
    # indices: one uint8 at offset 0; values: one float at offset 4
    blob = pack("B", 2) + b"\x00" * 3 + floats(7.0)
    asset = _load(
        blob,
        [{"byteLength": 1}, {"byteOffset": 4, "byteLength": 4}],
        [
            {
                "componentType": 5126,
                "type": "SCALAR",
                "count": 4,
                "sparse": {
                    "count": 1,
                    "indices": {"bufferView": 0, "componentType": 5121},
                    "values": {"bufferView": 1},
                },
            }
        ],
    )
    assert asset.accessors[0].get() == [0.0, 0.0, 7.0, 0.0]


def test_sparse_overlay_keeps_untouched_base_elements():
    base = floats(1.0, 2.0, 3.0, 4.0)
    indices = pack("2H", 0, 3)
    values = floats(10.0, 40.0)
    blob = base + indices + values
    asset = _load(
        blob,
        [
            {"byteLength": 16},
            {"byteOffset": 16, "byteLength": 4},
            {"byteOffset": 20, "byteLength": 8},
        ],
        [
            {
                "bufferView": 0,
                "componentType": 5126,
                "type": "SCALAR",
                "count": 4,
                "sparse": {
                    "count": 2,
                    "indices": {"bufferView": 1, "componentType": 5123},
                    "values": {"bufferView": 2},
                },
            }
        ],
    )
    accessor = asset.accessors[0]
    assert accessor.get() == [10.0, 2.0, 3.0, 40.0]
    assert accessor.get(packed=True) == floats(10.0, 2.0, 3.0, 40.0)


def test_sparse_vec3_over_strided_base():
    base = floats(1, 1, 1, 9) + floats(2, 2, 2, 9)
    blob = base + pack("I", 1) + floats(5, 6, 7)
    asset = _load(
        blob,
        [
            {"byteLength": 32, "byteStride": 16},
            {"byteOffset": 32, "byteLength": 4},
            {"byteOffset": 36, "byteLength": 12},
        ],
        [
            {
                "bufferView": 0,
                "componentType": 5126,
                "type": "VEC3",
                "count": 2,
                "sparse": {
                    "count": 1,
                    "indices": {"bufferView": 1, "componentType": 5125},
                    "values": {"bufferView": 2},
                },
            }
        ],
    )
    assert asset.accessors[0].get() == [(1.0, 1.0, 1.0), (5.0, 6.0, 7.0)]


def _sparse_doc_accessor(sparse_count: int, index_value: int, **values_extra):
    blob = pack("B", index_value) + b"\x00" * 3 + floats(7.0)
    views = [{"byteLength": 1}, {"byteOffset": 4, "byteLength": 4}]
    accessor = {
        "componentType": 5126,
        "type": "SCALAR",
        "count": 2,
        "sparse": {
            "count": sparse_count,
            "indices": {"bufferView": 0, "componentType": 5121},
            "values": {"bufferView": 1, **values_extra},
        },
    }
    return blob, views, [accessor]


def test_sparse_count_larger_than_accessor_count():
    with pytest.raises(SparseOverflowError):
        _load(*_sparse_doc_accessor(3, 0))


def test_sparse_block_with_stride_rejected():
    with pytest.raises(SparseOverflowError):
        _load(*_sparse_doc_accessor(1, 0, byteStride=4))


def test_sparse_index_beyond_count():
    asset = _load(*_sparse_doc_accessor(1, 5))
    with pytest.raises(SparseOverflowError):
        asset.accessors[0].get()


def test_read_past_view_is_out_of_bounds():
    blob = floats(1.0, 2.0)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 1}],
    )
    with pytest.raises(OutOfBoundsError):
        asset.accessors[0].get()


def test_get_is_idempotent():
    blob = floats(1.0, 2.0, 3.0, 4.0)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [{"bufferView": 0, "componentType": 5126, "type": "VEC2", "count": 2}],
    )
    accessor = asset.accessors[0]
    assert accessor.get() == accessor.get()
    assert accessor.get(packed=True) == accessor.get(packed=True)


def test_to_numpy_shapes_and_dtypes():
    blob = floats(1, 2, 3, 4, 5, 6) + pack("3H", 0, 1, 2) + b"\x00\x00"
    asset = _load(
        blob,
        [{"byteLength": 24}, {"byteOffset": 24, "byteLength": 6}],
        [
            {"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 2},
            {"bufferView": 1, "componentType": 5123, "type": "SCALAR", "count": 3},
        ],
    )
    positions = asset.accessors[0].to_numpy()
    indices = asset.accessors[1].to_numpy()
    assert positions.shape == (2, 3)
    assert positions.dtype == np.float32
    np.testing.assert_array_equal(positions[1], [4.0, 5.0, 6.0])
    assert indices.shape == (3,)
    assert indices.dtype == np.uint16
    assert indices.tolist() == [0, 1, 2]


def test_unpack_elements_scalar_stride():
    data = struct.pack("<HHHH", 1, 0xFFFF, 2, 0xFFFF)
    assert unpack_elements(data, "SCALAR", 5123, 2, stride=4) == [1, 2]


def test_sparse_view_with_target_rejected():
    blob, views, accessors = _sparse_doc_accessor(1, 0)
    views[0]["target"] = 34963
    with pytest.raises(SparseOverflowError):
        _load(blob, views, accessors)


def test_sparse_block_with_target_rejected():
    with pytest.raises(SparseOverflowError):
        _load(*_sparse_doc_accessor(1, 0, target=34962))


def test_accessor_layout_properties():
    blob = floats(1.0, 2.0, 3.0)
    asset = _load(
        blob,
        [{"byteLength": len(blob)}],
        [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 1}],
    )
    accessor = asset.accessors[0]
    assert accessor.component_count == 3
    assert accessor.element_size == 12
