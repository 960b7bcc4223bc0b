"""Lazy binary data resolution: buffers, buffer views, accessors, images.

Everything here is a pure function of the resolved graph and the bytes it
points at. Components are little-endian. Vector elements are read at
``stride * i``; matrix elements are always tightly packed at
``element_size * i``.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING, List, Optional, Union

import numpy as np

from .constants import (
    COMPONENT_FORMATS,
    MATRIX_TYPES,
    SPARSE_INDEX_COMPONENTS,
    TYPE_COMPONENT_COUNT,
    VECTOR_TYPES,
)
from .errors import (
    E_BOUNDS,
    E_BUFFER_LENGTH,
    E_DECODE,
    E_SPARSE,
    E_URI,
    BufferLengthMismatchError,
    DecodeError,
    InvalidUriError,
    OutOfBoundsError,
    SparseOverflowError,
)
from .uri import resolve_uri
from .vector import Vector

if TYPE_CHECKING:  # pragma: no cover
    from .model import Accessor, Asset, Buffer, BufferView, Image

__all__ = [
    "component_count",
    "element_size",
    "unpack_elements",
    "buffer_data",
    "buffer_view_data",
    "accessor_data",
    "accessor_array",
    "image_data",
]

Element = Union[int, float, Vector, tuple]

# Trailing BIN chunk padding allowed beyond a buffer's byteLength
_MAX_CHUNK_PADDING = 3

_NUMPY_DTYPES = {
    5120: np.dtype("<i1"),
    5121: np.dtype("<u1"),
    5122: np.dtype("<i2"),
    5123: np.dtype("<u2"),
    5125: np.dtype("<u4"),
    5126: np.dtype("<f4"),
}


def _component_format(component_type: int) -> tuple[str, int]:
    try:
        return COMPONENT_FORMATS[component_type]
    except KeyError:
        raise DecodeError(
            E_DECODE,
            f"Unknown component type {component_type}",
            {"componentType": component_type},
        ) from None


def component_count(accessor_type: str) -> int:
    try:
        return TYPE_COMPONENT_COUNT[accessor_type]
    except KeyError:
        raise DecodeError(
            E_DECODE,
            f"Invalid accessor type {accessor_type!r}",
            {"type": accessor_type},
        ) from None


def element_size(accessor_type: str, component_type: int) -> int:
    return component_count(accessor_type) * _component_format(component_type)[1]


def _element_step(accessor_type: str, stride: int, elem_size: int) -> int:
    return elem_size if accessor_type in MATRIX_TYPES else stride


def _extent(count: int, step: int, elem_size: int) -> int:
    return 0 if count <= 0 else (count - 1) * step + elem_size


def unpack_elements(
    data: bytes,
    accessor_type: str,
    component_type: int,
    count: int,
    stride: Optional[int] = None,
) -> List[Element]:
    """Decode ``count`` elements from ``data``.

    SCALAR yields numbers, VEC2-VEC4 yield :class:`Vector`, MAT2-MAT4 yield
    flat column-major tuples.
    """
    fmt, comp_size = _component_format(component_type)
    n = component_count(accessor_type)
    elem_size = n * comp_size
    step = _element_step(accessor_type, stride or elem_size, elem_size)
    needed = _extent(count, step, elem_size)
    if len(data) < needed:
        raise OutOfBoundsError(
            E_BOUNDS,
            f"Need {needed} bytes for {count} {accessor_type} elements, have {len(data)}",
            {"needed": needed, "available": len(data)},
        )
    unpacker = struct.Struct(f"<{n}{fmt}")
    elements: List[Element] = []
    for i in range(count):
        values = unpacker.unpack_from(data, i * step)
        if accessor_type == "SCALAR":
            elements.append(values[0])
        elif accessor_type in VECTOR_TYPES:
            elements.append(Vector(values))
        else:
            elements.append(values)
    return elements


def _resolve_resource(asset: Optional["Asset"], uri: str) -> bytes:
    if asset is None:
        return resolve_uri(uri, None)
    return resolve_uri(
        uri, asset.base_path, max_size=asset.options.max_resource_size
    )


def buffer_data(buffer: "Buffer") -> bytes:
    asset = buffer._asset
    if buffer.embedded and asset is not None and asset.blob is not None:
        data = asset.blob
        extra = len(data) - buffer.byteLength
        if 0 < extra <= _MAX_CHUNK_PADDING:
            data = data[: buffer.byteLength]
    elif buffer.uri is None:
        raise InvalidUriError(
            E_URI,
            f"Buffer {buffer.index} has no uri and no embedded binary chunk",
            {"buffer": buffer.index},
        )
    else:
        data = _resolve_resource(buffer._asset, buffer.uri)
    if len(data) != buffer.byteLength:
        raise BufferLengthMismatchError(
            E_BUFFER_LENGTH,
            f"Buffer {buffer.index} resolved to {len(data)} bytes, declared {buffer.byteLength}",
            {"buffer": buffer.index, "actual": len(data), "declared": buffer.byteLength},
        )
    return data


def buffer_view_data(view: "BufferView") -> bytes:
    if view.buffer is None:
        raise DecodeError(E_DECODE, f"Buffer view {view.index} has no buffer")
    data = view.buffer.get()
    end = view.byteOffset + view.byteLength
    if end > len(data):
        raise OutOfBoundsError(
            E_BOUNDS,
            f"Buffer view {view.index} ends at {end}, buffer holds {len(data)} bytes",
            {"bufferView": view.index, "end": end, "available": len(data)},
        )
    return data[view.byteOffset : end]


def _apply_sparse(
    accessor: "Accessor", base: bytes, step: int, elem_size: int
) -> bytes:
    sparse = accessor.sparse
    assert sparse is not None
    if sparse.count > accessor.count:
        raise SparseOverflowError(
            E_SPARSE,
            f"Sparse count {sparse.count} exceeds accessor count {accessor.count}",
            {"accessor": accessor.index},
        )
    idx_type = sparse.indices.componentType
    if idx_type not in SPARSE_INDEX_COMPONENTS:
        raise DecodeError(
            E_DECODE,
            f"Sparse indices need an unsigned integer type, got {idx_type}",
            {"accessor": accessor.index},
        )
    idx_view = sparse.indices.bufferView
    val_view = sparse.values.bufferView
    if idx_view is None or val_view is None:
        raise DecodeError(
            E_DECODE, f"Accessor {accessor.index} has incomplete sparse data"
        )
    indices = unpack_elements(
        idx_view.get()[sparse.indices.byteOffset :],
        "SCALAR",
        idx_type,
        sparse.count,
    )
    values = val_view.get()[sparse.values.byteOffset :]
    if len(values) < sparse.count * elem_size:
        raise OutOfBoundsError(
            E_BOUNDS,
            f"Sparse values of accessor {accessor.index} are truncated",
            {"needed": sparse.count * elem_size, "available": len(values)},
        )

    overrides: dict[int, bytes] = {}
    for i, target in enumerate(indices):
        if target >= accessor.count:
            raise SparseOverflowError(
                E_SPARSE,
                f"Sparse index {target} out of range for accessor {accessor.index} (count={accessor.count})",
                {"accessor": accessor.index, "target": target},
            )
        overrides[target] = values[i * elem_size : (i + 1) * elem_size]

    out = bytearray()
    for i in range(accessor.count):
        chunk = overrides.get(i)
        if chunk is None:
            off = i * step
            chunk = base[off : off + elem_size]
        out += chunk
    return bytes(out)


def accessor_data(accessor: "Accessor", packed: bool = False):
    """Decoded elements of ``accessor``, or its byte stream when ``packed``.

    The packed stream of a plain accessor is the view data from the
    accessor's ``byteOffset`` to the end of the view. Sparse accessors and
    accessors without a view yield exactly ``count`` tightly packed elements.
    """
    elem_size = accessor.element_size
    count = accessor.count
    view = accessor.bufferView
    if view is None:
        base = bytes(elem_size * count)
        stride = elem_size
    else:
        base = view.get()[accessor.byteOffset :]
        stride = view.byteStride or elem_size
    step = _element_step(accessor.type, stride, elem_size)
    needed = _extent(count, step, elem_size)
    if len(base) < needed:
        raise OutOfBoundsError(
            E_BOUNDS,
            f"Accessor {accessor.index} reads {needed} bytes, buffer view provides {len(base)}",
            {"accessor": accessor.index, "needed": needed, "available": len(base)},
        )

    if accessor.sparse is not None:
        base = _apply_sparse(accessor, base, step, elem_size)
        stride = elem_size

    if packed:
        return base
    return unpack_elements(
        base, accessor.type, accessor.componentType, count, stride
    )


def accessor_array(accessor: "Accessor") -> np.ndarray:
    dtype = _NUMPY_DTYPES.get(accessor.componentType)
    if dtype is None:
        _component_format(accessor.componentType)  # raises DecodeError
    n = accessor.component_count
    elements = accessor_data(accessor)
    shape = (accessor.count,) if n == 1 else (accessor.count, n)
    if not elements:
        return np.empty(shape, dtype=dtype)
    return np.asarray(elements, dtype=dtype).reshape(shape)


def image_data(image: "Image") -> bytes:
    if image.uri is not None and image.bufferView is not None:
        raise DecodeError(
            E_DECODE,
            f"Image {image.index} declares both uri and bufferView",
            {"image": image.index},
        )
    if image.uri is not None:
        return _resolve_resource(image._asset, image.uri)
    if image.bufferView is not None:
        if image.mimeType is None:
            raise DecodeError(
                E_DECODE,
                f"Image {image.index} stored in a buffer view needs a mimeType",
                {"image": image.index},
            )
        return image.bufferView.get()
    raise DecodeError(
        E_DECODE,
        f"Image {image.index} has neither uri nor bufferView",
        {"image": image.index},
    )
