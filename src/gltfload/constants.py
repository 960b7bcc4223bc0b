"""Binary layout and schema constants for glTF 2.0."""

from __future__ import annotations

# Binary container (little-endian)
GLB_MAGIC = b"glTF"
GLB_VERSION = 2
GLB_HEADER_SIZE = 12
GLB_CHUNK_HEADER_SIZE = 8
CHUNK_TYPE_JSON = b"JSON"
CHUNK_TYPE_BIN = b"BIN\x00"

# Accessor component types: code -> (struct format, byte size)
COMPONENT_BYTE = 5120
COMPONENT_UNSIGNED_BYTE = 5121
COMPONENT_SHORT = 5122
COMPONENT_UNSIGNED_SHORT = 5123
COMPONENT_UNSIGNED_INT = 5125
COMPONENT_FLOAT = 5126

COMPONENT_FORMATS: dict[int, tuple[str, int]] = {
    COMPONENT_BYTE: ("b", 1),
    COMPONENT_UNSIGNED_BYTE: ("B", 1),
    COMPONENT_SHORT: ("h", 2),
    COMPONENT_UNSIGNED_SHORT: ("H", 2),
    COMPONENT_UNSIGNED_INT: ("I", 4),
    COMPONENT_FLOAT: ("f", 4),
}

# Sparse indices may only use unsigned integer types
SPARSE_INDEX_COMPONENTS = frozenset(
    {COMPONENT_UNSIGNED_BYTE, COMPONENT_UNSIGNED_SHORT, COMPONENT_UNSIGNED_INT}
)

TYPE_COMPONENT_COUNT: dict[str, int] = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}
VECTOR_TYPES = frozenset({"VEC2", "VEC3", "VEC4"})
MATRIX_TYPES = frozenset({"MAT2", "MAT3", "MAT4"})

# Data URI prefixes accepted by the resource locator
DATA_URI_PREFIXES = (
    "data:application/octet-stream;base64,",
    "data:application/gltf-buffer;base64,",
    "data:image/png;base64,",
    "data:image/jpeg;base64,",
)

# Defaults installed by the resolver
WRAP_REPEAT = 10497
MODE_TRIANGLES = 4
DEFAULT_INTERPOLATION = "LINEAR"
DEFAULT_ALPHA_MODE = "OPAQUE"
DEFAULT_ALPHA_CUTOFF = 0.5
DEFAULT_SCALE = (1.0, 1.0, 1.0)
DEFAULT_ROTATION = (0.0, 0.0, 0.0, 1.0)
DEFAULT_TRANSLATION = (0.0, 0.0, 0.0)
DEFAULT_BASE_COLOR = (1.0, 1.0, 1.0, 1.0)
DEFAULT_EMISSIVE = (0.0, 0.0, 0.0)

# Upper bound for a single external resource read (bytes)
MAX_RESOURCE_SIZE = 512 * 1024 * 1024
