"""Load glTF 2.0 assets into a linked object graph."""

from .api import LoadOptions, index_of, load, loads, summarize, verify
from .errors import GltfError
from .model import (
    Accessor,
    Animation,
    Asset,
    Buffer,
    BufferView,
    Camera,
    Image,
    Material,
    Mesh,
    Node,
    Primitive,
    Sampler,
    Scene,
    Skin,
    Texture,
)
from .vector import Vector

__version__ = "0.1.0"

__all__ = [
    "load",
    "loads",
    "index_of",
    "summarize",
    "verify",
    "LoadOptions",
    "GltfError",
    "Asset",
    "Accessor",
    "Animation",
    "Buffer",
    "BufferView",
    "Camera",
    "Image",
    "Material",
    "Mesh",
    "Node",
    "Primitive",
    "Sampler",
    "Scene",
    "Skin",
    "Texture",
    "Vector",
    "__version__",
]
