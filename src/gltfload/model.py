"""Dataclass models for a resolved glTF 2.0 asset.

Attribute names follow the glTF JSON property names. Every index field of
the source document is replaced by the referenced object; each top-level
entity remembers its original position as ``index``.

Entities compare by identity: the graph contains cycles (node parents,
skin joints) so structural equality would never terminate.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from . import pipeline
from .config import LoadOptions
from .constants import (
    DEFAULT_ALPHA_CUTOFF,
    DEFAULT_ALPHA_MODE,
    DEFAULT_BASE_COLOR,
    DEFAULT_EMISSIVE,
    DEFAULT_INTERPOLATION,
    MODE_TRIANGLES,
    WRAP_REPEAT,
)
from .vector import Vector

__all__ = [
    "Property",
    "Entity",
    "AssetInfo",
    "Buffer",
    "BufferView",
    "SparseIndices",
    "SparseValues",
    "Sparse",
    "Accessor",
    "Image",
    "Sampler",
    "Texture",
    "TextureInfo",
    "NormalTextureInfo",
    "OcclusionTextureInfo",
    "PbrMetallicRoughness",
    "Material",
    "Primitive",
    "Mesh",
    "Perspective",
    "Orthographic",
    "Camera",
    "Skin",
    "AnimationSampler",
    "AnimationChannelTarget",
    "AnimationChannel",
    "Animation",
    "Node",
    "Scene",
    "Asset",
    "index_of",
]


@dataclass(slots=True, eq=False)
class Property:
    extensions: Optional[Dict[str, Any]] = None
    extras: Any = None


@dataclass(slots=True, eq=False, repr=False)
class Entity(Property):
    index: Optional[int] = None
    name: Optional[str] = None

    def __repr__(self) -> str:
        label = f", name={self.name!r}" if self.name is not None else ""
        return f"{type(self).__name__}(index={self.index}{label})"


@dataclass(slots=True, eq=False)
class AssetInfo(Property):
    version: str = "2.0"
    minVersion: Optional[str] = None
    generator: Optional[str] = None
    copyright: Optional[str] = None


# Binary data ----------------------------------------------------------------


@dataclass(slots=True, eq=False, repr=False)
class Buffer(Entity):
    byteLength: int = 0
    uri: Optional[str] = None
    # Sourced from the binary container's BIN chunk instead of a URI
    embedded: bool = False
    _asset: Optional["Asset"] = None
    _cache: Optional[bytes] = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self) -> bytes:
        asset = self._asset
        if asset is None or not asset.options.memoize_buffers:
            return pipeline.buffer_data(self)
        with self._lock:
            if self._cache is None:
                self._cache = pipeline.buffer_data(self)
            return self._cache


@dataclass(slots=True, eq=False, repr=False)
class BufferView(Entity):
    buffer: Optional[Buffer] = None
    byteOffset: int = 0
    byteLength: int = 0
    byteStride: Optional[int] = None
    target: Optional[int] = None

    def get(self) -> bytes:
        return pipeline.buffer_view_data(self)


@dataclass(slots=True, eq=False)
class SparseIndices(Property):
    bufferView: Optional[BufferView] = None
    byteOffset: int = 0
    componentType: int = 0


@dataclass(slots=True, eq=False)
class SparseValues(Property):
    bufferView: Optional[BufferView] = None
    byteOffset: int = 0


@dataclass(slots=True, eq=False)
class Sparse(Property):
    count: int = 0
    indices: SparseIndices = field(default_factory=SparseIndices)
    values: SparseValues = field(default_factory=SparseValues)


@dataclass(slots=True, eq=False, repr=False)
class Accessor(Entity):
    bufferView: Optional[BufferView] = None
    byteOffset: int = 0
    componentType: int = 0
    normalized: bool = False
    count: int = 0
    type: str = "SCALAR"
    max: Optional[List[float]] = None
    min: Optional[List[float]] = None
    sparse: Optional[Sparse] = None

    @property
    def component_count(self) -> int:
        return pipeline.component_count(self.type)

    @property
    def element_size(self) -> int:
        return pipeline.element_size(self.type, self.componentType)

    def get(self, packed: bool = False):
        """Decoded elements, or the raw element byte stream when ``packed``."""
        return pipeline.accessor_data(self, packed=packed)

    def to_numpy(self) -> np.ndarray:
        return pipeline.accessor_array(self)


@dataclass(slots=True, eq=False, repr=False)
class Image(Entity):
    uri: Optional[str] = None
    mimeType: Optional[str] = None
    bufferView: Optional[BufferView] = None
    _asset: Optional["Asset"] = None

    def get(self) -> bytes:
        return pipeline.image_data(self)


# Textures & materials ---------------------------------------------------------


@dataclass(slots=True, eq=False, repr=False)
class Sampler(Entity):
    magFilter: Optional[int] = None
    minFilter: Optional[int] = None
    wrapS: int = WRAP_REPEAT
    wrapT: int = WRAP_REPEAT


@dataclass(slots=True, eq=False, repr=False)
class Texture(Entity):
    sampler: Optional[Sampler] = None
    source: Optional[Image] = None


@dataclass(slots=True, eq=False)
class TextureInfo(Property):
    texture: Optional[Texture] = None
    texCoord: int = 0


@dataclass(slots=True, eq=False)
class NormalTextureInfo(TextureInfo):
    scale: float = 1.0


@dataclass(slots=True, eq=False)
class OcclusionTextureInfo(TextureInfo):
    strength: float = 1.0


@dataclass(slots=True, eq=False)
class PbrMetallicRoughness(Property):
    baseColorFactor: Vector = field(
        default_factory=lambda: Vector(DEFAULT_BASE_COLOR)
    )
    baseColorTexture: Optional[TextureInfo] = None
    metallicFactor: float = 1.0
    roughnessFactor: float = 1.0
    metallicRoughnessTexture: Optional[TextureInfo] = None


@dataclass(slots=True, eq=False, repr=False)
class Material(Entity):
    # Only present when the source material declares it
    pbrMetallicRoughness: Optional[PbrMetallicRoughness] = None
    normalTexture: Optional[NormalTextureInfo] = None
    occlusionTexture: Optional[OcclusionTextureInfo] = None
    emissiveTexture: Optional[TextureInfo] = None
    emissiveFactor: Vector = field(
        default_factory=lambda: Vector(DEFAULT_EMISSIVE)
    )
    alphaMode: str = DEFAULT_ALPHA_MODE
    alphaCutoff: float = DEFAULT_ALPHA_CUTOFF
    doubleSided: bool = False


# Geometry -----------------------------------------------------------------------


@dataclass(slots=True, eq=False, repr=False)
class Primitive(Entity):
    attributes: Dict[str, Accessor] = field(default_factory=dict)
    indices: Optional[Accessor] = None
    material: Optional[Material] = None
    mode: int = MODE_TRIANGLES
    targets: Optional[List[Dict[str, Accessor]]] = None


@dataclass(slots=True, eq=False, repr=False)
class Mesh(Entity):
    primitives: List[Primitive] = field(default_factory=list)
    weights: Optional[List[float]] = None


@dataclass(slots=True, eq=False)
class Perspective(Property):
    yfov: float = 0.0
    znear: float = 0.0
    aspectRatio: Optional[float] = None
    zfar: Optional[float] = None


@dataclass(slots=True, eq=False)
class Orthographic(Property):
    xmag: float = 0.0
    ymag: float = 0.0
    znear: float = 0.0
    zfar: float = 0.0


@dataclass(slots=True, eq=False, repr=False)
class Camera(Entity):
    type: str = "perspective"
    perspective: Optional[Perspective] = None
    orthographic: Optional[Orthographic] = None


@dataclass(slots=True, eq=False, repr=False)
class Skin(Entity):
    inverseBindMatrices: Optional[Accessor] = None
    skeleton: Optional["Node"] = None
    joints: List["Node"] = field(default_factory=list)


# Animation -----------------------------------------------------------------------


@dataclass(slots=True, eq=False, repr=False)
class AnimationSampler(Entity):
    input: Optional[Accessor] = None
    output: Optional[Accessor] = None
    interpolation: str = DEFAULT_INTERPOLATION


@dataclass(slots=True, eq=False)
class AnimationChannelTarget(Property):
    node: Optional["Node"] = None
    path: Optional[str] = None


@dataclass(slots=True, eq=False, repr=False)
class AnimationChannel(Entity):
    sampler: Optional[AnimationSampler] = None
    target: AnimationChannelTarget = field(
        default_factory=AnimationChannelTarget
    )


@dataclass(slots=True, eq=False, repr=False)
class Animation(Entity):
    channels: List[AnimationChannel] = field(default_factory=list)
    samplers: List[AnimationSampler] = field(default_factory=list)


# Scene graph -----------------------------------------------------------------------


@dataclass(slots=True, eq=False, repr=False)
class Node(Entity):
    camera: Optional[Camera] = None
    children: List["Node"] = field(default_factory=list)
    skin: Optional[Skin] = None
    # Column-major 4x4; when set, scale/rotation/translation get no defaults
    matrix: Optional[Tuple[float, ...]] = None
    mesh: Optional[Mesh] = None
    rotation: Optional[Vector] = None
    scale: Optional[Vector] = None
    translation: Optional[Vector] = None
    weights: Optional[List[float]] = None
    parent: Optional["Node"] = None


@dataclass(slots=True, eq=False, repr=False)
class Scene(Entity):
    nodes: List[Node] = field(default_factory=list)


# Root ------------------------------------------------------------------------------

_COLLECTIONS: Dict[type, str] = {
    Buffer: "buffers",
    BufferView: "bufferViews",
    Accessor: "accessors",
    Image: "images",
    Sampler: "samplers",
    Texture: "textures",
    Material: "materials",
    Mesh: "meshes",
    Camera: "cameras",
    Skin: "skins",
    Animation: "animations",
    Node: "nodes",
    Scene: "scenes",
}


def index_of(entity: Entity) -> int:
    """Original 0-based position of ``entity`` in its owning collection."""
    if entity.index is None:
        raise ValueError(f"{entity!r} is not part of any collection")
    return entity.index


@dataclass(slots=True, eq=False)
class Asset:
    asset: AssetInfo = field(default_factory=AssetInfo)
    scene: Optional[Scene] = None
    scenes: List[Scene] = field(default_factory=list)
    nodes: List[Node] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)
    cameras: List[Camera] = field(default_factory=list)
    accessors: List[Accessor] = field(default_factory=list)
    bufferViews: List[BufferView] = field(default_factory=list)
    buffers: List[Buffer] = field(default_factory=list)
    materials: List[Material] = field(default_factory=list)
    textures: List[Texture] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    samplers: List[Sampler] = field(default_factory=list)
    skins: List[Skin] = field(default_factory=list)
    animations: List[Animation] = field(default_factory=list)
    extensionsUsed: List[str] = field(default_factory=list)
    extensionsRequired: List[str] = field(default_factory=list)
    extensions: Optional[Dict[str, Any]] = None
    extras: Any = None
    # Shared by every primitive that names no material
    default_material: Material = field(default_factory=Material)
    base_path: Optional[Path] = None
    blob: Optional[bytes] = field(default=None, repr=False)
    # Read from a binary container, with or without a BIN chunk
    binary: bool = False
    options: LoadOptions = field(default_factory=LoadOptions)

    def index_of(self, entity: Entity) -> int:
        """Like :func:`index_of`, but also checks the entity belongs here."""
        idx = index_of(entity)
        attr = _COLLECTIONS.get(type(entity))
        if attr is not None:
            items = getattr(self, attr)
            if idx >= len(items) or items[idx] is not entity:
                raise ValueError(f"{entity!r} does not belong to this asset")
        return idx
