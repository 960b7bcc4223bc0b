"""Reference graph resolution.

Turns the decoded JSON document (plain dicts and lists) into the linked
object graph of :mod:`gltfload.model`. Collections are resolved in a fixed
order so every reference target exists before anything points at it; the
node arena is allocated up front because skins and nodes refer to each
other.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import LoadOptions
from .constants import (
    DEFAULT_ROTATION,
    DEFAULT_SCALE,
    DEFAULT_TRANSLATION,
)
from .errors import (
    E_BOUNDS,
    E_DOCUMENT,
    E_PARENT,
    E_REF,
    E_SPARSE,
    E_VERSION,
    BrokenReferenceError,
    DocumentError,
    IncompatibleVersionError,
    InconsistentParentError,
    OutOfBoundsError,
    SparseOverflowError,
)
from .logging import get_logger
from .model import (
    Accessor,
    Animation,
    AnimationChannel,
    AnimationChannelTarget,
    AnimationSampler,
    Asset,
    AssetInfo,
    Buffer,
    BufferView,
    Camera,
    Image,
    Material,
    Mesh,
    Node,
    NormalTextureInfo,
    OcclusionTextureInfo,
    Orthographic,
    PbrMetallicRoughness,
    Perspective,
    Primitive,
    Sampler,
    Scene,
    Skin,
    Sparse,
    SparseIndices,
    SparseValues,
    Texture,
    TextureInfo,
)
from .vector import Vector

__all__ = ["resolve_document"]


def _props(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {"extensions": raw.get("extensions"), "extras": raw.get("extras")}


def _named(raw: Dict[str, Any], index: int) -> Dict[str, Any]:
    return {**_props(raw), "index": index, "name": raw.get("name")}


def _copy(raw: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """Subset of ``raw`` holding the given keys that are present."""
    return {k: raw[k] for k in keys if k in raw}


def _vector(value: Any, path: str) -> Optional[Vector]:
    if value is None:
        return None
    try:
        return Vector(value)
    except (TypeError, ValueError) as e:
        raise DocumentError(
            E_DOCUMENT, f"{path} must hold 2 to 4 numbers", {"path": path}
        ) from e


class _Resolver:
    def __init__(
        self,
        document: Dict[str, Any],
        *,
        blob: Optional[bytes],
        binary: bool,
        base_path: Optional[Path],
        options: LoadOptions,
    ) -> None:
        self.doc = document
        self.blob = blob
        self.asset = Asset(
            base_path=base_path, blob=blob, binary=binary, options=options
        )
        self.log = get_logger()

    # Helpers ------------------------------------------------------------------

    def _items(self, key: str, raw: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        source = self.doc if raw is None else raw
        items = source.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise DocumentError(E_DOCUMENT, f"'{key}' must be a list", {"path": key})
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise DocumentError(
                    E_DOCUMENT, "Entry must be object", {"path": f"{key}[{i}]"}
                )
        return items

    def _object(self, raw: Dict[str, Any], key: str, path: str) -> Optional[Dict[str, Any]]:
        value = raw.get(key)
        if value is not None and not isinstance(value, dict):
            raise DocumentError(
                E_DOCUMENT, f"'{key}' must be an object", {"path": f"{path}.{key}"}
            )
        return value

    def _ref(self, collection: List[Any], index: Any, path: str, *, required: bool = False):
        if index is None:
            if required:
                raise BrokenReferenceError(
                    E_REF, f"Missing required reference {path}", {"path": path}
                )
            return None
        if (
            isinstance(index, bool)
            or not isinstance(index, int)
            or not 0 <= index < len(collection)
        ):
            raise BrokenReferenceError(
                E_REF,
                f"{path} -> {index!r} does not exist (collection size {len(collection)})",
                {"path": path, "index": index, "size": len(collection)},
            )
        return collection[index]

    def _ref_list(self, collection: List[Any], indices: Any, path: str) -> List[Any]:
        if indices is None:
            return []
        if not isinstance(indices, list):
            raise DocumentError(E_DOCUMENT, f"{path} must be a list", {"path": path})
        return [
            self._ref(collection, idx, f"{path}[{i}]", required=True)
            for i, idx in enumerate(indices)
        ]

    def _ref_map(self, collection: List[Any], mapping: Any, path: str) -> Dict[str, Any]:
        if not isinstance(mapping, dict):
            raise DocumentError(E_DOCUMENT, f"{path} must be an object", {"path": path})
        return {
            key: self._ref(collection, idx, f"{path}.{key}", required=True)
            for key, idx in mapping.items()
        }

    # Phases -----------------------------------------------------------------------

    def _check_version(self) -> None:
        info = self.doc.get("asset")
        if not isinstance(info, dict):
            raise DocumentError(E_DOCUMENT, "Document has no 'asset' object")
        version = info.get("version")
        if not isinstance(version, str) or not version.startswith("2"):
            raise IncompatibleVersionError(
                E_VERSION,
                f"Incompatible glTF version {version!r}",
                {"version": version},
            )
        self.asset.asset = AssetInfo(
            **_props(info),
            **_copy(info, "version", "minVersion", "generator", "copyright"),
        )

    def _samplers(self) -> None:
        self.asset.samplers = [
            Sampler(
                **_named(raw, i),
                **_copy(raw, "magFilter", "minFilter", "wrapS", "wrapT"),
            )
            for i, raw in enumerate(self._items("samplers"))
        ]

    def _buffers(self) -> None:
        buffers = []
        for i, raw in enumerate(self._items("buffers")):
            uri = raw.get("uri")
            buffers.append(
                Buffer(
                    **_named(raw, i),
                    byteLength=raw.get("byteLength", 0),
                    uri=uri,
                    # Only the first buffer may live in the BIN chunk
                    embedded=i == 0 and uri is None and self.blob is not None,
                    _asset=self.asset,
                )
            )
        self.asset.buffers = buffers

    def _buffer_views(self) -> None:
        views = []
        for i, raw in enumerate(self._items("bufferViews")):
            path = f"bufferViews[{i}]"
            buffer = self._ref(
                self.asset.buffers, raw.get("buffer"), f"{path}.buffer", required=True
            )
            view = BufferView(
                **_named(raw, i),
                buffer=buffer,
                **_copy(raw, "byteOffset", "byteLength", "byteStride", "target"),
            )
            if view.byteOffset + view.byteLength > buffer.byteLength:
                raise OutOfBoundsError(
                    E_BOUNDS,
                    f"{path} spans {view.byteOffset}+{view.byteLength}, buffer {buffer.index} holds {buffer.byteLength}",
                    {"path": path},
                )
            views.append(view)
        self.asset.bufferViews = views

    def _sparse_view(self, raw: Dict[str, Any], path: str) -> BufferView:
        if raw.get("target") or raw.get("byteStride"):
            raise SparseOverflowError(
                E_SPARSE, f"{path} must not declare target or byteStride", {"path": path}
            )
        view = self._ref(
            self.asset.bufferViews, raw.get("bufferView"), f"{path}.bufferView", required=True
        )
        if view.byteStride or view.target:
            raise SparseOverflowError(
                E_SPARSE,
                f"{path}.bufferView must not declare byteStride or target",
                {"path": path, "bufferView": view.index},
            )
        return view

    def _sparse(self, raw: Dict[str, Any], accessor: Accessor, path: str) -> Sparse:
        count = raw.get("count", 0)
        if count > accessor.count:
            raise SparseOverflowError(
                E_SPARSE,
                f"{path}.count {count} exceeds accessor count {accessor.count}",
                {"path": path},
            )
        raw_indices = self._object(raw, "indices", path) or {}
        raw_values = self._object(raw, "values", path) or {}
        indices = SparseIndices(
            **_props(raw_indices),
            bufferView=self._sparse_view(raw_indices, f"{path}.indices"),
            **_copy(raw_indices, "byteOffset", "componentType"),
        )
        values = SparseValues(
            **_props(raw_values),
            bufferView=self._sparse_view(raw_values, f"{path}.values"),
            **_copy(raw_values, "byteOffset"),
        )
        return Sparse(**_props(raw), count=count, indices=indices, values=values)

    def _accessors(self) -> None:
        accessors = []
        for i, raw in enumerate(self._items("accessors")):
            path = f"accessors[{i}]"
            accessor = Accessor(
                **_named(raw, i),
                bufferView=self._ref(
                    self.asset.bufferViews, raw.get("bufferView"), f"{path}.bufferView"
                ),
                **_copy(
                    raw,
                    "byteOffset",
                    "componentType",
                    "normalized",
                    "count",
                    "type",
                    "max",
                    "min",
                ),
            )
            sparse = self._object(raw, "sparse", path)
            if sparse is not None:
                accessor.sparse = self._sparse(sparse, accessor, f"{path}.sparse")
            accessors.append(accessor)
        self.asset.accessors = accessors

    def _images(self) -> None:
        self.asset.images = [
            Image(
                **_named(raw, i),
                bufferView=self._ref(
                    self.asset.bufferViews,
                    raw.get("bufferView"),
                    f"images[{i}].bufferView",
                ),
                **_copy(raw, "uri", "mimeType"),
                _asset=self.asset,
            )
            for i, raw in enumerate(self._items("images"))
        ]

    def _textures(self) -> None:
        # Absent sampler/source stay None; no default objects are invented.
        self.asset.textures = [
            Texture(
                **_named(raw, i),
                sampler=self._ref(
                    self.asset.samplers, raw.get("sampler"), f"textures[{i}].sampler"
                ),
                source=self._ref(
                    self.asset.images, raw.get("source"), f"textures[{i}].source"
                ),
            )
            for i, raw in enumerate(self._items("textures"))
        ]

    def _texture_info(
        self, raw: Dict[str, Any], key: str, path: str, cls=TextureInfo, extra=()
    ):
        info = self._object(raw, key, path)
        if info is None:
            return None
        return cls(
            **_props(info),
            texture=self._ref(
                self.asset.textures, info.get("index"), f"{path}.{key}.index", required=True
            ),
            **_copy(info, "texCoord", *extra),
        )

    def _materials(self) -> None:
        materials = []
        for i, raw in enumerate(self._items("materials")):
            path = f"materials[{i}]"
            material = Material(
                **_named(raw, i),
                normalTexture=self._texture_info(
                    raw, "normalTexture", path, NormalTextureInfo, ("scale",)
                ),
                occlusionTexture=self._texture_info(
                    raw, "occlusionTexture", path, OcclusionTextureInfo, ("strength",)
                ),
                emissiveTexture=self._texture_info(raw, "emissiveTexture", path),
                **_copy(raw, "alphaMode", "alphaCutoff", "doubleSided"),
            )
            if "emissiveFactor" in raw:
                material.emissiveFactor = _vector(
                    raw["emissiveFactor"], f"{path}.emissiveFactor"
                )
            pbr = self._object(raw, "pbrMetallicRoughness", path)
            if pbr is not None:
                pbr_path = f"{path}.pbrMetallicRoughness"
                material.pbrMetallicRoughness = PbrMetallicRoughness(
                    **_props(pbr),
                    baseColorTexture=self._texture_info(
                        pbr, "baseColorTexture", pbr_path
                    ),
                    metallicRoughnessTexture=self._texture_info(
                        pbr, "metallicRoughnessTexture", pbr_path
                    ),
                    **_copy(pbr, "metallicFactor", "roughnessFactor"),
                )
                if "baseColorFactor" in pbr:
                    material.pbrMetallicRoughness.baseColorFactor = _vector(
                        pbr["baseColorFactor"], f"{pbr_path}.baseColorFactor"
                    )
            materials.append(material)
        self.asset.materials = materials

    def _meshes(self) -> None:
        accessors = self.asset.accessors
        meshes = []
        for i, raw in enumerate(self._items("meshes")):
            mesh = Mesh(**_named(raw, i), **_copy(raw, "weights"))
            for j, prim in enumerate(self._items("primitives", raw)):
                path = f"meshes[{i}].primitives[{j}]"
                material = self._ref(
                    self.asset.materials, prim.get("material"), f"{path}.material"
                )
                targets = None
                if prim.get("targets") is not None:
                    targets = [
                        self._ref_map(accessors, t, f"{path}.targets[{k}]")
                        for k, t in enumerate(self._items("targets", prim))
                    ]
                mesh.primitives.append(
                    Primitive(
                        **_props(prim),
                        index=j,
                        attributes=self._ref_map(
                            accessors, prim.get("attributes", {}), f"{path}.attributes"
                        ),
                        indices=self._ref(accessors, prim.get("indices"), f"{path}.indices"),
                        material=material or self.asset.default_material,
                        targets=targets,
                        **_copy(prim, "mode"),
                    )
                )
            meshes.append(mesh)
        self.asset.meshes = meshes

    def _cameras(self) -> None:
        cameras = []
        for i, raw in enumerate(self._items("cameras")):
            path = f"cameras[{i}]"
            camera = Camera(**_named(raw, i), **_copy(raw, "type"))
            persp = self._object(raw, "perspective", path)
            if persp is not None:
                camera.perspective = Perspective(
                    **_props(persp), **_copy(persp, "yfov", "znear", "aspectRatio", "zfar")
                )
            ortho = self._object(raw, "orthographic", path)
            if ortho is not None:
                camera.orthographic = Orthographic(
                    **_props(ortho), **_copy(ortho, "xmag", "ymag", "znear", "zfar")
                )
            cameras.append(camera)
        self.asset.cameras = cameras

    def _skins(self) -> None:
        nodes = self.asset.nodes
        self.asset.skins = [
            Skin(
                **_named(raw, i),
                inverseBindMatrices=self._ref(
                    self.asset.accessors,
                    raw.get("inverseBindMatrices"),
                    f"skins[{i}].inverseBindMatrices",
                ),
                skeleton=self._ref(nodes, raw.get("skeleton"), f"skins[{i}].skeleton"),
                joints=self._ref_list(nodes, raw.get("joints"), f"skins[{i}].joints"),
            )
            for i, raw in enumerate(self._items("skins"))
        ]

    def _animations(self) -> None:
        accessors = self.asset.accessors
        animations = []
        for i, raw in enumerate(self._items("animations")):
            path = f"animations[{i}]"
            anim = Animation(**_named(raw, i))
            for j, s in enumerate(self._items("samplers", raw)):
                spath = f"{path}.samplers[{j}]"
                anim.samplers.append(
                    AnimationSampler(
                        **_props(s),
                        index=j,
                        input=self._ref(
                            accessors, s.get("input"), f"{spath}.input", required=True
                        ),
                        output=self._ref(
                            accessors, s.get("output"), f"{spath}.output", required=True
                        ),
                        **_copy(s, "interpolation"),
                    )
                )
            for j, c in enumerate(self._items("channels", raw)):
                cpath = f"{path}.channels[{j}]"
                target = self._object(c, "target", cpath) or {}
                anim.channels.append(
                    AnimationChannel(
                        **_props(c),
                        index=j,
                        sampler=self._ref(
                            anim.samplers, c.get("sampler"), f"{cpath}.sampler", required=True
                        ),
                        target=AnimationChannelTarget(
                            **_props(target),
                            node=self._ref(
                                self.asset.nodes, target.get("node"), f"{cpath}.target.node"
                            ),
                            path=target.get("path"),
                        ),
                    )
                )
            animations.append(anim)
        self.asset.animations = animations

    def _link_nodes(self) -> None:
        nodes = self.asset.nodes
        for i, (node, raw) in enumerate(zip(nodes, self._items("nodes"))):
            path = f"nodes[{i}]"
            node.mesh = self._ref(self.asset.meshes, raw.get("mesh"), f"{path}.mesh")
            node.skin = self._ref(self.asset.skins, raw.get("skin"), f"{path}.skin")
            node.camera = self._ref(self.asset.cameras, raw.get("camera"), f"{path}.camera")
            node.weights = raw.get("weights")
            node.children = self._ref_list(nodes, raw.get("children"), f"{path}.children")
            for child in node.children:
                if child is node or (child.parent is not None and child.parent is not node):
                    claimed_by = node.index if child is node else child.parent.index
                    raise InconsistentParentError(
                        E_PARENT,
                        f"Node {child.index} is a child of both node {claimed_by} and node {node.index}",
                        {"node": child.index, "parents": [claimed_by, node.index]},
                    )
                child.parent = node

            # An explicit matrix wins; scale/rotation/translation stay unset
            if raw.get("matrix") is not None:
                node.matrix = tuple(raw["matrix"])
                continue
            node.scale = _vector(raw.get("scale"), f"{path}.scale") or Vector(
                DEFAULT_SCALE
            )
            node.rotation = _vector(
                raw.get("rotation"), f"{path}.rotation"
            ) or Vector(DEFAULT_ROTATION)
            node.translation = _vector(
                raw.get("translation"), f"{path}.translation"
            ) or Vector(DEFAULT_TRANSLATION)

    def _scenes(self) -> None:
        self.asset.scenes = [
            Scene(
                **_named(raw, i),
                nodes=self._ref_list(self.asset.nodes, raw.get("nodes"), f"scenes[{i}].nodes"),
            )
            for i, raw in enumerate(self._items("scenes"))
        ]
        self.asset.scene = self._ref(self.asset.scenes, self.doc.get("scene"), "scene")

    # Entry -----------------------------------------------------------------------

    def resolve(self) -> Asset:
        self._check_version()
        self.asset.nodes = [
            Node(**_named(raw, i)) for i, raw in enumerate(self._items("nodes"))
        ]
        phases = (
            ("samplers", self._samplers),
            ("buffers", self._buffers),
            ("bufferViews", self._buffer_views),
            ("accessors", self._accessors),
            ("images", self._images),
            ("textures", self._textures),
            ("materials", self._materials),
            ("meshes", self._meshes),
            ("cameras", self._cameras),
            ("skins", self._skins),
            ("animations", self._animations),
            ("nodes", self._link_nodes),
            ("scenes", self._scenes),
        )
        for name, phase in phases:
            phase()
            self.log.debug("resolved %s (%d)", name, len(getattr(self.asset, name)))

        asset = self.asset
        asset.extensionsUsed = list(self.doc.get("extensionsUsed") or [])
        asset.extensionsRequired = list(self.doc.get("extensionsRequired") or [])
        asset.extensions = self.doc.get("extensions")
        asset.extras = self.doc.get("extras")
        return asset


def resolve_document(
    document: Dict[str, Any],
    *,
    blob: Optional[bytes] = None,
    binary: bool = False,
    base_path: Optional[Path] = None,
    options: Optional[LoadOptions] = None,
) -> Asset:
    """Build the linked :class:`Asset` graph from a decoded glTF document."""
    if not isinstance(document, dict):
        raise DocumentError(E_DOCUMENT, "Root of a glTF document must be an object")
    return _Resolver(
        document,
        blob=blob,
        binary=binary,
        base_path=base_path,
        options=options or LoadOptions(),
    ).resolve()
