"""
GLTF Loader

Loads the scene graph, skins and animation clips of GLTF/GLB files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Union

import numpy as np
import pygltflib
from pyrr import Matrix33, Quaternion, Vector3

from ..animation.clip import AnimationClip
from ..animation.track import InterpolationType, KeyframeTrack, TrackKind
from ..config import settings
from ..core.buffer_attribute import BufferAttribute
from ..core.scene_graph import Bone, SceneNode, Skeleton, SkinnedMesh

logger = logging.getLogger(__name__)

# GLTF channel path -> (track property, kind)
CHANNEL_TARGETS = {
    "translation": ("position", TrackKind.VECTOR),
    "rotation": ("quaternion", TrackKind.QUATERNION),
    "scale": ("scale", TrackKind.VECTOR),
    "weights": ("morphTargetInfluences", TrackKind.UNKNOWN),
}

COMPONENT_TYPE_SIZES = {
    5120: 1,  # BYTE
    5121: 1,  # UNSIGNED_BYTE
    5122: 2,  # SHORT
    5123: 2,  # UNSIGNED_SHORT
    5125: 4,  # UNSIGNED_INT
    5126: 4,  # FLOAT
}

COMPONENT_DTYPES = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5125: np.uint32,
    5126: np.float32,
}

COMPONENT_COUNTS = {
    'SCALAR': 1,
    'VEC2': 2,
    'VEC3': 3,
    'VEC4': 4,
    'MAT2': 4,
    'MAT3': 9,
    'MAT4': 16,
}


@dataclass
class GltfImport:
    """Scene graph and clips read from one file."""

    root: SceneNode
    clips: List[AnimationClip] = field(default_factory=list)
    nodes: List[SceneNode] = field(default_factory=list)  # Indexed like gltf.nodes

    @property
    def skinned_meshes(self) -> List[SkinnedMesh]:
        return [node for node in self.root.iter_subtree() if node.is_skinned_mesh]


class GltfLoader:
    """
    Loads GLTF/GLB files into scene nodes and animation clips.
    """

    def load(self, filepath: Union[str, Path]) -> GltfImport:
        """
        Load a GLTF or GLB file.

        Args:
            filepath: Path to .gltf or .glb file

        Returns:
            GltfImport with the scene root, clips and per-index nodes

        Raises:
            FileNotFoundError: If the file does not exist
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"GLTF file not found: {filepath}")

        logger.info("Loading animation asset: %s", filepath)
        gltf = pygltflib.GLTF2().load(str(filepath))

        nodes = self._create_nodes(gltf)
        root = SceneNode(filepath.stem)

        scene_idx = gltf.scene if gltf.scene is not None else 0
        if gltf.scenes and scene_idx < len(gltf.scenes):
            root_indices = gltf.scenes[scene_idx].nodes or []
        else:
            # No scene: every node without a parent is a root
            child_indices = {c for node in gltf.nodes for c in (node.children or [])}
            root_indices = [i for i in range(len(gltf.nodes)) if i not in child_indices]

        for node_idx in root_indices:
            root.add(nodes[node_idx])

        clips = self._load_animations(gltf, nodes) if gltf.animations else []

        result = GltfImport(root=root, clips=clips, nodes=nodes)
        logger.info("  Loaded %d nodes, %d skinned meshes, %d clips",
                    len(nodes), len(result.skinned_meshes), len(clips))
        return result

    def _create_nodes(self, gltf: pygltflib.GLTF2) -> List[SceneNode]:
        """
        Create a scene node per GLTF node and link the hierarchy.

        Joint nodes become bones; mesh nodes with a skin become skinned
        meshes (one child per primitive when the mesh has several).
        """
        joint_indices: Set[int] = set()
        for skin in gltf.skins:
            joint_indices.update(skin.joints)

        nodes: List[SceneNode] = []
        for node_idx, gltf_node in enumerate(gltf.nodes):
            name = gltf_node.name if gltf_node.name else f"Node_{node_idx}"
            if node_idx in joint_indices:
                node = Bone(name)
            else:
                node = SceneNode(name)
            self._apply_node_transform(node, gltf_node)
            nodes.append(node)

        for node_idx, gltf_node in enumerate(gltf.nodes):
            for child_idx in gltf_node.children or []:
                nodes[node_idx].add(nodes[child_idx])

        for node_idx, gltf_node in enumerate(gltf.nodes):
            if gltf_node.mesh is None or gltf_node.skin is None:
                continue
            nodes[node_idx] = self._create_skinned_mesh(gltf, node_idx, nodes)

        return nodes

    def _create_skinned_mesh(self, gltf: pygltflib.GLTF2, node_idx: int,
                             nodes: List[SceneNode]) -> SceneNode:
        gltf_node = gltf.nodes[node_idx]
        gltf_skin = gltf.skins[gltf_node.skin]
        original = nodes[node_idx]

        skeleton = Skeleton(
            bones=[nodes[j] for j in gltf_skin.joints],
            name=gltf_skin.name if gltf_skin.name else f"Skin_{gltf_node.skin}",
        )

        primitives = gltf.meshes[gltf_node.mesh].primitives
        meshes = []
        for prim_idx, primitive in enumerate(primitives):
            name = original.name if len(primitives) == 1 else f"{original.name}_{prim_idx}"
            skin_index, skin_weight = self._extract_skin_buffers(gltf, primitive)
            meshes.append(SkinnedMesh(name, skeleton, skin_index, skin_weight))

        if len(meshes) == 1:
            replacement = meshes[0]
            replacement.position = original.position
            replacement.quaternion = original.quaternion
            replacement.scale = original.scale
        else:
            replacement = SceneNode(original.name)
            replacement.position = original.position
            replacement.quaternion = original.quaternion
            replacement.scale = original.scale
            replacement.add(*meshes)

        parent = original.parent
        children = list(original.children)
        if parent is not None:
            index = parent.children.index(original)
            parent.remove(original)
            parent.children.insert(index, replacement)
            replacement.parent = parent
        replacement.add(*children)
        return replacement

    def _extract_skin_buffers(self, gltf: pygltflib.GLTF2, primitive):
        """Read JOINTS_0/WEIGHTS_0 into 4-slot buffers (None when absent)."""
        attributes = primitive.attributes
        joints_idx = getattr(attributes, 'JOINTS_0', None)
        weights_idx = getattr(attributes, 'WEIGHTS_0', None)
        if joints_idx is None or weights_idx is None:
            return None, None

        joints = self._get_accessor_data(gltf, joints_idx)
        weights = self._get_accessor_data(gltf, weights_idx)
        slots = settings.SKIN_INFLUENCE_SLOTS
        return BufferAttribute(joints, slots), BufferAttribute(weights, slots)

    def _apply_node_transform(self, node: SceneNode, gltf_node):
        """Copy translation/rotation/scale (or a decomposed matrix) onto a node."""
        if gltf_node.matrix is not None and len(gltf_node.matrix) == 16:
            # Column-major GLTF matrix read row by row gives pyrr's row-major layout
            matrix = np.array(gltf_node.matrix, dtype='f4').reshape(4, 4)
            scale = np.linalg.norm(matrix[:3, :3], axis=1)
            rotation = matrix[:3, :3] / np.where(scale > 0, scale, 1.0)[:, None]
            node.position = Vector3(matrix[3, :3])
            node.quaternion = Quaternion.from_matrix(Matrix33(rotation))
            node.scale = Vector3(scale)
            return

        if gltf_node.translation is not None:
            node.position = Vector3(gltf_node.translation)
        if gltf_node.rotation is not None:
            node.quaternion = Quaternion(gltf_node.rotation)  # (x, y, z, w)
        if gltf_node.scale is not None:
            node.scale = Vector3(gltf_node.scale)

    def _get_accessor_data(self, gltf: pygltflib.GLTF2, accessor_idx: int) -> np.ndarray:
        """
        Get data from an accessor as a flat float32 array.

        Normalized integer accessors are mapped to [0, 1] / [-1, 1].

        Args:
            gltf: GLTF data
            accessor_idx: Accessor index

        Returns:
            Numpy array with data
        """
        accessor = gltf.accessors[accessor_idx]
        component_count = COMPONENT_COUNTS[accessor.type]
        dtype = COMPONENT_DTYPES[accessor.componentType]

        if accessor.bufferView is None:
            # Sparse-only or zero-initialised accessor
            return np.zeros(accessor.count * component_count, dtype='f4')

        buffer_view = gltf.bufferViews[accessor.bufferView]
        buffer = gltf.buffers[buffer_view.buffer]

        if buffer.uri:
            buffer_data = gltf.get_data_from_buffer_uri(buffer.uri)
        else:
            buffer_data = gltf.binary_blob()

        offset = (buffer_view.byteOffset or 0) + (accessor.byteOffset or 0)
        stride = buffer_view.byteStride or 0
        element_size = COMPONENT_TYPE_SIZES[accessor.componentType] * component_count

        if stride == 0 or stride == element_size:
            data = buffer_data[offset:offset + accessor.count * element_size]
        else:
            data = bytearray()
            for i in range(accessor.count):
                element_offset = offset + i * stride
                data.extend(buffer_data[element_offset:element_offset + element_size])

        array = np.frombuffer(bytes(data), dtype=dtype).astype('f4')

        if accessor.normalized and dtype is not np.float32:
            array = array / np.iinfo(dtype).max
            if np.iinfo(dtype).min < 0:
                array = np.maximum(array, -1.0)

        return array.astype('f4')

    def _load_animations(self, gltf: pygltflib.GLTF2, nodes: List[SceneNode]) -> List[AnimationClip]:
        """
        Convert GLTF animations into clips.

        Channels become tracks named "<node>.<property>". Cubic spline
        samplers keep only their values (tangents are dropped) and play
        back linearly.
        """
        clips = []

        for anim_idx, gltf_anim in enumerate(gltf.animations):
            anim_name = gltf_anim.name if gltf_anim.name else f"Animation_{anim_idx}"
            tracks = []

            for channel in gltf_anim.channels:
                track = self._load_channel(gltf, gltf_anim, channel, nodes)
                if track is not None:
                    tracks.append(track)

            clips.append(AnimationClip(anim_name, -1.0, tracks))
            logger.debug("  Animation '%s': %d tracks", anim_name, len(tracks))

        return clips

    def _load_channel(self, gltf, gltf_anim, channel, nodes: List[SceneNode]) -> Optional[KeyframeTrack]:
        target_path = channel.target.path
        if target_path not in CHANNEL_TARGETS:
            logger.warning("Unknown animation target path: %s", target_path)
            return None
        if channel.target.node is None:
            return None

        property_name, kind = CHANNEL_TARGETS[target_path]
        node_name = nodes[channel.target.node].name
        sampler = gltf_anim.samplers[channel.sampler]

        times = self._get_accessor_data(gltf, sampler.input)
        values = self._get_accessor_data(gltf, sampler.output)

        interp_str = sampler.interpolation if sampler.interpolation else "LINEAR"
        interpolation = InterpolationType.STEP if interp_str == "STEP" else InterpolationType.LINEAR

        if interp_str == "CUBICSPLINE" and times.size:
            # Each sample is stored as (in-tangent, value, out-tangent)
            width = values.size // (times.size * 3)
            values = values.reshape(times.size, 3, width)[:, 1, :].reshape(-1)
            logger.debug("Dropped cubic spline tangents for %s.%s", node_name, property_name)

        try:
            return KeyframeTrack(f"{node_name}.{property_name}", times, values, kind, interpolation)
        except ValueError as e:
            logger.warning("Skipping malformed channel %s.%s: %s", node_name, property_name, e)
            return None
