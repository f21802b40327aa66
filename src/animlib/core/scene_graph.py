"""
Scene Graph

Named node hierarchy with bones, skeletons and skinned meshes.
"""

from typing import Callable, Iterator, List, Optional, Dict
from pyrr import Matrix44, Vector3, Quaternion

from .buffer_attribute import BufferAttribute


class SceneNode:
    """
    Node in a scene hierarchy.

    Each node has:
    - Name (may be empty)
    - Local transform as position/quaternion/scale (relative to parent)
    - Parent-child relationships
    """

    is_bone = False
    is_skinned_mesh = False

    def __init__(self, name: str = ""):
        """
        Initialize a scene node.

        Args:
            name: Node name (used to bind animation tracks)
        """
        self.name = name
        self.parent: Optional['SceneNode'] = None
        self.children: List['SceneNode'] = []

        self.position = Vector3([0.0, 0.0, 0.0])
        self.quaternion = Quaternion()  # Identity, (x, y, z, w)
        self.scale = Vector3([1.0, 1.0, 1.0])

    def add(self, *children: 'SceneNode') -> 'SceneNode':
        """Attach children to this node, detaching them from any previous parent."""
        for child in children:
            if child.parent is not None:
                child.parent.remove(child)
            child.parent = self
            self.children.append(child)
        return self

    def remove(self, child: 'SceneNode'):
        """Detach a child from this node."""
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def traverse(self, callback: Callable[['SceneNode'], None]):
        """Call callback on this node and every descendant, depth-first."""
        for node in self.iter_subtree():
            callback(node)

    def iter_subtree(self) -> Iterator['SceneNode']:
        """Iterate this node and all descendants in depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_object_by_name(self, name: str) -> Optional['SceneNode']:
        """Find the first node in this subtree with the given name."""
        for node in self.iter_subtree():
            if node.name == name:
                return node
        return None

    def get_local_transform(self) -> Matrix44:
        """Local matrix built from scale, rotation and translation (row-major)."""
        mat = Matrix44.from_scale(self.scale)
        mat = mat @ Matrix44.from_quaternion(self.quaternion)
        mat = mat @ Matrix44.from_translation(self.position)
        return mat

    def get_world_transform(self) -> Matrix44:
        """World matrix: local @ parent_world, walking up to the root."""
        world = self.get_local_transform()
        node = self.parent
        while node is not None:
            world = world @ node.get_local_transform()
            node = node.parent
        return world

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}', children={len(self.children)})"


class Bone(SceneNode):
    """Joint node that animation tracks and skin weights refer to."""

    is_bone = True


class Skeleton:
    """
    Ordered list of bones bound to a skinned mesh.

    Bone order matches the indices stored in the mesh's skin index buffer.
    """

    def __init__(self, bones: Optional[List[Bone]] = None, name: str = "Skeleton"):
        """
        Initialize skeleton.

        Args:
            bones: Bones in skin index order
            name: Skeleton name for debugging
        """
        self.name = name
        self.bones: List[Bone] = list(bones) if bones else []
        self.bone_by_name: Dict[str, Bone] = {bone.name: bone for bone in self.bones}

    def get_bone(self, name: str) -> Optional[Bone]:
        """Find a bone by name."""
        return self.bone_by_name.get(name)

    @property
    def bone_names(self) -> List[str]:
        return [bone.name for bone in self.bones]

    def __repr__(self):
        return f"Skeleton(name='{self.name}', bones={len(self.bones)})"


class SkinnedMesh(SceneNode):
    """
    Mesh node deformed by a skeleton.

    Skin data is stored as two flat buffers with a fixed number of
    slots per vertex: bone indices and their weights.
    """

    is_skinned_mesh = True

    def __init__(
        self,
        name: str = "",
        skeleton: Optional[Skeleton] = None,
        skin_index: Optional[BufferAttribute] = None,
        skin_weight: Optional[BufferAttribute] = None,
    ):
        super().__init__(name)
        self.skeleton = skeleton
        self.skin_index = skin_index
        self.skin_weight = skin_weight

    @property
    def has_skin_buffers(self) -> bool:
        return self.skin_index is not None and self.skin_weight is not None
