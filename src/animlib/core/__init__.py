"""Scene graph and vertex buffer types."""

from .buffer_attribute import BufferAttribute
from .scene_graph import SceneNode, Bone, Skeleton, SkinnedMesh

__all__ = ['BufferAttribute', 'SceneNode', 'Bone', 'Skeleton', 'SkinnedMesh']
