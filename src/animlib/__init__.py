"""
AnimLib - Skeletal Animation Retargeting and Optimization

Retargets clips between skeletons, removes tracks that do not bind to a
model, and caps per-vertex skin influences for constrained hardware.
"""

# Core
from .core import BufferAttribute, SceneNode, Bone, Skeleton, SkinnedMesh

# Animation
from .animation import (
    KeyframeTrack,
    TrackKind,
    InterpolationType,
    AnimationClip,
    BlendMode,
    AnimationPlayer,
    AnimationAction,
    LoopMode,
    AnimationLibrary,
)

# Retargeting
from .retarget import BoneNameMatchPolicy, detect_bone_mapping, retarget_clip, retarget_to_model

# Optimization
from .optimize import sanitize_clip, sanitize_player_actions, reduce_skin_influences, optimize_model

# Loaders
from .loaders import GltfLoader, GltfImport

__version__ = "0.1.0"
__all__ = [
    # Core
    "BufferAttribute",
    "SceneNode",
    "Bone",
    "Skeleton",
    "SkinnedMesh",
    # Animation
    "KeyframeTrack",
    "TrackKind",
    "InterpolationType",
    "AnimationClip",
    "BlendMode",
    "AnimationPlayer",
    "AnimationAction",
    "LoopMode",
    "AnimationLibrary",
    # Retargeting
    "BoneNameMatchPolicy",
    "detect_bone_mapping",
    "retarget_clip",
    "retarget_to_model",
    # Optimization
    "sanitize_clip",
    "sanitize_player_actions",
    "reduce_skin_influences",
    "optimize_model",
    # Loaders
    "GltfLoader",
    "GltfImport",
]
