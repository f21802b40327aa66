"""Bone name mapping and clip retargeting."""

from .bone_mapper import (
    BoneNameMap,
    BoneNameMatchPolicy,
    normalize_bone_name,
    collect_bone_names,
    detect_bone_mapping,
    retarget_clip,
    retarget_to_model,
)

__all__ = [
    'BoneNameMap',
    'BoneNameMatchPolicy',
    'normalize_bone_name',
    'collect_bone_names',
    'detect_bone_mapping',
    'retarget_clip',
    'retarget_to_model',
]
