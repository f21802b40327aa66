"""
Bone Name Mapper

Maps bone names between skeletons and retargets clips to the new names.

Matching is a name-only heuristic meant for rig export differences such
as a vendor-prefixed rig against a clean one. Hierarchy, bind pose and
bone lengths are never compared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..animation.clip import AnimationClip
from ..animation.track import TRACK_NAME_SEPARATOR, split_track_name
from ..config import settings
from ..core.scene_graph import SceneNode

logger = logging.getLogger(__name__)

BoneNameMap = Dict[str, str]


@dataclass(slots=True, frozen=True)
class BoneNameMatchPolicy:
    """Rules used to normalize bone names before comparing them."""

    prefixes: Tuple[str, ...] = settings.BONE_NAME_PREFIXES
    separators: Tuple[str, ...] = settings.BONE_NAME_SEPARATORS
    case_sensitive: bool = False

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BoneNameMatchPolicy":
        """Create a policy from a JSON-compatible dictionary. Missing or null keys use the defaults."""

        data = dict(payload)
        prefixes = data.get("prefixes")
        separators = data.get("separators")
        if prefixes is None:
            prefixes = settings.BONE_NAME_PREFIXES
        if separators is None:
            separators = settings.BONE_NAME_SEPARATORS
        if isinstance(prefixes, str) or isinstance(separators, str):
            raise ValueError("prefixes and separators must be lists of strings")
        return cls(
            prefixes=tuple(str(p) for p in prefixes),
            separators=tuple(str(s) for s in separators),
            case_sensitive=bool(data.get("case_sensitive", False)),
        )


DEFAULT_POLICY = BoneNameMatchPolicy()


def normalize_bone_name(name: str, policy: BoneNameMatchPolicy = DEFAULT_POLICY) -> str:
    """
    Reduce a bone name to its comparable core.

    "mixamorigLeft_Arm" -> "leftarm" with the default policy.
    """
    result = name if policy.case_sensitive else name.lower()

    for prefix in policy.prefixes:
        candidate = prefix if policy.case_sensitive else prefix.lower()
        if candidate and result.startswith(candidate):
            result = result[len(candidate):]
            break

    for separator in policy.separators:
        if separator:
            result = result.replace(separator, "")

    return result


def collect_bone_names(root: SceneNode) -> List[str]:
    """Names of every bone in a subtree, in depth-first order."""
    return [node.name for node in root.iter_subtree() if node.is_bone]


def detect_bone_mapping(
    source: SceneNode,
    target: SceneNode,
    policy: Optional[BoneNameMatchPolicy] = None
) -> BoneNameMap:
    """
    Auto-detect a bone name mapping between two skeletons.

    Each source bone is matched exactly first, then by normalized name.
    The first normalized match wins and maps to the target's original
    name. Names that normalize to nothing only match exactly. Bones
    without a match are left out of the result.

    Args:
        source: Root of the skeleton the clip was authored for
        target: Root of the skeleton the clip will play on
        policy: Normalization rules (defaults from settings)

    Returns:
        Dictionary mapping source bone names to target bone names
    """
    policy = policy or DEFAULT_POLICY
    source_bones = collect_bone_names(source)
    target_bones = collect_bone_names(target)
    target_set = set(target_bones)

    normalized_targets: List[Tuple[str, str]] = [
        (normalize_bone_name(name, policy), name) for name in target_bones
    ]

    bone_map: BoneNameMap = {}
    for source_bone in source_bones:
        if source_bone in target_set:
            bone_map[source_bone] = source_bone
            continue

        simplified = normalize_bone_name(source_bone, policy)
        if not simplified:
            continue
        for simplified_target, target_bone in normalized_targets:
            if simplified == simplified_target:
                bone_map[source_bone] = target_bone
                break

    unmatched = len(source_bones) - len(bone_map)
    logger.debug("Detected bone mapping for %d/%d bones (%d unmatched)",
                 len(bone_map), len(source_bones), unmatched)
    return bone_map


def retarget_clip(
    clip: AnimationClip,
    bone_map: BoneNameMap,
    suffix: str = settings.RETARGET_CLIP_SUFFIX
) -> AnimationClip:
    """
    Rename a clip's tracks to address another skeleton's bones.

    Tracks whose target has no mapping, or whose name has no separator,
    are copied through unchanged. The input clip is never modified.

    Args:
        clip: Original animation clip
        bone_map: Source bone name to target bone name
        suffix: Appended to the clip name

    Returns:
        New clip with remapped track names
    """
    tracks = []
    remapped = 0

    for track in clip.tracks:
        bone_name, property_name = split_track_name(track.name)
        new_bone_name = bone_map.get(bone_name) if property_name is not None else None

        if new_bone_name:
            tracks.append(track.with_name(f"{new_bone_name}{TRACK_NAME_SEPARATOR}{property_name}"))
            remapped += 1
        else:
            tracks.append(track.clone())

    logger.debug("Retargeted clip '%s': %d/%d tracks renamed",
                 clip.name, remapped, len(clip.tracks))

    return clip.with_tracks(tracks, name=clip.name + suffix)


def retarget_to_model(
    clip: AnimationClip,
    source: SceneNode,
    target: SceneNode,
    policy: Optional[BoneNameMatchPolicy] = None
) -> AnimationClip:
    """Detect the mapping between two skeletons and retarget a clip with it."""
    bone_map = detect_bone_mapping(source, target, policy)
    logger.info("Auto-detected bone mapping: %s", bone_map)
    return retarget_clip(clip, bone_map)
