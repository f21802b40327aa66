"""
Clip Sanitizer

Removes animation tracks that do not bind to anything in a model.
Tracks for accessory meshes (hair, hats, ...) and names missing from the
model would otherwise leave the player with unresolved bindings.
"""

import logging
from dataclasses import dataclass, field
from typing import Set

from ..animation.clip import AnimationClip
from ..animation.track import split_track_name
from ..config import settings
from ..core.scene_graph import SceneNode

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ValidNames:
    """Names a track may target in one model."""

    bones: Set[str] = field(default_factory=set)
    nodes: Set[str] = field(default_factory=set)

    def __contains__(self, name: str) -> bool:
        return name in self.bones or name in self.nodes


def collect_valid_names(model: SceneNode) -> ValidNames:
    """
    Gather bone and node names from a model in a single traversal.

    Bones come from the skeleton of every skinned mesh in the subtree;
    nodes are all named nodes, bones included.
    """
    names = ValidNames()
    for node in model.iter_subtree():
        if node.name:
            names.nodes.add(node.name)
        if node.is_skinned_mesh and node.skeleton is not None:
            names.bones.update(bone.name for bone in node.skeleton.bones)
    return names


def is_non_bone_target(name: str) -> bool:
    """True if a track target is a known accessory or mesh name."""
    if name in settings.NON_BONE_NAME_LITERALS:
        return True
    return any(fragment in name for fragment in settings.NON_BONE_NAME_FRAGMENTS)


def sanitize_clip(clip: AnimationClip, model: SceneNode, silent: bool = True) -> AnimationClip:
    """
    Remove tracks that target neither a bone nor a named node of the model.

    Known accessory names are always removed. Tracks whose name has no
    separator are kept. Returns a NEW clip; the original is not modified.

    Args:
        clip: Clip to clean
        model: Model the clip will play on
        silent: Skip logging the removed tracks

    Returns:
        Cleaned clip with kept tracks in their original order
    """
    valid = collect_valid_names(model)
    kept = []
    removed = []

    for track in clip.tracks:
        object_name, property_name = split_track_name(track.name)
        if property_name is None:
            kept.append(track.clone())
            continue

        if is_non_bone_target(object_name) or object_name not in valid:
            removed.append(track.name)
        else:
            kept.append(track.clone())

    if removed and (not silent or settings.DEBUG_ANIMATION_CLEANUP):
        logger.info("Removed %d/%d non-bone tracks from clip '%s'",
                    len(removed), len(clip.tracks), clip.name or "unnamed")
        removed_objects = sorted({split_track_name(name)[0] for name in removed})
        logger.debug("Removed objects: %s", removed_objects)

    return clip.with_tracks(kept)


def sanitize_player_actions(player, model: SceneNode) -> int:
    """
    Clean every clip registered on a player and swap in the cleaned actions.

    Actions whose clip loses tracks are stopped, removed and replaced by an
    action for the cleaned clip with the same loop, repetition, clamp and
    time scale settings. Playing actions keep playing from the same time.

    Args:
        player: Player exposing an ``actions`` enumeration
        model: Model the clips play on

    Returns:
        Number of actions replaced
    """
    actions = getattr(player, "actions", None)
    if actions is None:
        logger.debug("Player %r exposes no actions, nothing to sanitize", player)
        return 0

    replaced = 0
    for action in list(actions):
        original = action.get_clip()
        cleaned = sanitize_clip(original, model)
        if cleaned.track_count == original.track_count:
            continue

        was_playing = action.is_running()
        time = action.time

        player.uncache_action(action)

        new_action = player.clip_action(cleaned)
        new_action.loop = action.loop
        new_action.repetitions = action.repetitions
        new_action.clamp_when_finished = action.clamp_when_finished
        new_action.time_scale = action.time_scale

        if was_playing:
            new_action.play()
            new_action.time = time

        replaced += 1

    if replaced:
        logger.info("Replaced %d action(s) with sanitized clips", replaced)
    return replaced
