"""Tests for clip sanitizing against a model"""

import logging

import pytest

from animlib.animation.clip import AnimationClip, BlendMode
from animlib.animation.player import AnimationPlayer, LoopMode
from animlib.animation.track import vector_track
from animlib.core.scene_graph import Bone, SceneNode, Skeleton, SkinnedMesh
from animlib.optimize.clip_sanitizer import (
    collect_valid_names,
    is_non_bone_target,
    sanitize_clip,
    sanitize_player_actions,
)


def make_model():
    """Character with a Hips -> Spine skeleton, a skinned body and a prop."""
    root = SceneNode("Character")
    hips = Bone("Hips")
    spine = Bone("Spine")
    hips.add(spine)
    body = SkinnedMesh("Body", Skeleton([hips, spine]))
    root.add(hips, body, SceneNode("Prop"))
    return root


def track(name):
    return vector_track(name, [0.0, 1.0], [0, 0, 0, 1, 1, 1])


def make_clip(names, name="Walk"):
    return AnimationClip(name, 1.0, [track(n) for n in names], BlendMode.NORMAL)


def test_collect_valid_names():
    """Bones come from skeletons, nodes from every named node"""
    names = collect_valid_names(make_model())
    assert names.bones == {"Hips", "Spine"}
    assert names.nodes == {"Character", "Hips", "Spine", "Body", "Prop"}
    assert "Prop" in names
    assert "Missing" not in names


def test_collect_valid_names_uses_every_skeleton():
    """Bones of all skinned meshes are collected, even detached ones"""
    root = make_model()
    root.add(SkinnedMesh("Cape", Skeleton([Bone("CapeRoot")])))
    names = collect_valid_names(root)
    assert names.bones == {"Hips", "Spine", "CapeRoot"}
    assert "CapeRoot" not in names.nodes


def test_is_non_bone_target():
    """Accessory fragments and the known bad literal are rejected"""
    assert is_non_bone_target("hair_01")
    assert is_non_bone_target("Character_hat_top")
    assert is_non_bone_target("face_accessory_glasses")
    assert is_non_bone_target("fullBody_Toes")
    assert not is_non_bone_target("fullBody_Toes2")
    assert not is_non_bone_target("Hips")
    assert not is_non_bone_target("Hair")


def test_sanitize_keeps_bone_and_node_tracks():
    """Tracks targeting bones or named nodes survive in order"""
    clip = make_clip(["Spine.position", "Missing.position", "Prop.position", "Hips.quaternion"])
    result = sanitize_clip(clip, make_model())
    assert result.track_names == ["Spine.position", "Prop.position", "Hips.quaternion"]


def test_sanitize_drops_known_bad_name():
    """fullBody_Toes is dropped even if the model has such a node"""
    model = make_model()
    model.add(SceneNode("fullBody_Toes"))
    result = sanitize_clip(make_clip(["fullBody_Toes.position", "Hips.position"]), model)
    assert result.track_names == ["Hips.position"]


def test_sanitize_drops_accessory_tracks():
    """Accessory tracks are dropped even when the node exists"""
    model = make_model()
    model.add(SceneNode("hair_01"))
    result = sanitize_clip(make_clip(["hair_01.position", "hat_top.scale", "Hips.position"]), model)
    assert result.track_names == ["Hips.position"]


def test_sanitize_keeps_names_without_separator():
    """Malformed names are preserved"""
    result = sanitize_clip(make_clip(["weird", "Missing.position"]), make_model())
    assert result.track_names == ["weird"]


def test_sanitize_returns_new_clip():
    """The original clip is never modified"""
    clip = make_clip(["Hips.position", "Missing.position"])
    result = sanitize_clip(clip, make_model())

    assert result is not clip
    assert clip.track_count == 2
    assert result.name == clip.name
    assert result.duration == clip.duration
    assert result.blend_mode is clip.blend_mode
    assert result.tracks[0] is not clip.tracks[0]
    assert result.tracks[0].content_equals(clip.tracks[0])


def test_sanitize_is_idempotent():
    """Sanitizing twice gives the same track set"""
    model = make_model()
    clip = make_clip(["hair_01.position", "Hips.position", "Nope.scale", "x", "Body.position"])
    once = sanitize_clip(clip, model)
    twice = sanitize_clip(once, model)
    assert twice.track_names == once.track_names


def test_sanitize_logs_removed_tracks(caplog):
    """Non-silent runs report how many tracks were removed"""
    caplog.set_level(logging.DEBUG, logger="animlib.optimize.clip_sanitizer")
    sanitize_clip(make_clip(["Hips.position", "Missing.position", "hair_01.scale"]), make_model(),
                  silent=False)
    assert "Removed 2/3 non-bone tracks" in caplog.text
    assert "hair_01" in caplog.text


def test_sanitize_silent_by_default(caplog):
    """Silent runs do not log the summary"""
    caplog.set_level(logging.DEBUG, logger="animlib.optimize.clip_sanitizer")
    sanitize_clip(make_clip(["Missing.position"]), make_model())
    assert "Removed" not in caplog.text


def test_sanitize_player_replaces_dirty_action():
    """Actions losing tracks are swapped and keep their settings and time"""
    model = make_model()
    player = AnimationPlayer(model)
    action = player.clip_action(make_clip(["Hips.position", "Missing.position"]))
    action.loop = LoopMode.PINGPONG
    action.repetitions = 3
    action.clamp_when_finished = True
    action.time_scale = 0.5
    action.play()
    action.time = 0.4

    replaced = sanitize_player_actions(player, model)

    assert replaced == 1
    assert len(player.actions) == 1
    new_action = player.actions[0]
    assert new_action is not action
    assert new_action.clip.track_names == ["Hips.position"]
    assert new_action.loop is LoopMode.PINGPONG
    assert new_action.repetitions == 3
    assert new_action.clamp_when_finished is True
    assert new_action.time_scale == 0.5
    assert new_action.is_running()
    assert new_action.time == pytest.approx(0.4)
    assert not action.is_playing


def test_sanitize_player_keeps_stopped_actions_stopped():
    """Replacements for idle actions are not started"""
    model = make_model()
    player = AnimationPlayer(model)
    player.clip_action(make_clip(["Missing.position"]))

    assert sanitize_player_actions(player, model) == 1
    new_action = player.actions[0]
    assert not new_action.is_playing
    assert new_action.time == 0.0
    assert new_action.clip.track_count == 0


def test_sanitize_player_leaves_clean_actions():
    """Actions whose clip needs no change stay untouched"""
    model = make_model()
    player = AnimationPlayer(model)
    action = player.clip_action(make_clip(["Hips.position"])).play()

    assert sanitize_player_actions(player, model) == 0
    assert player.actions == (action,)
    assert action.is_running()


def test_sanitize_player_handles_several_actions():
    """Each action is checked independently"""
    model = make_model()
    player = AnimationPlayer(model)
    clean = player.clip_action(make_clip(["Hips.position"], name="Idle"))
    player.clip_action(make_clip(["hair_01.position", "Spine.position"], name="Run"))

    assert sanitize_player_actions(player, model) == 1
    assert player.actions[0] is clean
    assert player.actions[1].clip.name == "Run"
    assert player.actions[1].clip.track_names == ["Spine.position"]


def test_sanitize_player_without_actions_is_noop():
    """Players that cannot enumerate actions are ignored"""

    class OpaquePlayer:
        pass

    assert sanitize_player_actions(OpaquePlayer(), make_model()) == 0
