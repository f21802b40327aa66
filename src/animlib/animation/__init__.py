"""
Animation System

Keyframe tracks, clips, playback state and the clip library.
"""

from .track import (
    KeyframeTrack,
    TrackKind,
    InterpolationType,
    split_track_name,
    vector_track,
    quaternion_track,
    scalar_track,
)
from .clip import AnimationClip, BlendMode
from .player import AnimationPlayer, AnimationAction, LoopMode
from .library import AnimationLibrary

__all__ = [
    'KeyframeTrack',
    'TrackKind',
    'InterpolationType',
    'split_track_name',
    'vector_track',
    'quaternion_track',
    'scalar_track',
    'AnimationClip',
    'BlendMode',
    'AnimationPlayer',
    'AnimationAction',
    'LoopMode',
    'AnimationLibrary',
]
