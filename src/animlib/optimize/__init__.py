"""Clip cleanup and skin optimization."""

from .clip_sanitizer import (
    ValidNames,
    collect_valid_names,
    is_non_bone_target,
    sanitize_clip,
    sanitize_player_actions,
)
from .skin_optimizer import reduce_skin_influences, optimize_model

__all__ = [
    'ValidNames',
    'collect_valid_names',
    'is_non_bone_target',
    'sanitize_clip',
    'sanitize_player_actions',
    'reduce_skin_influences',
    'optimize_model',
]
