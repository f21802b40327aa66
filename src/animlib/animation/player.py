"""
Animation Player

Manages animation actions and their playback state.
"""

import logging
import math
from enum import Enum
from typing import List, Optional, Tuple, Union

from .clip import AnimationClip
from ..core.scene_graph import SceneNode

logger = logging.getLogger(__name__)


class LoopMode(Enum):
    """How an action behaves when it reaches the end of its clip."""
    ONCE = "once"
    REPEAT = "repeat"
    PINGPONG = "pingpong"


class AnimationAction:
    """
    Playback state of one clip on a player.

    Manages:
    - Current time and play/pause state
    - Loop mode, repetition count and clamp-on-finish behaviour
    - Time scale
    """

    def __init__(self, player: 'AnimationPlayer', clip: AnimationClip):
        """
        Initialize animation action.

        Args:
            player: Player that owns this action
            clip: Clip to play
        """
        self.player = player
        self.clip = clip
        self.loop = LoopMode.REPEAT
        self.repetitions: float = math.inf
        self.clamp_when_finished = False
        self.time_scale = 1.0
        self.time = 0.0
        self.weight = 1.0
        self.enabled = True
        self.paused = False
        self.is_playing = False

        self._loop_count = -1
        self._direction = 1.0

    def get_clip(self) -> AnimationClip:
        return self.clip

    def play(self) -> 'AnimationAction':
        """Start playing from the current time."""
        self.is_playing = True
        return self

    def stop(self) -> 'AnimationAction':
        """Stop playback and rewind to the start."""
        self.is_playing = False
        return self.reset()

    def reset(self) -> 'AnimationAction':
        """Rewind to the start and clear finished/paused state."""
        self.time = 0.0
        self.paused = False
        self.enabled = True
        self._loop_count = -1
        self._direction = 1.0
        return self

    def is_running(self) -> bool:
        """True while the action is playing, enabled, not paused and moving."""
        return self.is_playing and self.enabled and not self.paused and self.time_scale != 0.0

    def update(self, delta_time: float):
        """
        Advance playback time.

        Args:
            delta_time: Time elapsed since last frame (seconds)
        """
        if not self.is_running():
            return

        duration = self.clip.duration
        time = self.time + delta_time * self.time_scale * self._direction

        if self.loop is LoopMode.ONCE or duration <= 0.0:
            if time >= duration:
                self._finish(max(duration, 0.0))
            elif time < 0.0:
                self._finish(0.0)
            else:
                self.time = time
            return

        if self._loop_count == -1:
            self._loop_count = 0

        if 0.0 <= time < duration:
            self.time = time
            return

        forward = time >= duration
        excess = time - duration if forward else -time
        wraps = 1 + int(excess // duration)
        remainder = excess % duration

        self._loop_count += wraps
        if self._loop_count >= self.repetitions:
            self._finish(duration if forward else 0.0)
            return

        if self.loop is LoopMode.PINGPONG and wraps % 2 == 1:
            self._direction = -self._direction
            self.time = duration - remainder if forward else remainder
        else:
            self.time = remainder if forward else duration - remainder

    def _finish(self, end_time: float):
        self.time = end_time
        if self.clamp_when_finished:
            self.paused = True
        else:
            self.enabled = False
        logger.debug("Action for clip '%s' finished at %.3fs", self.clip.name, end_time)

    def __repr__(self):
        return (f"AnimationAction(clip='{self.clip.name}', time={self.time:.2f}s, "
                f"playing={self.is_playing}, loop={self.loop.value})")


class AnimationPlayer:
    """
    Owns the actions that play clips against a root node.

    Actions are cached per clip: asking for the same clip twice returns
    the same action.
    """

    def __init__(self, root: SceneNode):
        """
        Initialize animation player.

        Args:
            root: Node whose subtree the clips animate
        """
        self.root = root
        self.time = 0.0
        self.time_scale = 1.0
        self._actions: List[AnimationAction] = []

    @property
    def actions(self) -> Tuple[AnimationAction, ...]:
        """Every action currently registered on this player."""
        return tuple(self._actions)

    def clip_action(self, clip: AnimationClip) -> AnimationAction:
        """Get the action for a clip, creating it if needed."""
        action = self.existing_action(clip)
        if action is None:
            action = AnimationAction(self, clip)
            self._actions.append(action)
        return action

    def existing_action(self, clip: Union[AnimationClip, str]) -> Optional[AnimationAction]:
        """Find the action bound to a clip object or clip name."""
        for action in self._actions:
            if action.clip is clip or (isinstance(clip, str) and action.clip.name == clip):
                return action
        return None

    def uncache_action(self, action: AnimationAction):
        """Stop an action and remove it from this player."""
        if action in self._actions:
            action.stop()
            self._actions.remove(action)

    def stop_all_action(self):
        for action in self._actions:
            action.stop()

    def update(self, delta_time: float):
        """
        Advance every running action.

        Args:
            delta_time: Time elapsed since last frame (seconds)
        """
        scaled = delta_time * self.time_scale
        self.time += scaled
        for action in self._actions:
            action.update(scaled)

    def __repr__(self):
        return f"AnimationPlayer(root='{self.root.name}', actions={len(self._actions)})"
