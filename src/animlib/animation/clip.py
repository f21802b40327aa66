"""
Animation Clip

Named collection of keyframe tracks.
"""

from typing import Iterable, List, Optional, Tuple
from enum import Enum

from .track import KeyframeTrack


class BlendMode(Enum):
    """How a clip's values combine with the bind pose."""
    NORMAL = "normal"
    ADDITIVE = "additive"


class AnimationClip:
    """
    Complete animation with multiple tracks.

    Clips are treated as immutable: operations that change tracks or
    metadata return a new clip.
    """

    def __init__(
        self,
        name: str,
        duration: float = -1.0,
        tracks: Iterable[KeyframeTrack] = (),
        blend_mode: BlendMode = BlendMode.NORMAL
    ):
        """
        Initialize animation clip.

        Args:
            name: Clip name
            duration: Length in seconds (negative computes it from the tracks)
            tracks: Keyframe tracks in binding order
            blend_mode: Blend mode used during playback
        """
        self.name = name
        self.tracks: Tuple[KeyframeTrack, ...] = tuple(tracks)
        self.blend_mode = blend_mode
        self.duration = float(duration) if duration >= 0 else self._compute_duration()

    def _compute_duration(self) -> float:
        if not self.tracks:
            return 0.0
        return max(track.end_time for track in self.tracks)

    @property
    def track_names(self) -> List[str]:
        return [track.name for track in self.tracks]

    def find_track(self, name: str) -> Optional[KeyframeTrack]:
        for track in self.tracks:
            if track.name == name:
                return track
        return None

    def with_tracks(self, tracks: Iterable[KeyframeTrack], name: Optional[str] = None) -> 'AnimationClip':
        """New clip with the same duration and blend mode but different tracks."""
        return AnimationClip(
            name if name is not None else self.name,
            self.duration,
            tracks,
            self.blend_mode,
        )

    def reset_duration(self) -> 'AnimationClip':
        """New clip whose duration is the last keyframe time of its tracks."""
        return AnimationClip(self.name, -1.0, self.tracks, self.blend_mode)

    def clone(self) -> 'AnimationClip':
        return self.with_tracks([track.clone() for track in self.tracks])

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    def __repr__(self):
        return f"AnimationClip(name='{self.name}', duration={self.duration:.2f}s, tracks={len(self.tracks)})"
