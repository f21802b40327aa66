"""
Animation Library

Registry of named clips shared by the characters of a game.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .clip import AnimationClip
from ..config import settings

logger = logging.getLogger(__name__)


def strip_accessory_tracks(clip: AnimationClip) -> AnimationClip:
    """New clip without tracks whose target starts with an accessory prefix."""
    tracks = [
        track for track in clip.tracks
        if not track.target_name.startswith(settings.LIBRARY_PRECLEAN_PREFIXES)
    ]
    if len(tracks) == clip.track_count:
        return clip
    return clip.with_tracks(tracks)


class AnimationLibrary:
    """
    Stores clips by id.

    Clips loaded from files are pre-cleaned of accessory tracks and their
    duration is recomputed from the remaining keyframes. Clips registered
    directly are stored as given.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize animation library.

        Args:
            debug: Log every registered clip at INFO level
        """
        self.debug = debug
        self._clips: Dict[str, AnimationClip] = {}

    def register_clip(self, clip_id: str, clip: AnimationClip) -> AnimationClip:
        """
        Add a clip under an id, unchanged.

        Registering an id twice keeps the first clip.

        Returns:
            The clip stored under the id
        """
        existing = self._clips.get(clip_id)
        if existing is not None:
            logger.warning("Clip '%s' already registered, skipping", clip_id)
            return existing

        self._clips[clip_id] = clip

        if self.debug:
            logger.info("Registered animation clip: %s (%d tracks)", clip_id, clip.track_count)
        return clip

    def load_animation(self, clip_id: str, path: Union[str, Path], loader=None) -> AnimationClip:
        """
        Load the first animation of a glTF/GLB file and store it.

        Accessory tracks are stripped and the duration is reset to the
        last remaining keyframe.

        Args:
            clip_id: Id to store the clip under
            path: Path to .gltf or .glb file
            loader: GltfLoader to use (a new one by default)

        Raises:
            ValueError: If the file contains no animations
        """
        existing = self._clips.get(clip_id)
        if existing is not None:
            logger.warning("Loading an already loaded clip: %s", clip_id)
            return existing

        if loader is None:
            from ..loaders.gltf_loader import GltfLoader
            loader = GltfLoader()

        result = loader.load(path)
        if not result.clips:
            raise ValueError(f"No animations found in {path}")

        clip = result.clips[0]
        cleaned = strip_accessory_tracks(clip)
        removed = clip.track_count - cleaned.track_count
        if removed and self.debug:
            logger.info("Pre-cleaned %d accessory tracks from animation: %s", removed, clip_id)

        cleaned = cleaned.reset_duration()
        self._clips[clip_id] = cleaned

        if self.debug:
            logger.info("Loaded animation: %s from %s (%d tracks)", clip_id, path, cleaned.track_count)
        return cleaned

    def load_animations(self, paths: Dict[str, Union[str, Path]], loader=None) -> Dict[str, AnimationClip]:
        """
        Load several animations at once.

        Args:
            paths: Clip id to file path
            loader: GltfLoader shared by every load (a new one by default)

        Returns:
            Clip id to stored clip
        """
        if loader is None:
            from ..loaders.gltf_loader import GltfLoader
            loader = GltfLoader()
        return {clip_id: self.load_animation(clip_id, path, loader) for clip_id, path in paths.items()}

    def get_clip(self, clip_id: str) -> Optional[AnimationClip]:
        return self._clips.get(clip_id)

    def clone_clip(self, clip_id: str) -> Optional[AnimationClip]:
        clip = self._clips.get(clip_id)
        return clip.clone() if clip is not None else None

    def has_clip(self, clip_id: str) -> bool:
        return clip_id in self._clips

    def all_clips(self) -> Dict[str, AnimationClip]:
        """Copy of the id to clip mapping."""
        return dict(self._clips)

    def __repr__(self):
        return f"AnimationLibrary(clips={len(self._clips)})"
