"""
Keyframe Track

Named, time-sampled channel of animation data for one target property.
"""

from typing import Optional, Tuple
from enum import Enum
import numpy as np

TRACK_NAME_SEPARATOR = "."


class InterpolationType(Enum):
    """Animation interpolation types."""
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBICSPLINE = "CUBICSPLINE"


class TrackKind(Enum):
    """Track value layout. The value is the number of floats per sample."""
    VECTOR = 3
    QUATERNION = 4
    SCALAR = 1
    UNKNOWN = 0

    @classmethod
    def from_property(cls, property_name: str) -> 'TrackKind':
        """Guess the kind from a property name such as 'quaternion' or 'position'."""
        return _PROPERTY_KINDS.get(property_name, cls.UNKNOWN)


_PROPERTY_KINDS = {
    'position': TrackKind.VECTOR,
    'scale': TrackKind.VECTOR,
    'translation': TrackKind.VECTOR,
    'quaternion': TrackKind.QUATERNION,
    'rotation': TrackKind.QUATERNION,
    'morphTargetInfluences': TrackKind.SCALAR,
    'visible': TrackKind.SCALAR,
    'opacity': TrackKind.SCALAR,
}


def split_track_name(name: str) -> Tuple[str, Optional[str]]:
    """
    Split a track name into target and property at the first separator.

    "Hips.quaternion" -> ("Hips", "quaternion")
    "Hips" -> ("Hips", None)
    """
    target, sep, prop = name.partition(TRACK_NAME_SEPARATOR)
    if not sep:
        return name, None
    return target, prop


def _readonly(array, dtype) -> np.ndarray:
    data = np.array(array, dtype=dtype).reshape(-1)
    data.flags.writeable = False
    return data


def _is_readonly(array) -> bool:
    return (isinstance(array, np.ndarray) and array.ndim == 1
            and not array.flags.writeable and array.dtype == np.float32)


class KeyframeTrack:
    """
    Animation track targeting a single node property.

    Times and values are stored as read-only flat arrays so tracks can
    share them after renaming without copying.
    """

    def __init__(
        self,
        name: str,
        times,
        values,
        kind: TrackKind = TrackKind.UNKNOWN,
        interpolation: InterpolationType = InterpolationType.LINEAR
    ):
        """
        Initialize keyframe track.

        Args:
            name: Composite "<target>.<property>" name
            times: Strictly increasing sample times in seconds
            values: Flat value buffer, components_per_sample floats per time
            kind: Value layout of the track
            interpolation: Interpolation method

        Raises:
            ValueError: If the buffers are inconsistent
        """
        self.name = name
        self.kind = kind
        self.interpolation = interpolation
        self.times = times if _is_readonly(times) else _readonly(times, 'f4')
        self.values = values if _is_readonly(values) else _readonly(values, 'f4')
        self._validate()

    def _validate(self):
        if self.times.size > 1 and np.any(np.diff(self.times) <= 0):
            raise ValueError(f"Track '{self.name}' times must be strictly increasing")

        expected = self.times.size * self.components_per_sample
        if self.values.size != expected:
            raise ValueError(
                f"Track '{self.name}' has {self.values.size} values, expected {expected} "
                f"({self.times.size} samples x {self.components_per_sample})"
            )

    @property
    def components_per_sample(self) -> int:
        if self.kind is not TrackKind.UNKNOWN:
            return self.kind.value
        if self.times.size == 0:
            return 0
        return self.values.size // self.times.size

    @property
    def target_name(self) -> str:
        return split_track_name(self.name)[0]

    @property
    def property_name(self) -> Optional[str]:
        return split_track_name(self.name)[1]

    @property
    def start_time(self) -> float:
        return float(self.times[0]) if self.times.size else 0.0

    @property
    def end_time(self) -> float:
        return float(self.times[-1]) if self.times.size else 0.0

    def get_values(self) -> np.ndarray:
        """Values shaped (samples, components_per_sample)."""
        size = self.components_per_sample
        if size == 0:
            return self.values.reshape(0, 0)
        return self.values.reshape(-1, size)

    def with_name(self, name: str) -> 'KeyframeTrack':
        """New track with a different name sharing this track's data."""
        return KeyframeTrack(name, self.times, self.values, self.kind, self.interpolation)

    def clone(self) -> 'KeyframeTrack':
        return self.with_name(self.name)

    def content_equals(self, other: 'KeyframeTrack') -> bool:
        """True if name, kind, interpolation and data all match."""
        return (
            self.name == other.name
            and self.kind is other.kind
            and self.interpolation is other.interpolation
            and np.array_equal(self.times, other.times)
            and np.array_equal(self.values, other.values)
        )

    def __repr__(self):
        return (f"KeyframeTrack(name='{self.name}', kind={self.kind.name}, "
                f"samples={self.times.size})")


def vector_track(name: str, times, values, interpolation=InterpolationType.LINEAR) -> KeyframeTrack:
    return KeyframeTrack(name, times, values, TrackKind.VECTOR, interpolation)


def quaternion_track(name: str, times, values, interpolation=InterpolationType.LINEAR) -> KeyframeTrack:
    return KeyframeTrack(name, times, values, TrackKind.QUATERNION, interpolation)


def scalar_track(name: str, times, values, interpolation=InterpolationType.LINEAR) -> KeyframeTrack:
    return KeyframeTrack(name, times, values, TrackKind.SCALAR, interpolation)
