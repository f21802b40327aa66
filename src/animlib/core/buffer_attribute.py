"""
Buffer Attribute

Flat per-vertex attribute storage with a dirty flag for GPU re-upload.
"""

from typing import Optional
import moderngl
import numpy as np


class BufferAttribute:
    """
    Per-vertex attribute data stored as a flat numpy array.

    Tracks whether the CPU copy changed since the last upload so the
    renderer only re-uploads buffers that were modified.
    """

    def __init__(self, array, item_size: int, dtype='f4'):
        """
        Initialize buffer attribute.

        Args:
            array: Attribute data (any shape, stored flattened)
            item_size: Number of components per vertex
            dtype: Numpy dtype of the stored data
        """
        if item_size < 1:
            raise ValueError(f"item_size must be positive, got {item_size}")

        self.array = np.array(array, dtype=dtype).reshape(-1)
        if self.array.size % item_size != 0:
            raise ValueError(
                f"Buffer length {self.array.size} is not a multiple of item_size {item_size}"
            )

        self.item_size = item_size
        self.needs_update = False
        self.version = 0

    @property
    def count(self) -> int:
        """Number of vertices stored in this attribute."""
        return self.array.size // self.item_size

    def mark_dirty(self):
        """Flag the attribute for re-upload on the next sync."""
        self.needs_update = True
        self.version += 1

    def as_items(self) -> np.ndarray:
        """View of the data shaped (count, item_size). Writes go to the buffer."""
        return self.array.reshape(-1, self.item_size)

    def upload(self, ctx: moderngl.Context, buffer: Optional[moderngl.Buffer] = None) -> moderngl.Buffer:
        """
        Upload the attribute to the GPU.

        Writes into an existing buffer when one is given and large enough,
        otherwise creates a new buffer. Clears the dirty flag.

        Args:
            ctx: ModernGL context used to create buffers
            buffer: Previously uploaded buffer to reuse

        Returns:
            Buffer holding the current data
        """
        data = self.array.astype('f4').tobytes()

        if buffer is not None and buffer.size >= len(data):
            buffer.write(data)
        else:
            buffer = ctx.buffer(data)

        self.needs_update = False
        return buffer

    def __repr__(self):
        return f"BufferAttribute(count={self.count}, item_size={self.item_size}, dirty={self.needs_update})"
