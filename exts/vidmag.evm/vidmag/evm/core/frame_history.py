"""
Fixed-capacity frame history for streaming temporal filtering.
"""

from collections import deque
from typing import Iterator

import numpy as np


class FrameHistory:
    """
    Newest-first buffer of the last N frames.

    Index 0 is the most recently pushed frame, index N-1 the oldest
    retained one. Every push stores a private copy; once full, each push
    evicts exactly the oldest frame.
    """

    def __init__(self, capacity: int, dtype=np.float32):
        """
        Initialize history.

        Args:
            capacity: Maximum number of frames retained (N)
            dtype: Storage dtype for the copies
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")

        self.capacity = int(capacity)
        self.dtype = np.dtype(dtype)
        self._frames = deque(maxlen=self.capacity)

    def push(self, frame: np.ndarray):
        """Store a copy of frame as the newest entry."""
        # deque(maxlen) drops the oldest entry on the right
        self._frames.appendleft(np.array(frame, dtype=self.dtype, copy=True))

    def is_full(self) -> bool:
        return len(self._frames) == self.capacity

    def frame_at(self, index: int) -> np.ndarray:
        """
        Get a retained frame.

        Args:
            index: 0 = newest ... len-1 = oldest

        Returns:
            The stored frame (not a copy; do not mutate)
        """
        if not 0 <= index < len(self._frames):
            raise IndexError(
                f"frame index {index} out of range for history of {len(self._frames)}"
            )
        return self._frames[index]

    def clear(self):
        self._frames.clear()

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._frames)
