"""
Amplification of temporally filtered frames.
"""

import math
from typing import Optional

import numpy as np

from ..errors import ConfigurationError, ShapeMismatchError


class AmplificationStage:
    """
    Uniform magnification of a filtered frame.

    Chroma channels already carry their attenuation from the temporal
    filter, so the same alpha applies to every channel here.
    """

    def __init__(self, alpha: float, num_channels: Optional[int] = None):
        """
        Args:
            alpha: Magnification factor
            num_channels: Expected channel count (None = any)
        """
        if not math.isfinite(alpha):
            raise ConfigurationError(
                f"alpha must be finite, got {alpha!r}",
                parameter='alpha', value=alpha
            )
        self.alpha = float(alpha)
        self.num_channels = num_channels

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Return a new frame scaled by alpha."""
        frame = np.asarray(frame)
        if frame.ndim != 3:
            raise ShapeMismatchError(
                f"filtered frame must have shape (H, W, C), got {frame.shape}",
                actual=frame.shape
            )
        if self.num_channels is not None and frame.shape[2] != self.num_channels:
            raise ShapeMismatchError(
                f"filtered frame has {frame.shape[2]} channels, "
                f"expected {self.num_channels}",
                actual=frame.shape
            )

        if not np.issubdtype(frame.dtype, np.floating):
            frame = frame.astype(np.float32)

        return frame * frame.dtype.type(self.alpha)
