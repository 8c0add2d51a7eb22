"""
Colorspace Conversion

RGB <-> YCrCb on float frames so the luma signal sits in channel 0.
"""

import numpy as np
import cv2


def to_float(frame: np.ndarray) -> np.ndarray:
    """Convert a uint8 frame to float32 in [0, 1]; float frames pass through as float32."""
    if frame.dtype == np.uint8:
        return frame.astype(np.float32) / 255.0
    return frame.astype(np.float32)


def to_uint8(frame: np.ndarray) -> np.ndarray:
    """Clip a float [0, 1] frame and round to uint8."""
    return np.clip(np.rint(frame * 255.0), 0, 255).astype(np.uint8)


def rgb_to_ycrcb(frame: np.ndarray) -> np.ndarray:
    """
    Convert RGB to YCrCb.

    Args:
        frame: RGB frame (H, W, 3), float in [0, 1]

    Returns:
        float32 frame with channels (Y, Cr, Cb)
    """
    return cv2.cvtColor(frame.astype(np.float32), cv2.COLOR_RGB2YCrCb)


def ycrcb_to_rgb(frame: np.ndarray) -> np.ndarray:
    """Convert YCrCb (float32) back to RGB."""
    return cv2.cvtColor(frame.astype(np.float32), cv2.COLOR_YCrCb2RGB)
