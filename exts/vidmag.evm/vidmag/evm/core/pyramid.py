"""
Spatial Pyramid Construction

Gaussian pyramid down/up-sampling. Temporal filtering runs on the
coarsest level, and the amplified result is brought back to full
resolution before it is added to the source frame.
"""

import numpy as np
import cv2
from typing import List, Tuple


def build_gaussian_pyramid(image: np.ndarray, levels: int) -> List[np.ndarray]:
    """
    Build Gaussian pyramid by iterative blur and downsample.

    Args:
        image: Input image (H, W, C)
        levels: Number of pyramid levels (1 = the image only)

    Returns:
        List of images from finest to coarsest [L0, L1, ..., LN]
    """
    if levels < 1:
        raise ValueError(f"levels must be >= 1, got {levels}")

    pyramid = [image]
    current = image

    for _ in range(levels - 1):
        # pyrDown applies the 5x5 Gaussian before decimating
        current = cv2.pyrDown(current)
        pyramid.append(current)

    return pyramid


def downsample(image: np.ndarray, levels: int) -> np.ndarray:
    """Return the coarsest level of the Gaussian pyramid."""
    return build_gaussian_pyramid(image, levels)[-1]


def upsample(image: np.ndarray, shape: Tuple[int, ...], levels: int) -> np.ndarray:
    """
    Bring a coarse level back to full resolution.

    Args:
        image: Coarse image (h, w, C)
        shape: Target shape (H, W[, C])
        levels: Pyramid levels used for the downsample

    Returns:
        Image of size (H, W, C)
    """
    current = image
    for _ in range(levels - 1):
        current = cv2.pyrUp(current)

    # Match size (handle odd dimensions)
    h, w = shape[:2]
    if current.shape[:2] != (h, w):
        current = cv2.resize(current, (w, h), interpolation=cv2.INTER_LINEAR)

    # cv2 drops the channel axis for single-channel images
    if current.ndim == 2:
        current = current[:, :, np.newaxis]

    return current
