"""
Band-Pass FIR Design for EVM

Windowed-sinc band-pass taps: the difference of two ideal low-pass
responses, tapered with a Blackman window. Taps are computed once and
never adapted.
"""

import logging
import math

import numpy as np
from scipy import signal

from ..errors import ConfigurationError, FilterDesignError

logger = logging.getLogger(__name__)

SYMMETRY_TOLERANCE = 1e-9


def validate_band(
    low_hz: float,
    high_hz: float,
    sample_rate_hz: float,
    num_taps: int
):
    """
    Check band-pass design parameters.

    Raises:
        ConfigurationError: naming the first offending parameter
    """
    if isinstance(num_taps, bool) or not isinstance(num_taps, (int, np.integer)):
        raise ConfigurationError(
            f"num_taps must be an integer, got {num_taps!r}",
            parameter='num_taps', value=num_taps
        )
    if num_taps < 3 or num_taps % 2 == 0:
        raise ConfigurationError(
            f"num_taps must be odd and >= 3, got {num_taps}",
            parameter='num_taps', value=num_taps
        )

    for name, value in (('low_hz', low_hz), ('high_hz', high_hz),
                        ('sample_rate_hz', sample_rate_hz)):
        if not math.isfinite(value):
            raise ConfigurationError(
                f"{name} must be finite, got {value!r}",
                parameter=name, value=value
            )

    if sample_rate_hz <= 0:
        raise ConfigurationError(
            f"sample_rate_hz must be positive, got {sample_rate_hz}",
            parameter='sample_rate_hz', value=sample_rate_hz
        )
    if low_hz < 0:
        raise ConfigurationError(
            f"low_hz must be non-negative, got {low_hz}",
            parameter='low_hz', value=low_hz
        )
    if low_hz >= high_hz:
        raise ConfigurationError(
            f"low_hz ({low_hz}) must be below high_hz ({high_hz})",
            parameter='low_hz', value=low_hz
        )

    # Nyquist: strict on the lower corner, inclusive on the upper one
    nyquist = sample_rate_hz / 2.0
    if not low_hz < nyquist:
        raise ConfigurationError(
            f"low_hz ({low_hz}) must be below Nyquist ({nyquist}) "
            f"for sample_rate_hz={sample_rate_hz}",
            parameter='low_hz', value=low_hz
        )
    if high_hz > nyquist:
        raise ConfigurationError(
            f"high_hz ({high_hz}) must not exceed Nyquist ({nyquist}) "
            f"for sample_rate_hz={sample_rate_hz}",
            parameter='high_hz', value=high_hz
        )


def design_bandpass_taps(
    low_hz: float,
    high_hz: float,
    sample_rate_hz: float,
    num_taps: int
) -> np.ndarray:
    """
    Design band-pass FIR taps.

    Args:
        low_hz: Lower corner frequency (Hz)
        high_hz: Upper corner frequency (Hz)
        sample_rate_hz: Sample rate, i.e. video framerate (Hz)
        num_taps: Filter length N (odd)

    Returns:
        float64 array of N taps
    """
    validate_band(low_hz, high_hz, sample_rate_hz, num_taps)

    center = (num_taps - 1) // 2
    offset = np.arange(num_taps, dtype=np.float64) - center

    taps = np.empty(num_taps, dtype=np.float64)
    off_center = offset != 0
    t = offset[off_center]
    taps[off_center] = (
        np.sin(2.0 * np.pi * high_hz / sample_rate_hz * t) -
        np.sin(2.0 * np.pi * low_hz / sample_rate_hz * t)
    ) / (np.pi * t)
    # Limit of the sinc difference at t = 0
    taps[center] = 2.0 * (high_hz - low_hz) / sample_rate_hz

    # 0.42 - 0.5 cos(2 pi n / (N-1)) + 0.08 cos(4 pi n / (N-1))
    taps *= signal.windows.blackman(num_taps, sym=True)

    return taps


def check_symmetric(taps: np.ndarray, tol: float = SYMMETRY_TOLERANCE) -> bool:
    """Return True if taps[i] == taps[N-1-i] within tol for all i."""
    taps = np.asarray(taps, dtype=np.float64)
    return bool(np.all(np.abs(taps - taps[::-1]) <= tol))


class FilterDesigner:
    """
    Band-pass FIR designer.

    Parameters are validated on construction so an invalid designer
    never exists.
    """

    def __init__(
        self,
        low_hz: float,
        high_hz: float,
        sample_rate_hz: float,
        num_taps: int
    ):
        """
        Initialize designer.

        Args:
            low_hz: Lower corner frequency (Hz)
            high_hz: Upper corner frequency (Hz)
            sample_rate_hz: Video framerate (Hz)
            num_taps: Odd filter length
        """
        validate_band(low_hz, high_hz, sample_rate_hz, num_taps)

        self.low_hz = float(low_hz)
        self.high_hz = float(high_hz)
        self.sample_rate_hz = float(sample_rate_hz)
        self.num_taps = int(num_taps)

    @property
    def nyquist_hz(self) -> float:
        return self.sample_rate_hz / 2.0

    def design(self) -> np.ndarray:
        """
        Design taps and run the symmetry self-check.

        Raises:
            FilterDesignError: if the result is not symmetric
        """
        taps = design_bandpass_taps(
            self.low_hz, self.high_hz, self.sample_rate_hz, self.num_taps
        )

        if not check_symmetric(taps):
            raise FilterDesignError(
                f"Filter not symmetric: band=[{self.low_hz}, {self.high_hz}] Hz, "
                f"sr={self.sample_rate_hz}, N={self.num_taps}"
            )

        logger.debug(
            "[FilterDesigner] N=%d band=[%.3f, %.3f] Hz sr=%.2f center=%.6f",
            self.num_taps, self.low_hz, self.high_hz,
            self.sample_rate_hz, taps[self.num_taps // 2]
        )

        return taps

    def __repr__(self) -> str:
        return (f"FilterDesigner(low_hz={self.low_hz}, high_hz={self.high_hz}, "
                f"sample_rate_hz={self.sample_rate_hz}, num_taps={self.num_taps})")
