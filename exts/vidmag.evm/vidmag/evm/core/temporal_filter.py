"""
Temporal Band-Pass Filtering for EVM

FIR filter over a sliding window of frames. Each pixel's time series is
convolved with fixed taps; the filter holds exactly N frames of state
for streaming video processing.
"""

import logging
import math
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..errors import ConfigurationError, ShapeMismatchError
from .fir_design import FilterDesigner
from .frame_history import FrameHistory

logger = logging.getLogger(__name__)

SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


class FilterState(Enum):
    """Streaming state of a temporal filter."""
    WARMING = 'warming'  # fewer than N frames seen, no output
    STEADY = 'steady'    # one output per input


class TemporalFilter:
    """
    FIR band-pass filter with frame history for streaming video.

    Channel 0 is the primary (luma) channel and is weighted by the taps
    directly. Every other channel is additionally weighted by the chroma
    attenuation factor.
    """

    def __init__(
        self,
        taps: np.ndarray,
        chroma_attenuation: float = 1.0,
        dtype=np.float32
    ):
        """
        Initialize temporal filter.

        Args:
            taps: FIR coefficients, odd length N
            chroma_attenuation: Weight applied to non-primary channels
            dtype: Working precision, float32 or float64
        """
        taps = np.array(taps, dtype=np.float64, copy=True)
        if taps.ndim != 1 or taps.size % 2 == 0:
            raise ConfigurationError(
                f"taps must be a 1-D sequence of odd length, got shape {taps.shape}",
                parameter='taps'
            )
        if not np.all(np.isfinite(taps)):
            raise ConfigurationError("taps must be finite", parameter='taps')

        if not math.isfinite(chroma_attenuation) or chroma_attenuation < 0:
            raise ConfigurationError(
                f"chroma_attenuation must be finite and non-negative, "
                f"got {chroma_attenuation!r}",
                parameter='chroma_attenuation', value=chroma_attenuation
            )

        try:
            work_dtype = np.dtype(dtype)
        except TypeError as e:
            raise ConfigurationError(
                f"dtype {dtype!r} is not a numpy dtype",
                parameter='dtype', value=dtype
            ) from e
        if work_dtype not in SUPPORTED_DTYPES:
            raise ConfigurationError(
                f"dtype must be float32 or float64, got {work_dtype}",
                parameter='dtype', value=dtype
            )

        taps.setflags(write=False)
        self._taps = taps
        self._chroma_attenuation = float(chroma_attenuation)
        self._dtype = work_dtype

        self._history = FrameHistory(taps.size, dtype=work_dtype)
        self._frame_shape: Optional[Tuple[int, int, int]] = None
        self._weights: Optional[np.ndarray] = None
        self._frames_seen = 0

    @classmethod
    def from_band(
        cls,
        low_hz: float,
        high_hz: float,
        sample_rate_hz: float,
        num_taps: int,
        chroma_attenuation: float = 1.0,
        dtype=np.float32
    ) -> 'TemporalFilter':
        """Design band-pass taps and build a filter around them."""
        taps = FilterDesigner(low_hz, high_hz, sample_rate_hz, num_taps).design()
        return cls(taps, chroma_attenuation=chroma_attenuation, dtype=dtype)

    @property
    def taps(self) -> np.ndarray:
        return self._taps

    @property
    def num_taps(self) -> int:
        return self._taps.size

    @property
    def chroma_attenuation(self) -> float:
        return self._chroma_attenuation

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def latency(self) -> int:
        """Number of leading input frames that never produce output."""
        return self.num_taps - 1

    @property
    def group_delay(self) -> int:
        """Delay, in frames, of the output relative to the newest input."""
        return (self.num_taps - 1) // 2

    @property
    def state(self) -> FilterState:
        if self._history.is_full():
            return FilterState.STEADY
        return FilterState.WARMING

    @property
    def frames_seen(self) -> int:
        return self._frames_seen

    @property
    def frame_shape(self) -> Optional[Tuple[int, int, int]]:
        return self._frame_shape

    @property
    def history_size(self) -> int:
        return len(self._history)

    def filter(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Push a frame and filter the current window.

        Args:
            frame: Input frame (H, W, C)

        Returns:
            Filtered frame (H, W, C) in the working dtype, or None while
            fewer than N frames have been pushed
        """
        frame = np.asarray(frame)
        self._check_shape(frame)

        weights = self._weights
        if weights is None:
            weights = self._channel_weights(frame.shape[2])

        was_warming = not self._history.is_full()
        self._history.push(frame)
        self._frames_seen += 1

        if self._frame_shape is None:
            self._frame_shape = frame.shape
            self._weights = weights

        if not self._history.is_full():
            return None

        if was_warming:
            logger.debug(
                "[TemporalFilter] Steady state after %d frames (N=%d)",
                self._frames_seen, self.num_taps
            )

        return self._convolve()

    def reset(self):
        """Clear history and return to the warming state."""
        self._history.clear()
        self._frame_shape = None
        self._weights = None
        self._frames_seen = 0

    def _channel_weights(self, num_channels: int) -> np.ndarray:
        """(N, C) weights: taps for channel 0, attenuated taps elsewhere."""
        gain = np.full(num_channels, self._chroma_attenuation, dtype=np.float64)
        gain[0] = 1.0
        return np.outer(self._taps, gain).astype(self._dtype)

    def _convolve(self) -> np.ndarray:
        # history is newest first, so frame n pairs with taps[n]
        output = np.zeros(self._frame_shape, dtype=self._dtype)
        for n, past in enumerate(self._history):
            output += past * self._weights[n]
        return output

    def _check_shape(self, frame: np.ndarray):
        if frame.ndim != 3:
            raise ShapeMismatchError(
                f"frame must have shape (H, W, C), got {frame.ndim}-D shape {frame.shape}",
                expected=self._frame_shape, actual=frame.shape
            )
        if frame.shape[2] < 1:
            raise ShapeMismatchError(
                f"frame must have at least one channel, got channels 0 in shape {frame.shape}",
                expected=self._frame_shape, actual=frame.shape
            )

        if self._frame_shape is None or frame.shape == self._frame_shape:
            return

        mismatched = [
            f"{name} {want} != {got}"
            for name, want, got in zip(
                ('height', 'width', 'channels'), self._frame_shape, frame.shape
            )
            if want != got
        ]
        raise ShapeMismatchError(
            f"frame shape {frame.shape} does not match {self._frame_shape}: "
            + ", ".join(mismatched),
            expected=self._frame_shape, actual=frame.shape
        )
