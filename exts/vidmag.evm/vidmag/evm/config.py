"""
Configuration for color magnification.

Defaults target the human pulse (50-60 BPM band) at 30 fps.
"""

import logging
import math
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict

from .errors import ConfigurationError
from .core.fir_design import validate_band

logger = logging.getLogger(__name__)

# ==================== TEMPORAL FILTER ====================
DEFAULT_LOW_HZ = 50.0 / 60.0     # Lower corner frequency (Hz)
DEFAULT_HIGH_HZ = 60.0 / 60.0    # Upper corner frequency (Hz)
DEFAULT_SAMPLE_RATE_HZ = 30.0    # Assumed video framerate (Hz)
DEFAULT_NUM_TAPS = 119           # Odd FIR length; warm-up is N-1 frames

# ==================== AMPLIFICATION ====================
DEFAULT_ALPHA = 50.0             # Magnification factor
DEFAULT_CHROMA_ATTENUATION = 1.0 # Weight of Cr/Cb relative to Y

# ==================== SPATIAL ====================
DEFAULT_PYRAMID_LEVELS = 4       # Gaussian pyramid depth for downsampling

DEFAULT_DTYPE = 'float32'
SUPPORTED_DTYPES = ('float32', 'float64')


@dataclass(frozen=True)
class EVMConfig:
    """
    Magnification parameters, fixed for the lifetime of a pipeline.

    Attributes:
        low_hz: Lower corner frequency (Hz)
        high_hz: Upper corner frequency (Hz)
        sample_rate_hz: Source framerate (Hz)
        alpha: Magnification factor
        chroma_attenuation: Weight of chroma channels, 0-1 typical
        num_taps: FIR length (odd)
        pyramid_levels: Gaussian pyramid depth (1 = full resolution)
        dtype: Working precision, 'float32' or 'float64'
    """
    low_hz: float = DEFAULT_LOW_HZ
    high_hz: float = DEFAULT_HIGH_HZ
    sample_rate_hz: float = DEFAULT_SAMPLE_RATE_HZ
    alpha: float = DEFAULT_ALPHA
    chroma_attenuation: float = DEFAULT_CHROMA_ATTENUATION
    num_taps: int = DEFAULT_NUM_TAPS
    pyramid_levels: int = DEFAULT_PYRAMID_LEVELS
    dtype: str = DEFAULT_DTYPE

    def validate(self) -> 'EVMConfig':
        """
        Check every field.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: naming the offending field
        """
        validate_band(self.low_hz, self.high_hz, self.sample_rate_hz, self.num_taps)

        if not math.isfinite(self.alpha):
            raise ConfigurationError(
                f"alpha must be finite, got {self.alpha!r}",
                parameter='alpha', value=self.alpha
            )
        if not math.isfinite(self.chroma_attenuation) or self.chroma_attenuation < 0:
            raise ConfigurationError(
                f"chroma_attenuation must be finite and non-negative, "
                f"got {self.chroma_attenuation!r}",
                parameter='chroma_attenuation', value=self.chroma_attenuation
            )
        if self.chroma_attenuation > 1:
            logger.warning(
                "[EVMConfig] chroma_attenuation=%.3f > 1 amplifies chroma more than luma",
                self.chroma_attenuation
            )
        if isinstance(self.pyramid_levels, bool) or not isinstance(self.pyramid_levels, int) \
                or self.pyramid_levels < 1:
            raise ConfigurationError(
                f"pyramid_levels must be an integer >= 1, got {self.pyramid_levels!r}",
                parameter='pyramid_levels', value=self.pyramid_levels
            )
        if self.dtype not in SUPPORTED_DTYPES:
            raise ConfigurationError(
                f"dtype must be one of {', '.join(SUPPORTED_DTYPES)}, got {self.dtype!r}",
                parameter='dtype', value=self.dtype
            )
        return self

    def with_sample_rate(self, sample_rate_hz: float) -> 'EVMConfig':
        """Copy with a new sample rate (e.g. the source video's fps)."""
        return replace(self, sample_rate_hz=float(sample_rate_hz))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'EVMConfig':
        """Build from a dict; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown config keys: {', '.join(unknown)}. "
                f"Supported keys: {', '.join(sorted(known))}",
                parameter=unknown[0]
            )
        return cls(**d)
