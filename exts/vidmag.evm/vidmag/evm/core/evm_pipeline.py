"""
Complete EVM Pipeline

Combines colorspace conversion, spatial downsampling, temporal
filtering and amplification into a single composable pipeline.
"""

import itertools
import logging
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np

from ..config import EVMConfig
from ..errors import ShapeMismatchError
from .amplification import AmplificationStage
from .colorspace import rgb_to_ycrcb, to_float, to_uint8, ycrcb_to_rgb
from .pyramid import downsample, upsample
from .temporal_filter import FilterState, TemporalFilter

logger = logging.getLogger(__name__)

# Share of clipped pixels above which a run is reported as saturating
CLIP_WARN_FRACTION = 0.01


class PipelineDriver:
    """
    Per-frame sequencing: temporal filter, then amplification.

    All cross-frame state lives in the temporal filter.
    """

    def __init__(self, temporal_filter: TemporalFilter, amplifier: AmplificationStage):
        self.temporal_filter = temporal_filter
        self.amplifier = amplifier

    @property
    def state(self) -> FilterState:
        return self.temporal_filter.state

    def process(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Filter and amplify one downsampled, luma/chroma frame.

        Returns:
            Amplified frame, or None during warm-up (nothing to emit)
        """
        filtered = self.temporal_filter.filter(frame)
        if filtered is None:
            return None
        return self.amplifier.apply(filtered)

    def run(self, frames: Iterable[np.ndarray]) -> Iterator[np.ndarray]:
        """Yield one amplified frame per steady-state input, in order."""
        for frame in frames:
            amplified = self.process(frame)
            if amplified is not None:
                yield amplified


class EVMPipeline:
    """
    Eulerian color magnification of full-resolution RGB frames.

    Processes video frames through:
    1. RGB -> YCrCb
    2. Spatial downsampling (Gaussian pyramid)
    3. Temporal band-pass filtering
    4. Amplification
    5. Upsampling and recombination with the source frame
    """

    def __init__(self, config: Optional[EVMConfig] = None):
        """
        Initialize EVM pipeline.

        Args:
            config: Magnification parameters (defaults if None)
        """
        self.config = (config or EVMConfig()).validate()

        temporal_filter = TemporalFilter.from_band(
            self.config.low_hz,
            self.config.high_hz,
            self.config.sample_rate_hz,
            self.config.num_taps,
            chroma_attenuation=self.config.chroma_attenuation,
            dtype=np.dtype(self.config.dtype)
        )
        self.driver = PipelineDriver(
            temporal_filter,
            AmplificationStage(self.config.alpha, num_channels=3)
        )

        # Statistics
        self.frame_count = 0
        self.frames_emitted = 0
        self.last_clipped_fraction = 0.0

        logger.info(
            "[EVMPipeline] band=[%.3f, %.3f] Hz @ %.2f fps, alpha=%.1f, "
            "chroma_attenuation=%.2f, N=%d (warm-up %d frames), levels=%d",
            self.config.low_hz, self.config.high_hz, self.config.sample_rate_hz,
            self.config.alpha, self.config.chroma_attenuation, self.config.num_taps,
            temporal_filter.latency, self.config.pyramid_levels
        )

    @property
    def temporal_filter(self) -> TemporalFilter:
        return self.driver.temporal_filter

    @property
    def state(self) -> FilterState:
        return self.driver.state

    def process_frame(self, frame: np.ndarray) -> Tuple[Optional[np.ndarray], dict]:
        """
        Process a single video frame.

        Args:
            frame: Input RGB frame (H, W, 3), uint8 or float in [0, 1]

        Returns:
            (magnified_frame, metrics)
            magnified_frame is None during warm-up; otherwise it has the
            input's shape and dtype.
            metrics = {
                'frame_count': int,
                'frames_emitted': int,
                'state': str,
                'clipped_fraction': float
            }
        """
        frame = np.asarray(frame)
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise ShapeMismatchError(
                f"expected an RGB frame of shape (H, W, 3), got {frame.shape}",
                actual=frame.shape
            )

        ycrcb = rgb_to_ycrcb(to_float(frame))
        coarse = downsample(ycrcb, self.config.pyramid_levels)

        amplified = self.driver.process(coarse)
        self.frame_count += 1

        if amplified is None:
            return None, self.get_metrics()

        detail = upsample(amplified.astype(np.float32), ycrcb.shape,
                          self.config.pyramid_levels)
        rgb = ycrcb_to_rgb(ycrcb + detail)

        out_of_range = (rgb < 0.0) | (rgb > 1.0)
        self.last_clipped_fraction = float(np.mean(out_of_range))

        if frame.dtype == np.uint8:
            magnified = to_uint8(rgb)
        else:
            magnified = rgb.astype(np.float32)

        self.frames_emitted += 1
        return magnified, self.get_metrics()

    def reset(self):
        """Reset pipeline state."""
        self.temporal_filter.reset()
        self.frame_count = 0
        self.frames_emitted = 0
        self.last_clipped_fraction = 0.0

    def get_metrics(self) -> dict:
        """Get current metrics without processing a frame."""
        return {
            'frame_count': self.frame_count,
            'frames_emitted': self.frames_emitted,
            'state': self.state.value,
            'clipped_fraction': self.last_clipped_fraction
        }


def magnify_video(
    source,
    sink,
    config: Optional[EVMConfig] = None,
    max_frames: Optional[int] = None,
    progress_every: int = 30,
    use_source_fps: bool = True
) -> dict:
    """
    Magnify every frame of a source into a sink.

    Warm-up frames are read but not written, so the output is
    num_taps - 1 frames shorter than the input.

    Args:
        source: VideoSource
        sink: FrameSink
        config: Magnification parameters
        max_frames: Stop after reading this many frames
        progress_every: Log progress every N frames (0 disables)
        use_source_fps: Take the sample rate from the source framerate

    Returns:
        {'frames_read': int, 'frames_written': int}
    """
    config = config or EVMConfig()
    if use_source_fps:
        config = config.with_sample_rate(source.get_fps())

    pipeline = EVMPipeline(config)
    total = getattr(source, 'frame_count', None) or getattr(source, 'total_frames', None)

    frames_read = 0
    frames_written = 0
    clipped_sum = 0.0

    frames = source if max_frames is None else itertools.islice(source, max_frames)
    for frame in frames:
        magnified, metrics = pipeline.process_frame(frame)
        frames_read += 1

        if magnified is not None:
            sink.write_frame(magnified)
            frames_written += 1
            clipped_sum += metrics['clipped_fraction']

        if progress_every and frames_read % progress_every == 0:
            if total:
                logger.info("[EVMPipeline] Frame %d/%d (%.0f%%) - %s",
                            frames_read, total, 100.0 * frames_read / total,
                            metrics['state'])
            else:
                logger.info("[EVMPipeline] Frame %d - %s", frames_read, metrics['state'])

    if frames_written and clipped_sum / frames_written > CLIP_WARN_FRACTION:
        logger.warning(
            "[EVMPipeline] %.1f%% of output pixels were clipped; consider a lower alpha",
            100.0 * clipped_sum / frames_written
        )
    if frames_written == 0:
        logger.warning(
            "[EVMPipeline] No output: %d frames read, filter needs %d to warm up",
            frames_read, pipeline.temporal_filter.num_taps
        )

    logger.info("[EVMPipeline] Done: %d frames read, %d written", frames_read, frames_written)

    return {'frames_read': frames_read, 'frames_written': frames_written}
