"""
Video Input Management

Handles video decoding from files and synthetic test sequences.
Provides a unified interface for different video sources.
"""

import logging
from typing import Iterator, Optional, Tuple

import numpy as np
import cv2

from .errors import VideoIOError

logger = logging.getLogger(__name__)

FALLBACK_FPS = 30.0


class VideoSource:
    """Base class for video sources."""

    def read_frame(self) -> Optional[np.ndarray]:
        """Read next frame (H, W, 3) RGB uint8. Returns None if no more frames."""
        raise NotImplementedError

    def get_fps(self) -> float:
        """Get video framerate."""
        raise NotImplementedError

    def get_frame_size(self) -> Tuple[int, int]:
        """Get (width, height)."""
        raise NotImplementedError

    def release(self):
        """Release resources."""
        pass

    def reset(self):
        """Reset to beginning."""
        pass

    def __iter__(self) -> Iterator[np.ndarray]:
        while True:
            frame = self.read_frame()
            if frame is None:
                return
            yield frame

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class FileVideoSource(VideoSource):
    """Video from file."""

    def __init__(self, file_path: str):
        """
        Initialize file video source.

        Args:
            file_path: Path to video file
        """
        self.file_path = str(file_path)
        self.cap = cv2.VideoCapture(self.file_path)

        if not self.cap.isOpened():
            raise VideoIOError(f"Could not open video file: {self.file_path}",
                               path=self.file_path)

        self.fps = self.cap.get(cv2.CAP_PROP_FPS)
        if not self.fps or self.fps <= 0:
            logger.warning("[VideoInput] %s reports no framerate, assuming %.1f fps",
                           self.file_path, FALLBACK_FPS)
            self.fps = FALLBACK_FPS

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.frame_count = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))

        logger.info("[VideoInput] Opened %s: %dx%d @ %.1f fps, %d frames",
                    self.file_path, self.width, self.height, self.fps, self.frame_count)

    def read_frame(self) -> Optional[np.ndarray]:
        """Read next frame."""
        ret, frame = self.cap.read()
        if not ret:
            return None

        # Convert BGR to RGB
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def get_fps(self) -> float:
        return self.fps

    def get_frame_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def release(self):
        """Release video capture."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("[VideoInput] Released %s", self.file_path)

    def reset(self):
        """Reset to beginning."""
        self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)


class SyntheticVideoSource(VideoSource):
    """
    Synthetic video for testing.

    Generates a flat gray frame whose center patch is tinted by a
    sinusoidal color change, like skin flushing with the pulse.
    """

    def __init__(
        self,
        width: int = 64,
        height: int = 48,
        fps: float = 30.0,
        duration: float = 10.0,
        pulse_freq: float = 1.0,
        amplitude: float = 2.0,
        noise_level: float = 0.0,
        seed: Optional[int] = None
    ):
        """
        Initialize synthetic video source.

        Args:
            width: Frame width
            height: Frame height
            fps: Framerate
            duration: Total duration (seconds)
            pulse_freq: Frequency of the color change (Hz)
            amplitude: Peak change of the red channel (gray levels)
            noise_level: Max uniform noise (gray levels), 0 for none
            seed: Seed for the noise generator
        """
        self.width = width
        self.height = height
        self.fps = fps
        self.duration = duration
        self.pulse_freq = pulse_freq
        self.amplitude = amplitude
        self.noise_level = noise_level
        self.seed = seed

        self.total_frames = int(round(fps * duration))
        self.current_frame = 0
        self._rng = np.random.default_rng(seed)

        logger.info("[VideoInput] Created synthetic video: %dx%d @ %.1f fps, "
                    "%d frames, pulse=%.1f BPM",
                    width, height, fps, self.total_frames, pulse_freq * 60)

    def read_frame(self) -> Optional[np.ndarray]:
        """Generate next synthetic frame."""
        if self.current_frame >= self.total_frames:
            return None

        t = self.current_frame / self.fps
        pulse = np.sin(2 * np.pi * self.pulse_freq * t)

        frame = np.full((self.height, self.width, 3), 128.0, dtype=np.float32)

        # Tint center region: red up, green slightly down
        h_start, h_end = self.height // 3, 2 * self.height // 3
        w_start, w_end = self.width // 3, 2 * self.width // 3
        frame[h_start:h_end, w_start:w_end, 0] += pulse * self.amplitude
        frame[h_start:h_end, w_start:w_end, 1] -= pulse * self.amplitude * 0.5

        if self.noise_level > 0:
            frame += self._rng.uniform(-self.noise_level, self.noise_level, frame.shape)

        self.current_frame += 1

        return np.clip(np.rint(frame), 0, 255).astype(np.uint8)

    def get_fps(self) -> float:
        return self.fps

    def get_frame_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def reset(self):
        """Reset to beginning."""
        self.current_frame = 0
        self._rng = np.random.default_rng(self.seed)
