"""
Video Output

Sinks for magnified frames: an encoded file via OpenCV, or an
in-memory collector.
"""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import cv2

from .errors import VideoIOError

logger = logging.getLogger(__name__)

DEFAULT_FOURCC = 'mp4v'


class FrameSink:
    """Base class for frame consumers."""

    def write_frame(self, frame: np.ndarray):
        """Write one RGB uint8 frame (H, W, 3)."""
        raise NotImplementedError

    def release(self):
        """Flush and release resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class VideoSink(FrameSink):
    """
    Encoded video file.

    The writer is opened on the first frame, once the frame size is known.
    """

    def __init__(self, file_path: str, fps: float, fourcc: str = DEFAULT_FOURCC):
        """
        Args:
            file_path: Output video path
            fps: Output framerate
            fourcc: Four-character codec code (e.g. 'mp4v', 'MJPG')
        """
        if len(fourcc) != 4:
            raise VideoIOError(f"fourcc must be 4 characters, got {fourcc!r}",
                               path=str(file_path))

        self.file_path = str(file_path)
        self.fps = fps
        self.fourcc = fourcc
        self.writer: Optional[cv2.VideoWriter] = None
        self.frames_written = 0

    def _open(self, width: int, height: int):
        parent = Path(self.file_path).parent
        if not parent.exists():
            raise VideoIOError(f"Output directory does not exist: {parent}",
                               path=self.file_path)

        self.writer = cv2.VideoWriter(
            self.file_path,
            cv2.VideoWriter_fourcc(*self.fourcc),
            self.fps,
            (width, height)
        )
        if not self.writer.isOpened():
            self.writer = None
            raise VideoIOError(
                f"Could not open video writer for {self.file_path} "
                f"(fourcc={self.fourcc}, {width}x{height} @ {self.fps:.1f} fps)",
                path=self.file_path
            )

        logger.info("[VideoOutput] Writing %s: %dx%d @ %.1f fps (%s)",
                    self.file_path, width, height, self.fps, self.fourcc)

    def write_frame(self, frame: np.ndarray):
        if self.writer is None:
            self._open(frame.shape[1], frame.shape[0])

        # Convert RGB to BGR
        self.writer.write(cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
        self.frames_written += 1

    def release(self):
        if self.writer is not None:
            self.writer.release()
            self.writer = None
            logger.info("[VideoOutput] Closed %s after %d frames",
                        self.file_path, self.frames_written)


class FrameCollector(FrameSink):
    """Keeps written frames in memory."""

    def __init__(self):
        self.frames: List[np.ndarray] = []

    def write_frame(self, frame: np.ndarray):
        self.frames.append(frame.copy())

    @property
    def frames_written(self) -> int:
        return len(self.frames)
