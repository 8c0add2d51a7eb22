"""Command-line entrypoint for color magnification."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import (
    DEFAULT_ALPHA,
    DEFAULT_CHROMA_ATTENUATION,
    DEFAULT_DTYPE,
    DEFAULT_HIGH_HZ,
    DEFAULT_LOW_HZ,
    DEFAULT_NUM_TAPS,
    DEFAULT_PYRAMID_LEVELS,
    SUPPORTED_DTYPES,
    EVMConfig,
)
from .core.evm_pipeline import magnify_video
from .errors import ConfigurationError, EVMError, VideoIOError
from .video_input import FileVideoSource
from .video_output import DEFAULT_FOURCC, VideoSink

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vidmag',
        description='Eulerian color magnification (temporal FIR band-pass)'
    )
    parser.add_argument('input', help='Input video path')
    parser.add_argument('output', help='Output video path')
    parser.add_argument('--low', type=float, default=DEFAULT_LOW_HZ,
                        help='Lower corner frequency (Hz)')
    parser.add_argument('--high', type=float, default=DEFAULT_HIGH_HZ,
                        help='Upper corner frequency (Hz)')
    parser.add_argument('--alpha', type=float, default=DEFAULT_ALPHA,
                        help='Magnification factor')
    parser.add_argument('--chroma-attenuation', type=float, default=DEFAULT_CHROMA_ATTENUATION,
                        help='Weight of chroma channels relative to luma (0-1)')
    parser.add_argument('--taps', type=int, default=DEFAULT_NUM_TAPS,
                        help='FIR length (odd); output starts after taps-1 frames')
    parser.add_argument('--levels', type=int, default=DEFAULT_PYRAMID_LEVELS,
                        help='Gaussian pyramid levels for downsampling')
    parser.add_argument('--fps', type=float, default=None,
                        help='Sample rate override (defaults to the input framerate)')
    parser.add_argument('--dtype', default=DEFAULT_DTYPE, choices=list(SUPPORTED_DTYPES),
                        help='Working precision')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='Limit number of frames read')
    parser.add_argument('--fourcc', default=DEFAULT_FOURCC,
                        help='Output codec four-character code')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        source = FileVideoSource(args.input)
    except VideoIOError as e:
        logger.error(e.message)
        return 1

    with source:
        fps = args.fps if args.fps is not None else source.get_fps()
        try:
            config = EVMConfig(
                low_hz=args.low,
                high_hz=args.high,
                sample_rate_hz=fps,
                alpha=args.alpha,
                chroma_attenuation=args.chroma_attenuation,
                num_taps=args.taps,
                pyramid_levels=args.levels,
                dtype=args.dtype
            ).validate()
        except ConfigurationError as e:
            logger.error("Invalid configuration (%s): %s", e.parameter, e.message)
            return 2

        try:
            with VideoSink(args.output, source.get_fps(), fourcc=args.fourcc) as sink:
                summary = magnify_video(
                    source, sink, config,
                    max_frames=args.max_frames,
                    use_source_fps=False
                )
        except EVMError as e:
            # I/O failures and mid-stream resolution changes
            logger.error(e.message)
            return 1

    print(f"Magnified {args.input} -> {args.output}. "
          f"Frames read={summary['frames_read']}, written={summary['frames_written']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
