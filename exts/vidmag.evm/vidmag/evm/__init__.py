"""
vidmag EVM (Eulerian Video Magnification)

Amplifies subtle periodic color changes in video via temporal FIR
band-pass filtering over a spatially downsampled stream.
"""

from .errors import (
    EVMError,
    ConfigurationError,
    FilterDesignError,
    ShapeMismatchError,
    VideoIOError
)
from .config import EVMConfig
from .core import (
    FilterDesigner,
    design_bandpass_taps,
    check_symmetric,
    FrameHistory,
    TemporalFilter,
    FilterState,
    AmplificationStage
)
from .core.evm_pipeline import PipelineDriver, EVMPipeline, magnify_video

__version__ = '0.1.0'

__all__ = [
    'EVMError',
    'ConfigurationError',
    'FilterDesignError',
    'ShapeMismatchError',
    'VideoIOError',
    'EVMConfig',
    'FilterDesigner',
    'design_bandpass_taps',
    'check_symmetric',
    'FrameHistory',
    'TemporalFilter',
    'FilterState',
    'AmplificationStage',
    'PipelineDriver',
    'EVMPipeline',
    'magnify_video',
    '__version__'
]
