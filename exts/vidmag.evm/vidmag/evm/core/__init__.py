"""
Temporal filtering and amplification engine.
"""

from .fir_design import FilterDesigner, design_bandpass_taps, check_symmetric
from .frame_history import FrameHistory
from .temporal_filter import TemporalFilter, FilterState
from .amplification import AmplificationStage

__all__ = [
    'FilterDesigner',
    'design_bandpass_taps',
    'check_symmetric',
    'FrameHistory',
    'TemporalFilter',
    'FilterState',
    'AmplificationStage'
]
