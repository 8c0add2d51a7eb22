"""
Amplification Stage Tests
"""

import sys
from pathlib import Path

# Add extension to path
ext_dir = Path(__file__).parent.parent / "exts" / "vidmag.evm"
sys.path.insert(0, str(ext_dir))

import numpy as np
import pytest

from vidmag.evm.core.amplification import AmplificationStage
from vidmag.evm.errors import ConfigurationError, ShapeMismatchError


def test_scales_every_channel():
    stage = AmplificationStage(alpha=20.0)
    frame = np.arange(12, dtype=np.float32).reshape(2, 2, 3)

    out = stage.apply(frame)

    np.testing.assert_allclose(out, frame * 20.0)
    assert out.dtype == np.float32


def test_returns_new_array():
    stage = AmplificationStage(alpha=1.0)
    frame = np.ones((1, 1, 3), dtype=np.float64)

    out = stage.apply(frame)
    out[:] = 0.0

    assert np.all(frame == 1.0)


def test_integer_frames_are_promoted():
    stage = AmplificationStage(alpha=0.5)

    out = stage.apply(np.full((1, 1, 3), 3, dtype=np.int32))

    assert np.issubdtype(out.dtype, np.floating)
    np.testing.assert_allclose(out, 1.5)


def test_rejects_two_dimensional_frame():
    stage = AmplificationStage(alpha=2.0)

    with pytest.raises(ShapeMismatchError):
        stage.apply(np.zeros((4, 4)))


def test_rejects_wrong_channel_count():
    stage = AmplificationStage(alpha=2.0, num_channels=3)

    with pytest.raises(ShapeMismatchError, match="channels"):
        stage.apply(np.zeros((4, 4, 1)))


@pytest.mark.parametrize("alpha", [float('inf'), float('nan')])
def test_rejects_non_finite_alpha(alpha):
    with pytest.raises(ConfigurationError) as excinfo:
        AmplificationStage(alpha)

    assert excinfo.value.parameter == 'alpha'
