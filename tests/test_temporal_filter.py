"""
Temporal Filter Tests

Warm-up, steady-state throughput, bounded memory, linearity,
DC rejection and the chroma attenuation policy.
"""

import sys
from pathlib import Path

# Add extension to path
ext_dir = Path(__file__).parent.parent / "exts" / "vidmag.evm"
sys.path.insert(0, str(ext_dir))

import numpy as np
import pytest
from scipy import signal

from vidmag.evm.core.fir_design import design_bandpass_taps
from vidmag.evm.core.temporal_filter import FilterState, TemporalFilter
from vidmag.evm.errors import ConfigurationError, ShapeMismatchError


def random_frames(count, shape=(4, 5, 3), seed=0):
    rng = np.random.default_rng(seed)
    return [rng.random(shape, dtype=np.float32) for _ in range(count)]


def test_concrete_scenario_matches_reference_fir():
    """N=5, band [0.1, 0.4] at sr=1, single-channel 1x1 frames."""
    values = np.array([1, 0, 1, 0, 1, 0, 1, 0, 1], dtype=np.float64)
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5, chroma_attenuation=1.0)
    taps = design_bandpass_taps(0.1, 0.4, 1.0, 5)

    outputs = []
    for call, v in enumerate(values, start=1):
        out = filt.filter(np.full((1, 1, 1), v))
        if call <= 4:
            assert out is None
        else:
            assert out is not None
            assert out.shape == (1, 1, 1)
            outputs.append(out[0, 0, 0])

    # Call 5 pairs taps with [v5, v4, v3, v2, v1]
    assert outputs[0] == pytest.approx(np.dot(taps, values[4::-1]), abs=1e-6)

    reference = signal.lfilter(taps, [1.0], values)[4:]
    np.testing.assert_allclose(outputs, reference, atol=1e-6)


@pytest.mark.parametrize("n_taps", [3, 5, 31, 119])
def test_warm_up_length(n_taps):
    filt = TemporalFilter.from_band(0.5, 3.0, 30.0, n_taps)
    frames = random_frames(n_taps, shape=(2, 2, 3))

    for frame in frames[:-1]:
        assert filt.filter(frame) is None
        assert filt.state is FilterState.WARMING

    assert filt.filter(frames[-1]) is not None
    assert filt.state is FilterState.STEADY
    assert filt.latency == n_taps - 1


def test_steady_state_one_output_per_input():
    filt = TemporalFilter.from_band(0.5, 3.0, 30.0, 7)
    frames = random_frames(60, shape=(2, 2, 3))

    results = [filt.filter(f) for f in frames]

    assert all(r is None for r in results[:6])
    assert all(r is not None for r in results[6:])
    assert filt.frames_seen == 60


def test_memory_is_bounded():
    filt = TemporalFilter.from_band(0.5, 3.0, 30.0, 119)
    frame = np.zeros((1, 1, 3), dtype=np.float32)

    for _ in range(10000):
        filt.filter(frame)
        assert filt.history_size <= 119

    assert filt.history_size == 119


def test_linearity():
    frames = [f.astype(np.float64) for f in random_frames(20, seed=3)]
    k = 3.7

    plain = TemporalFilter.from_band(2.0, 6.0, 30.0, 9, chroma_attenuation=0.3, dtype=np.float64)
    scaled = TemporalFilter.from_band(2.0, 6.0, 30.0, 9, chroma_attenuation=0.3, dtype=np.float64)

    for frame in frames:
        a = plain.filter(frame)
        b = scaled.filter(frame * k)
        if a is None:
            assert b is None
            continue
        np.testing.assert_allclose(b, a * k, rtol=1e-9, atol=1e-12)


def test_constant_input_is_rejected():
    filt = TemporalFilter.from_band(3.0, 9.0, 30.0, 63)
    frame = np.full((3, 3, 3), 0.8, dtype=np.float32)

    out = None
    for _ in range(80):
        out = filt.filter(frame)

    assert out is not None
    assert np.max(np.abs(out)) < 1e-3


def test_in_band_sinusoid_passes_with_group_delay():
    sr = 30.0
    filt = TemporalFilter.from_band(3.0, 9.0, sr, 63, dtype=np.float64)
    t = np.arange(200) / sr
    x = np.sin(2 * np.pi * 6.0 * t)

    ys = []
    for v in x:
        out = filt.filter(np.full((1, 1, 1), v))
        ys.append(None if out is None else out[0, 0, 0])

    delay = filt.group_delay
    assert delay == 31
    for n in range(62, 200):
        assert ys[n] == pytest.approx(x[n - delay], abs=0.02)


def test_out_of_band_sinusoid_is_attenuated():
    sr = 30.0
    filt = TemporalFilter.from_band(3.0, 9.0, sr, 63)
    t = np.arange(200) / sr
    x = np.sin(2 * np.pi * 13.5 * t)

    peak = 0.0
    for v in x:
        out = filt.filter(np.full((1, 1, 1), v, dtype=np.float32))
        if out is not None:
            peak = max(peak, abs(float(out[0, 0, 0])))

    assert peak < 0.05


def test_chroma_attenuation_halves_chroma():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5, chroma_attenuation=0.5)
    rng = np.random.default_rng(7)

    ready = 0
    for _ in range(20):
        luma = rng.random((3, 4, 1), dtype=np.float32)
        frame = np.repeat(luma, 3, axis=2)
        out = filt.filter(frame)
        if out is None:
            continue
        ready += 1
        np.testing.assert_allclose(out[..., 1], 0.5 * out[..., 0], rtol=1e-6, atol=1e-7)
        np.testing.assert_allclose(out[..., 2], 0.5 * out[..., 0], rtol=1e-6, atol=1e-7)

    assert ready == 16


def test_input_is_copied():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 3, dtype=np.float64)
    buf = np.ones((1, 1, 1))

    filt.filter(buf)
    buf[:] = 5.0
    filt.filter(buf)
    buf[:] = 2.0
    out = filt.filter(buf)

    taps = filt.taps
    expected = taps[0] * 2.0 + taps[1] * 5.0 + taps[2] * 1.0
    assert out[0, 0, 0] == pytest.approx(expected)


def test_outputs_are_fresh_buffers():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 3)
    frames = random_frames(5, shape=(2, 2, 3))

    outs = [filt.filter(f) for f in frames]
    snapshot = outs[3].copy()
    outs[2][:] = 1e6

    np.testing.assert_array_equal(outs[3], snapshot)
    assert outs[2] is not outs[3]


def test_output_dtype_follows_working_precision():
    for dtype in (np.float32, np.float64):
        filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 3, dtype=dtype)
        out = None
        for frame in random_frames(3, shape=(2, 2, 3)):
            out = filt.filter(frame)
        assert out.dtype == dtype


def test_shape_mismatch_is_reported_and_state_kept():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5)
    filt.filter(np.zeros((4, 5, 3), dtype=np.float32))
    filt.filter(np.zeros((4, 5, 3), dtype=np.float32))

    with pytest.raises(ShapeMismatchError) as excinfo:
        filt.filter(np.zeros((4, 6, 3), dtype=np.float32))

    err = excinfo.value
    assert err.expected == (4, 5, 3)
    assert err.actual == (4, 6, 3)
    assert "width" in err.message
    assert filt.history_size == 2
    assert filt.frames_seen == 2

    # Still usable with the established shape
    filt.filter(np.zeros((4, 5, 3), dtype=np.float32))
    assert filt.history_size == 3


def test_channel_mismatch_names_channels():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5)
    filt.filter(np.zeros((2, 2, 3), dtype=np.float32))

    with pytest.raises(ShapeMismatchError, match="channels"):
        filt.filter(np.zeros((2, 2, 1), dtype=np.float32))


def test_rejects_two_dimensional_frame():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5)

    with pytest.raises(ShapeMismatchError):
        filt.filter(np.zeros((2, 2), dtype=np.float32))
    assert filt.history_size == 0


def test_rejects_channelless_frame_without_state_change():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 3)

    with pytest.raises(ShapeMismatchError, match="channels"):
        filt.filter(np.zeros((2, 2, 0), dtype=np.float32))
    assert filt.history_size == 0
    assert filt.frame_shape is None
    assert filt.frames_seen == 0

    # A valid stream still works afterwards
    outputs = [filt.filter(f) for f in random_frames(3, shape=(2, 2, 3))]
    assert outputs[:2] == [None, None]
    assert outputs[2].shape == (2, 2, 3)


def test_reset_returns_to_warming():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 3)
    for frame in random_frames(4, shape=(2, 2, 3)):
        filt.filter(frame)
    assert filt.state is FilterState.STEADY

    filt.reset()

    assert filt.state is FilterState.WARMING
    assert filt.frame_shape is None
    assert filt.frames_seen == 0
    # A new shape is accepted after reset
    assert filt.filter(np.zeros((3, 3, 3), dtype=np.float32)) is None


def test_taps_are_read_only():
    filt = TemporalFilter.from_band(0.1, 0.4, 1.0, 5)

    with pytest.raises(ValueError):
        filt.taps[0] = 1.0


def test_rejects_even_length_taps():
    with pytest.raises(ConfigurationError) as excinfo:
        TemporalFilter(np.ones(4))

    assert excinfo.value.parameter == 'taps'


def test_rejects_half_precision():
    with pytest.raises(ConfigurationError) as excinfo:
        TemporalFilter(np.ones(3), dtype=np.float16)

    assert excinfo.value.parameter == 'dtype'


def test_rejects_negative_chroma_attenuation():
    with pytest.raises(ConfigurationError) as excinfo:
        TemporalFilter(np.ones(3), chroma_attenuation=-0.5)

    assert excinfo.value.parameter == 'chroma_attenuation'


def test_from_band_rejects_invalid_band():
    with pytest.raises(ConfigurationError) as excinfo:
        TemporalFilter.from_band(1.0, 20.0, 30.0, 11)

    assert excinfo.value.parameter == 'high_hz'
