"""Tests for dsp.hilbert module."""

import numpy as np
import pytest

from fxspectra.dsp.hilbert import (
    analytic_signal,
    compute_amplitude,
    hilbert_transform,
    hilbert_transform_time,
    instantaneous_amplitude,
    instantaneous_frequency,
    instantaneous_phase,
    unwrap_phase,
)

OMEGA = 0.5


@pytest.fixture
def tone():
    """Gaussian-windowed tone that vanishes at both ends."""
    t = np.arange(256)
    envelope = np.exp(-(((t - 128) / 30.0) ** 2))
    return t, envelope, envelope * np.cos(OMEGA * t)


def test_hilbert_transform_of_windowed_tone(tone):
    t, envelope, x = tone
    np.testing.assert_allclose(hilbert_transform(x), envelope * np.sin(OMEGA * t), atol=1e-3)


def test_analytic_signal(tone):
    t, envelope, x = tone
    z = analytic_signal(x)
    assert np.iscomplexobj(z)
    np.testing.assert_array_equal(z.real, x)
    np.testing.assert_allclose(z, envelope * np.exp(1j * OMEGA * t), atol=1e-3)


def test_compute_amplitude(tone):
    _, envelope, x = tone
    np.testing.assert_allclose(compute_amplitude(x), envelope, atol=1e-3)


def test_instantaneous_amplitude(tone):
    _, envelope, x = tone
    amplitude = instantaneous_amplitude(x)
    assert amplitude.shape == x.shape
    np.testing.assert_allclose(amplitude, envelope, atol=0.05)


def test_instantaneous_phase_is_unwrapped(tone):
    _, _, x = tone
    phase = instantaneous_phase(x)
    steps = np.diff(phase)
    assert np.all(steps >= 0)
    assert np.all(steps < 2.0 * np.pi)
    np.testing.assert_allclose(steps[98:158], OMEGA, atol=1e-3)


def test_instantaneous_frequency(tone):
    _, _, x = tone
    frequency = instantaneous_frequency(x)
    assert frequency.shape == x.shape
    middle = frequency[96:160]
    assert np.median(middle) == pytest.approx(OMEGA / (2.0 * np.pi), abs=0.01)


def test_unwrap_phase():
    t = np.arange(100)
    wrapped = np.angle(np.exp(1j * 0.3 * t))
    np.testing.assert_allclose(unwrap_phase(wrapped), 0.3 * t, atol=1e-9)

    # Steps are always taken forward
    unwrapped = unwrap_phase(np.array([0.0, -0.5]))
    assert unwrapped[1] == pytest.approx(2.0 * np.pi - 0.5)

    np.testing.assert_array_equal(unwrap_phase(np.array([1.5])), [1.5])


def test_hilbert_transform_time_impulse():
    x = np.zeros(6)
    x[0] = 1.0
    expected = np.array([0.0, 1.0, 0.0, 1.0 / 3.0, 0.0, 1.0 / 5.0]) * 2.0 / np.pi
    np.testing.assert_allclose(hilbert_transform_time(x), expected, atol=1e-15)


def test_hilbert_transform_time_odd_length():
    x = np.zeros(5)
    x[4] = 1.0
    expected = np.array([0.0, -1.0 / 3.0, 0.0, -1.0, 0.0]) * 2.0 / np.pi
    np.testing.assert_allclose(hilbert_transform_time(x), expected, atol=1e-15)


def test_empty_signal_rejected():
    for func in (hilbert_transform, hilbert_transform_time, analytic_signal, compute_amplitude):
        with pytest.raises(ValueError, match="at least one sample"):
            func(np.array([]))
