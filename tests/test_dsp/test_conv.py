"""Tests for dsp.conv module."""

import numpy as np
import pytest

from fxspectra.dsp.conv import (
    derivative_filter,
    fft_filter,
    filter_length,
    hilbert_filter,
    identity_filter,
    lowpass_filter,
)


def test_filter_length():
    assert filter_length(100) == 512
    assert filter_length(100, cyclic=True) == 128
    assert filter_length(64, cyclic=True) == 64


def test_identity_filter_reproduces_input(rng):
    """Filtering with the all-pass filter returns the input."""
    x = rng.standard_normal(100)
    y = fft_filter(x, identity_filter(filter_length(100)))
    np.testing.assert_allclose(y, x, atol=1e-12)

    y = fft_filter(x, identity_filter(filter_length(100, cyclic=True)), cyclic=True)
    np.testing.assert_allclose(y, x, atol=1e-12)


def test_fft_filter_does_not_modify_input(rng):
    x = rng.standard_normal(50)
    original = x.copy()
    fft_filter(x, hilbert_filter(filter_length(50)))
    np.testing.assert_array_equal(x, original)


def test_hilbert_filter_bins():
    h = hilbert_filter(8)
    np.testing.assert_array_equal(h, [0, -1j, -1j, -1j, 0])


def test_hilbert_filter_turns_cosine_into_sine():
    t = np.arange(64)
    omega = 2.0 * np.pi * 4 / 64
    y = fft_filter(np.cos(omega * t), hilbert_filter(64), cyclic=True)
    np.testing.assert_allclose(y, np.sin(omega * t), atol=1e-10)


def test_derivative_filter():
    h = derivative_filter(64)
    assert len(h) == 33
    assert h[0] == 0
    assert h[-1] == 0
    np.testing.assert_array_equal(h.real, np.zeros(33))

    t = np.arange(64)
    omega = 2.0 * np.pi * 4 / 64
    y = fft_filter(np.sin(omega * t), h, cyclic=True)
    taper = np.cos(np.pi * 4 / 63)
    np.testing.assert_allclose(y, taper * omega * np.cos(omega * t), atol=1e-10)


def test_lowpass_filter():
    h = lowpass_filter(64)
    assert h[0] == 1.0
    assert np.all(np.diff(h.real) < 0)
    np.testing.assert_array_equal(h.imag, np.zeros(33))

    # Cutoff is limited to Nyquist
    np.testing.assert_array_equal(lowpass_filter(64, 2.0), lowpass_filter(64, 0.5))

    with pytest.raises(ValueError, match="cutoff must be positive"):
        lowpass_filter(64, 0.0)


def test_lowpass_keeps_constant_signal():
    x = np.full(40, 3.0)
    y = fft_filter(x, lowpass_filter(filter_length(40)))
    np.testing.assert_allclose(y, x, atol=1e-12)


def test_filter_length_validation():
    for make in (identity_filter, hilbert_filter, derivative_filter, lowpass_filter):
        with pytest.raises(ValueError, match="power of two"):
            make(48)
        with pytest.raises(ValueError, match="power of two"):
            make(0)


def test_fft_filter_errors():
    with pytest.raises(ValueError, match="empty"):
        fft_filter(np.array([]), identity_filter(1))
    with pytest.raises(ValueError, match="Filter has 3 bins"):
        fft_filter(np.ones(10), np.ones(3))
