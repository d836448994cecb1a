"""Tests for spectra.markov module."""

import numpy as np
import pytest

from fxspectra.spectra.markov import smooth_markov


def _peak(n=101, center=50, sigma=5.0, height=1000.0, baseline=10.0):
    i = np.arange(n, dtype=float)
    return baseline + height * np.exp(-0.5 * ((i - center) / sigma) ** 2)


@pytest.mark.parametrize("window", [1, 3, 7])
def test_area_is_preserved(window, rng):
    y = _peak() + rng.poisson(5.0, 101)
    result = smooth_markov(y, window)
    assert result.shape == y.shape
    assert result.sum() == pytest.approx(y.sum(), rel=1e-9)
    assert np.all(result > 0)


def test_peak_position_is_kept():
    result = smooth_markov(_peak(), 3)
    assert abs(int(np.argmax(result)) - 50) <= 1


def test_constant_spectrum_is_unchanged():
    y = np.full(30, 4.0)
    np.testing.assert_allclose(smooth_markov(y, 3), y)


def test_spectrum_without_positive_values():
    y = np.zeros(10)
    result = smooth_markov(y, 3)
    np.testing.assert_array_equal(result, y)
    assert result is not y


def test_length_and_input_untouched():
    y = _peak()
    original = y.copy()
    result = smooth_markov(y, 3, length=60)
    assert len(result) == 60
    assert result.sum() == pytest.approx(y[:60].sum())
    np.testing.assert_array_equal(y, original)


def test_invalid_window():
    with pytest.raises(ValueError, match="averaging_window must be positive"):
        smooth_markov(np.ones(10), 0)
