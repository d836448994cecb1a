"""Tests for dsp.spectrum module."""

import numpy as np
import pytest

from fxspectra.dsp.spectrum import (
    frequency_scale,
    interpolate_bary_centre,
    interpolate_gaussian,
    interpolate_naff,
    interpolate_parabolic,
    magnitude_spectrum,
    phase_spectrum,
)


def test_frequency_scale():
    np.testing.assert_allclose(frequency_scale(4), [0.0, 0.125, 0.25, 0.375])
    assert len(frequency_scale(0)) == 0
    with pytest.raises(ValueError):
        frequency_scale(-1)


def test_magnitude_spectrum():
    bins = np.array([1.0, 2.0j, -3.0, 4.0])
    np.testing.assert_allclose(
        magnitude_spectrum(bins, truncate_dc_nyquist=False), [0.25, 0.5, 0.75, 1.0]
    )
    # DC and Nyquist take the value of their neighbours
    np.testing.assert_allclose(magnitude_spectrum(bins), [0.5, 0.5, 0.75, 0.75])
    np.testing.assert_allclose(
        magnitude_spectrum(bins, truncate_dc_nyquist=False, norm=1.0), [1.0, 2.0, 3.0, 4.0]
    )


def test_magnitude_spectrum_db():
    bins = np.array([10.0, 100.0, 1000.0])
    np.testing.assert_allclose(
        magnitude_spectrum(bins, truncate_dc_nyquist=False, db=True, norm=1.0),
        [20.0, 40.0, 60.0],
    )


def test_magnitude_spectrum_errors():
    with pytest.raises(ValueError, match="norm must be positive"):
        magnitude_spectrum(np.ones(4), norm=0.0)
    with pytest.raises(ValueError, match="Expected 1D"):
        magnitude_spectrum(np.ones((2, 2)))


def test_phase_spectrum():
    bins = np.array([1.0, 1.0j, -1.0, -1.0j])
    np.testing.assert_allclose(
        phase_spectrum(bins, truncate_dc_nyquist=False), [0.0, np.pi / 2, np.pi, -np.pi / 2]
    )
    np.testing.assert_allclose(phase_spectrum(bins), [np.pi / 2, np.pi / 2, np.pi, np.pi])


def test_interpolate_parabolic_recovers_vertex():
    i = np.arange(5, dtype=float)
    data = 10.0 - (i - 2.3) ** 2
    assert interpolate_parabolic(data, 2) == pytest.approx(0.23)


def test_interpolate_gaussian_recovers_centre():
    i = np.arange(5, dtype=float)
    data = np.exp(-0.5 * (i - 2.3) ** 2)
    assert interpolate_gaussian(data, 2) == pytest.approx(0.23)


def test_interpolate_bary_centre():
    assert interpolate_bary_centre(np.array([1.0, 2.0, 1.0]), 1) == pytest.approx(1.0 / 6.0)
    assert interpolate_bary_centre(np.array([0.0, 1.0, 1.0, 0.0]), 1) == pytest.approx(1.5 / 8.0)


def test_interpolate_naff_stays_within_one_bin():
    data = np.array([0.1, 0.5, 1.0, 0.8, 0.2, 0.1, 0.0, 0.0])
    position = interpolate_naff(data, 2)
    resolution = 1.0 / (2.0 * len(data))
    assert 2 * resolution < position < 3 * resolution


def test_interpolators_at_edges():
    data = np.array([3.0, 2.0, 1.0, 0.5])
    for func in (interpolate_bary_centre, interpolate_parabolic, interpolate_gaussian, interpolate_naff):
        assert func(data, 0) == 0.0
        assert func(data, 3) == pytest.approx(3.0 / 8.0)
        with pytest.raises(ValueError, match="out of range"):
            func(data, 4)


def test_interpolate_gaussian_needs_positive_bins():
    assert interpolate_gaussian(np.array([0.0, 1.0, 0.5]), 1) == pytest.approx(1.0 / 6.0)
