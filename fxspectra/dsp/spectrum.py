"""Magnitude/phase spectra and sub-bin peak interpolation.

The spectrum helpers take complex FFT bins (e.g. from ``np.fft.rfft``) and
turn them into normalized magnitude or phase spectra. The DC and Nyquist
bins are the least reliable part of a finite-length spectrum, so by
default they are replaced by their neighbours.

The interpolators refine the position of a peak found at integer bin
``index`` of a magnitude spectrum and return it as a normalized frequency
in ``[0, 0.5]``.
"""

from typing import Optional

import numpy as np

from .utils import check_1d_array


def frequency_scale(n: int) -> np.ndarray:
    """Equidistant normalized frequency axis ``i * 0.5 / n`` for ``n`` bins."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return np.arange(n, dtype=float) * (0.5 / n) if n else np.zeros(0)


def magnitude_spectrum(
    bins: np.ndarray,
    truncate_dc_nyquist: bool = True,
    db: bool = False,
    norm: Optional[float] = None,
) -> np.ndarray:
    """Normalized magnitude of complex FFT bins.

    Args:
        bins: Complex FFT values (1D).
        truncate_dc_nyquist: If True, replace the first and last output
            value by their neighbours. If False, all bins keep their
            true magnitude.
        db: If True, return ``20 * log10(magnitude)``.
        norm: Divisor applied to ``|bins|`` (default: ``len(bins)``).

    Returns:
        Real array with one value per bin.

    Raises:
        ValueError: If bins is not 1D or norm is not positive.
    """
    bins = np.asarray(bins, dtype=complex)
    if bins.ndim != 1:
        raise ValueError(f"Expected 1D array, got {bins.ndim}D array")
    if norm is None:
        norm = float(len(bins))
    if norm <= 0:
        raise ValueError(f"norm must be positive, got {norm}")

    magnitude = np.abs(bins) / norm
    if db:
        with np.errstate(divide="ignore"):
            magnitude = 20.0 * np.log10(magnitude)
    if truncate_dc_nyquist and len(magnitude) >= 3:
        magnitude[0] = magnitude[1]
        magnitude[-1] = magnitude[-2]
    return magnitude


def phase_spectrum(bins: np.ndarray, truncate_dc_nyquist: bool = True) -> np.ndarray:
    """Phase ``atan2(Im, Re)`` in ``[-pi, pi]`` of complex FFT bins."""
    bins = np.asarray(bins, dtype=complex)
    phase = np.angle(bins)
    if truncate_dc_nyquist and len(phase) >= 3:
        phase[0] = phase[1]
        phase[-1] = phase[-2]
    return phase


def _neighbours(data: np.ndarray, index: int):
    data = check_1d_array(data)
    if not 0 <= index < len(data):
        raise ValueError(f"index {index} out of range for {len(data)} bins")
    inner = 0 < index < len(data) - 1
    if not inner:
        return data, None
    return data, (data[index - 1], data[index], data[index + 1])


def interpolate_bary_centre(data: np.ndarray, index: int) -> float:
    """Amplitude-weighted centre of the three bins around ``index``."""
    data, nb = _neighbours(data, index)
    resolution = 1.0 / (2.0 * len(data))
    if nb is None:
        return index * resolution
    left, center, right = nb
    total = left + center + right
    if total == 0:
        return index * resolution
    centre = ((index - 1) * left + index * center + (index + 1) * right) / total
    return float(centre * resolution)


def interpolate_parabolic(data: np.ndarray, index: int) -> float:
    """Vertex of the parabola through the three bins around ``index``."""
    data, nb = _neighbours(data, index)
    resolution = 1.0 / (2.0 * len(data))
    if nb is None:
        return index * resolution
    left, center, right = nb
    denom = 2.0 * center - left - right
    if denom == 0:
        return index * resolution
    return float((index + 0.5 * (right - left) / denom) * resolution)


def interpolate_gaussian(data: np.ndarray, index: int) -> float:
    """Peak of the Gaussian through the three bins around ``index``.

    Requires strictly positive bins; otherwise the integer position is
    returned.
    """
    data, nb = _neighbours(data, index)
    resolution = 1.0 / (2.0 * len(data))
    if nb is None:
        return index * resolution
    left, center, right = nb
    if min(left, center, right) <= 0:
        return index * resolution
    denom = np.log(center**2 / (left * right))
    if denom == 0:
        return index * resolution
    return float((index + 0.5 * np.log(right / left) / denom) * resolution)


def interpolate_naff(data: np.ndarray, index: int) -> float:
    """NAFF/SUSSIX-style interpolation for a Hann-free FFT peak."""
    data, nb = _neighbours(data, index)
    position = index / (2.0 * len(data))
    if nb is None:
        return position
    left, center, right = nb
    pin = np.pi / len(data)
    if left < right:
        return float(position + np.arctan2(right * np.sin(pin), center + right * np.cos(pin)) / np.pi)
    return float(position - np.arctan2(left * np.sin(pin), center + left * np.cos(pin)) / np.pi)
