"""Hilbert transform and analytic-signal quantities.

The quadrature component of a real signal is obtained in the Fourier
domain with :func:`~fxspectra.dsp.conv.hilbert_filter`, using the
boundary-padded convolution of :mod:`fxspectra.dsp.conv`. From it the
instantaneous amplitude, phase and frequency are derived.

Phase unwrapping assumes the true phase always advances, i.e. every
sample-to-sample step is taken modulo 2π into ``[0, 2π)``. This holds for
the narrow-band, positive-frequency signals the routines are meant for
and is not a general-purpose unwrapper.
"""

from __future__ import annotations

import numpy as np

from .conv import derivative_filter, fft_filter, filter_length, hilbert_filter, lowpass_filter
from .utils import check_1d_array

_TWO_PI = 2.0 * np.pi


def _check_signal(data) -> np.ndarray:
    data = check_1d_array(data)
    if len(data) == 0:
        raise ValueError("Signal must contain at least one sample")
    return data


def hilbert_transform(data: np.ndarray) -> np.ndarray:
    """FFT-based Hilbert transform of a real signal.

    Args:
        data: Real input signal (1D array, non-empty).

    Returns:
        The quadrature component, same length as ``data``.

    Example:
        >>> t = np.arange(256)
        >>> envelope = np.exp(-(((t - 128) / 30.0) ** 2))
        >>> q = hilbert_transform(envelope * np.cos(0.5 * t))
        >>> bool(np.allclose(q, envelope * np.sin(0.5 * t), atol=1e-3))
        True
    """
    data = _check_signal(data)
    return fft_filter(data, hilbert_filter(filter_length(len(data))))


def hilbert_transform_time(data: np.ndarray) -> np.ndarray:
    """Discrete Hilbert transform computed in the time domain.

    Implements S. Kak, "The discrete Hilbert transform", Proc. IEEE 58
    (1970): even output samples sum the odd input samples and vice versa,
    weighted by ``2 / (pi (k - j))``.
    """
    data = _check_signal(data)
    n = len(data)
    k = np.arange(n)
    out = np.zeros(n, dtype=float)
    odd = k[1::2]
    even = k[0::2]
    for parity, src in ((0, odd), (1, even)):
        rows = k[k % 2 == parity]
        out[rows] = np.sum(data[src][None, :] / (rows[:, None] - src[None, :]), axis=1)
    return out * (2.0 / np.pi)


def analytic_signal(data: np.ndarray) -> np.ndarray:
    """Return ``data + i * hilbert_transform(data)``."""
    data = _check_signal(data)
    return data + 1j * hilbert_transform(data)


def compute_amplitude(data: np.ndarray) -> np.ndarray:
    """Envelope ``sqrt(x^2 + H[x]^2)`` without any smoothing."""
    data = _check_signal(data)
    return np.hypot(hilbert_transform(data), data)


def instantaneous_amplitude(data: np.ndarray, cutoff: float = 0.4) -> np.ndarray:
    """Envelope of a real signal with spurious Nyquist content removed.

    Args:
        data: Real input signal.
        cutoff: Low-pass cutoff in cycles per sample (default: 0.4).

    Returns:
        Low-pass filtered instantaneous amplitude.
    """
    amplitude = compute_amplitude(data)
    return fft_filter(amplitude, lowpass_filter(filter_length(len(amplitude)), cutoff))


def unwrap_phase(phase: np.ndarray) -> np.ndarray:
    """Unwrap a phase sequence assuming it only ever advances.

    Each step ``phase[i] - phase[i-1]`` is reduced modulo 2π into
    ``[0, 2π)`` and accumulated from ``phase[0]``, so the result is
    non-decreasing and no adjacent jump reaches 2π.
    """
    phase = check_1d_array(phase)
    if len(phase) < 2:
        return phase.copy()
    steps = np.mod(np.diff(phase), _TWO_PI)
    # mod rounds tiny negative steps up to exactly 2π
    steps[steps >= _TWO_PI] = 0.0
    out = np.empty_like(phase)
    out[0] = phase[0]
    out[1:] = phase[0] + np.cumsum(steps)
    return out


def instantaneous_phase(data: np.ndarray) -> np.ndarray:
    """Unwrapped phase ``atan2(H[x], x)`` of a real signal."""
    data = _check_signal(data)
    return unwrap_phase(np.arctan2(hilbert_transform(data), data))


def instantaneous_frequency(data: np.ndarray, cutoff: float = 0.4) -> np.ndarray:
    """Instantaneous frequency in cycles per sample.

    The unwrapped phase is differentiated in the Fourier domain and divided
    by 2π. Values above 0.5 are folded back to ``1 - f``, the first and
    last samples are zeroed, and the result is low-pass filtered.

    Args:
        data: Real input signal.
        cutoff: Low-pass cutoff in cycles per sample (default: 0.4).

    Returns:
        Frequency estimate per sample.
    """
    phase = instantaneous_phase(data)
    n = len(phase)
    length = filter_length(n)

    frequency = fft_filter(phase, derivative_filter(length)) / _TWO_PI
    frequency = np.where(frequency > 0.5, 1.0 - frequency, frequency)
    frequency[0] = 0.0
    frequency[-1] = 0.0
    return fft_filter(frequency, lowpass_filter(length, cutoff))
