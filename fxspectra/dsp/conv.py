"""FFT-domain filtering.

Filters are given as complex transfer functions sampled on the ``rfft``
grid of an FFT of length ``L`` (``L // 2 + 1`` bins). ``fft_filter``
multiplies the spectrum of the data by such a filter and transforms back.

Non-cyclic filtering embeds the data in a buffer three times its length
and pads both sides with the boundary samples (zero-order hold), which
keeps wrap-around artefacts away from the returned region.
"""

from typing import Tuple

import numpy as np

from .utils import check_1d_array, is_pow2, next_pow2


def filter_length(n: int, cyclic: bool = False) -> int:
    """Return the FFT length ``fft_filter`` uses for ``n`` samples.

    Args:
        n: Number of data samples.
        cyclic: Whether cyclic boundaries are requested.

    Returns:
        ``next_pow2(n)`` for cyclic, ``next_pow2(3 * n)`` otherwise.
    """
    return next_pow2(n if cyclic else 3 * n)


def _check_filter_length(length: int, name: str) -> None:
    if length <= 0 or not is_pow2(length):
        raise ValueError(
            f"{name} length must be a positive power of two, got {length}"
        )


def _frequencies(length: int) -> np.ndarray:
    # bin index k for k = 0 .. L/2
    return np.arange(length // 2 + 1, dtype=float)


def identity_filter(length: int) -> np.ndarray:
    """Return the all-pass filter (unit response on every bin)."""
    _check_filter_length(length, "Identity filter")
    return np.ones(length // 2 + 1, dtype=complex)


def hilbert_filter(length: int) -> np.ndarray:
    """Return the Hilbert (90 degree phase shift) filter.

    ``H[k] = -i`` for positive frequencies, with the DC and Nyquist bins
    set to zero.

    Args:
        length: FFT length (power of two).

    Returns:
        Complex array of ``length // 2 + 1`` bins.

    Raises:
        ValueError: If length is not a positive power of two.
    """
    _check_filter_length(length, "Hilbert filter")
    h = np.full(length // 2 + 1, -1j, dtype=complex)
    h[0] = 0.0
    h[-1] = 0.0
    return h


def derivative_filter(length: int) -> np.ndarray:
    """Return a tapered differentiation filter.

    ``H[k] = i * cos(pi k / (L - 1)) * 2 pi k / L``: the ideal ``i omega``
    derivative response rolled off towards Nyquist, where it is zero.

    Raises:
        ValueError: If length is not a positive power of two.
    """
    _check_filter_length(length, "Derivative filter")
    k = _frequencies(length)
    window = np.cos(np.pi * k / (length - 1)) if length > 1 else np.ones_like(k)
    h = 1j * window * 2.0 * np.pi * k / length
    h[-1] = 0.0
    return h


def lowpass_filter(length: int, cutoff: float = 0.4) -> np.ndarray:
    """Return a zero-phase low-pass filter.

    The response is ``1 / (1 + (2 pi f / cutoff)^2)`` with ``f = k / L``
    in cycles per sample, i.e. the squared magnitude of a first-order
    low-pass.

    Args:
        length: FFT length (power of two).
        cutoff: Cutoff in cycles per sample, clipped to 0.5.

    Raises:
        ValueError: If length is invalid or cutoff is not positive.
    """
    _check_filter_length(length, "Low-pass filter")
    if cutoff <= 0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")
    cutoff = min(cutoff, 0.5)
    f = _frequencies(length) / length
    h = 1.0 / (1.0 + (2.0 * np.pi * f / cutoff) ** 2)
    return h.astype(complex)


def _embed(data: np.ndarray, length: int, cyclic: bool) -> Tuple[np.ndarray, int]:
    n = len(data)
    buf = np.zeros(length, dtype=float)
    if cyclic:
        buf[:n] = data
        return buf, 0
    offset = length // 3 - 1
    buf[:offset] = data[0]
    buf[offset : offset + n] = data
    buf[offset + n :] = data[-1]
    return buf, offset


def fft_filter(data: np.ndarray, filt: np.ndarray, cyclic: bool = False) -> np.ndarray:
    """Apply a frequency-domain filter to a real signal.

    Args:
        data: Input signal (1D array, non-empty).
        filt: Complex filter of ``filter_length(len(data), cyclic) // 2 + 1``
            bins, e.g. from :func:`hilbert_filter`.
        cyclic: If True, treat the data as periodic (zero padded to the
            next power of two). Otherwise pad with the boundary samples.

    Returns:
        Filtered signal with the same length as ``data``.

    Raises:
        ValueError: If data is empty or the filter size does not match.

    Example:
        >>> x = np.cos(0.3 * np.arange(64))
        >>> y = fft_filter(x, identity_filter(filter_length(64)))
        >>> bool(np.allclose(x, y))
        True
    """
    data = check_1d_array(data)
    if len(data) == 0:
        raise ValueError("Cannot filter an empty signal")
    filt = np.asarray(filt, dtype=complex)

    length = filter_length(len(data), cyclic)
    if filt.ndim != 1 or len(filt) != length // 2 + 1:
        raise ValueError(
            f"Filter has {filt.size} bins, expected {length // 2 + 1} "
            f"for {len(data)} samples (FFT length {length})"
        )

    buf, offset = _embed(data, length, cyclic)
    spectrum = np.fft.rfft(buf) * filt
    out = np.fft.irfft(spectrum, n=length)
    return out[offset : offset + len(data)].copy()

