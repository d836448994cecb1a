"""Apodization (window) functions for spectral analysis.

Implements the apodization family used by the STFT framer: rectangular,
Hamming, von Hann, exponential von Hann, Blackman, Nuttall,
Blackman-Harris, Blackman-Nuttall, flat-top and exponential. All but the
Hamming window use the symmetric ``(n - 1)`` denominator.

Windows are cached per ``(kind, length)`` in a bounded LRU cache. The
cache only saves recomputation: an evicted window is rebuilt with
identical values.
"""

from __future__ import annotations

import os
from collections import OrderedDict
from enum import Enum
from typing import Callable, Dict, Tuple

import numpy as np

_CACHE_SIZE_ENV_VAR = "FXSPECTRA_WINDOW_CACHE_SIZE"
_DEFAULT_CACHE_SIZE = 64


def _cosine_sum(n: int, coefficients: Tuple[float, ...]) -> np.ndarray:
    # a0 - a1 cos(x) + a2 cos(2x) - a3 cos(3x) + ...
    x = 2.0 * np.pi * np.arange(n, dtype=float) / (n - 1)
    w = np.zeros(n, dtype=float)
    for k, a in enumerate(coefficients):
        w += (-1.0) ** k * a * np.cos(k * x)
    return w


def _rectangular(n: int) -> np.ndarray:
    return np.ones(n, dtype=float)


def _hamming(n: int) -> np.ndarray:
    i = np.arange(n, dtype=float)
    return 0.53836 - 0.46164 * np.cos(2.0 * np.pi * i / n)


def _hann(n: int) -> np.ndarray:
    return _cosine_sum(n, (0.5, 0.5))


def _hann_exp(n: int) -> np.ndarray:
    i = np.arange(n, dtype=float)
    return np.sin(2.0 * np.pi * i / (n - 1)) ** 2


def _blackman(n: int) -> np.ndarray:
    return _cosine_sum(n, (0.42, 0.5, 0.08))


def _nuttall(n: int) -> np.ndarray:
    return _cosine_sum(n, (0.355768, 0.487396, 0.144232, 0.012604))


def _blackman_harris(n: int) -> np.ndarray:
    return _cosine_sum(n, (0.35875, 0.48829, 0.14128, 0.01168))


def _blackman_nuttall(n: int) -> np.ndarray:
    return _cosine_sum(n, (0.3635819, 0.4891775, 0.1365995, 0.0106411))


def _flat_top(n: int) -> np.ndarray:
    return _cosine_sum(n, (1.0, 1.93, 1.29, 0.388, 0.032))


def _exponential(n: int) -> np.ndarray:
    i = np.arange(n, dtype=float)
    return np.exp(i / (3.0 * n))


class Apodization(Enum):
    """Window kinds available to the spectral routines."""

    RECTANGULAR = "rectangular"
    HAMMING = "Hamming"
    HANN = "von Hann"
    HANN_EXP = "exp. von Hann"
    BLACKMAN = "Blackman"
    NUTTALL = "Nuttall"
    BLACKMAN_HARRIS = "Blackman-Harris"
    BLACKMAN_NUTTALL = "Blackman-Nuttall"
    FLAT_TOP = "Flat-Top"
    EXPONENTIAL = "exponential"

    def compute(self, n: int) -> np.ndarray:
        """Compute the window of length ``n`` without touching the cache.

        Raises:
            ValueError: If n <= 0.
        """
        if n <= 0:
            raise ValueError(f"Window length n must be positive, got {n}")
        if n == 1:
            return np.ones(1, dtype=float)
        return _WINDOW_FUNCTIONS[self](n)

    def get_window(self, n: int) -> np.ndarray:
        """Return the (read-only, cached) window of length ``n``."""
        return window_cache.get(self, n)

    def value_at(self, i: int, n: int) -> float:
        """Return sample ``i`` of the window of length ``n``."""
        if not 0 <= i < n:
            raise ValueError(f"Index {i} out of range for window length {n}")
        return float(self.get_window(n)[i])

    def apodize(self, data: np.ndarray) -> np.ndarray:
        """Return ``data`` multiplied by a window of matching length."""
        data = np.asarray(data)
        if data.ndim != 1:
            raise ValueError(f"Expected 1D array, got {data.ndim}D array")
        return data * self.get_window(len(data))


_WINDOW_FUNCTIONS: Dict[Apodization, Callable[[int], np.ndarray]] = {
    Apodization.RECTANGULAR: _rectangular,
    Apodization.HAMMING: _hamming,
    Apodization.HANN: _hann,
    Apodization.HANN_EXP: _hann_exp,
    Apodization.BLACKMAN: _blackman,
    Apodization.NUTTALL: _nuttall,
    Apodization.BLACKMAN_HARRIS: _blackman_harris,
    Apodization.BLACKMAN_NUTTALL: _blackman_nuttall,
    Apodization.FLAT_TOP: _flat_top,
    Apodization.EXPONENTIAL: _exponential,
}


class WindowCache:
    """Bounded LRU cache of apodization windows keyed by (kind, length).

    Args:
        max_size: Maximum number of cached windows (default taken from
            ``FXSPECTRA_WINDOW_CACHE_SIZE``, else 64).
    """

    def __init__(self, max_size: int | None = None):
        if max_size is None:
            max_size = int(os.getenv(_CACHE_SIZE_ENV_VAR, _DEFAULT_CACHE_SIZE))
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[Tuple[Apodization, int], np.ndarray] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Tuple[Apodization, int]) -> bool:
        return key in self._entries

    def get(self, kind: Apodization, n: int) -> np.ndarray:
        key = (Apodization(kind), int(n))
        window = self._entries.get(key)
        if window is not None:
            self._entries.move_to_end(key)
            return window

        window = key[0].compute(key[1])
        window.flags.writeable = False
        # A concurrent first use may have stored the same values meanwhile
        window = self._entries.setdefault(key, window)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
        return window

    def clear(self) -> None:
        """Drop every cached window."""
        self._entries.clear()


window_cache = WindowCache()


def get_window(kind: Apodization | str, n: int) -> np.ndarray:
    """Return the cached window of the given kind and length.

    Args:
        kind: An :class:`Apodization` member or its value string.
        n: Window length (must be positive).

    Returns:
        Read-only float64 array of length n.

    Raises:
        ValueError: If n <= 0 or the kind is unknown.

    Example:
        >>> w = get_window(Apodization.HANN, 8)
        >>> float(w[0])
        0.0
    """
    return window_cache.get(Apodization(kind), n)


def clear_window_cache() -> None:
    """Invalidate the module-level window cache."""
    window_cache.clear()
