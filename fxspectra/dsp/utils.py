"""Utility functions for signal processing.

Provides helper routines for input validation, buffer sizing and
sample-interval estimation.
"""

from typing import Optional

import numpy as np


def check_1d_array(x) -> np.ndarray:
    """Validate and cast input to 1D float64 array.

    Args:
        x: Input array-like object.

    Returns:
        1D float64 numpy array.

    Raises:
        ValueError: If input is not 1D, contains NaN, or contains Inf.
    """
    arr = np.asarray(x, dtype=float)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    elif arr.ndim > 1:
        raise ValueError(f"Expected 1D array, got {arr.ndim}D array")
    if np.any(np.isnan(arr)):
        raise ValueError("Input contains NaN values")
    if np.any(np.isinf(arr)):
        raise ValueError("Input contains Inf values")
    return arr


def check_length(arr: np.ndarray, length: Optional[int]) -> int:
    """Resolve the number of samples an operation works on.

    Args:
        arr: Validated 1D input.
        length: Requested length, or None for the whole array.

    Returns:
        The effective length.

    Raises:
        ValueError: If ``length`` is not positive or exceeds ``len(arr)``.
    """
    if length is None:
        length = len(arr)
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")
    if length > len(arr):
        raise ValueError(
            f"length ({length}) exceeds buffer length ({len(arr)})"
        )
    return int(length)


def next_pow2(n: int) -> int:
    """Return the next power-of-two >= n.

    Args:
        n: Positive integer.

    Returns:
        Smallest power-of-two >= n. Returns 1 if n <= 0.
    """
    if n <= 0:
        return 1
    if n & (n - 1) == 0:  # Already a power of 2
        return n
    return 1 << (n - 1).bit_length()


def is_pow2(n: int) -> bool:
    """Return True if ``n`` is a positive power of two."""
    return n > 0 and n & (n - 1) == 0


def sample_interval(x_coords: np.ndarray) -> float:
    """Estimate the sampling interval of equidistant coordinates.

    Args:
        x_coords: Monotonic sample coordinates.

    Returns:
        ``(x[-1] - x[0]) / (n - 1)``, or 1.0 for fewer than two samples.

    Raises:
        ValueError: If the coordinates do not increase.
    """
    x_coords = check_1d_array(x_coords)
    if len(x_coords) < 2:
        return 1.0
    dt = (x_coords[-1] - x_coords[0]) / (len(x_coords) - 1)
    if dt <= 0:
        raise ValueError(f"Coordinates must be increasing, got step {dt}")
    return float(dt)
