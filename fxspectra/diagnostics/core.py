"""Output assertions used by the spectral routines in debug mode."""

from __future__ import annotations

import numpy as np


def assert_finite(values: np.ndarray, name: str = "output") -> None:
    """
    Assert that an array contains only finite values.

    Parameters
    ----------
    values:
        Array to check.
    name:
        Label used in the error message.

    Raises
    ------
    ValueError
        If any entry is NaN or infinite.
    """
    values = np.asarray(values)
    bad = ~np.isfinite(values)
    if np.any(bad):
        raise ValueError(
            f"{name} contains {int(np.count_nonzero(bad))} non-finite values, "
            f"first at index {int(np.flatnonzero(bad)[0])}"
        )


def assert_area_preserved(
    source: np.ndarray,
    result: np.ndarray,
    rtol: float = 1e-9,
    atol: float = 1e-9,
) -> None:
    """
    Assert that ``sum(result)`` matches ``sum(source)`` within tolerance.

    Raises
    ------
    ValueError
        If the areas differ by more than ``atol + rtol * |sum(source)|``.
    """
    expected = float(np.sum(source))
    actual = float(np.sum(result))
    if not np.isfinite(actual) or abs(actual - expected) > atol + rtol * abs(expected):
        raise ValueError(
            f"Area not preserved: expected {expected!r}, got {actual!r}"
        )
