"""Iterative deconvolution of spectra.

Two multiplicative algorithms are provided. Both keep the estimate
non-negative and support *boosted* repetitions: after every block of
``number_iterations`` updates the estimate is raised element-wise to the
power ``boost`` before the next block, which sharpens peaks.

- Gold deconvolution solves the normal equations ``AᵗA x = Aᵗy`` of the
  convolution matrix ``A`` built from the response, updating
  ``x <- x * Aᵗy / (AᵗA x)``.
- Richardson-Lucy deconvolution updates ``x`` by the response-weighted
  average of the ratio between the data and the current reconstruction.

The response is a shift-invariant kernel given as a vector of the same
length as the data; its maximum marks the zero position, and the result
is rotated accordingly.

References:
    - M. Morhac et al., "Efficient one- and two-dimensional Gold
      deconvolution and its application to gamma-ray spectra
      decomposition", NIM A 401 (1997) 385-408.
    - W. H. Richardson, "Bayesian-based iterative method of image
      restoration", JOSA 62 (1972) 55-59.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..diagnostics import assert_finite, is_debug_enabled
from ..dsp.utils import check_1d_array, check_length
from ..logging import get_logger
from .workspace import Operation, WorkspacePool, scratch

logger = get_logger(__name__)

# Samples below this level take no part in the Gold update
_GOLD_EPSILON = 1e-6


@dataclass
class _Response:
    kernel: np.ndarray
    support: int
    area: float
    peak: int


def _check_parameters(number_iterations: int, number_repetitions: int) -> None:
    if number_iterations <= 0:
        raise ValueError(
            f"number_iterations must be positive, got {number_iterations}"
        )
    if number_repetitions <= 0:
        raise ValueError(
            f"number_repetitions must be positive, got {number_repetitions}"
        )


def _scan_response(response: np.ndarray, n: int) -> _Response:
    kernel = np.zeros(n, dtype=float)
    m = min(n, len(response))
    kernel[:m] = response[:m]

    nonzero = np.flatnonzero(kernel)
    if len(nonzero) == 0:
        raise ValueError("Zero response vector")

    # the peak is the first strictly positive maximum, 0 if none is positive
    peak = int(np.argmax(kernel)) if kernel.max() > 0 else 0
    return _Response(kernel, int(nonzero[-1]) + 1, float(kernel.sum()), peak)


def _boost(x: np.ndarray, boost: float) -> np.ndarray:
    return np.power(np.maximum(x, 0.0), boost)


def gold_deconvolve(
    source: np.ndarray,
    response: np.ndarray,
    number_iterations: int,
    number_repetitions: int = 1,
    boost: float = 1.0,
    length: Optional[int] = None,
    pool: Optional[WorkspacePool] = None,
) -> np.ndarray:
    """Gold deconvolution of a spectrum.

    Args:
        source: Observed spectrum (1D array). It is not modified.
        response: Response kernel; truncated or zero padded to ``length``.
        number_iterations: Updates per repetition.
        number_repetitions: Number of boosted repetitions (default: 1).
        boost: Exponent applied between repetitions (default: 1.0).
        length: Number of leading samples to process (default: all).
        pool: Optional workspace pool for the scratch buffer.

    Returns:
        The deconvolved spectrum scaled by the response area, so that a
        converged result has the area of the source.

    Raises:
        ValueError: If length, iteration or repetition counts are not
            positive, or the response is all zero.
    """
    source = check_1d_array(source)
    response = check_1d_array(response)
    n = check_length(source, length)
    _check_parameters(number_iterations, number_repetitions)
    resp = _scan_response(response, n)
    y = source[:n]
    h = resp.kernel
    lh = resp.support

    # AᵗA[i] = sum_j h[j] h[i + j],  Aᵗy[i] = sum_m h[m] y[m + i]
    ata = np.correlate(h, h, mode="full")[n - 1 :]
    aty = np.correlate(y, h, mode="full")[n - 1 :]
    kernel = np.concatenate((ata[lh - 1 : 0 : -1], ata[:lh]))

    with scratch(pool, Operation.GOLD, 4 * n) as work:
        x = work[:n]
        update = work[n : 2 * n]
        x[:] = 1.0
        update[:] = aty

        for repetition in range(number_repetitions):
            if repetition:
                x[:] = _boost(x, boost)
            for _ in range(number_iterations):
                active = (aty > _GOLD_EPSILON) & (x > _GOLD_EPSILON)
                denom = np.convolve(x, kernel, mode="full")[lh - 1 : lh - 1 + n]
                ratio = np.zeros(n, dtype=float)
                nonzero = active & (denom != 0)
                ratio[nonzero] = aty[nonzero] / denom[nonzero]
                update[active] = x[active] * ratio[active]
                x[:] = update

        result = resp.area * np.roll(x, resp.peak)

    logger.debug(
        "Gold: n=%d, support=%d, iterations=%d x %d, boost=%g",
        n,
        lh,
        number_iterations,
        number_repetitions,
        boost,
    )
    if is_debug_enabled():
        assert_finite(result, "gold deconvolution")
    return result


def richardson_lucy_deconvolve(
    source: np.ndarray,
    response: np.ndarray,
    number_iterations: int,
    number_repetitions: int = 1,
    boost: float = 1.0,
    length: Optional[int] = None,
    pool: Optional[WorkspacePool] = None,
) -> np.ndarray:
    """Richardson-Lucy deconvolution of a spectrum.

    The reconstruction is causal: sample ``i`` of the estimate contributes
    to data samples ``i .. i + support - 1``, so only the first
    ``length - support + 1`` estimate samples are free.

    Args:
        source: Observed spectrum (1D array). It is not modified.
        response: Response kernel; truncated or zero padded to ``length``.
        number_iterations: Updates per repetition.
        number_repetitions: Number of boosted repetitions (default: 1).
        boost: Exponent applied between repetitions (default: 1.0).
        length: Number of leading samples to process (default: all).
        pool: Optional workspace pool for the scratch buffer.

    Returns:
        The deconvolved spectrum rotated to the response peak. With a
        unit-area response its area matches the source.

    Raises:
        ValueError: If length, iteration or repetition counts are not
            positive, or the response is all zero.
    """
    source = check_1d_array(source)
    response = check_1d_array(response)
    n = check_length(source, length)
    _check_parameters(number_iterations, number_repetitions)
    resp = _scan_response(response, n)
    y = source[:n]
    lh = resp.support
    h = resp.kernel[:lh]
    free = n - lh + 1

    with scratch(pool, Operation.RICHARDSON_LUCY, 4 * n) as work:
        x = work[:n]
        x[:free] = 1.0

        for repetition in range(number_repetitions):
            if repetition:
                x[:] = _boost(x, boost)
            for _ in range(number_iterations):
                denom = np.convolve(x, h)[:n]
                ratio = y.copy()
                positive = y > 0
                ratio[positive] = 0.0
                ok = positive & (denom > 0)
                ratio[ok] = y[ok] / denom[ok]
                weight = np.correlate(ratio, h, mode="valid")
                x[:free] = np.where(x[:free] > 0, x[:free] * weight, 0.0)

        result = np.roll(x, resp.peak)

    logger.debug(
        "Richardson-Lucy: n=%d, support=%d, iterations=%d x %d, boost=%g",
        n,
        lh,
        number_iterations,
        number_repetitions,
        boost,
    )
    if is_debug_enabled():
        assert_finite(result, "Richardson-Lucy deconvolution")
    return result


def unfold(
    source: np.ndarray,
    response_matrix: np.ndarray,
    number_iterations: int,
    number_repetitions: int = 1,
    boost: float = 1.0,
) -> np.ndarray:
    """Gold unfolding against a response matrix.

    Row ``j`` of ``response_matrix`` is the detector response to a unit
    signal in output channel ``j``. Rows are normalized to unit area, and
    the Gold update is run on the twice-multiplied normal equations
    ``(AAᵗ)² x = (AAᵗ) A y``.

    Args:
        source: Measured spectrum of ``n_in`` channels.
        response_matrix: Array of shape ``(n_out, n_in)`` with
            ``n_out <= n_in``.
        number_iterations: Updates per repetition.
        number_repetitions: Number of boosted repetitions (default: 1).
        boost: Exponent applied between repetitions (default: 1.0).

    Returns:
        Array of ``n_in`` samples: the ``n_out`` unfolded channels followed
        by zeros.

    Raises:
        ValueError: On shape mismatches, non-positive counts, or a
            response row that is all zero.
    """
    source = check_1d_array(source)
    matrix = np.asarray(response_matrix, dtype=float)
    _check_parameters(number_iterations, number_repetitions)
    if matrix.ndim != 2:
        raise ValueError(f"Response matrix must be 2D, got {matrix.ndim}D")
    n_out, n_in = matrix.shape
    if n_out == 0 or n_in == 0:
        raise ValueError(f"Response matrix must not be empty, got shape {matrix.shape}")
    if n_in != len(source):
        raise ValueError(
            f"Response matrix has {n_in} columns, source has {len(source)} samples"
        )
    if n_in < n_out:
        raise ValueError(
            f"Source length ({n_in}) must be >= number of unfolded channels ({n_out})"
        )
    if not np.all(np.isfinite(matrix)):
        raise ValueError("Response matrix contains non-finite values")

    zero_rows = ~np.any(matrix != 0, axis=1)
    if np.any(zero_rows):
        raise ValueError(
            f"Zero column in response matrix (channel {int(np.flatnonzero(zero_rows)[0])})"
        )
    a = matrix / matrix.sum(axis=1, keepdims=True)

    aat = a @ a.T
    b = aat @ aat
    c = aat @ (a @ source)

    x = np.ones(n_out, dtype=float)
    for repetition in range(number_repetitions):
        if repetition:
            x = _boost(x, boost)
        for _ in range(number_iterations):
            denom = b @ x
            ratio = np.zeros(n_out, dtype=float)
            nonzero = denom != 0
            ratio[nonzero] = c[nonzero] / denom[nonzero]
            x = x * ratio

    result = np.zeros(n_in, dtype=float)
    result[:n_out] = x
    return result
