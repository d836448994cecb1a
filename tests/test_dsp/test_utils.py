"""Tests for dsp.utils module."""

import numpy as np
import pytest

from fxspectra.dsp.utils import (
    check_1d_array,
    check_length,
    is_pow2,
    next_pow2,
    sample_interval,
)


def test_next_pow2():
    """Test next_pow2 function."""
    assert next_pow2(1) == 1
    assert next_pow2(2) == 2
    assert next_pow2(3) == 4
    assert next_pow2(4) == 4
    assert next_pow2(5) == 8
    assert next_pow2(15) == 16
    assert next_pow2(16) == 16
    assert next_pow2(17) == 32
    assert next_pow2(0) == 1
    assert next_pow2(-1) == 1


def test_is_pow2():
    assert is_pow2(1)
    assert is_pow2(64)
    assert not is_pow2(0)
    assert not is_pow2(-4)
    assert not is_pow2(96)


def test_check_1d_array():
    """Test check_1d_array validation."""
    # Valid 1D array
    x = np.array([1.0, 2.0, 3.0])
    result = check_1d_array(x)
    assert result.ndim == 1
    assert result.dtype == float
    np.testing.assert_array_equal(result, x)

    # List input
    result = check_1d_array([1, 2, 3])
    assert result.ndim == 1
    assert result.dtype == float

    # Scalar
    result = check_1d_array(5.0)
    assert result.ndim == 1
    assert len(result) == 1

    # 2D array should raise
    with pytest.raises(ValueError, match="Expected 1D array"):
        check_1d_array(np.array([[1.0, 2.0], [3.0, 4.0]]))

    # NaN should raise
    with pytest.raises(ValueError, match="NaN"):
        check_1d_array(np.array([1.0, np.nan, 3.0]))

    # Inf should raise
    with pytest.raises(ValueError, match="Inf"):
        check_1d_array(np.array([1.0, np.inf, 3.0]))


def test_check_length():
    x = np.zeros(10)
    assert check_length(x, None) == 10
    assert check_length(x, 4) == 4

    with pytest.raises(ValueError, match="must be positive"):
        check_length(x, 0)
    with pytest.raises(ValueError, match="exceeds buffer length"):
        check_length(x, 11)
    with pytest.raises(ValueError, match="must be positive"):
        check_length(np.zeros(0), None)


def test_sample_interval():
    assert sample_interval(np.array([0.0, 0.5, 1.0, 1.5])) == pytest.approx(0.5)
    # Only the end points matter
    assert sample_interval(np.array([0.0, 0.1, 0.9, 3.0])) == pytest.approx(1.0)
    assert sample_interval(np.array([2.0])) == 1.0
    assert sample_interval(np.array([])) == 1.0

    with pytest.raises(ValueError, match="increasing"):
        sample_interval(np.array([1.0, 0.0]))
