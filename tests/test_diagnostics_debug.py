"""Tests for debug mode functionality."""

import numpy as np
import pytest

from fxspectra.diagnostics import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)
from fxspectra.spectra import estimate_background, gold_deconvolve, smooth_markov


def test_debug_mode_toggle_and_context() -> None:
    """Test debug mode toggling and context manager."""
    set_debug_enabled(False)
    assert not is_debug_enabled()

    with debug_context(True):
        assert is_debug_enabled()

    # Back to previous (False in this block)
    assert not is_debug_enabled()

    set_debug_enabled(True)
    assert is_debug_enabled()

    with debug_context(False):
        assert not is_debug_enabled()

    # Back to True
    assert is_debug_enabled()


def test_debug_context_nested() -> None:
    """Test nested debug contexts."""
    set_debug_enabled(False)

    with debug_context(True):
        assert is_debug_enabled()

        with debug_context(False):
            assert not is_debug_enabled()

        assert is_debug_enabled()

    assert not is_debug_enabled()


def test_debug_context_restores_on_error() -> None:
    set_debug_enabled(False)
    with pytest.raises(RuntimeError):
        with debug_context(True):
            raise RuntimeError("boom")
    assert not is_debug_enabled()


def test_routines_run_checks_in_debug_mode() -> None:
    """Routines complete in debug mode when their outputs are valid."""
    y = np.array([1.0, 2.0, 5.0, 20.0, 5.0, 2.0, 1.0, 1.0, 1.0])
    response = np.array([1.0, 0.5, 0.25, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0])

    with debug_context(True):
        background = estimate_background(y, 2)
        smoothed = smooth_markov(y, 2)
        deconvolved = gold_deconvolve(y, response, 10)

    assert background.shape == y.shape
    np.testing.assert_allclose(smoothed.sum(), y.sum())
    assert np.all(np.isfinite(deconvolved))
