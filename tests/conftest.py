"""Pytest configuration and shared fixtures for fxspectra tests.

This module provides:
- A deterministic numpy RNG fixture
- Isolation of the process-wide window cache and debug flag
"""

import os

import numpy as np
import pytest

from fxspectra.diagnostics import is_debug_enabled, set_debug_enabled
from fxspectra.dsp import clear_window_cache


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set the global numpy seed for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture(scope="function", autouse=True)
def isolated_state():
    """Start every test with an empty window cache and restore debug mode."""
    clear_window_cache()
    original = is_debug_enabled()
    yield
    set_debug_enabled(original)
    clear_window_cache()

