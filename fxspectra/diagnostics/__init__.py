"""Diagnostics and debugging utilities for fxspectra."""

from .core import assert_area_preserved, assert_finite
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "assert_finite",
    "assert_area_preserved",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
