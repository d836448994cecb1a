"""Spectrum processing for gamma-ray and similar counting spectra.

This package provides the iterative one-dimensional algorithms:
- Background estimation by clipping with optional smoothing and Compton
  edge correction
- Gold and Richardson-Lucy deconvolution, and Gold unfolding against a
  response matrix
- Markov-chain smoothing that preserves the spectrum area
- High-resolution peak search on top of the above

Every routine returns a new array and accepts an optional
:class:`WorkspacePool` to reuse scratch buffers across calls.
"""

from .background import Direction, FilterOrder, SmoothWindow, estimate_background
from .deconvolution import gold_deconvolve, richardson_lucy_deconvolve, unfold
from .markov import smooth_markov
from .peaks import Peak, PeakSearchResult, search, search_high_res
from .workspace import Operation, WorkspacePool, scratch

__all__ = [
    # Workspace
    "Operation",
    "WorkspacePool",
    "scratch",
    # Background
    "Direction",
    "FilterOrder",
    "SmoothWindow",
    "estimate_background",
    # Deconvolution
    "gold_deconvolve",
    "richardson_lucy_deconvolve",
    "unfold",
    # Smoothing
    "smooth_markov",
    # Peak search
    "Peak",
    "PeakSearchResult",
    "search_high_res",
    "search",
]
