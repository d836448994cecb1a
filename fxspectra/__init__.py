"""fxspectra - NumPy-native spectral analysis for counting spectra and signals."""

__version__ = "0.1.0"

# Diagnostics
from .diagnostics import (
    assert_area_preserved,
    assert_finite,
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

# Fourier-domain signal processing
from .dsp import (
    Apodization,
    Padding,
    ShortTimeFourierTransform,
    Spectrogram,
    analytic_signal,
    clear_window_cache,
    compute_amplitude,
    fft_filter,
    get_window,
    hilbert_transform,
    instantaneous_amplitude,
    instantaneous_frequency,
    instantaneous_phase,
    magnitude_spectrum,
    stft,
    stft_complex,
    stft_complex_interleaved,
    stft_real,
)

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Spectrum processing
from .spectra import (
    Direction,
    FilterOrder,
    Peak,
    PeakSearchResult,
    SmoothWindow,
    WorkspacePool,
    estimate_background,
    gold_deconvolve,
    richardson_lucy_deconvolve,
    search,
    search_high_res,
    smooth_markov,
    unfold,
)

__all__ = [
    # Version
    "__version__",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    # Diagnostics
    "assert_finite",
    "assert_area_preserved",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Spectrum processing
    "WorkspacePool",
    "Direction",
    "FilterOrder",
    "SmoothWindow",
    "estimate_background",
    "gold_deconvolve",
    "richardson_lucy_deconvolve",
    "unfold",
    "smooth_markov",
    "Peak",
    "PeakSearchResult",
    "search_high_res",
    "search",
    # Fourier-domain signal processing
    "Apodization",
    "get_window",
    "clear_window_cache",
    "fft_filter",
    "hilbert_transform",
    "analytic_signal",
    "compute_amplitude",
    "instantaneous_amplitude",
    "instantaneous_phase",
    "instantaneous_frequency",
    "magnitude_spectrum",
    "Padding",
    "Spectrogram",
    "ShortTimeFourierTransform",
    "stft",
    "stft_real",
    "stft_complex",
    "stft_complex_interleaved",
]
