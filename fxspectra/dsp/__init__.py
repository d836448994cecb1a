"""Deterministic spectral signal processing.

This package provides the Fourier-domain building blocks:
- Apodization windows with a bounded LRU cache
- FFT-domain filtering with Hilbert, derivative and low-pass filters
- Hilbert transform and analytic-signal amplitude, phase and frequency
- Magnitude/phase spectra and sub-bin peak interpolation
- Short-time Fourier transform spectrograms for real and complex input

All functions are deterministic, NumPy-first and never modify their
inputs.
"""

from .conv import (
    derivative_filter,
    fft_filter,
    filter_length,
    hilbert_filter,
    identity_filter,
    lowpass_filter,
)
from .hilbert import (
    analytic_signal,
    compute_amplitude,
    hilbert_transform,
    hilbert_transform_time,
    instantaneous_amplitude,
    instantaneous_frequency,
    instantaneous_phase,
    unwrap_phase,
)
from .spectrum import (
    frequency_scale,
    interpolate_bary_centre,
    interpolate_gaussian,
    interpolate_naff,
    interpolate_parabolic,
    magnitude_spectrum,
    phase_spectrum,
)
from .stft import (
    Padding,
    ShortTimeFourierTransform,
    Spectrogram,
    frequency_axis_complex,
    frequency_axis_real,
    stft,
    stft_complex,
    stft_complex_interleaved,
    stft_real,
    time_axis,
)
from .utils import check_1d_array, check_length, is_pow2, next_pow2, sample_interval
from .windows import Apodization, WindowCache, clear_window_cache, get_window

__all__ = [
    # Utils
    "check_1d_array",
    "check_length",
    "next_pow2",
    "is_pow2",
    "sample_interval",
    # Windows
    "Apodization",
    "WindowCache",
    "get_window",
    "clear_window_cache",
    # Filtering
    "filter_length",
    "fft_filter",
    "identity_filter",
    "hilbert_filter",
    "derivative_filter",
    "lowpass_filter",
    # Hilbert
    "hilbert_transform",
    "hilbert_transform_time",
    "analytic_signal",
    "compute_amplitude",
    "instantaneous_amplitude",
    "instantaneous_phase",
    "instantaneous_frequency",
    "unwrap_phase",
    # Spectra
    "frequency_scale",
    "magnitude_spectrum",
    "phase_spectrum",
    "interpolate_bary_centre",
    "interpolate_parabolic",
    "interpolate_gaussian",
    "interpolate_naff",
    # STFT
    "Padding",
    "Spectrogram",
    "ShortTimeFourierTransform",
    "stft",
    "stft_real",
    "stft_complex",
    "stft_complex_interleaved",
    "time_axis",
    "frequency_axis_real",
    "frequency_axis_complex",
]
