"""Short-Time Fourier Transform (STFT) spectrograms.

Slices a real or complex signal into frames of ``n_fft`` samples every
``step`` samples, apodizes each frame, and stores its normalized
magnitude spectrum as one column of a frequency x time matrix. The last
frames, which run past the end of the signal, are completed according to
a :class:`Padding` policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from ..logging import get_logger
from .spectrum import magnitude_spectrum
from .utils import check_1d_array, sample_interval
from .windows import Apodization

logger = get_logger(__name__)


class Padding(Enum):
    """How a frame that runs past the end of the signal is completed."""

    ZERO = "zero"
    ZOH = "zoh"
    MIRROR = "mirror"


@dataclass
class Spectrogram:
    """
    Time-frequency magnitude matrix with its coordinate axes.

    ``magnitude[f, t]`` is the magnitude of frequency bin ``f`` in frame
    ``t``. For complex input the rows run from the most negative frequency
    upwards; for real input they cover ``[0, fs/2)``.
    """

    magnitude: np.ndarray
    time_axis: np.ndarray
    frequency_axis: np.ndarray
    n_fft: int
    step: int

    @property
    def shape(self) -> tuple:
        return self.magnitude.shape

    @property
    def n_frames(self) -> int:
        return self.magnitude.shape[1]


def n_frames(n_samples: int, step: int) -> int:
    """Number of frames, ``ceil(n_samples / step)``."""
    return -(-n_samples // step)


def time_axis(dt: float, n_samples: int, step: int) -> np.ndarray:
    """Start time of every frame, ``dt * i * step``."""
    return dt * step * np.arange(n_frames(n_samples, step), dtype=float)


def frequency_axis_real(dt: float, n_fft: int) -> np.ndarray:
    """Frequencies of the ``n_fft // 2`` rows of a real-input spectrogram."""
    return np.arange(n_fft // 2, dtype=float) / (dt * n_fft)


def frequency_axis_complex(dt: float, n_fft: int) -> np.ndarray:
    """Frequencies of the ``n_fft`` rows of a complex-input spectrogram."""
    return np.fft.fftshift(np.fft.fftfreq(n_fft, d=dt))


def _frame(values: np.ndarray, offset: int, n_fft: int, padding: Padding) -> np.ndarray:
    valid = len(values) - offset
    if valid >= n_fft:
        return values[offset : offset + n_fft].copy()

    frame = np.zeros(n_fft, dtype=values.dtype)
    frame[:valid] = values[offset:]
    if padding is Padding.ZOH:
        frame[valid:] = values[-1]
    elif padding is Padding.MIRROR:
        # walk backwards from the last sample, clamped at the first
        idx = len(values) - 1 - np.arange(n_fft - valid)
        frame[valid:] = values[np.maximum(idx, 0)]
    return frame


class ShortTimeFourierTransform:
    """STFT processor.

    Encapsulates the framing parameters and provides the real-input and
    complex-input transforms.
    """

    def __init__(
        self,
        n_fft: int,
        step: int,
        apodization: Apodization | str = Apodization.HANN,
        padding: Padding | str = Padding.ZOH,
        db_scale: bool = False,
        truncate_dc_nyquist: bool = True,
    ):
        """Initialize STFT processor.

        Args:
            n_fft: Frame and FFT size.
            step: Hop between the starts of consecutive frames.
            apodization: Window applied to each frame (default: Hann).
            padding: Completion of frames past the end (default: ZOH).
            db_scale: If True, magnitudes are returned in dB.
            truncate_dc_nyquist: If True, the outermost bins of every frame
                take the value of their neighbours.

        Raises:
            ValueError: If n_fft or step are not positive, or an enum
                argument is unknown.
        """
        if n_fft <= 0:
            raise ValueError(f"n_fft must be positive, got {n_fft}")
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.n_fft = int(n_fft)
        self.step = int(step)
        self.apodization = Apodization(apodization)
        self.padding = Padding(padding)
        self.db_scale = db_scale
        self.truncate_dc_nyquist = truncate_dc_nyquist

    def _empty(self) -> Spectrogram:
        return Spectrogram(np.zeros((0, 0)), np.zeros(0), np.zeros(0), self.n_fft, self.step)

    def _magnitude(self, bins: np.ndarray, norm: float) -> np.ndarray:
        return magnitude_spectrum(
            bins, truncate_dc_nyquist=self.truncate_dc_nyquist, db=self.db_scale, norm=norm
        )

    def _check_size(self, n_samples: int) -> None:
        if n_samples < self.n_fft:
            logger.debug(
                "Signal of %d samples is shorter than n_fft=%d, frames are padded (%s)",
                n_samples,
                self.n_fft,
                self.padding.name,
            )

    def real(self, data: np.ndarray, dt: float = 1.0) -> Spectrogram:
        """Spectrogram of a real signal.

        Args:
            data: Real input signal (1D array).
            dt: Sampling interval used for the axes.

        Returns:
            Spectrogram with ``n_fft // 2`` rows and ``ceil(N / step)``
            columns; magnitudes are ``|X| / (n_fft / 2)``.
        """
        data = check_1d_array(data)
        if len(data) == 0:
            return self._empty()
        self._check_size(len(data))

        window = self.apodization.get_window(self.n_fft)
        n_rows = self.n_fft // 2
        n_cols = n_frames(len(data), self.step)
        out = np.zeros((n_rows, n_cols), dtype=float)
        for i in range(n_cols):
            frame = _frame(data, i * self.step, self.n_fft, self.padding) * window
            bins = np.fft.rfft(frame)[:n_rows]
            out[:, i] = self._magnitude(bins, self.n_fft / 2)

        return Spectrogram(
            magnitude=out,
            time_axis=time_axis(dt, len(data), self.step),
            frequency_axis=frequency_axis_real(dt, self.n_fft),
            n_fft=self.n_fft,
            step=self.step,
        )

    def complex(self, real: np.ndarray, imag: np.ndarray, dt: float = 1.0) -> Spectrogram:
        """Spectrogram of a complex signal given as real and imaginary parts.

        Returns:
            Spectrogram with ``n_fft`` rows ordered from the most negative
            frequency, and ``ceil(N / step)`` columns; magnitudes are
            ``|X| / n_fft``.

        Raises:
            ValueError: If real and imag differ in length.
        """
        real = check_1d_array(real)
        imag = check_1d_array(imag)
        if len(real) != len(imag):
            raise ValueError(
                f"real and imag must have equal length, got {len(real)} and {len(imag)}"
            )
        values = real + 1j * imag
        if len(values) == 0:
            return self._empty()
        self._check_size(len(values))

        window = self.apodization.get_window(self.n_fft)
        n_cols = n_frames(len(values), self.step)
        out = np.zeros((self.n_fft, n_cols), dtype=float)
        for i in range(n_cols):
            frame = _frame(values, i * self.step, self.n_fft, self.padding) * window
            current = self._magnitude(np.fft.fft(frame), self.n_fft)
            out[:, i] = np.fft.fftshift(current)

        return Spectrogram(
            magnitude=out,
            time_axis=time_axis(dt, len(values), self.step),
            frequency_axis=frequency_axis_complex(dt, self.n_fft),
            n_fft=self.n_fft,
            step=self.step,
        )

    def complex_interleaved(self, values: np.ndarray, dt: float = 1.0) -> Spectrogram:
        """Spectrogram of a complex signal stored as ``[re, im, re, im, ...]``.

        Raises:
            ValueError: If the buffer has an odd number of entries.
        """
        values = check_1d_array(values)
        if len(values) % 2 != 0:
            raise ValueError(
                f"Interleaved complex data needs an even length, got {len(values)}"
            )
        return self.complex(values[0::2], values[1::2], dt=dt)


def stft_real(
    data: np.ndarray,
    n_fft: int,
    step: int,
    apodization: Apodization | str = Apodization.HANN,
    padding: Padding | str = Padding.ZOH,
    db_scale: bool = False,
    truncate_dc_nyquist: bool = True,
    dt: float = 1.0,
) -> Spectrogram:
    """Compute the spectrogram of a real signal.

    Convenience function for :meth:`ShortTimeFourierTransform.real`.

    Example:
        >>> spec = stft_real(np.random.randn(352), n_fft=128, step=64)
        >>> spec.shape
        (64, 6)
    """
    processor = ShortTimeFourierTransform(
        n_fft, step, apodization, padding, db_scale, truncate_dc_nyquist
    )
    return processor.real(data, dt=dt)


def stft_complex(
    real: np.ndarray,
    imag: np.ndarray,
    n_fft: int,
    step: int,
    apodization: Apodization | str = Apodization.HANN,
    padding: Padding | str = Padding.ZOH,
    db_scale: bool = False,
    truncate_dc_nyquist: bool = True,
    dt: float = 1.0,
) -> Spectrogram:
    """Compute the spectrogram of a complex signal (fft-shifted rows)."""
    processor = ShortTimeFourierTransform(
        n_fft, step, apodization, padding, db_scale, truncate_dc_nyquist
    )
    return processor.complex(real, imag, dt=dt)


def stft_complex_interleaved(
    values: np.ndarray,
    n_fft: int,
    step: int,
    apodization: Apodization | str = Apodization.HANN,
    padding: Padding | str = Padding.ZOH,
    db_scale: bool = False,
    truncate_dc_nyquist: bool = True,
    dt: float = 1.0,
) -> Spectrogram:
    """Spectrogram of a complex signal stored as ``[re, im, re, im, ...]``."""
    processor = ShortTimeFourierTransform(
        n_fft, step, apodization, padding, db_scale, truncate_dc_nyquist
    )
    return processor.complex_interleaved(values, dt=dt)


def stft(
    x_coords: np.ndarray,
    y_values: np.ndarray,
    n_fft: int,
    step: int,
    imag: Optional[np.ndarray] = None,
    **kwargs,
) -> Spectrogram:
    """Spectrogram of sampled data given by coordinates and values.

    The sampling interval is derived from ``x_coords``. When ``imag`` is
    given, ``y_values`` and ``imag`` form a complex signal.

    Args:
        x_coords: Equidistant sample coordinates.
        y_values: Sample values (real part).
        n_fft: Frame and FFT size.
        step: Hop between frames.
        imag: Optional imaginary part.
        **kwargs: apodization, padding, db_scale, truncate_dc_nyquist.

    Raises:
        ValueError: If the coordinate and value lengths differ.
    """
    x_coords = check_1d_array(x_coords)
    y_values = check_1d_array(y_values)
    if len(x_coords) != len(y_values):
        raise ValueError(
            f"x and y must have equal length, got {len(x_coords)} and {len(y_values)}"
        )
    processor = ShortTimeFourierTransform(n_fft, step, **kwargs)
    dt = sample_interval(x_coords) if len(x_coords) else 1.0
    if imag is None:
        return processor.real(y_values, dt=dt)
    return processor.complex(y_values, imag, dt=dt)
