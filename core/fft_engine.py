'''
FFT engine: padding, 2D transform and zero-frequency centering.

Functions:
- next_pow2 / pad_to_pow2: lift an arbitrary grid onto a power-of-two canvas
- fft_shift / ifft_shift: move DC to the centre and back
- forward_transform: rows, then columns, then shift
- inverse_transform: unshift, then columns, then rows (unnormalized)

The 1D transform itself is delegated to a SpectrumPrimitive; the default
wraps numpy.fft with an unnormalized inverse, so the caller owns the
1/(width*height) scaling.
'''

from typing import Optional, Tuple
import numpy as np

from .types import IntensityGrid, PaddedGrid


class SpectrumPrimitive:
    """
    1D transform capability used by the 2D stage.

    Both methods operate on the last axis of a complex array, so a 2D input
    is a batch of independent sequences. Neither direction normalizes.
    """

    def transform(self, seq: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def inverse_transform(self, seq: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class NumpySpectrumPrimitive(SpectrumPrimitive):
    """numpy.fft backed primitive restricted to power-of-two lengths."""

    @staticmethod
    def _check_length(seq: np.ndarray):
        n = seq.shape[-1]
        if n < 1 or (n & (n - 1)) != 0:
            raise ValueError(f"Spectrum primitive requires a power-of-two length, got {n}.")

    def transform(self, seq: np.ndarray) -> np.ndarray:
        self._check_length(seq)
        return np.fft.fft(seq, axis=-1)

    def inverse_transform(self, seq: np.ndarray) -> np.ndarray:
        self._check_length(seq)
        # norm="forward" puts the 1/n on the forward side, leaving ifft unscaled
        return np.fft.ifft(seq, axis=-1, norm="forward")


_DEFAULT_PRIMITIVE = NumpySpectrumPrimitive()


# --- Padding ---
def next_pow2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    power = 1
    while power < n:
        power *= 2
    return power


def pad_to_pow2(grid: IntensityGrid) -> PaddedGrid:
    """
    Copy grid into the top-left corner of a zero-filled power-of-two canvas.
    No scaling or resampling. Degenerate (0-sized) grids give a 1x1 zero grid.
    """
    height, width = grid.data.shape
    new_w, new_h = next_pow2(width), next_pow2(height)
    padded = np.zeros((new_h, new_w), dtype=np.float64)
    padded[:height, :width] = grid.data
    return PaddedGrid(padded, original_width=width, original_height=height)


# --- Shift ---
def fft_shift(F: np.ndarray) -> np.ndarray:
    """
    Shift zero-frequency to center (wrapper).
    Moves (x, y) to ((x + w//2) % w, (y + h//2) % h); self-inverse for even sizes.
    """
    return np.fft.fftshift(F, axes=(0, 1))


def ifft_shift(Fs: np.ndarray) -> np.ndarray:
    """Inverse shift (center -> origin) (wrapper)."""
    return np.fft.ifftshift(Fs, axes=(0, 1))


# --- 2D transform ---
def _as_plane(values, width: int, height: int) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size != width * height:
        raise ValueError(f"Expected {width * height} samples for a {width}x{height} grid, got {arr.size}.")
    return arr.reshape(height, width)


def forward_transform(
    real,
    imag,
    width: int,
    height: int,
    primitive: Optional[SpectrumPrimitive] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Centred 2D forward transform of a (real, imag) grid.

    real/imag may be flat row-major buffers or (height, width) arrays;
    the result is always a pair of (height, width) arrays. width and height
    must be powers of two (pad first).
    """
    prim = primitive or _DEFAULT_PRIMITIVE
    data = _as_plane(real, width, height) + 1j * _as_plane(imag, width, height)
    # rows: `height` sequences of length `width`
    data = prim.transform(data)
    # columns: `width` sequences of length `height`
    data = prim.transform(data.T).T
    data = fft_shift(data)
    return np.real(data).copy(), np.imag(data).copy()


def inverse_transform(
    real,
    imag,
    width: int,
    height: int,
    primitive: Optional[SpectrumPrimitive] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Inverse of forward_transform without the 1/(width*height) normalization.
    Unshift, then columns, then rows.
    """
    prim = primitive or _DEFAULT_PRIMITIVE
    data = _as_plane(real, width, height) + 1j * _as_plane(imag, width, height)
    data = ifft_shift(data)
    data = prim.inverse_transform(data.T).T
    data = prim.inverse_transform(data)
    return np.real(data).copy(), np.imag(data).copy()
