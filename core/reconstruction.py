"""
core/reconstruction.py

Inverse transform of a mixed spectrum back to an intensity grid:
inverse 2D transform -> divide by padded size -> clamp to [0, 255] -> crop.
"""

import warnings
from typing import Optional
import numpy as np

from . import config
from .errors import DimensionMismatchError
from .fft_engine import SpectrumPrimitive, inverse_transform
from .types import IntensityGrid, OutputGrid, Spectrum


def reconstruct(
    mixed: Spectrum,
    original_width: int,
    original_height: int,
    primitive: Optional[SpectrumPrimitive] = None,
    imag_tol: float = 1e-6,
    suppress_warning: bool = True,
) -> OutputGrid:
    """
    Rebuild the top-left original_width x original_height samples from a centred spectrum.

    Ringing from hard-edged masks is clipped, not filtered. The imaginary part of
    the inverse is dropped; pass suppress_warning=False to get a RuntimeWarning
    when it exceeds imag_tol (after normalization).
    """
    pw, ph = mixed.padded_width, mixed.padded_height
    if original_width > pw or original_height > ph:
        raise DimensionMismatchError(
            f"Original size {original_width}x{original_height} exceeds padded size {pw}x{ph}."
        )

    re, im = inverse_transform(mixed.real, mixed.imag, pw, ph, primitive=primitive)
    size = float(pw * ph)
    values = re / size

    if not suppress_warning:
        imag_max = float(np.max(np.abs(im))) / size if im.size else 0.0
        if imag_max > imag_tol:
            warnings.warn(
                f"Inverse transform has non-negligible imaginary component (max abs = {imag_max}). "
                "Returning real part.",
                RuntimeWarning,
            )

    values = np.clip(values, config.INTENSITY_MIN, config.INTENSITY_MAX)
    return IntensityGrid(values[:original_height, :original_width].copy())
