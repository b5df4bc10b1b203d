'''
Conversions between the cartesian (real/imag) and polar (magnitude/phase)
forms of a spectrum.

Functions:
- to_polar: (real, imag) -> (magnitude, phase), phase in (-pi, pi]
- to_cartesian: (magnitude, phase) -> (real, imag)
- magnitude_spectrum: log-scaled magnitude for visualization
'''

from typing import Tuple
import numpy as np


def to_polar(real: np.ndarray, imag: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Elementwise magnitude sqrt(re^2 + im^2) and phase atan2(im, re).
    atan2(0, 0) is 0, so an all-zero cell has zero phase.
    """
    real = np.asarray(real, dtype=np.float64)
    imag = np.asarray(imag, dtype=np.float64)
    if real.shape != imag.shape:
        raise ValueError("to_polar expects real and imag of identical shape.")
    return np.hypot(real, imag), np.arctan2(imag, real)


def to_cartesian(magnitude: np.ndarray, phase: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Elementwise (mag*cos(phase), mag*sin(phase))."""
    magnitude = np.asarray(magnitude, dtype=np.float64)
    phase = np.asarray(phase, dtype=np.float64)
    if magnitude.shape != phase.shape:
        raise ValueError("to_cartesian expects magnitude and phase of identical shape.")
    return magnitude * np.cos(phase), magnitude * np.sin(phase)


def magnitude_spectrum(real: np.ndarray, imag: np.ndarray, log: bool = True) -> np.ndarray:
    """
    Return magnitude for visualization.
    If log is True, returns log1p(magnitude).
    """
    mag, _ = to_polar(real, imag)
    if log:
        return np.log1p(mag)
    return mag
