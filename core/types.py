"""
core/types.py

Array containers passed between the engine stages.

All grids are numpy arrays of shape (height, width) in C order, so the
row-major linear index y*width + x is simply the flattened position.
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .filters import RegionSpec
from .spectral_features import to_polar


@dataclass(eq=False)
class IntensityGrid:
    """Grayscale samples, conceptually 0..255. Owned by the caller; never written by the engine."""
    data: np.ndarray

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=np.float64)
        if self.data.ndim != 2:
            raise ValueError("IntensityGrid expects a 2D array.")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @classmethod
    def from_flat(cls, values, width: int, height: int) -> "IntensityGrid":
        """Build a grid from a row-major buffer of length width*height."""
        arr = np.asarray(values, dtype=np.float64)
        if arr.size != width * height:
            raise ValueError(f"Buffer of {arr.size} samples cannot be shaped {width}x{height}.")
        return cls(arr.reshape(height, width))


@dataclass(eq=False)
class PaddedGrid(IntensityGrid):
    """Power-of-two grid with the source in its top-left corner and zeros elsewhere."""
    original_width: int = 0
    original_height: int = 0


# OutputGrid has the same shape contract as its source image.
OutputGrid = IntensityGrid


@dataclass(eq=False)
class Spectrum:
    """
    Centred complex spectrum stored as separate real/imaginary planes.

    magnitude and phase are derived once at construction so display
    callers can read them without recomputing.
    """
    real: np.ndarray
    imag: np.ndarray
    magnitude: Optional[np.ndarray] = None
    phase: Optional[np.ndarray] = None

    def __post_init__(self):
        self.real = np.asarray(self.real, dtype=np.float64)
        self.imag = np.asarray(self.imag, dtype=np.float64)
        if self.real.ndim != 2 or self.real.shape != self.imag.shape:
            raise ValueError("Spectrum real and imag must be 2D arrays of identical shape.")
        if self.magnitude is None or self.phase is None:
            self.magnitude, self.phase = to_polar(self.real, self.imag)

    @property
    def padded_width(self) -> int:
        return int(self.real.shape[1])

    @property
    def padded_height(self) -> int:
        return int(self.real.shape[0])

    @property
    def shape(self):
        return self.real.shape


@dataclass(eq=False)
class MixedSpectrum(Spectrum):
    """Result of a mix; cells outside the active region are exactly zero."""
    region: Optional[RegionSpec] = None


@dataclass(eq=False)
class LoadedImage:
    """Everything derived from one input slot: source, padded copy, forward spectrum."""
    grid: IntensityGrid
    padded: PaddedGrid
    spectrum: Spectrum

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height
