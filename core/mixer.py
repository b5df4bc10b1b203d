"""
core/mixer.py

Weighted multi-image mixing in the frequency domain.

Provided:
- Basis: MAG_PHASE or REAL_IMAG, selects which pair of components is weighted
- Weight(component1_gain, component2_gain)
- mix(spectra, weights, basis, region) -> MixedSpectrum

Notes:
- Gains are plain multipliers: no normalization, negative or >1 values allowed.
- In MAG_PHASE the weighted phases are summed as plain numbers and the sum
  is used as the phase of the result (no circular mean / wraparound).
  The result is therefore not linear in the weights for that basis.
- Cells outside the active region are exactly (0, 0).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence
import numpy as np

from . import config
from .errors import DimensionMismatchError, EmptyInputError
from .filters import RegionSpec, build_region_mask
from .spectral_features import to_cartesian
from .types import MixedSpectrum, Spectrum


class Basis(str, Enum):
    MAG_PHASE = "Mag/Phase"
    REAL_IMAG = "Real/Imag"


@dataclass(frozen=True)
class Weight:
    component1_gain: float = config.DEFAULT_COMPONENT1_GAIN
    component2_gain: float = config.DEFAULT_COMPONENT2_GAIN


def _components(spectrum: Spectrum, basis: Basis):
    if basis == Basis.MAG_PHASE:
        return spectrum.magnitude, spectrum.phase
    return spectrum.real, spectrum.imag


def mix(
    spectra: Sequence[Spectrum],
    weights: Sequence[Weight],
    basis: Basis,
    region: RegionSpec,
) -> MixedSpectrum:
    """
    Combine spectra under per-image weights and a region gate.

    Parameters
    ----------
    spectra : sequence of Spectrum
        Centred spectra sharing one padded shape (sizes must be unified by the caller).
    weights : sequence of Weight
        One per spectrum. component1 scales magnitude (or real), component2 scales phase (or imag).
    basis : Basis
        Component pair to weight and sum.
    region : RegionSpec
        Active rectangle and polarity in padded-grid coordinates.

    Returns
    -------
    MixedSpectrum
        Freshly allocated; inputs are not modified.
    """
    if len(spectra) == 0:
        raise EmptyInputError("Nothing to mix: no spectra supplied.")
    if len(spectra) != len(weights):
        raise ValueError(f"Got {len(spectra)} spectra but {len(weights)} weights.")
    basis = Basis(basis)

    shape = spectra[0].shape
    for s in spectra[1:]:
        if s.shape != shape:
            raise DimensionMismatchError(f"Spectrum shape {s.shape} differs from {shape}; unify sizes first.")

    comp1_sum = np.zeros(shape, dtype=np.float64)
    comp2_sum = np.zeros(shape, dtype=np.float64)
    for spectrum, w in zip(spectra, weights):
        c1, c2 = _components(spectrum, basis)
        comp1_sum += c1 * float(w.component1_gain)
        comp2_sum += c2 * float(w.component2_gain)

    if basis == Basis.MAG_PHASE:
        real, imag = to_cartesian(comp1_sum, comp2_sum)
    else:
        real, imag = comp1_sum, comp2_sum

    active = build_region_mask(shape[1], shape[0], region)
    real = np.where(active, real, 0.0)
    imag = np.where(active, imag, 0.0)
    return MixedSpectrum(real, imag, region=region)
