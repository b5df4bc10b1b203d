"""
visuals/plots.py

Display helpers for spectra, region masks and mix results.

APIs:
- normalize_for_display(data, use_log=True) -> uint8 array
- plot_magnitude_spectrum(spectrum, out_path=None, log=True)
- plot_phase_spectrum(spectrum, out_path=None)
- plot_region_mask(region, shape, out_path=None)
- save_spectrum_views(spectrum, out_dir, base_name='spectrum') -> dict of paths
- compare_and_save(inputs, output, out_path=None, titles=None)

Notes:
- Raw arrays are written with Pillow; only compare_and_save uses matplotlib.
- If out_path is None, functions return the display array (or the Figure).
"""

from typing import Dict, Optional, Sequence
import os
import numpy as np
import matplotlib.pyplot as plt
from PIL import Image

from core.filters import RegionSpec, build_region_mask
from core.spectral_features import magnitude_spectrum
from core.types import IntensityGrid, Spectrum


def _ensure_outdir(out_path: Optional[str]):
    if out_path is None:
        return None
    d = os.path.dirname(out_path)
    if d:
        os.makedirs(d, exist_ok=True)
    return out_path


def normalize_for_display(data: np.ndarray, use_log: bool = True) -> np.ndarray:
    """
    Map an arbitrary numeric array onto 0..255 uint8.
    use_log applies log(1 + |x|) first (useful for magnitude spectra).
    A constant array maps to zeros.
    """
    a = np.asarray(data, dtype=np.float64)
    if use_log:
        a = np.log1p(np.abs(a))
    amin = float(np.min(a)) if a.size else 0.0
    amax = float(np.max(a)) if a.size else 0.0
    rng = (amax - amin) or 1.0
    return np.rint((a - amin) / rng * 255.0).astype(np.uint8)


def _save_raw_array_image(out_path: Optional[str], arr: np.ndarray, log_scale: bool = False):
    """
    Save a 2D numeric array as a grayscale PNG, stretched to 0..255.
    """
    if out_path is None:
        return None
    _ensure_outdir(out_path)
    img = Image.fromarray(normalize_for_display(arr, use_log=log_scale))
    img.save(out_path)
    return out_path


def plot_magnitude_spectrum(
    spectrum: Spectrum,
    out_path: Optional[str] = None,
    log: bool = True,
):
    """
    Log-scaled magnitude of a centred spectrum.
    Writes a PNG when out_path is given, otherwise returns the uint8 array.
    """
    mag = magnitude_spectrum(spectrum.real, spectrum.imag, log=bool(log))
    if out_path is not None:
        return _save_raw_array_image(out_path, mag, log_scale=False)
    return normalize_for_display(mag, use_log=False)


def plot_phase_spectrum(spectrum: Spectrum, out_path: Optional[str] = None):
    """
    Phase mapped linearly from -pi..pi to 0..255.
    """
    phase_norm = (spectrum.phase + np.pi) / (2.0 * np.pi)
    disp = np.rint(np.clip(phase_norm, 0.0, 1.0) * 255.0).astype(np.uint8)
    if out_path is not None:
        _ensure_outdir(out_path)
        Image.fromarray(disp).save(out_path)
        return out_path
    return disp


def plot_region_mask(region: RegionSpec, shape, out_path: Optional[str] = None):
    """Active cells white, inactive black."""
    height, width = shape
    disp = build_region_mask(width, height, region).astype(np.uint8) * 255
    if out_path is not None:
        _ensure_outdir(out_path)
        Image.fromarray(disp).save(out_path)
        return out_path
    return disp


def save_spectrum_views(spectrum: Spectrum, out_dir: str, base_name: str = "spectrum") -> Dict[str, str]:
    """
    Write magnitude, phase, real and imaginary views of a spectrum to out_dir.
    Real/imag use the same log stretch as magnitude.
    """
    os.makedirs(out_dir, exist_ok=True)
    paths = {
        "magnitude": plot_magnitude_spectrum(spectrum, os.path.join(out_dir, f"{base_name}_magnitude.png")),
        "phase": plot_phase_spectrum(spectrum, os.path.join(out_dir, f"{base_name}_phase.png")),
        "real": _save_raw_array_image(os.path.join(out_dir, f"{base_name}_real.png"), spectrum.real, True),
        "imag": _save_raw_array_image(os.path.join(out_dir, f"{base_name}_imag.png"), spectrum.imag, True),
    }
    return paths


def compare_and_save(
    inputs: Sequence[IntensityGrid],
    output: IntensityGrid,
    out_path: Optional[str] = None,
    titles: Optional[Sequence[str]] = None,
):
    """
    Inputs side by side followed by the mixed output, one row.
    Returns out_path when saved, otherwise the Figure.
    """
    grids = list(inputs) + [output]
    if titles is None:
        titles = [f"Input {i + 1}" for i in range(len(inputs))] + ["Mixed"]
    fig, axs = plt.subplots(1, len(grids), figsize=(4 * len(grids), 4), squeeze=False)

    for ax, grid, title in zip(axs[0], grids, titles):
        ax.imshow(grid.data, cmap="gray", vmin=0, vmax=255, interpolation="nearest")
        ax.set_title(title)
        ax.axis("off")

    if out_path:
        _ensure_outdir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight", pad_inches=0.05)
        plt.close(fig)
        return out_path
    return fig
