# visuals/__init__.py
"""
Visual helpers for the Fourier image mixer.
Provides display normalization and export utilities used by scripts.
"""
from .plots import (
    normalize_for_display,
    plot_magnitude_spectrum,
    plot_phase_spectrum,
    plot_region_mask,
    save_spectrum_views,
    compare_and_save,
)
__all__ = [
    "normalize_for_display",
    "plot_magnitude_spectrum",
    "plot_phase_spectrum",
    "plot_region_mask",
    "save_spectrum_views",
    "compare_and_save",
]
