"""
Core package init for the Fourier image mixer.
Exposes public modules for import in tests and scripts.
"""
__all__ = [
    "config",
    "errors",
    "types",
    "fft_engine",
    "spectral_features",
    "filters",
    "mixer",
    "reconstruction",
    "pipeline",
]
