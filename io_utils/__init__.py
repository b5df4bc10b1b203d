# io/__init__.py
"""
I/O helpers package for the Fourier image mixer.
"""
from .image_handler import read_grayscale, save_image, resize_grid, grid_from_array, to_uint8
from .file_utils import make_result_filename, save_parameters_txt

__all__ = [
    "read_grayscale",
    "save_image",
    "resize_grid",
    "grid_from_array",
    "to_uint8",
    "make_result_filename",
    "save_parameters_txt",
]
