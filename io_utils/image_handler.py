# io/image_handler.py
"""
Image read/write helpers using Pillow.

Functions:
- read_grayscale(path) -> IntensityGrid (luminance, 0..255)
- save_image(path, array_or_grid) -> writes an 8-bit grayscale image
- resize_grid(grid, width, height) -> IntensityGrid resampled with Pillow
- grid_from_array(array) -> IntensityGrid (RGB arrays reduced to luminance)
"""

from PIL import Image
import pillow_avif  # noqa: F401  (registers the AVIF decoder)
import numpy as np

from core.types import IntensityGrid

# ITU-R 601 luma, the same weights Pillow uses for mode "L"
_LUMA = np.array([0.299, 0.587, 0.114])


def read_grayscale(path: str) -> IntensityGrid:
    """
    Read an image from `path` and return its luminance as an IntensityGrid.
    Alpha is discarded.
    """
    img = Image.open(path)
    if img.mode in ("RGBA", "LA", "P") or ("transparency" in img.info):
        img = img.convert("RGBA").convert("RGB")
    img = img.convert("L")
    return IntensityGrid(np.asarray(img, dtype=np.float64))


def grid_from_array(array: np.ndarray) -> IntensityGrid:
    """Wrap an HxW array, or reduce an HxWx3(4) array to luminance."""
    arr = np.asarray(array, dtype=np.float64)
    if arr.ndim == 3 and arr.shape[2] in (3, 4):
        arr = arr[..., :3] @ _LUMA
    elif arr.ndim != 2:
        raise ValueError("grid_from_array expects HxW, HxWx3 or HxWx4 array.")
    return IntensityGrid(arr)


def to_uint8(array: np.ndarray) -> np.ndarray:
    """Clip to 0..255 and round to uint8."""
    return np.rint(np.clip(np.asarray(array, dtype=np.float64), 0.0, 255.0)).astype(np.uint8)


def save_image(path: str, image):
    """
    Save an IntensityGrid or an HxW array to `path` as 8-bit grayscale.
    Floats are clipped to 0..255.
    """
    array = image.data if isinstance(image, IntensityGrid) else np.asarray(image)
    if array.ndim != 2:
        raise ValueError("save_image expects an HxW array or IntensityGrid.")
    Image.fromarray(to_uint8(array)).save(path)
    return path


def resize_grid(grid: IntensityGrid, width: int, height: int) -> IntensityGrid:
    """
    Resample grid to width x height with a high quality (Lanczos) filter.
    Works in float ("F" mode) so no precision is lost before the transform.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Cannot resize to {width}x{height}.")
    if (grid.width, grid.height) == (width, height):
        return IntensityGrid(grid.data.copy())
    img = Image.fromarray(grid.data.astype(np.float32))
    img = img.resize((int(width), int(height)), resample=Image.LANCZOS)
    return IntensityGrid(np.clip(np.asarray(img, dtype=np.float64), 0.0, 255.0))
