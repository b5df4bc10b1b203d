"""
core/filters.py

Rectangular frequency-region masks on a centred spectrum.

Bounds are inclusive on both ends: a cell (x, y) is inside when
start_x <= x <= end_x and start_y <= y <= end_y.
"""

import math
from dataclasses import dataclass
import numpy as np

from . import config


@dataclass(frozen=True)
class RegionSpec:
    start_x: int
    start_y: int
    end_x: int
    end_y: int
    pass_inside: bool = True


def whole_spectrum_region(width: int, height: int) -> RegionSpec:
    """Rectangle covering the full grid with pass_inside=True (a no-op mask)."""
    return RegionSpec(0, 0, width - 1, height - 1, pass_inside=True)


def region_from_fraction(
    padded_width: int,
    padded_height: int,
    size_fraction: float,
    pass_inside: bool = True,
) -> RegionSpec:
    """
    Centred rectangle whose sides are size_fraction of the padded grid.
    start = floor(center - side/2), end = floor(center + side/2) per axis.
    """
    size_fraction = float(size_fraction)
    if not (config.MIN_REGION_FRACTION <= size_fraction <= config.MAX_REGION_FRACTION):
        raise ValueError(
            f"size_fraction must be in [{config.MIN_REGION_FRACTION}, {config.MAX_REGION_FRACTION}], "
            f"got {size_fraction}."
        )
    region_w = padded_width * size_fraction
    region_h = padded_height * size_fraction
    center_x = padded_width / 2.0
    center_y = padded_height / 2.0
    return RegionSpec(
        start_x=int(math.floor(center_x - region_w / 2.0)),
        start_y=int(math.floor(center_y - region_h / 2.0)),
        end_x=int(math.floor(center_x + region_w / 2.0)),
        end_y=int(math.floor(center_y + region_h / 2.0)),
        pass_inside=bool(pass_inside),
    )


def classify(x: int, y: int, region: RegionSpec) -> bool:
    """True when (x, y) is active (kept) under region."""
    in_rect = region.start_x <= x <= region.end_x and region.start_y <= y <= region.end_y
    return in_rect if region.pass_inside else not in_rect


def build_region_mask(width: int, height: int, region: RegionSpec) -> np.ndarray:
    """
    Boolean (height, width) mask equal to classify() at every coordinate.
    """
    x = np.arange(width).reshape(1, width)
    y = np.arange(height).reshape(height, 1)
    in_x = (x >= region.start_x) & (x <= region.end_x)
    in_y = (y >= region.start_y) & (y <= region.end_y)
    in_rect = in_y & in_x
    return in_rect if region.pass_inside else ~in_rect

