"""
core/pipeline.py

Request-scoped mixing pipeline and the four-in / two-out mixer session.

  1) prepare_image: pad -> forward transform (once per loaded image / size change)
  2) run_mix: region -> mix -> reconstruct, into fresh buffers
  3) FourierMixer.mix: publish the result to an output slot

A CancellationToken is sampled only at stage boundaries. Nothing is
published unless every stage completed, so a cancelled or failed mix
leaves the previous output slot contents untouched.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from . import config
from .errors import CancelledError, DimensionMismatchError, EmptyInputError
from .fft_engine import SpectrumPrimitive, forward_transform, pad_to_pow2
from .filters import RegionSpec, region_from_fraction, whole_spectrum_region
from .mixer import Basis, Weight, mix
from .reconstruction import reconstruct
from .types import IntensityGrid, LoadedImage, MixedSpectrum, OutputGrid, Spectrum

logger = logging.getLogger(__name__)


class MixMode(str, Enum):
    COMPONENT = "component"   # whole spectrum, no gating
    REGION = "region"         # centred rectangle, inner or outer pass


class CancellationToken:
    """Cooperative abort flag shared between the caller and a running mix."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str):
        if self._event.is_set():
            raise CancelledError(stage)


def _default_weights() -> Tuple[Weight, ...]:
    return tuple(Weight() for _ in range(config.NUM_INPUT_SLOTS))


@dataclass(frozen=True)
class MixRequest:
    """
    Immutable description of one mix.

    weights holds one Weight per input slot (slot 1 first); weights of
    empty slots are ignored. Plain (gain1, gain2) pairs are accepted.
    """
    weights: Tuple[Weight, ...] = field(default_factory=_default_weights)
    basis: Basis = Basis.MAG_PHASE
    mode: MixMode = MixMode.COMPONENT
    region_fraction: float = config.DEFAULT_REGION_FRACTION
    pass_inside: bool = True
    output_slot: int = 1

    def __post_init__(self):
        weights = tuple(w if isinstance(w, Weight) else Weight(*w) for w in self.weights)
        if len(weights) != config.NUM_INPUT_SLOTS:
            raise ValueError(f"Expected {config.NUM_INPUT_SLOTS} weights, got {len(weights)}.")
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "basis", Basis(self.basis))
        object.__setattr__(self, "mode", MixMode(self.mode))
        if self.output_slot not in config.OUTPUT_SLOTS:
            raise ValueError(f"output_slot must be one of {config.OUTPUT_SLOTS}, got {self.output_slot}.")
        if not (config.MIN_REGION_FRACTION <= float(self.region_fraction) <= config.MAX_REGION_FRACTION):
            raise ValueError(f"region_fraction out of range: {self.region_fraction}")

    def region_for(self, padded_width: int, padded_height: int) -> RegionSpec:
        if self.mode == MixMode.COMPONENT:
            return whole_spectrum_region(padded_width, padded_height)
        return region_from_fraction(padded_width, padded_height, self.region_fraction, self.pass_inside)


@dataclass(eq=False)
class MixResult:
    output: OutputGrid
    spectrum: MixedSpectrum
    request: MixRequest


def prepare_image(
    grid: IntensityGrid,
    primitive: Optional[SpectrumPrimitive] = None,
    token: Optional[CancellationToken] = None,
) -> LoadedImage:
    """Pad a grid and compute its centred spectrum."""
    padded = pad_to_pow2(grid)
    if token is not None:
        token.raise_if_cancelled("padding")
    re, im = forward_transform(
        padded.data, np.zeros_like(padded.data), padded.width, padded.height, primitive=primitive
    )
    if token is not None:
        token.raise_if_cancelled("forward transform")
    logger.debug("Prepared %dx%d image on %dx%d canvas", grid.width, grid.height, padded.width, padded.height)
    return LoadedImage(grid=grid, padded=padded, spectrum=Spectrum(re, im))


def run_mix(
    images: Sequence[LoadedImage],
    weights: Sequence[Weight],
    request: MixRequest,
    token: Optional[CancellationToken] = None,
    primitive: Optional[SpectrumPrimitive] = None,
) -> MixResult:
    """
    Mix already prepared images and reconstruct the output grid.
    Pure: reads the images, allocates its own buffers, publishes nothing.
    """
    token = token or CancellationToken()
    if not images:
        raise EmptyInputError("Nothing to mix: load at least one image.")
    token.raise_if_cancelled("start")

    width, height = images[0].width, images[0].height
    for img in images[1:]:
        if (img.width, img.height) != (width, height):
            raise DimensionMismatchError(
                f"Image size {img.width}x{img.height} differs from {width}x{height}; unify sizes first."
            )

    first = images[0].spectrum
    region = request.region_for(first.padded_width, first.padded_height)
    logger.debug("Mixing %d image(s), basis=%s, region=%s", len(images), request.basis.value, region)
    mixed = mix([img.spectrum for img in images], weights, request.basis, region)
    token.raise_if_cancelled("mixing")

    output = reconstruct(mixed, width, height, primitive=primitive)
    token.raise_if_cancelled("reconstruction")
    return MixResult(output=output, spectrum=mixed, request=request)


Resizer = Callable[[IntensityGrid, int, int], IntensityGrid]


class FourierMixer:
    """
    Session holding up to four input images and two output slots.

    Loaded images are unified to the size of the smallest-area image; when
    that size changes every slot is resized and re-transformed in full.
    Publishing to an output slot is last-started-wins: a mix that began
    earlier never overwrites the result of one that began later.
    """

    def __init__(self, primitive: Optional[SpectrumPrimitive] = None, resizer: Optional[Resizer] = None):
        if resizer is None:
            # default Pillow resampler; core modules never import io_utils at load time
            from io_utils.image_handler import resize_grid as resizer
        self._primitive = primitive
        self._resizer = resizer
        self._lock = threading.Lock()
        self._sources: List[Optional[IntensityGrid]] = [None] * config.NUM_INPUT_SLOTS
        self._images: List[Optional[LoadedImage]] = [None] * config.NUM_INPUT_SLOTS
        self._outputs: Dict[int, Optional[MixResult]] = {slot: None for slot in config.OUTPUT_SLOTS}
        self._published_seq: Dict[int, int] = {slot: 0 for slot in config.OUTPUT_SLOTS}
        self._seq = itertools.count(1)
        self._unified_size: Tuple[int, int] = (0, 0)

    # --- inputs ---
    @staticmethod
    def _check_input_slot(slot: int) -> int:
        if not (1 <= slot <= config.NUM_INPUT_SLOTS):
            raise ValueError(f"Input slot must be in 1..{config.NUM_INPUT_SLOTS}, got {slot}.")
        return slot - 1

    @property
    def unified_size(self) -> Tuple[int, int]:
        return self._unified_size

    @property
    def loaded_slots(self) -> List[int]:
        return [i + 1 for i, img in enumerate(self._images) if img is not None]

    def image(self, slot: int) -> Optional[LoadedImage]:
        return self._images[self._check_input_slot(slot)]

    def load_image(self, slot: int, grid: IntensityGrid) -> LoadedImage:
        """
        Store grid in slot and (re)compute its spectrum. A grid with zero width
        or height is rejected; on any failure the session is left as it was.
        """
        idx = self._check_input_slot(slot)
        if grid.width == 0 or grid.height == 0:
            raise ValueError(f"Cannot load an empty {grid.width}x{grid.height} image into slot {slot}.")
        with self._lock:
            sources = list(self._sources)
            sources[idx] = grid
            self._refresh(sources, changed=idx)
            return self._images[idx]

    def clear_image(self, slot: int):
        idx = self._check_input_slot(slot)
        with self._lock:
            sources = list(self._sources)
            sources[idx] = None
            self._refresh(sources, changed=None)

    @staticmethod
    def _target_size(sources: Sequence[Optional[IntensityGrid]]) -> Tuple[int, int]:
        loaded = [g for g in sources if g is not None]
        if not loaded:
            return (0, 0)
        smallest = min(loaded, key=lambda g: g.width * g.height)
        return (smallest.width, smallest.height)

    def _prepare(self, grid: IntensityGrid, size: Tuple[int, int]) -> LoadedImage:
        width, height = size
        if (grid.width, grid.height) != (width, height):
            grid = self._resizer(grid, width, height)
        return prepare_image(grid, primitive=self._primitive)

    def _refresh(self, sources: List[Optional[IntensityGrid]], changed: Optional[int]):
        """
        Prepare every affected slot from `sources`, then commit sources, images
        and unified size together. Nothing is committed if a slot fails.
        """
        target = self._target_size(sources)
        images = list(self._images)
        if target != self._unified_size:
            logger.info("Unified size changed %s -> %s; recomputing all spectra", self._unified_size, target)
            images = [self._prepare(src, target) if src is not None else None for src in sources]
        elif changed is not None:
            src = sources[changed]
            images[changed] = self._prepare(src, target) if src is not None else None
        else:
            images = [img if src is not None else None for img, src in zip(images, sources)]

        self._sources = sources
        self._images = images
        self._unified_size = target

    # --- outputs ---
    def output(self, slot: int) -> Optional[MixResult]:
        if slot not in config.OUTPUT_SLOTS:
            raise ValueError(f"Output slot must be one of {config.OUTPUT_SLOTS}, got {slot}.")
        return self._outputs[slot]

    def mix(self, request: MixRequest, token: Optional[CancellationToken] = None) -> MixResult:
        """
        Run a mix over the loaded slots and publish it to request.output_slot.
        Raises EmptyInputError / CancelledError without touching any output slot.
        """
        with self._lock:
            seq = next(self._seq)
            pairs = [(img, request.weights[i]) for i, img in enumerate(self._images) if img is not None]
        if not pairs:
            raise EmptyInputError("Nothing to mix: load at least one image.")

        try:
            result = run_mix(
                [img for img, _ in pairs],
                [w for _, w in pairs],
                request,
                token=token,
                primitive=self._primitive,
            )
        except CancelledError as exc:
            logger.info("Mix #%d for output %d cancelled at %s", seq, request.output_slot, exc.stage)
            raise

        slot = request.output_slot
        with self._lock:
            if seq > self._published_seq[slot]:
                self._outputs[slot] = result
                self._published_seq[slot] = seq
                logger.info("Mix #%d published to output %d", seq, slot)
            else:
                logger.debug("Mix #%d for output %d superseded by #%d", seq, slot, self._published_seq[slot])
        return result
