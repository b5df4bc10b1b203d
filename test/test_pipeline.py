import threading
import numpy as np
import pytest
from core.errors import CancelledError, EmptyInputError
from core.filters import build_region_mask
from core.mixer import Basis, Weight
from core.pipeline import CancellationToken, FourierMixer, MixMode, MixRequest, prepare_image, run_mix
from core.types import IntensityGrid


def _grid(h, w, seed=0):
    rng = np.random.default_rng(seed)
    return IntensityGrid(rng.uniform(0, 255, size=(h, w)))


def _identity_request(slot=1, output_slot=1):
    weights = [Weight(0.0, 0.0)] * 4
    weights[slot - 1] = Weight(1.0, 1.0)
    return MixRequest(weights=tuple(weights), basis=Basis.REAL_IMAG, mode=MixMode.COMPONENT,
                      output_slot=output_slot)


def test_request_validation():
    with pytest.raises(ValueError):
        MixRequest(weights=(Weight(),) * 3)
    with pytest.raises(ValueError):
        MixRequest(output_slot=3)
    with pytest.raises(ValueError):
        MixRequest(region_fraction=0.05)
    with pytest.raises(ValueError):
        MixRequest(mode="circle")

def test_request_accepts_plain_pairs():
    req = MixRequest(weights=((1, 0), (0, 1), (0, 0), (0.5, 0.5)), basis="Real/Imag", mode="region")
    assert req.weights[3] == Weight(0.5, 0.5)
    assert req.basis is Basis.REAL_IMAG
    assert req.mode is MixMode.REGION

def test_mix_without_images():
    mixer = FourierMixer()
    with pytest.raises(EmptyInputError):
        mixer.mix(MixRequest())
    assert mixer.output(1) is None and mixer.output(2) is None

def test_single_image_identity():
    mixer = FourierMixer()
    grid = _grid(12, 20)
    mixer.load_image(2, grid)
    result = mixer.mix(_identity_request(slot=2, output_slot=2))
    assert result.output.data.shape == (12, 20)
    assert np.allclose(result.output.data, grid.data, atol=1e-6)
    assert mixer.output(2) is result
    assert mixer.output(1) is None

def test_unified_size_is_smallest_area():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(16, 16))
    mixer.load_image(3, _grid(4, 8, seed=1))
    assert mixer.unified_size == (8, 4)
    assert mixer.loaded_slots == [1, 3]
    assert mixer.image(1).grid.data.shape == (4, 8)
    assert mixer.image(1).spectrum.shape == (4, 8)
    mixer.clear_image(3)
    assert mixer.unified_size == (16, 16)
    assert mixer.image(1).grid.data.shape == (16, 16)

def test_input_slot_validation():
    mixer = FourierMixer()
    with pytest.raises(ValueError):
        mixer.load_image(0, _grid(4, 4))
    with pytest.raises(ValueError):
        mixer.load_image(5, _grid(4, 4))
    with pytest.raises(ValueError):
        mixer.output(0)

def test_region_mode_gates_mixed_spectrum():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(16, 16))
    mixer.load_image(2, _grid(16, 16, seed=3))
    req = MixRequest(mode=MixMode.REGION, region_fraction=0.25, pass_inside=True)
    result = mixer.mix(req)
    region = result.spectrum.region
    assert (region.start_x, region.end_x) == (6, 10)
    inactive = ~build_region_mask(16, 16, region)
    assert np.all(result.spectrum.magnitude[inactive] == 0)
    assert np.all((result.output.data >= 0) & (result.output.data <= 255))

def test_cancel_before_start_preserves_output():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(8, 8))
    first = mixer.mix(_identity_request())
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError) as exc:
        mixer.mix(MixRequest(weights=((2, 2),) * 4), token=token)
    assert exc.value.stage == "start"
    assert mixer.output(1) is first

def test_cancel_between_stages():
    class CancelAfterMixing(CancellationToken):
        def raise_if_cancelled(self, stage):
            if stage == "mixing":
                self.cancel()
            super().raise_if_cancelled(stage)

    mixer = FourierMixer()
    mixer.load_image(1, _grid(8, 8))
    with pytest.raises(CancelledError) as exc:
        mixer.mix(_identity_request(), token=CancelAfterMixing())
    assert exc.value.stage == "mixing"
    assert mixer.output(1) is None

def test_cancel_after_reconstruction_keeps_previous_output():
    class CancelAfterReconstruction(CancellationToken):
        def raise_if_cancelled(self, stage):
            if stage == "reconstruction":
                self.cancel()
            super().raise_if_cancelled(stage)

    mixer = FourierMixer()
    mixer.load_image(1, _grid(8, 8))
    first = mixer.mix(_identity_request())
    with pytest.raises(CancelledError) as exc:
        mixer.mix(MixRequest(weights=((2, 2),) * 4), token=CancelAfterReconstruction())
    assert exc.value.stage == "reconstruction"
    assert mixer.output(1) is first

def test_prepare_image_cancellation():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError):
        prepare_image(_grid(4, 4), token=token)

def test_later_started_mix_wins():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(8, 8))
    later = {}

    class StartSecondMix(CancellationToken):
        def raise_if_cancelled(self, stage):
            # while the first mix is in flight, a second one starts and publishes
            if stage == "mixing" and not later:
                later["result"] = mixer.mix(MixRequest(weights=((0.5, 0.5),) * 4, basis=Basis.REAL_IMAG))
            super().raise_if_cancelled(stage)

    first = mixer.mix(_identity_request(), token=StartSecondMix())
    assert mixer.output(1) is later["result"]
    assert mixer.output(1) is not first

def test_concurrent_mixes_to_different_slots():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(32, 32))
    mixer.load_image(2, _grid(32, 32, seed=5))
    errors = []

    def run(slot):
        try:
            mixer.mix(MixRequest(output_slot=slot, basis=Basis.REAL_IMAG))
        except Exception as e:  # collected for the assertion below
            errors.append(e)

    threads = [threading.Thread(target=run, args=(s,)) for s in (1, 2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not errors
    assert np.allclose(mixer.output(1).output.data, mixer.output(2).output.data)

def test_run_mix_is_pure():
    img = prepare_image(_grid(4, 4))
    before = img.spectrum.real.copy()
    run_mix([img], [Weight(3.0, 3.0)], MixRequest(basis=Basis.REAL_IMAG))
    assert np.array_equal(img.spectrum.real, before)

def test_run_mix_empty():
    with pytest.raises(EmptyInputError):
        run_mix([], [], MixRequest())

def test_empty_grid_rejected_without_touching_session():
    mixer = FourierMixer()
    mixer.load_image(1, IntensityGrid(np.ones((8, 8))))
    before = mixer.image(1)
    with pytest.raises(ValueError):
        mixer.load_image(2, IntensityGrid(np.zeros((0, 0))))
    with pytest.raises(ValueError):
        mixer.load_image(2, IntensityGrid(np.zeros((4, 0))))
    assert mixer.unified_size == (8, 8)
    assert mixer.loaded_slots == [1]
    assert mixer.image(1) is before
    mixer.load_image(3, IntensityGrid(np.ones((8, 8))))
    assert mixer.loaded_slots == [1, 3]

def test_failed_resize_rolls_back_load():
    def failing_resizer(grid, width, height):
        raise RuntimeError("resampler unavailable")

    mixer = FourierMixer(resizer=failing_resizer)
    mixer.load_image(1, _grid(8, 8))
    before = mixer.image(1)
    # a smaller image changes the unified size and forces slot 1 through the resizer
    with pytest.raises(RuntimeError):
        mixer.load_image(2, _grid(4, 4))
    assert mixer.unified_size == (8, 8)
    assert mixer.loaded_slots == [1]
    assert mixer.image(1) is before
    assert mixer.image(2) is None
    mixer.load_image(2, _grid(8, 8, seed=2))
    assert mixer.loaded_slots == [1, 2]

def test_injected_resizer_is_used():
    calls = []

    def nearest_resizer(grid, width, height):
        calls.append((grid.width, grid.height, width, height))
        ys = np.arange(height) * grid.height // height
        xs = np.arange(width) * grid.width // width
        return IntensityGrid(grid.data[np.ix_(ys, xs)])

    mixer = FourierMixer(resizer=nearest_resizer)
    mixer.load_image(1, _grid(16, 16))
    mixer.load_image(2, _grid(8, 8, seed=1))
    assert calls == [(16, 16, 8, 8)]
    assert mixer.image(1).grid.data.shape == (8, 8)

def test_clear_image_keeps_other_slots():
    mixer = FourierMixer()
    mixer.load_image(1, _grid(8, 8))
    mixer.load_image(2, _grid(8, 8, seed=4))
    kept = mixer.image(1)
    mixer.clear_image(2)
    assert mixer.loaded_slots == [1]
    assert mixer.image(1) is kept
    assert mixer.unified_size == (8, 8)
