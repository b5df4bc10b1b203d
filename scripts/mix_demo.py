"""
Mix a set of images in the frequency domain and save the result with diagnostics.

Saves the mixed output, spectrum views of every input and of the mix,
the region mask, a side-by-side comparison and a parameters.txt.

Usage (from project root):
python -m scripts.mix_demo

Edit the IMAGES list and the mix parameters below as needed.
"""

import logging
import os
from datetime import datetime

from core.errors import EmptyInputError
from core.mixer import Basis, Weight
from core.pipeline import FourierMixer, MixMode, MixRequest
from io_utils.image_handler import read_grayscale, save_image
from io_utils.file_utils import make_result_filename, save_parameters_txt
from visuals.plots import compare_and_save, plot_region_mask, save_spectrum_views

# CONFIG: up to four image paths, one per input slot (None leaves a slot empty)
IMAGES = [
    "data/image_1.png",
    "data/image_2.png",
    None,
    None,
]

# mix parameters
WEIGHTS = [
    Weight(1.0, 0.0),   # magnitude from image 1
    Weight(0.0, 1.0),   # phase from image 2
    Weight(0.0, 0.0),
    Weight(0.0, 0.0),
]
BASIS = Basis.MAG_PHASE
MODE = MixMode.REGION
REGION_FRACTION = 0.5
PASS_INSIDE = True
OUTPUT_SLOT = 1

timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
OUTDIR = os.path.join("results", f"mix_demo_{timestamp}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    os.makedirs(OUTDIR, exist_ok=True)

    mixer = FourierMixer()
    for slot, path in enumerate(IMAGES, start=1):
        if path is None:
            continue
        if not os.path.exists(path):
            print("Skipping missing:", path)
            continue
        print(f"Loading slot {slot}:", path)
        mixer.load_image(slot, read_grayscale(path))

    request = MixRequest(
        weights=tuple(WEIGHTS),
        basis=BASIS,
        mode=MODE,
        region_fraction=REGION_FRACTION,
        pass_inside=PASS_INSIDE,
        output_slot=OUTPUT_SLOT,
    )
    try:
        result = mixer.mix(request)
    except EmptyInputError as e:
        print("Nothing to mix:", e)
        return

    out_path = make_result_filename("ftmix", BASIS.value, MODE.value, OUTPUT_SLOT, "mixed", outdir=OUTDIR)
    save_image(out_path, result.output)

    inputs = []
    for slot in mixer.loaded_slots:
        img = mixer.image(slot)
        inputs.append(img.grid)
        save_spectrum_views(img.spectrum, OUTDIR, base_name=f"input{slot}")
    save_spectrum_views(result.spectrum, OUTDIR, base_name="mixed")
    plot_region_mask(result.spectrum.region, result.spectrum.shape, out_path=os.path.join(OUTDIR, "region_mask.png"))
    compare_and_save(inputs, result.output, out_path=os.path.join(OUTDIR, "comparison.png"))

    save_parameters_txt(OUTDIR, {
        "images": IMAGES,
        "weights": WEIGHTS,
        "basis": BASIS.value,
        "mode": MODE.value,
        "region_fraction": REGION_FRACTION,
        "pass_inside": PASS_INSIDE,
        "unified_size": mixer.unified_size,
        "region": result.spectrum.region,
    })
    print("Mix done. Results in:", OUTDIR)


if __name__ == "__main__":
    main()
