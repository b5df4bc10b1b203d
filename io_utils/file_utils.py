# io/file_utils.py
"""
File naming and parameter recording helpers.
"""

import os
import datetime
from typing import Dict


def make_result_filename(
    projname: str,
    basis: str,
    mode: str,
    output_slot: int,
    desc: str,
    ext: str = "png",
    outdir: str = ".",
) -> str:
    timestamp = datetime.datetime.now().strftime("%Y%m%dT%H%M%S")
    safe_basis = str(basis).replace("/", "-")
    safe_desc = str(desc).replace(" ", "_")
    fname = f"{projname}_{safe_basis}_{mode}_out{output_slot}_{safe_desc}_{timestamp}.{ext}"
    os.makedirs(outdir, exist_ok=True)
    return os.path.join(outdir, fname)


def save_parameters_txt(outdir: str, params: Dict):
    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, "parameters.txt")
    with open(path, "w", encoding="utf-8") as f:
        for k, v in params.items():
            f.write(f"{k}: {v}\n")
    return path
