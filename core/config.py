"""
core/config.py

Engine defaults. Edit here rather than in call sites.
"""

# input/output slots (1-based in the public API)
NUM_INPUT_SLOTS = 4
OUTPUT_SLOTS = (1, 2)

# default gains applied to both components of every slot
DEFAULT_COMPONENT1_GAIN = 0.25
DEFAULT_COMPONENT2_GAIN = 0.25

# region mode: rectangle side as a fraction of the padded grid
DEFAULT_REGION_FRACTION = 0.5
MIN_REGION_FRACTION = 0.1
MAX_REGION_FRACTION = 1.0

# valid sample range of an intensity grid
INTENSITY_MIN = 0.0
INTENSITY_MAX = 255.0
