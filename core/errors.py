"""
core/errors.py

Exception types raised by the mixing engine.
Parameter problems (bad slot index, fraction out of range, ...) raise ValueError.
"""


class MixerError(Exception):
    """Base class for mixer failures."""


class EmptyInputError(MixerError):
    """A mix was requested with no loaded images (nothing to mix)."""


class DimensionMismatchError(MixerError):
    """Padded and original sizes disagree, or spectra of different shapes met in a mix."""


class CancelledError(MixerError):
    """An in-flight mix was aborted by its caller before publishing."""

    def __init__(self, stage: str = ""):
        self.stage = stage
        msg = "Mix cancelled" + (f" at stage '{stage}'" if stage else "")
        super().__init__(msg)
