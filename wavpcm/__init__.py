"""Public package exports for wavpcm."""

from .errors import FormatError, SessionClosedError, UnsupportedFormatError, WaveError
from .wave_format import FormatDescriptor
from .wave_reader import CHANNEL_MISMATCH, WaveReader
from .wave_writer import WaveWriter

__all__ = [
    "CHANNEL_MISMATCH",
    "FormatDescriptor",
    "FormatError",
    "SessionClosedError",
    "UnsupportedFormatError",
    "WaveError",
    "WaveReader",
    "WaveWriter",
]
