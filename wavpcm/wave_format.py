"""Constants and header layout for canonical 44-byte PCM WAV files."""

from __future__ import annotations

import struct
from dataclasses import dataclass


RIFF_TAG = b"RIFF"
WAVE_TAG = b"WAVE"
FMT_TAG = b"fmt "
DATA_TAG = b"data"

PCM_FORMAT = 1
FMT_CHUNK_SIZE = 16
HEADER_SIZE = 44

# Samples are always streamed as little-endian int16.
SAMPLE_WIDTH = 2
SAMPLE_DTYPE = "<i2"

# RIFF size is data size + 36 and must still fit a u32.
MAX_DATA_SIZE = 0xFFFFFFFF - (HEADER_SIZE - 8)

HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def bytes_per_sample(bits_per_sample: int) -> int:
    """Round a bit depth up to whole bytes."""
    return (bits_per_sample + 7) // 8


@dataclass(frozen=True)
class FormatDescriptor:
    """Format metadata of a PCM WAV file."""

    sample_rate: int
    channels: int
    bits_per_sample: int
    data_size: int
    file_size: int

    @property
    def bytes_per_sample(self) -> int:
        return bytes_per_sample(self.bits_per_sample)

    @property
    def block_align(self) -> int:
        return self.channels * self.bytes_per_sample

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

    @property
    def length_seconds(self) -> int:
        """Whole seconds of audio; 0 if any rate factor is 0."""
        if self.byte_rate == 0:
            return 0
        return self.data_size // self.byte_rate


def pack_header(descriptor: FormatDescriptor) -> bytes:
    """Build the canonical 44-byte header for ``descriptor``.

    The RIFF size field is derived from ``data_size``; ``file_size`` is
    not consulted.
    """
    data_size = descriptor.data_size
    if data_size < 0 or data_size > MAX_DATA_SIZE:
        raise ValueError(f"data_size {data_size} does not fit a WAV header.")
    return HEADER_STRUCT.pack(
        RIFF_TAG,
        data_size + HEADER_SIZE - 8,
        WAVE_TAG,
        FMT_TAG,
        FMT_CHUNK_SIZE,
        PCM_FORMAT,
        descriptor.channels,
        descriptor.sample_rate,
        descriptor.byte_rate,
        descriptor.block_align,
        descriptor.bits_per_sample,
        DATA_TAG,
        data_size,
    )
