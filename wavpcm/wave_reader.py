"""Streaming reader for canonical PCM WAV files."""

from __future__ import annotations

import logging
import os
import struct
from typing import BinaryIO
from typing import MutableSequence
from typing import Optional
from typing import Union

import numpy as np

from .errors import FormatError, SessionClosedError, UnsupportedFormatError
from .wave_format import (
    DATA_TAG,
    FMT_CHUNK_SIZE,
    FMT_TAG,
    HEADER_SIZE,
    PCM_FORMAT,
    RIFF_TAG,
    SAMPLE_DTYPE,
    SAMPLE_WIDTH,
    WAVE_TAG,
    FormatDescriptor,
)


logger = logging.getLogger(__name__)

STREAM_BUFFER_SIZE = 4096

# Returned by the read calls when the file's channel count does not match.
CHANNEL_MISMATCH = -1

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class WaveReader:
    """Reads the header of a PCM WAV file and streams int16 samples out of it.

    Usage::

        reader = WaveReader("in.wav")
        reader.open_wave()
        buf = np.zeros(1024, dtype=np.int16)
        count = reader.read(buf, len(buf))
        while count > 0:
            consume(buf[:count])
            count = reader.read(buf, len(buf))
        reader.close_wave_file()

    A reader is single use: once closed it cannot be reopened.
    """

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.path = os.fspath(path)
        self.warnings: list[str] = []
        self._stream: Optional[BinaryIO] = None
        self._closed = False
        self._format = FormatDescriptor(
            sample_rate=0, channels=0, bits_per_sample=0, data_size=0, file_size=0
        )
        self._remaining = 0

    def __enter__(self) -> "WaveReader":
        self.open_wave()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._stream is not None:
            self.close_wave_file()

    @property
    def format(self) -> FormatDescriptor:
        """Parsed format; all fields are 0 until ``open_wave`` succeeds."""
        return self._format

    @property
    def sample_rate(self) -> int:
        return self._format.sample_rate

    @property
    def channels(self) -> int:
        return self._format.channels

    @property
    def bits_per_sample(self) -> int:
        return self._format.bits_per_sample

    @property
    def data_size(self) -> int:
        return self._format.data_size

    @property
    def file_size(self) -> int:
        return self._format.file_size

    def open_wave(self) -> None:
        """Open the file and validate the RIFF/WAVE/fmt/data header.

        Raises:
            FormatError: a chunk tag is wrong or the header is truncated.
            UnsupportedFormatError: the audio format code is not PCM.
            OSError: the file cannot be opened or read.
        """
        if self._closed:
            raise SessionClosedError("WaveReader cannot be reopened after close.")
        if self._stream is not None:
            raise RuntimeError("WaveReader is already open.")

        stream = open(self.path, "rb", buffering=STREAM_BUFFER_SIZE)
        try:
            descriptor = self._read_header(stream)
        except BaseException:
            stream.close()
            raise

        self._stream = stream
        self._format = descriptor
        self._remaining = descriptor.data_size
        logger.debug(
            "Opened %s: %d Hz, %d channel(s), %d bit, %d data bytes",
            self.path,
            descriptor.sample_rate,
            descriptor.channels,
            descriptor.bits_per_sample,
            descriptor.data_size,
        )

    def get_length(self) -> int:
        """Return the audio length in whole seconds (0 if unknown)."""
        return self._format.length_seconds

    def read(self, dst: MutableSequence[int], num_samples: int) -> int:
        """Read up to ``num_samples`` mono samples into ``dst``.

        Returns the number of samples stored, which is less than requested
        (possibly 0) once the data chunk is exhausted, or ``CHANNEL_MISMATCH``
        if the file is not mono.
        """
        stream = self._require_open()
        if self._format.channels != 1:
            return CHANNEL_MISMATCH
        _check_capacity(num_samples, dst)

        samples = self._read_frames(stream, num_samples, 1)
        _fill(dst, samples)
        return int(samples.size)

    def read_stereo(
        self,
        left: MutableSequence[int],
        right: MutableSequence[int],
        num_samples: int,
    ) -> int:
        """Read up to ``num_samples`` L/R frames, de-interleaving them.

        Returns the number of frames stored in each buffer, or
        ``CHANNEL_MISMATCH`` if the file is not stereo.
        """
        stream = self._require_open()
        if self._format.channels != 2:
            return CHANNEL_MISMATCH
        _check_capacity(num_samples, left, right)

        frames = self._read_frames(stream, num_samples, 2).reshape(-1, 2)
        _fill(left, frames[:, 0])
        _fill(right, frames[:, 1])
        return int(frames.shape[0])

    def close_wave_file(self) -> None:
        """Close the file. The reader cannot be used again afterwards."""
        stream = self._require_open()
        self._stream = None
        self._closed = True
        stream.close()

    def _require_open(self) -> BinaryIO:
        if self._stream is None:
            state = "closed" if self._closed else "not open"
            raise SessionClosedError(f"WaveReader for {self.path} is {state}.")
        return self._stream

    def _read_frames(self, stream: BinaryIO, num_frames: int, channels: int) -> np.ndarray:
        frame_bytes = channels * SAMPLE_WIDTH
        wanted = min(num_frames * frame_bytes, self._remaining)
        wanted -= wanted % frame_bytes
        if wanted <= 0:
            return np.zeros(0, dtype=SAMPLE_DTYPE)

        raw = stream.read(wanted)
        self._remaining -= len(raw)
        usable = len(raw) - len(raw) % frame_bytes
        return np.frombuffer(raw[:usable], dtype=SAMPLE_DTYPE)

    def _read_header(self, stream: BinaryIO) -> FormatDescriptor:
        self.warnings = []

        _expect_tag(stream, RIFF_TAG, "header chunk ID")
        riff_size = _read_u32(stream, "RIFF size")
        _expect_tag(stream, WAVE_TAG, "format")
        _expect_tag(stream, FMT_TAG, "format chunk ID")
        fmt_size = _read_u32(stream, "format chunk size")
        audio_format = _read_u16(stream, "audio format")
        if audio_format != PCM_FORMAT:
            raise UnsupportedFormatError(audio_format)
        channels = _read_u16(stream, "channel count")
        sample_rate = _read_u32(stream, "sample rate")
        byte_rate = _read_u32(stream, "byte rate")
        block_align = _read_u16(stream, "block align")
        bits_per_sample = _read_u16(stream, "bits per sample")
        _expect_tag(stream, DATA_TAG, "data chunk ID")
        data_size = _read_u32(stream, "data size")

        descriptor = FormatDescriptor(
            sample_rate=sample_rate,
            channels=channels,
            bits_per_sample=bits_per_sample,
            data_size=data_size,
            file_size=riff_size + 8,
        )

        if fmt_size != FMT_CHUNK_SIZE:
            self.warnings.append(
                f"Format chunk size is {fmt_size}, expected {FMT_CHUNK_SIZE}; accepted."
            )
        if byte_rate != descriptor.byte_rate:
            self.warnings.append(
                f"Declared byte rate {byte_rate} differs from computed {descriptor.byte_rate}."
            )
        if block_align != descriptor.block_align:
            self.warnings.append(
                f"Declared block align {block_align} differs from computed "
                f"{descriptor.block_align}."
            )
        if riff_size != data_size + HEADER_SIZE - 8:
            self.warnings.append(
                f"RIFF size {riff_size} does not match data size {data_size} + 36."
            )
        if descriptor.block_align and data_size % descriptor.block_align:
            self.warnings.append(
                f"Data size {data_size} is not a multiple of block align "
                f"{descriptor.block_align}."
            )
        for message in self.warnings:
            logger.debug("%s: %s", self.path, message)
        return descriptor


def _read_exact(stream: BinaryIO, size: int, field: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FormatError(f"WAV header is truncated while reading {field}.")
    return data


def _expect_tag(stream: BinaryIO, tag: bytes, field: str) -> None:
    value = stream.read(len(tag))
    if value != tag:
        raise FormatError(
            f"Invalid {field}: expected {tag.decode('ascii')!r}, got {value!r}.",
            expected=tag,
        )


def _read_u16(stream: BinaryIO, field: str) -> int:
    return _U16.unpack(_read_exact(stream, _U16.size, field))[0]


def _read_u32(stream: BinaryIO, field: str) -> int:
    return _U32.unpack(_read_exact(stream, _U32.size, field))[0]


def _check_capacity(num_samples: int, *buffers: MutableSequence[int]) -> None:
    if num_samples < 0:
        raise ValueError("num_samples must be >= 0.")
    for buffer in buffers:
        if len(buffer) < num_samples:
            raise ValueError(
                f"Buffer holds {len(buffer)} samples, {num_samples} requested."
            )


def _fill(buffer: MutableSequence[int], values: np.ndarray) -> None:
    count = values.size
    if isinstance(buffer, np.ndarray):
        buffer[:count] = values
    else:
        for index, value in enumerate(values.tolist()):
            buffer[index] = value
