"""Streaming writer for canonical PCM WAV files."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO
from typing import Optional
from typing import Sequence
from typing import Union

import numpy as np

from .config import normalize_format
from .errors import SessionClosedError
from .wave_format import (
    HEADER_SIZE,
    MAX_DATA_SIZE,
    SAMPLE_DTYPE,
    SAMPLE_WIDTH,
    FormatDescriptor,
    pack_header,
)


logger = logging.getLogger(__name__)

OUTPUT_STREAM_BUFFER = 16384


def to_pcm16(values: Sequence[int], num_samples: int) -> np.ndarray:
    """Take the first ``num_samples`` values as little-endian int16.

    Out-of-range integers wrap the way a 16-bit cast would.
    """
    if num_samples < 0:
        raise ValueError("num_samples must be >= 0.")
    if len(values) < num_samples:
        raise ValueError(f"Buffer holds {len(values)} samples, {num_samples} requested.")
    return np.asarray(values[:num_samples]).astype(np.int64).astype(SAMPLE_DTYPE)


class WaveWriter:
    """Streams int16 samples into a new WAV file.

    The header is reserved as 44 zero bytes by ``create_wave_file`` and
    rewritten with the final sizes by ``close_wave_file``, so the audio is
    never held in memory. A writer is single use.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        sample_rate: int,
        channels: int,
        sample_bits: int,
    ) -> None:
        self.path = os.fspath(path)
        self.sample_rate, self.channels, self.sample_bits = normalize_format(
            sample_rate, channels, sample_bits
        )
        self.bytes_written = 0
        self._stream: Optional[BinaryIO] = None
        self._closed = False

    def __enter__(self) -> "WaveWriter":
        if not self.create_wave_file():
            raise FileExistsError(f"Could not create {self.path}.")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._stream is not None:
            self.close_wave_file()

    def create_wave_file(self) -> bool:
        """Replace any file at ``path`` with a new one holding a blank header.

        Returns False if the file could not be created exclusively. Other
        I/O failures raise ``OSError``.
        """
        if self._closed:
            raise SessionClosedError("WaveWriter cannot be reused after close.")
        if self._stream is not None:
            raise RuntimeError("WaveWriter is already open.")

        if os.path.lexists(self.path):
            os.remove(self.path)
        try:
            stream = open(self.path, "xb", buffering=OUTPUT_STREAM_BUFFER)
        except FileExistsError:
            return False

        try:
            stream.write(bytes(HEADER_SIZE))
        except BaseException:
            stream.close()
            raise
        self._stream = stream
        self.bytes_written = 0
        logger.debug("Created %s with %d byte header placeholder", self.path, HEADER_SIZE)
        return True

    def write(self, src: Sequence[int], num_samples: int) -> None:
        """Append ``num_samples`` mono samples. Does nothing unless mono."""
        stream = self._require_open()
        if self.channels != 1:
            return
        self._append(stream, to_pcm16(src, num_samples))

    def write_stereo(
        self,
        left: Sequence[int],
        right: Sequence[int],
        num_samples: int,
    ) -> None:
        """Append ``num_samples`` frames, interleaved L then R. Does nothing unless stereo."""
        stream = self._require_open()
        if self.channels != 2:
            return
        left_pcm = to_pcm16(left, num_samples)
        right_pcm = to_pcm16(right, num_samples)
        interleaved = np.empty(num_samples * 2, dtype=SAMPLE_DTYPE)
        interleaved[0::2] = left_pcm
        interleaved[1::2] = right_pcm
        self._append(stream, interleaved)

    def close_wave_file(self) -> None:
        """Close the stream and backfill the header. The writer is finished afterwards."""
        stream = self._require_open()
        self._stream = None
        self._closed = True
        try:
            stream.flush()
        finally:
            stream.close()
        self._write_wave_header()

    def descriptor(self) -> FormatDescriptor:
        """Format of the file as it would be finalized now."""
        return FormatDescriptor(
            sample_rate=self.sample_rate,
            channels=self.channels,
            bits_per_sample=self.sample_bits,
            data_size=self.bytes_written,
            file_size=self.bytes_written + HEADER_SIZE,
        )

    def _require_open(self) -> BinaryIO:
        if self._stream is None:
            state = "closed" if self._closed else "not created"
            raise SessionClosedError(f"WaveWriter for {self.path} is {state}.")
        return self._stream

    def _append(self, stream: BinaryIO, samples: np.ndarray) -> None:
        size = samples.size * SAMPLE_WIDTH
        if self.bytes_written + size > MAX_DATA_SIZE:
            raise ValueError("WAV data chunk would exceed the 4 GiB size limit.")
        stream.write(samples.tobytes())
        self.bytes_written += size

    def _write_wave_header(self) -> None:
        header = pack_header(self.descriptor())
        with open(self.path, "r+b") as handle:
            handle.seek(0)
            handle.write(header)
        logger.debug("Finalized %s with %d data bytes", self.path, self.bytes_written)
