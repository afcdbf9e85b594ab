"""Exception types raised by the wavpcm codec."""

from __future__ import annotations

from typing import Optional


class WaveError(ValueError):
    """Base class for malformed or unsupported WAV input."""


class FormatError(WaveError):
    """Raised when the RIFF/WAVE chunk layout is not what the codec expects."""

    def __init__(self, message: str, expected: Optional[bytes] = None) -> None:
        super().__init__(message)
        self.expected = expected


class UnsupportedFormatError(WaveError):
    """Raised when the fmt chunk declares something other than linear PCM."""

    def __init__(self, audio_format: int) -> None:
        super().__init__(
            f"Unable to read non-PCM WAV files (audio format {audio_format})."
        )
        self.audio_format = audio_format


class SessionClosedError(RuntimeError):
    """Raised when a reader or writer is used outside its open lifetime."""
