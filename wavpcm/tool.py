"""Top-level copy/inspect API and CLI for wavpcm."""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import Any
from typing import Optional

import numpy as np

from .config import ConfigError, load_json_config, normalize_copy_settings
from .errors import WaveError
from .wave_reader import WaveReader
from .wave_writer import WaveWriter


def describe_wave(input_path: str, *, verbose: bool = False) -> dict[str, Any]:
    """Return the header fields of a WAV file."""
    with WaveReader(input_path) as reader:
        fmt = reader.format
        info = {
            "sample_rate": fmt.sample_rate,
            "channels": fmt.channels,
            "bits_per_sample": fmt.bits_per_sample,
            "data_size": fmt.data_size,
            "file_size": fmt.file_size,
            "byte_rate": fmt.byte_rate,
            "block_align": fmt.block_align,
            "length_s": reader.get_length(),
            "warnings": list(reader.warnings),
        }
    _emit_warnings(info["warnings"], verbose=verbose)
    return info


def copy_wave(
    input_path: str,
    output_path: str,
    *,
    sample_rate: Optional[int] = None,
    block_size: Optional[int] = None,
    config_path: Optional[str] = None,
    verbose: bool = False,
) -> int:
    """Stream a WAV file through a reader into a writer.

    Returns the number of sample frames copied.
    """
    raw = load_json_config(config_path) if config_path else {}
    overrides = {"sample_rate": sample_rate, "block_size": block_size}
    settings, config_warnings = normalize_copy_settings(raw, overrides=overrides)
    _emit_warnings(config_warnings, verbose=verbose)

    copied = 0
    with WaveReader(input_path) as reader:
        _emit_warnings(reader.warnings, verbose=verbose)
        fmt = reader.format
        out_rate = settings["sample_rate"] or fmt.sample_rate
        size = settings["block_size"]

        with WaveWriter(output_path, out_rate, fmt.channels, fmt.bits_per_sample) as writer:
            if fmt.channels == 1:
                buffer = np.zeros(size, dtype=np.int16)
                count = reader.read(buffer, size)
                while count > 0:
                    writer.write(buffer, count)
                    copied += count
                    count = reader.read(buffer, size)
            else:
                left = np.zeros(size, dtype=np.int16)
                right = np.zeros(size, dtype=np.int16)
                count = reader.read_stereo(left, right, size)
                while count > 0:
                    writer.write_stereo(left, right, count)
                    copied += count
                    count = reader.read_stereo(left, right, size)
    return copied


def _emit_warnings(messages: list[str], verbose: bool) -> None:
    for message in messages:
        warnings.warn(message, RuntimeWarning, stacklevel=3)
        if verbose:
            print(f"warning: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wavpcm")
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser("info", help="Print WAV header fields.")
    info_parser.add_argument("input_path", help="Path to WAV file.")
    info_parser.add_argument("--verbose", action="store_true")

    copy_parser = subparsers.add_parser("copy", help="Stream a WAV file into a new one.")
    copy_parser.add_argument("input_path", help="Path to source WAV file.")
    copy_parser.add_argument("output_path", help="Path for output WAV file.")
    copy_parser.add_argument("--config", default=None, dest="config_path",
                             help="Optional JSON file with copy settings.")
    copy_parser.add_argument("--sample-rate", type=int, default=None, dest="sample_rate")
    copy_parser.add_argument("--block-size", type=int, default=None, dest="block_size")
    copy_parser.add_argument("--verbose", action="store_true")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if args.command == "info":
            info = describe_wave(args.input_path, verbose=args.verbose)
        elif args.command == "copy":
            copied = copy_wave(
                args.input_path,
                args.output_path,
                sample_rate=args.sample_rate,
                block_size=args.block_size,
                config_path=args.config_path,
                verbose=args.verbose,
            )
        else:
            parser.error(f"Unsupported command: {args.command}")
    except (ConfigError, WaveError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover
        print(f"error: unexpected failure: {exc}", file=sys.stderr)
        return 1

    if args.command == "info":
        for key, value in info.items():
            if key != "warnings":
                print(f"{key}: {value}")
    else:
        print(f"Copied {copied} frames to {Path(args.output_path)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
