"""Configuration loading and validation for wavpcm."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from typing import Optional
from typing import Union


SUPPORTED_BIT_DEPTHS = {8, 16}
SUPPORTED_CHANNELS = {1, 2}
DEFAULT_BLOCK_SIZE = 4096
MAX_SAMPLE_RATE = 0xFFFFFFFF


class ConfigError(ValueError):
    """Raised when configuration input is invalid."""


def load_json_config(config_path: Union[str, Path]) -> dict[str, Any]:
    """Load a JSON configuration file."""
    path = Path(config_path)
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ConfigError("Top-level JSON config must be an object.")
    return data


def normalize_format(sample_rate: Any, channels: Any, bits_per_sample: Any) -> tuple[int, int, int]:
    """Validate writer format parameters."""
    sample_rate = _require_int_value(sample_rate, "sample_rate")
    if sample_rate <= 0 or sample_rate > MAX_SAMPLE_RATE:
        raise ConfigError(f"sample_rate must be within [1, {MAX_SAMPLE_RATE}].")

    channels = _require_int_value(channels, "channels")
    if channels not in SUPPORTED_CHANNELS:
        raise ConfigError(f"channels must be one of {sorted(SUPPORTED_CHANNELS)}.")

    bits_per_sample = _require_int_value(bits_per_sample, "bits_per_sample")
    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise ConfigError(
            f"bits_per_sample must be one of {sorted(SUPPORTED_BIT_DEPTHS)}."
        )
    return sample_rate, channels, bits_per_sample


def normalize_copy_settings(
    raw_config: dict[str, Any], overrides: Optional[dict[str, Any]] = None
) -> tuple[dict[str, Any], list[str]]:
    """Validate copy settings; unset keys come back as None or defaults."""
    cfg = dict(raw_config)
    if overrides:
        for key, value in overrides.items():
            if value is not None:
                cfg[key] = value

    warnings: list[str] = []

    unknown = sorted(set(cfg) - {"sample_rate", "block_size"})
    for key in unknown:
        warnings.append(f"Unknown config key '{key}' was ignored.")

    sample_rate = cfg.get("sample_rate")
    if sample_rate is not None:
        sample_rate = _require_int_value(sample_rate, "sample_rate")
        if sample_rate <= 0 or sample_rate > MAX_SAMPLE_RATE:
            raise ConfigError(f"sample_rate must be within [1, {MAX_SAMPLE_RATE}].")

    block_size = cfg.get("block_size", DEFAULT_BLOCK_SIZE)
    block_size = _require_int_value(block_size, "block_size")
    if block_size <= 0:
        raise ConfigError("block_size must be greater than 0.")

    normalized = {
        "sample_rate": sample_rate,
        "block_size": block_size,
    }
    return normalized, warnings


def _require_int_value(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer.")
    return value
