import json
import tempfile
import unittest
from pathlib import Path

from wavpcm.config import (
    DEFAULT_BLOCK_SIZE,
    ConfigError,
    load_json_config,
    normalize_copy_settings,
    normalize_format,
)


class FormatValidationTests(unittest.TestCase):
    def test_valid_format(self):
        self.assertEqual(normalize_format(44100, 2, 16), (44100, 2, 16))
        self.assertEqual(normalize_format(8000, 1, 8), (8000, 1, 8))

    def test_invalid_bit_depth(self):
        with self.assertRaises(ConfigError):
            normalize_format(44100, 1, 24)

    def test_non_integer_sample_rate(self):
        with self.assertRaises(ConfigError):
            normalize_format(44100.0, 1, 16)


class CopySettingsTests(unittest.TestCase):
    def test_defaults_are_applied(self):
        cfg, warnings = normalize_copy_settings({})
        self.assertIsNone(cfg["sample_rate"])
        self.assertEqual(cfg["block_size"], DEFAULT_BLOCK_SIZE)
        self.assertEqual(warnings, [])

    def test_overrides_win_over_config(self):
        cfg, _ = normalize_copy_settings(
            {"sample_rate": 8000, "block_size": 16},
            overrides={"sample_rate": 16000, "block_size": None},
        )
        self.assertEqual(cfg["sample_rate"], 16000)
        self.assertEqual(cfg["block_size"], 16)

    def test_unknown_keys_warn(self):
        _, warnings = normalize_copy_settings({"channels": 2})
        self.assertEqual(len(warnings), 1)
        self.assertIn("channels", warnings[0])

    def test_block_size_must_be_positive(self):
        with self.assertRaises(ConfigError):
            normalize_copy_settings({"block_size": 0})

    def test_load_json_requires_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.json"
            path.write_text(json.dumps([1, 2]), encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_json_config(path)
            path.write_text(json.dumps({"block_size": 32}), encoding="utf-8")
            self.assertEqual(load_json_config(path), {"block_size": 32})


if __name__ == "__main__":
    unittest.main()
