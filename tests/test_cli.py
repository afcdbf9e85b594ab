import contextlib
import io
import json
import tempfile
import unittest
import warnings
from pathlib import Path

import numpy as np

from wavpcm.tool import copy_wave, describe_wave, main
from wavpcm.wave_reader import WaveReader
from wavpcm.wave_writer import WaveWriter


def _make_wav(path, channels, frames, sample_rate=8000):
    samples = (np.arange(frames * channels) % 200 - 100).astype(np.int16)
    with WaveWriter(path, sample_rate, channels, 16) as writer:
        if channels == 1:
            writer.write(samples, frames)
        else:
            writer.write_stereo(samples[0::2], samples[1::2], frames)
    return samples


class ToolTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_describe_wave(self):
        src = self.tmp / "in.wav"
        _make_wav(src, 2, 16000)
        info = describe_wave(str(src))
        self.assertEqual(info["channels"], 2)
        self.assertEqual(info["byte_rate"], 32000)
        self.assertEqual(info["length_s"], 2)
        self.assertEqual(info["warnings"], [])

    def test_copy_stereo_in_small_blocks(self):
        src = self.tmp / "in.wav"
        dst = self.tmp / "out.wav"
        _make_wav(src, 2, 1001)
        copied = copy_wave(str(src), str(dst), block_size=64)
        self.assertEqual(copied, 1001)
        self.assertEqual(src.read_bytes(), dst.read_bytes())

    def test_copy_mono_relabels_sample_rate_from_config(self):
        src = self.tmp / "in.wav"
        dst = self.tmp / "out.wav"
        cfg = self.tmp / "cfg.json"
        cfg.write_text(json.dumps({"sample_rate": 16000, "block_size": 10}), encoding="utf-8")
        samples = _make_wav(src, 1, 95)
        self.assertEqual(copy_wave(str(src), str(dst), config_path=str(cfg)), 95)
        with WaveReader(dst) as reader:
            self.assertEqual(reader.sample_rate, 16000)
            buf = np.zeros(100, dtype=np.int16)
            self.assertEqual(reader.read(buf, 100), 95)
        np.testing.assert_array_equal(buf[:95], samples)

    def test_cli_copy_and_info(self):
        src = self.tmp / "in.wav"
        dst = self.tmp / "out.wav"
        _make_wav(src, 1, 50)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertEqual(main(["copy", str(src), str(dst), "--block-size", "7"]), 0)
            self.assertEqual(main(["info", str(dst)]), 0)
        output = stdout.getvalue()
        self.assertIn("Copied 50 frames", output)
        self.assertIn("sample_rate: 8000", output)

    def test_cli_reports_bad_file(self):
        src = self.tmp / "bad.wav"
        src.write_bytes(b"not a wav file at all" * 4)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            self.assertEqual(main(["info", str(src)]), 2)
        self.assertIn("RIFF", stderr.getvalue())

    def test_cli_reports_missing_file(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            self.assertEqual(main(["info", str(self.tmp / "nope.wav")]), 2)

    def test_config_warnings_are_emitted(self):
        src = self.tmp / "in.wav"
        cfg = self.tmp / "cfg.json"
        cfg.write_text(json.dumps({"gain": 2}), encoding="utf-8")
        _make_wav(src, 1, 5)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            copy_wave(str(src), str(self.tmp / "out.wav"), config_path=str(cfg))
        self.assertTrue(any("gain" in str(w.message) for w in caught))


if __name__ == "__main__":
    unittest.main()
