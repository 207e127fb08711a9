from __future__ import annotations

import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PIL import Image

from contracts.ocr import Rect
from ocr.contracts import OcrConfig
from ocr.engines.tesseract_cli import TesseractCliEngine, build_command, parse_tsv
from ocr.module import run_ocr_on_frame, upright_frame

_HEADER = "level\tpage_num\tblock_num\tpar_num\tline_num\tword_num\tleft\ttop\twidth\theight\tconf\ttext"


def _tsv(*rows: str) -> str:
    return "\n".join([_HEADER, *rows]) + "\n"


_SAMPLE_TSV = _tsv(
    "1\t1\t0\t0\t0\t0\t0\t0\t720\t1280\t-1\t",
    "2\t1\t1\t0\t0\t0\t40\t90\t400\t60\t-1\t",
    # Emitted out of reading order on purpose.
    "5\t1\t1\t1\t1\t2\t130\t100\t40\t40\t91.5\t23",
    "5\t1\t1\t1\t1\t1\t50\t100\t40\t40\t96.0\t7",
    "5\t1\t1\t1\t1\t3\t210\t100\t0\t40\t90.0\t81",
    "5\t1\t1\t1\t1\t4\t290\t100\t40\t40\t12.0\t4",
    "5\t1\t1\t1\t1\t5\t370\t100\t40\t40\t95.0\t ",
)


class TestTesseractTsvParsing(unittest.TestCase):
    def test_parse_word_rows(self) -> None:
        fragments, page_size, dropped = parse_tsv(_SAMPLE_TSV, OcrConfig(confidence_floor=0.5))

        self.assertEqual(page_size, (720, 1280))
        self.assertEqual([f.text for f in fragments], ["7", "23"])
        self.assertEqual(fragments[0].bounding_box, Rect(50, 100, 90, 140))
        self.assertAlmostEqual(fragments[0].confidence, 0.96)
        self.assertEqual(dropped, {"malformed_row": 0, "bbox_zero_area": 1, "below_confidence_floor": 1})

    def test_command_requests_digits_and_tsv(self) -> None:
        cmd = build_command(OcrConfig(), Path("frame.png"))

        self.assertEqual(cmd[:5], ["tesseract", "frame.png", "stdout", "-l", "eng"])
        self.assertIn("tessedit_char_whitelist=0123456789", cmd)
        self.assertEqual(cmd[-1], "tsv")
        self.assertNotIn("-c", build_command(OcrConfig(digits_only=False, psm=None), Path("frame.png")))


class TestTesseractEngine(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.image_file = Path(self._tmp.name) / "frame.png"
        self.image_file.write_bytes(b"not really a png")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_input(self) -> None:
        result = TesseractCliEngine().run_on_image_file(config=OcrConfig(), image_file=Path(self._tmp.name) / "nope.png")

        self.assertFalse(result.ok)
        self.assertEqual(result.errors[0].code, "OCR_INPUT_NOT_FOUND")

    def test_backend_not_installed(self) -> None:
        with patch("ocr.engines.tesseract_cli.subprocess.run", side_effect=FileNotFoundError()):
            result = TesseractCliEngine().run_on_image_file(config=OcrConfig(), image_file=self.image_file)

        self.assertFalse(result.ok)
        self.assertEqual(result.fragments, [])
        self.assertEqual(result.errors[0].code, "OCR_BACKEND_NOT_INSTALLED")

    def test_timeout(self) -> None:
        with patch(
            "ocr.engines.tesseract_cli.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="tesseract", timeout=10.0),
        ):
            result = TesseractCliEngine().run_on_image_file(config=OcrConfig(), image_file=self.image_file)

        self.assertEqual(result.errors[0].code, "OCR_TIMEOUT")

    def test_non_zero_exit(self) -> None:
        proc = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="boom")
        with patch("ocr.engines.tesseract_cli.subprocess.run", return_value=proc):
            result = TesseractCliEngine().run_on_image_file(config=OcrConfig(), image_file=self.image_file)

        self.assertFalse(result.ok)
        self.assertEqual(result.errors[0].code, "OCR_BACKEND_ERROR")
        self.assertEqual(result.errors[0].detail["stderr"], "boom")

    def test_success(self) -> None:
        proc = subprocess.CompletedProcess(args=[], returncode=0, stdout=_SAMPLE_TSV, stderr="")
        with patch("ocr.engines.tesseract_cli.subprocess.run", return_value=proc):
            result = TesseractCliEngine().run_on_image_file(config=OcrConfig(), image_file=self.image_file)

        self.assertTrue(result.ok)
        self.assertEqual([f.text for f in result.fragments], ["7", "23", "4"])
        self.assertEqual((result.image_width, result.image_height), (720, 1280))
        self.assertEqual(result.meta["command_template"][1], "<IMAGE_FILE>")
        self.assertEqual(result.to_dict()["engine"], "tesseract_cli")


class TestFrameAdapter(unittest.TestCase):
    def test_upright_frame_rotates_clockwise(self) -> None:
        frame = Image.new("L", (30, 20), color=0)
        frame.putpixel((0, 0), 255)

        upright = upright_frame(frame, 90)

        self.assertEqual(upright.size, (20, 30))
        # Top-left pixel ends up top-right after a clockwise quarter turn.
        self.assertEqual(upright.getpixel((19, 0)), 255)
        self.assertIs(upright_frame(frame, 360), frame)

    def test_rejects_non_quarter_turns(self) -> None:
        with self.assertRaises(ValueError):
            upright_frame(Image.new("L", (4, 4)), 45)

    def test_frame_is_recognized_in_upright_space(self) -> None:
        seen: dict[str, Path] = {}

        def fake_run(cmd, **kwargs):
            seen["image"] = Path(cmd[1])
            with Image.open(cmd[1]) as img:
                seen["size"] = img.size
            return subprocess.CompletedProcess(args=cmd, returncode=0, stdout=_tsv(), stderr="")

        with patch("ocr.engines.tesseract_cli.subprocess.run", side_effect=fake_run):
            result = run_ocr_on_frame(config=OcrConfig(), image=Image.new("RGB", (64, 48)), rotation_degrees=270)

        self.assertTrue(result.ok)
        self.assertEqual(seen["size"], (48, 64))
        self.assertEqual((result.image_width, result.image_height), (48, 64))
        self.assertEqual(result.meta["rotation_degrees"], 270)
        self.assertFalse(seen["image"].exists())  # temp frame removed


if __name__ == "__main__":
    unittest.main()
