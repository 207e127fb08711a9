from __future__ import annotations

import dataclasses
import tempfile
from pathlib import Path

from PIL import Image

from .contracts import OcrConfig, OcrEngineName, OcrFrameResult
from .engines.base import OcrEngine
from .engines.tesseract_cli import TesseractCliEngine


def _get_engine(engine: OcrEngineName) -> OcrEngine:
    if engine == OcrEngineName.TESSERACT_CLI:
        return TesseractCliEngine()
    raise ValueError(f"Unsupported OCR engine: {engine}")


def run_ocr_on_image_file(*, config: OcrConfig, image_file: Path) -> OcrFrameResult:
    """
    Run OCR on an image that is already upright.

    Fragment coordinates are in the file's pixel space.
    """

    return _get_engine(config.engine).run_on_image_file(config=config, image_file=image_file)


def upright_frame(image: Image.Image, rotation_degrees: int) -> Image.Image:
    """
    Rotate a camera frame clockwise by `rotation_degrees` so its content is upright.

    Only quarter turns are supported; sensor rotation is always one of them.
    """

    if rotation_degrees % 90 != 0:
        raise ValueError(f"rotation_degrees must be a multiple of 90, got {rotation_degrees}")
    turns = (rotation_degrees // 90) % 4
    if turns == 0:
        return image
    # PIL rotates counter-clockwise.
    return image.rotate(-90 * turns, expand=True)


def run_ocr_on_frame(*, config: OcrConfig, image: Image.Image, rotation_degrees: int = 0) -> OcrFrameResult:
    """
    Run OCR on an in-memory camera frame.

    The frame is rotated upright first, so the returned fragments are already in
    the upright coordinate space the frame-analysis core expects.
    """

    upright = upright_frame(image, rotation_degrees)
    width, height = upright.size

    with tempfile.TemporaryDirectory(prefix="ticket_scan_ocr_") as tmp:
        frame_file = Path(tmp) / "frame.png"
        upright.convert("L").save(frame_file, format="PNG")
        result = run_ocr_on_image_file(config=config, image_file=frame_file)

    return dataclasses.replace(
        result,
        meta={**result.meta, "rotation_degrees": rotation_degrees},
        image_width=width,
        image_height=height,
    )
