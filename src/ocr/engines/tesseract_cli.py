from __future__ import annotations

import csv
import logging
import subprocess
from pathlib import Path
from typing import Any

from contracts.ocr import Rect, TextFragment

from ..contracts import OcrConfig, OcrEngineName, OcrError, OcrFrameResult
from .base import OcrEngine

logger = logging.getLogger(__name__)

_DIGIT_WHITELIST = "0123456789"


def _normalize_confidence(raw_conf: float | None) -> float | None:
    if raw_conf is None:
        return None
    if raw_conf < 0:
        return None
    # Tesseract TSV is typically 0..100; clamp into [0, 1]
    return max(0.0, min(1.0, raw_conf / 100.0))


def _box_from_tsv(left: int, top: int, width: int, height: int) -> Rect | None:
    """
    Rect for a TSV word box; endpoints are swapped if inverted, and boxes with
    no area are rejected (None).
    """

    x0, x1 = sorted((left, left + width))
    y0, y1 = sorted((top, top + height))
    if x0 == x1 or y0 == y1:
        return None
    return Rect(left=x0, top=y0, right=x1, bottom=y1)


def _failed(code: str, message: str, detail: dict[str, Any] | None, meta: dict[str, Any]) -> OcrFrameResult:
    return OcrFrameResult(
        ok=False,
        engine=OcrEngineName.TESSERACT_CLI,
        fragments=[],
        errors=[OcrError(code=code, message=message, detail=detail)],
        meta=meta,
    )


def build_command(config: OcrConfig, image_file: Path) -> list[str]:
    cmd = ["tesseract", str(image_file), "stdout", "-l", config.language]
    if config.psm is not None:
        cmd.extend(["--psm", str(config.psm)])
    if config.digits_only:
        cmd.extend(["-c", f"tessedit_char_whitelist={_DIGIT_WHITELIST}"])
    # Request TSV output (word-level rows include bounding boxes + conf + text).
    cmd.append("tsv")
    return cmd


def parse_tsv(tsv: str, config: OcrConfig) -> tuple[list[TextFragment], tuple[int, int] | None, dict[str, int]]:
    """
    Parse Tesseract TSV into fragments in (block, par, line, word) order.

    Returns (fragments, page size from the level-1 row if present, drop counts).
    """

    reader = csv.DictReader(tsv.splitlines(), delimiter="\t", quoting=csv.QUOTE_NONE)
    keyed: list[tuple[tuple[int, int, int, int], TextFragment]] = []
    page_size: tuple[int, int] | None = None
    dropped = {"malformed_row": 0, "bbox_zero_area": 0, "below_confidence_floor": 0}

    for row in reader:
        # level meanings: 1=page,2=block,3=para,4=line,5=word
        try:
            level = int(row.get("level", "") or "0")
        except ValueError:
            continue

        try:
            left = int(row.get("left", "") or "0")
            top = int(row.get("top", "") or "0")
            width = int(row.get("width", "") or "0")
            height = int(row.get("height", "") or "0")
        except ValueError:
            dropped["malformed_row"] += 1
            continue

        if level == 1 and page_size is None:
            page_size = (width, height)
            continue
        if level != 5:
            continue

        text = row.get("text") or ""
        # Emit only actual text hypotheses; do not strip/normalize/correct.
        if text.strip() == "":
            continue

        try:
            order_key = (
                int(row.get("block_num", "") or "0"),
                int(row.get("par_num", "") or "0"),
                int(row.get("line_num", "") or "0"),
                int(row.get("word_num", "") or "0"),
            )
        except ValueError:
            dropped["malformed_row"] += 1
            continue

        box = _box_from_tsv(left, top, width, height)
        if box is None:
            dropped["bbox_zero_area"] += 1
            continue

        conf_str = row.get("conf", "") or ""
        try:
            raw_conf: float | None = float(conf_str) if conf_str != "" else None
        except ValueError:
            raw_conf = None
        conf = _normalize_confidence(raw_conf)
        if conf is not None and conf < config.confidence_floor:
            dropped["below_confidence_floor"] += 1
            continue

        keyed.append((order_key, TextFragment(text=text, bounding_box=box, confidence=conf)))

    fragments = [f for _, f in sorted(keyed, key=lambda kf: kf[0])]
    return fragments, page_size, dropped


class TesseractCliEngine(OcrEngine):
    """
    Tesseract OCR via the `tesseract` CLI, parsed from TSV output.

    Emits word-level fragments only. Only an optional confidence floor is
    applied; content filtering is left to the frame-analysis core.
    """

    def run_on_image_file(self, *, config: OcrConfig, image_file: Path) -> OcrFrameResult:
        meta: dict[str, Any] = {
            "backend": "tesseract",
            "backend_mode": "cli",
            "language": config.language,
            "psm": config.psm,
            "digits_only": config.digits_only,
            "confidence_floor": config.confidence_floor,
        }

        if not image_file.exists():
            return _failed("OCR_INPUT_NOT_FOUND", "Input image file not found", {"image_file": str(image_file)}, meta)

        cmd = build_command(config, image_file)
        meta["command_template"] = ["tesseract", "<IMAGE_FILE>", *cmd[2:]]

        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=config.timeout_s,
            )
        except FileNotFoundError:
            return _failed(
                "OCR_BACKEND_NOT_INSTALLED",
                "tesseract binary not found on PATH",
                {"expected_command": "tesseract"},
                meta,
            )
        except subprocess.TimeoutExpired:
            return _failed("OCR_TIMEOUT", "OCR backend timed out", {"timeout_s": config.timeout_s}, meta)

        if proc.returncode != 0:
            logger.warning("tesseract exited with %d", proc.returncode)
            return _failed(
                "OCR_BACKEND_ERROR",
                "OCR backend returned a non-zero exit code",
                {"returncode": proc.returncode, "stderr": proc.stderr[-4000:]},
                meta,
            )

        fragments, page_size, dropped = parse_tsv(proc.stdout, config)
        meta["dropped"] = dropped
        logger.debug("tesseract produced %d fragments (dropped %s)", len(fragments), dropped)

        return OcrFrameResult(
            ok=True,
            engine=OcrEngineName.TESSERACT_CLI,
            fragments=fragments,
            errors=[],
            meta=meta,
            image_width=(None if page_size is None else page_size[0]),
            image_height=(None if page_size is None else page_size[1]),
        )
