"""
OCR provider adapter (perception only).

- Input: an upright image file, or an in-memory camera frame plus its rotation
- Output: `TextFragment` records with repaired, upright pixel coordinates
- Constraints: no correction, no merging, no content filtering; optional
  confidence floor only

Provider failures are returned as `OcrFrameResult(ok=False)` with error codes.
"""

from .contracts import OcrConfig, OcrEngineName, OcrError, OcrFrameResult
from .module import run_ocr_on_frame, run_ocr_on_image_file, upright_frame

__all__ = [
    "OcrConfig",
    "OcrEngineName",
    "OcrError",
    "OcrFrameResult",
    "run_ocr_on_frame",
    "run_ocr_on_image_file",
    "upright_frame",
]
