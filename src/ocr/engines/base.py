from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..contracts import OcrConfig, OcrFrameResult


class OcrEngine(ABC):
    """
    Interface for OCR perception engines.

    IMPORTANT:
    - Engines return literal text hypotheses, bounding boxes and confidences.
    - Engines must NOT drop tokens by content (non-numeric, out of range).
    - Failures are reported as `OcrFrameResult(ok=False)`, not raised.
    """

    @abstractmethod
    def run_on_image_file(self, *, config: OcrConfig, image_file: Path) -> OcrFrameResult:
        raise NotImplementedError
