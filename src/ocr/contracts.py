from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contracts.ocr import TextFragment


class OcrEngineName(str, Enum):
    """
    OCR backends supported by this adapter.

    Note: the adapter is *perception only*; backends must not filter tokens by
    content. Deciding which fragments are ticket numbers is the core's job.
    """

    TESSERACT_CLI = "tesseract_cli"


@dataclass(frozen=True, slots=True)
class OcrError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class OcrFrameResult:
    """
    OCR output for one frame, normalized into `TextFragment` records.

    Coordinates are in the pixel space of the upright image that was
    recognized (`image_width` x `image_height`). On failure `ok` is False and
    `fragments` is empty; nothing is fabricated to fill the gap.
    """

    ok: bool
    engine: OcrEngineName
    fragments: list[TextFragment]
    errors: list[OcrError]
    meta: dict[str, Any] = field(default_factory=dict)
    image_width: int | None = None
    image_height: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "engine": self.engine.value,
            "fragments": [f.to_dict() for f in self.fragments],
            "errors": [e.to_dict() for e in self.errors],
            "meta": dict(self.meta),
            "image_width": self.image_width,
            "image_height": self.image_height,
        }


@dataclass(frozen=True, slots=True)
class OcrConfig:
    """
    OCR adapter configuration.

    `digits_only` restricts the recognizer's character set; it is an engine
    hint, not a post-filter.
    """

    engine: OcrEngineName = OcrEngineName.TESSERACT_CLI
    confidence_floor: float = 0.0
    language: str = "eng"
    psm: int | None = 11  # Tesseract sparse-text mode suits scattered ticket cells.
    digits_only: bool = True
    timeout_s: float = 10.0

    def __post_init__(self) -> None:
        if self.confidence_floor < 0.0 or self.confidence_floor > 1.0:
            raise ValueError("confidence_floor must be within [0.0, 1.0]")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
