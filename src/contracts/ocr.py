from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Axis-aligned rectangle in the OCR provider's pixel space for one frame.

    Invariant: left <= right and top <= bottom.
    """

    left: int
    top: int
    right: int
    bottom: int

    def __post_init__(self) -> None:
        if self.left > self.right or self.top > self.bottom:
            raise ValueError(
                f"Rect requires left<=right and top<=bottom, got "
                f"({self.left}, {self.top}, {self.right}, {self.bottom})"
            )

    def width(self) -> int:
        return int(self.right - self.left)

    def height(self) -> int:
        return int(self.bottom - self.top)

    def area(self) -> int:
        return int(self.width() * self.height())

    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            left=min(self.left, other.left),
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )

    def contains(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def contains_point(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def padded(self, px: int) -> "Rect":
        # Padding may push edges negative; callers clamp when the frame size is known.
        return Rect(self.left - px, self.top - px, self.right + px, self.bottom + px)

    def clamped(self, width: int, height: int) -> "Rect":
        left = min(max(self.left, 0), width)
        top = min(max(self.top, 0), height)
        right = max(min(self.right, width), left)
        bottom = max(min(self.bottom, height), top)
        return Rect(left, top, right, bottom)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Rect":
        return Rect(
            left=int(d["left"]),
            top=int(d["top"]),
            right=int(d["right"]),
            bottom=int(d["bottom"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


@dataclass(frozen=True, slots=True)
class TextFragment:
    """
    One OCR-recognized token, already normalized by the provider adapter.

    `text` is exactly what the OCR engine recognized. `bounding_box` may be None
    when the provider could not localize the token.
    """

    text: str
    bounding_box: Rect | None
    confidence: float | None = None  # 0..1 when the provider reports one

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "TextFragment":
        box_raw = d.get("bounding_box")
        return TextFragment(
            text=str(d.get("text", "")),
            bounding_box=(None if box_raw is None else Rect.from_dict(box_raw)),
            confidence=(None if d.get("confidence") is None else float(d.get("confidence"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "bounding_box": (None if self.bounding_box is None else self.bounding_box.to_dict()),
            "confidence": self.confidence,
        }
