from __future__ import annotations

from statistics import median
from typing import Iterable

from contracts.ocr import Rect
from contracts.ticket import NumericCandidate


def union_many(boxes: Iterable[Rect]) -> Rect:
    boxes = list(boxes)
    if not boxes:
        return Rect(0, 0, 0, 0)
    out = boxes[0]
    for b in boxes[1:]:
        out = out.union(b)
    return out


def median_height(candidates: list[NumericCandidate]) -> float:
    heights = [c.position.height() for c in candidates if c.position.height() > 0]
    return float(median(heights)) if heights else 0.0


def candidate_sort_key(c: NumericCandidate) -> tuple[float, int, int, int, int, int]:
    # Total order on candidate content; ties only between identical candidates.
    p = c.position
    return (p.center_y(), p.left, p.top, p.right, p.bottom, c.value)


def row_tolerance(candidates: list[NumericCandidate], row_merge_k: float) -> float:
    return median_height(candidates) * row_merge_k


def assign_rows(candidates: list[NumericCandidate], tolerance: float) -> list[tuple[int, NumericCandidate]]:
    """
    Cluster candidates into rows by vertical center.

    Sweeps candidates in center order; a candidate whose center is more than
    `tolerance` below the previous one starts a new row. Returns (row, candidate)
    pairs in sweep order.
    """

    sweep = sorted(candidates, key=candidate_sort_key)
    out: list[tuple[int, NumericCandidate]] = []
    row = 0
    prev_y: float | None = None
    for c in sweep:
        y = c.position.center_y()
        if prev_y is not None and y - prev_y > tolerance:
            row += 1
        out.append((row, c))
        prev_y = y
    return out
