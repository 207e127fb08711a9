from __future__ import annotations

from contracts.ocr import Rect
from contracts.ticket import NumericCandidate

from .config import ScanConfig
from .geometry import assign_rows, row_tolerance, union_many


def order_reading(group: list[NumericCandidate], config: ScanConfig) -> list[NumericCandidate]:
    """Row-then-column order: rows top to bottom, left to right within a row."""

    rows = assign_rows(group, row_tolerance(group, config.row_merge_k))
    ordered = sorted(
        rows,
        key=lambda rc: (rc[0], rc[1].position.left, rc[1].position.top, rc[1].value),
    )
    return [c for _, c in ordered]


def extract(
    group: list[NumericCandidate],
    config: ScanConfig,
    *,
    frame_size: tuple[int, int] | None = None,
) -> tuple[list[int], Rect]:
    """
    Distinct numbers of one block (at most `max_numbers_per_block`) and its
    bounding rectangle.

    The rectangle covers every candidate of the group, including those past the
    cap. An empty group yields a zero rectangle; the pipeline never asks for one.
    """

    numbers: list[int] = []
    seen: set[int] = set()
    for c in order_reading(group, config):
        if len(numbers) >= config.max_numbers_per_block:
            break
        if c.value in seen:
            continue
        seen.add(c.value)
        numbers.append(c.value)

    if not group:
        return numbers, Rect(0, 0, 0, 0)

    rect = union_many(c.position for c in group)
    if config.rect_padding_px:
        rect = rect.padded(config.rect_padding_px)
        if frame_size is None:
            rect = Rect(max(rect.left, 0), max(rect.top, 0), rect.right, rect.bottom)
    if frame_size is not None:
        width, height = frame_size
        rect = rect.clamped(width, height)
    return numbers, rect
