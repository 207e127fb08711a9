from __future__ import annotations

import logging
from statistics import median

from contracts.ticket import NumericCandidate

from .config import ScanConfig, SegmentationStrategy, SingleClusterPolicy
from .geometry import candidate_sort_key, median_height, row_tolerance

logger = logging.getLogger(__name__)

Groups = tuple[list[NumericCandidate], list[NumericCandidate]]


def _gap_boundary(sweep: list[NumericCandidate], config: ScanConfig) -> float | None:
    """
    Boundary between the two blocks: midpoint of the largest vertical gap.

    Returns None when no gap is large enough to separate two blocks (a single
    block, or a single row, is in view).
    """

    centers = [c.position.center_y() for c in sweep]
    if len(centers) < 2:
        return None

    gaps = [centers[i + 1] - centers[i] for i in range(len(centers) - 1)]
    # Largest gap; the first one wins ties.
    best = max(range(len(gaps)), key=lambda i: (gaps[i], -i))

    tol = row_tolerance(sweep, config.row_merge_k)
    row_gaps = sorted((g for g in gaps if g > tol), reverse=True)
    if not row_gaps:
        return None

    largest = row_gaps[0]
    glyph_gap = config.block_gap_k * median_height(sweep)
    if len(row_gaps) > 1:
        # Row pitch is the median row gap; one stray row cannot move it.
        pitch = median(row_gaps)
        meaningful = largest >= config.block_gap_ratio * pitch or (
            largest >= glyph_gap and largest >= config.block_gap_min_ratio * pitch
        )
    else:
        meaningful = largest >= glyph_gap
    if not meaningful:
        return None

    return (centers[best] + centers[best + 1]) / 2.0


def _midpoint_boundary(sweep: list[NumericCandidate]) -> float | None:
    lo = sweep[0].position.center_y()
    hi = sweep[-1].position.center_y()
    if lo == hi:
        return None
    return (lo + hi) / 2.0


def _fixed_fraction_boundary(
    sweep: list[NumericCandidate], config: ScanConfig, frame_height: int | None
) -> float | None:
    if frame_height is not None and frame_height > 0:
        return frame_height * config.fixed_fraction
    lo = sweep[0].position.center_y()
    hi = sweep[-1].position.center_y()
    if lo == hi:
        return None
    return lo + config.fixed_fraction * (hi - lo)


def _single_cluster(sweep: list[NumericCandidate], policy: SingleClusterPolicy) -> Groups:
    if policy == SingleClusterPolicy.MEDIAN_SPLIT:
        mid = len(sweep) // 2
        return list(sweep[:mid]), list(sweep[mid:])
    return list(sweep), []


def segment(
    candidates: list[NumericCandidate],
    config: ScanConfig,
    *,
    frame_height: int | None = None,
) -> Groups:
    """
    Partition candidates into (upper, lower) ticket blocks.

    Every candidate lands in exactly one group. Groups are returned in
    vertical-center order, so the result does not depend on input order.
    """

    if not candidates:
        return [], []

    sweep = sorted(candidates, key=candidate_sort_key)

    if config.segmentation == SegmentationStrategy.GAP_BASED:
        boundary = _gap_boundary(sweep, config)
    elif config.segmentation == SegmentationStrategy.MIDPOINT_RANGE:
        boundary = _midpoint_boundary(sweep)
    elif config.segmentation == SegmentationStrategy.FIXED_FRACTION:
        boundary = _fixed_fraction_boundary(sweep, config, frame_height)
    else:
        raise ValueError(f"Unsupported segmentation strategy: {config.segmentation}")

    if boundary is None:
        logger.debug("No block boundary among %d candidates; policy=%s", len(sweep), config.single_cluster_policy.value)
        return _single_cluster(sweep, config.single_cluster_policy)

    upper = [c for c in sweep if c.position.center_y() < boundary]
    lower = [c for c in sweep if c.position.center_y() >= boundary]
    logger.debug("Block boundary y=%.1f: upper=%d lower=%d", boundary, len(upper), len(lower))
    return upper, lower
