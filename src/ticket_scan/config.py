from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from contracts.ticket import NUMBERS_PER_BLOCK


class SegmentationStrategy(str, Enum):
    GAP_BASED = "gap_based"
    MIDPOINT_RANGE = "midpoint_range"
    FIXED_FRACTION = "fixed_fraction"


class SingleClusterPolicy(str, Enum):
    """What the gap-based segmenter does when no gap separates two blocks."""

    SINGLE_BLOCK = "single_block"
    MEDIAN_SPLIT = "median_split"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """
    Frame-analysis parameters.

    Defaults are explicit constants (no time/randomness). Box limits are in the
    OCR provider's pixel space at the calibrated preview resolution.
    """

    # Candidate filter
    min_token_length: int = 1
    max_token_length: int = 2
    max_box_width: int = 200
    max_box_height: int = 100
    confidence_floor: float = 0.0

    # Block segmentation
    segmentation: SegmentationStrategy = SegmentationStrategy.GAP_BASED
    single_cluster_policy: SingleClusterPolicy = SingleClusterPolicy.SINGLE_BLOCK
    row_merge_k: float = 0.5  # centers closer than median_height * k share a row
    block_gap_ratio: float = 1.5  # block gap >= ratio * row pitch (median row gap)
    block_gap_k: float = 2.5  # or block gap >= median_height * k ...
    block_gap_min_ratio: float = 1.2  # ... and still >= min_ratio * row pitch
    fixed_fraction: float = 0.5

    # Block extraction
    max_numbers_per_block: int = NUMBERS_PER_BLOCK
    rect_padding_px: int = 0

    def validate(self) -> None:
        if self.min_token_length < 1:
            raise ValueError("min_token_length must be >= 1")
        if self.max_token_length < self.min_token_length:
            raise ValueError("max_token_length must be >= min_token_length")
        if self.max_box_width <= 0 or self.max_box_height <= 0:
            raise ValueError("max_box_width and max_box_height must be > 0")
        if not (0.0 <= self.confidence_floor <= 1.0):
            raise ValueError("confidence_floor must be within [0, 1]")
        if self.row_merge_k < 0:
            raise ValueError("row_merge_k must be >= 0")
        if self.block_gap_ratio < 1.0:
            raise ValueError("block_gap_ratio must be >= 1")
        if self.block_gap_k <= 0:
            raise ValueError("block_gap_k must be > 0")
        if not (1.0 < self.block_gap_min_ratio <= self.block_gap_ratio):
            raise ValueError("block_gap_min_ratio must be within (1, block_gap_ratio]")
        if not (0.0 < self.fixed_fraction < 1.0):
            raise ValueError("fixed_fraction must be within (0, 1)")
        if not (1 <= self.max_numbers_per_block <= NUMBERS_PER_BLOCK):
            raise ValueError(f"max_numbers_per_block must be within [1, {NUMBERS_PER_BLOCK}]")
        if self.rect_padding_px < 0:
            raise ValueError("rect_padding_px must be >= 0")


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """
    Frame admission policy for the integration layer around the core.

    Frames that arrive while an analysis is in flight, or sooner than
    `min_interval_s` after the previous admitted frame, are dropped.
    """

    min_interval_s: float = 0.5
    latency_warn_ms: float = 500.0

    def validate(self) -> None:
        if self.min_interval_s < 0:
            raise ValueError("min_interval_s must be >= 0")
        if self.latency_warn_ms <= 0:
            raise ValueError("latency_warn_ms must be > 0")
