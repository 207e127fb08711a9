from __future__ import annotations

from contracts.ticket import NUMBERS_PER_BLOCK, UPPER_BLOCK_INDEX, BlockResult, Tier

_TIER_LABELS = {
    Tier.FULL: "FULL MATCH",
    Tier.PARTIAL: "PARTIAL",
    Tier.NONE: "NO MATCH",
}


def block_label(block_index: int) -> str:
    return "UPPER" if block_index == UPPER_BLOCK_INDEX else "LOWER"


def format_status(results: list[BlockResult]) -> str:
    """One status line per block, e.g. "BLOCK 1 (UPPER): PARTIAL (13/15)"."""

    lines = [
        f"BLOCK {r.block_index} ({block_label(r.block_index)}): "
        f"{_TIER_LABELS[r.tier]} ({r.match_count}/{NUMBERS_PER_BLOCK})"
        for r in results
    ]
    return "\n".join(lines)
