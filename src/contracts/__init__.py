"""
Canonical data contracts shared by the OCR adapter, the frame-analysis core and
renderers.

Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .ocr import Rect, TextFragment
from .ticket import (
    LOWER_BLOCK_INDEX,
    MAX_TICKET_NUMBER,
    MIN_TICKET_NUMBER,
    NUMBERS_PER_BLOCK,
    PARTIAL_MATCH_MIN,
    UPPER_BLOCK_INDEX,
    BlockResult,
    NumericCandidate,
    ReferenceSet,
    ReferenceSetError,
    Tier,
)

__all__ = [
    "Rect",
    "TextFragment",
    "NumericCandidate",
    "ReferenceSet",
    "ReferenceSetError",
    "Tier",
    "BlockResult",
    "MIN_TICKET_NUMBER",
    "MAX_TICKET_NUMBER",
    "NUMBERS_PER_BLOCK",
    "PARTIAL_MATCH_MIN",
    "UPPER_BLOCK_INDEX",
    "LOWER_BLOCK_INDEX",
]
