"""
Frame analysis for two-block lottery tickets.

Consumes normalized OCR fragments and a reference set of 15 numbers; produces
per-block results (numbers, bounding rectangle, match tier) for a renderer.

No pixels, no camera state, no rendering. Each frame's analysis is a pure
function of its fragments and the session's reference set.
"""

import logging

from .config import ScanConfig, SegmentationStrategy, SessionConfig, SingleClusterPolicy
from .gate import FrameGate, GateStats
from .pipeline import FramePipeline, analyze
from .reference import parse_reference_numbers, reference_from_text
from .report import format_status
from .session import ScanSession

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FrameGate",
    "FramePipeline",
    "GateStats",
    "ScanConfig",
    "ScanSession",
    "SegmentationStrategy",
    "SessionConfig",
    "SingleClusterPolicy",
    "analyze",
    "format_status",
    "parse_reference_numbers",
    "reference_from_text",
]
