from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable

from contracts.ocr import TextFragment
from contracts.ticket import MAX_TICKET_NUMBER, MIN_TICKET_NUMBER, NumericCandidate

from .config import ScanConfig

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"[0-9]+")

REASON_NO_BBOX = "NO_BBOX"
REASON_LENGTH = "TEXT_LENGTH"
REASON_BOX_TOO_LARGE = "BOX_TOO_LARGE"
REASON_BELOW_CONFIDENCE_FLOOR = "BELOW_CONFIDENCE_FLOOR"
REASON_NOT_NUMERIC = "NOT_NUMERIC"
REASON_OUT_OF_RANGE = "OUT_OF_RANGE"


def rejection_reason(fragment: TextFragment, config: ScanConfig) -> str | None:
    """
    Return why `fragment` cannot be a ticket number, or None if it can.

    Checks run in a fixed order so a fragment always reports the same reason.
    """

    box = fragment.bounding_box
    if box is None:
        return REASON_NO_BBOX

    text = fragment.text.strip()
    if not (config.min_token_length <= len(text) <= config.max_token_length):
        return REASON_LENGTH

    if box.width() > config.max_box_width or box.height() > config.max_box_height:
        return REASON_BOX_TOO_LARGE

    if fragment.confidence is not None and fragment.confidence < config.confidence_floor:
        return REASON_BELOW_CONFIDENCE_FLOOR

    if _DIGITS_RE.fullmatch(text) is None:
        return REASON_NOT_NUMERIC

    if not (MIN_TICKET_NUMBER <= int(text) <= MAX_TICKET_NUMBER):
        return REASON_OUT_OF_RANGE

    return None


def filter_candidates(fragments: Iterable[TextFragment], config: ScanConfig) -> list[NumericCandidate]:
    """
    Keep the fragments that parse to a plausible ticket number.

    Rejected fragments are dropped silently; with live OCR that is the normal
    case, not a failure.
    """

    candidates: list[NumericCandidate] = []
    rejected: Counter[str] = Counter()

    for fragment in fragments:
        reason = rejection_reason(fragment, config)
        if reason is not None:
            rejected[reason] += 1
            continue
        candidates.append(NumericCandidate(value=int(fragment.text.strip()), position=fragment.bounding_box))

    if rejected:
        logger.debug(
            "Candidate filter kept %d fragments, rejected %s",
            len(candidates),
            dict(sorted(rejected.items())),
        )
    return candidates
