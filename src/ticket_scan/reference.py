from __future__ import annotations

import re

from contracts.ticket import MAX_TICKET_NUMBER, MIN_TICKET_NUMBER, ReferenceSet

_SEPARATORS_RE = re.compile(r"[,\s]+")


def parse_reference_numbers(text: str) -> list[int]:
    """
    Parse free-form user input ("1, 5 17,23 ...") into candidate reference numbers.

    Non-integer items and values outside the ticket range are ignored; the
    result is de-duplicated and sorted. The count is not checked here.
    """

    out: set[int] = set()
    for item in _SEPARATORS_RE.split(text.strip()):
        if not item:
            continue
        try:
            value = int(item)
        except ValueError:
            continue
        if MIN_TICKET_NUMBER <= value <= MAX_TICKET_NUMBER:
            out.add(value)
    return sorted(out)


def reference_from_text(text: str) -> ReferenceSet:
    return ReferenceSet.from_numbers(parse_reference_numbers(text))
