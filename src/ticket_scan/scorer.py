from __future__ import annotations

from typing import Collection, Iterable

from contracts.ticket import Tier


def score(numbers: Iterable[int], reference: Collection[int]) -> tuple[int, Tier]:
    """
    Count how many block numbers are in the reference set and classify the
    count: 15 is FULL, 13-14 is PARTIAL, anything lower is NONE.
    """

    match_count = len(set(numbers) & set(reference))
    return match_count, Tier.from_match_count(match_count)
