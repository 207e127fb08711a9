from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator

from .ocr import Rect

# Ticket domain rules (fixed; never inferred from data).
MIN_TICKET_NUMBER = 1
MAX_TICKET_NUMBER = 90
NUMBERS_PER_BLOCK = 15
PARTIAL_MATCH_MIN = 13

UPPER_BLOCK_INDEX = 1
LOWER_BLOCK_INDEX = 2


class Tier(str, Enum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    NONE = "NONE"

    @staticmethod
    def from_match_count(match_count: int) -> "Tier":
        if match_count == NUMBERS_PER_BLOCK:
            return Tier.FULL
        if PARTIAL_MATCH_MIN <= match_count < NUMBERS_PER_BLOCK:
            return Tier.PARTIAL
        return Tier.NONE


class ReferenceSetError(ValueError):
    """The user-selected numbers do not form a valid reference set."""


@dataclass(frozen=True, slots=True)
class NumericCandidate:
    value: int
    position: Rect

    def __post_init__(self) -> None:
        if not (MIN_TICKET_NUMBER <= self.value <= MAX_TICKET_NUMBER):
            raise ValueError(
                f"NumericCandidate.value must be within [{MIN_TICKET_NUMBER}, {MAX_TICKET_NUMBER}], got {self.value}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "position": self.position.to_dict()}


@dataclass(frozen=True, slots=True)
class ReferenceSet:
    """
    The 15 numbers a user is checking a ticket against.

    Fixed for the lifetime of a scan session; construct via `from_numbers` to
    get validation.
    """

    numbers: frozenset[int]

    @staticmethod
    def from_numbers(numbers: Iterable[int]) -> "ReferenceSet":
        values = list(numbers)
        out_of_range = sorted({n for n in values if not (MIN_TICKET_NUMBER <= n <= MAX_TICKET_NUMBER)})
        if out_of_range:
            raise ReferenceSetError(
                f"Reference numbers must be within [{MIN_TICKET_NUMBER}, {MAX_TICKET_NUMBER}]; "
                f"out of range: {out_of_range}"
            )
        distinct = frozenset(values)
        if len(distinct) != len(values):
            raise ReferenceSetError("Reference numbers must be distinct")
        if len(distinct) != NUMBERS_PER_BLOCK:
            raise ReferenceSetError(
                f"Exactly {NUMBERS_PER_BLOCK} reference numbers are required, got {len(distinct)}"
            )
        return ReferenceSet(numbers=distinct)

    def __contains__(self, value: object) -> bool:
        return value in self.numbers

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.numbers))

    def __len__(self) -> int:
        return len(self.numbers)

    def to_dict(self) -> dict[str, Any]:
        return {"numbers": sorted(self.numbers)}


@dataclass(frozen=True, slots=True)
class BlockResult:
    block_index: int  # 1 = upper block, 2 = lower block
    bounding_rect: Rect
    numbers: tuple[int, ...]  # distinct, row-then-column order, at most 15
    match_count: int
    tier: Tier

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_index": self.block_index,
            "bounding_rect": self.bounding_rect.to_dict(),
            "numbers": list(self.numbers),
            "match_count": self.match_count,
            "tier": self.tier.value,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "BlockResult":
        return BlockResult(
            block_index=int(d["block_index"]),
            bounding_rect=Rect.from_dict(d["bounding_rect"]),
            numbers=tuple(int(x) for x in (d.get("numbers") or [])),
            match_count=int(d["match_count"]),
            tier=Tier(str(d["tier"])),
        )
