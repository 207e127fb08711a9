from __future__ import annotations

import logging
from typing import Collection, Iterable

from contracts.ocr import TextFragment
from contracts.ticket import LOWER_BLOCK_INDEX, UPPER_BLOCK_INDEX, BlockResult

from .candidate_filter import filter_candidates
from .config import ScanConfig
from .extractor import extract
from .scorer import score
from .segmenter import segment

_module_logger = logging.getLogger(__name__)


class FramePipeline:
    """
    Per-frame analysis: filter -> segment -> extract -> score.

    Stateless between calls; one instance may be reused for every frame of a
    scan session. `frame_size` is (width, height) of the OCR image, used only by
    the fixed-fraction segmenter and for rectangle clamping.
    """

    def __init__(self, config: ScanConfig | None = None, *, logger: logging.Logger | None = None) -> None:
        self._config = config or ScanConfig()
        self._config.validate()
        self._log = logger or _module_logger

    @property
    def config(self) -> ScanConfig:
        return self._config

    def analyze(
        self,
        fragments: Iterable[TextFragment],
        reference: Collection[int],
        *,
        frame_size: tuple[int, int] | None = None,
    ) -> list[BlockResult]:
        fragments = list(fragments)
        if not fragments:
            return []

        candidates = filter_candidates(fragments, self._config)
        upper, lower = segment(
            candidates,
            self._config,
            frame_height=(None if frame_size is None else frame_size[1]),
        )

        results: list[BlockResult] = []
        for block_index, group in ((UPPER_BLOCK_INDEX, upper), (LOWER_BLOCK_INDEX, lower)):
            # Empty groups produce no result; never a placeholder rectangle.
            if not group:
                continue
            numbers, rect = extract(group, self._config, frame_size=frame_size)
            match_count, tier = score(numbers, reference)
            results.append(
                BlockResult(
                    block_index=block_index,
                    bounding_rect=rect,
                    numbers=tuple(numbers),
                    match_count=match_count,
                    tier=tier,
                )
            )
            self._log.debug(
                "Block %d: %d candidates, %d numbers, matches=%d tier=%s rect=%s",
                block_index,
                len(group),
                len(numbers),
                match_count,
                tier.value,
                rect.to_dict(),
            )

        self._log.debug(
            "Analyzed %d fragments -> %d candidates -> %d blocks",
            len(fragments),
            len(candidates),
            len(results),
        )
        return results


def analyze(
    fragments: Iterable[TextFragment],
    reference: Collection[int],
    config: ScanConfig | None = None,
    *,
    frame_size: tuple[int, int] | None = None,
) -> list[BlockResult]:
    return FramePipeline(config).analyze(fragments, reference, frame_size=frame_size)
