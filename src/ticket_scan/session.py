from __future__ import annotations

import logging
import time
from typing import Iterable

from contracts.ocr import TextFragment
from contracts.ticket import BlockResult, ReferenceSet
from ocr.contracts import OcrFrameResult

from .config import ScanConfig, SessionConfig
from .gate import FrameGate
from .pipeline import FramePipeline

_module_logger = logging.getLogger(__name__)


class ScanSession:
    """
    Integration layer around `FramePipeline` for one live scan.

    The reference numbers are validated once here and stay fixed for the
    session. Frames are admitted through a `FrameGate`, built from
    `session_config.min_interval_s` unless one is passed in (an injected gate
    keeps its own interval; a conflicting `session_config` is rejected).
    Dropped frames and failed OCR results return None instead of raising, so
    the capture loop keeps running.
    """

    def __init__(
        self,
        reference_numbers: Iterable[int],
        *,
        scan_config: ScanConfig | None = None,
        session_config: SessionConfig | None = None,
        gate: FrameGate | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._log = logger or _module_logger
        if gate is not None and session_config is not None and gate.min_interval_s != session_config.min_interval_s:
            raise ValueError(
                f"gate.min_interval_s ({gate.min_interval_s}) conflicts with "
                f"session_config.min_interval_s ({session_config.min_interval_s})"
            )
        self._session_config = session_config or SessionConfig()
        self._session_config.validate()

        # Raises ReferenceSetError: a session-start configuration error.
        self._reference = ReferenceSet.from_numbers(reference_numbers)
        self._pipeline = FramePipeline(scan_config, logger=self._log)
        self._gate = gate or FrameGate(self._session_config.min_interval_s)
        self._last_results: list[BlockResult] = []

        self._log.info("Scan session started with %d reference numbers", len(self._reference))

    @property
    def reference(self) -> ReferenceSet:
        return self._reference

    @property
    def gate(self) -> FrameGate:
        return self._gate

    @property
    def last_results(self) -> list[BlockResult]:
        return list(self._last_results)

    def submit(
        self,
        fragments: Iterable[TextFragment],
        *,
        frame_size: tuple[int, int] | None = None,
    ) -> list[BlockResult] | None:
        """Analyze one frame, or return None if the gate dropped it."""

        if not self._gate.try_admit():
            return None
        try:
            t0 = time.perf_counter()
            results = self._pipeline.analyze(fragments, self._reference, frame_size=frame_size)
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
        finally:
            self._gate.release()

        if elapsed_ms > self._session_config.latency_warn_ms:
            self._log.warning("Frame analysis took %.0fms", elapsed_ms)
        else:
            self._log.debug("Frame analysis took %.1fms (%d blocks)", elapsed_ms, len(results))

        self._last_results = results
        return results

    def submit_ocr(self, ocr_result: OcrFrameResult) -> list[BlockResult] | None:
        """Analyze a provider result; failed recognitions are skipped."""

        if not ocr_result.ok:
            self._log.warning(
                "Skipping frame: OCR failed (%s)",
                ", ".join(e.code for e in ocr_result.errors) or "no error code",
            )
            return None

        frame_size = None
        if ocr_result.image_width and ocr_result.image_height:
            frame_size = (ocr_result.image_width, ocr_result.image_height)
        return self.submit(ocr_result.fragments, frame_size=frame_size)
