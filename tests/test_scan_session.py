from __future__ import annotations

import logging
import threading
import unittest

from _ticket_frames import two_block_ticket

from contracts.ticket import ReferenceSetError, Tier
from ocr.contracts import OcrEngineName, OcrError, OcrFrameResult
from ticket_scan.config import SessionConfig
from ticket_scan.gate import FrameGate, GateStats
from ticket_scan.report import format_status
from ticket_scan.session import ScanSession


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestFrameGate(unittest.TestCase):
    def test_busy_and_throttled_frames_are_dropped(self) -> None:
        clock = _FakeClock()
        gate = FrameGate(0.5, clock=clock)

        self.assertTrue(gate.try_admit())
        self.assertTrue(gate.busy)
        self.assertFalse(gate.try_admit())  # in flight
        gate.release()

        clock.now += 0.2
        self.assertFalse(gate.try_admit())  # too soon
        self.assertFalse(gate.busy)

        clock.now += 0.4
        self.assertTrue(gate.try_admit())
        gate.release()

        self.assertEqual(gate.stats(), GateStats(admitted=2, dropped_busy=1, dropped_throttled=1))

    def test_only_one_thread_is_admitted(self) -> None:
        gate = FrameGate(0.0)
        admitted: list[bool] = []
        barrier = threading.Barrier(8)

        def offer() -> None:
            barrier.wait()
            admitted.append(gate.try_admit())

        threads = [threading.Thread(target=offer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(admitted.count(True), 1)
        gate.release()

    def test_negative_interval_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FrameGate(-1.0)


class TestScanSession(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.log = logging.getLogger("tests.scan_session")

    def _session(self, **kwargs) -> ScanSession:
        return ScanSession(range(1, 16), gate=FrameGate(0.5, clock=self.clock), logger=self.log, **kwargs)

    def test_invalid_reference_fails_at_session_start(self) -> None:
        with self.assertRaises(ReferenceSetError):
            ScanSession([1, 2, 3])

    def test_conflicting_gate_interval_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ScanSession(range(1, 16), gate=FrameGate(0.5), session_config=SessionConfig(min_interval_s=1.0))

    def test_interval_comes_from_session_config_or_injected_gate(self) -> None:
        self.assertEqual(ScanSession(range(1, 16), session_config=SessionConfig(min_interval_s=1.0)).gate.min_interval_s, 1.0)
        self.assertEqual(ScanSession(range(1, 16), gate=FrameGate(0.25)).gate.min_interval_s, 0.25)

    def test_submit_and_throttle(self) -> None:
        session = self._session()

        results = session.submit(two_block_ticket())
        self.assertIsNotNone(results)
        self.assertEqual([r.tier for r in results], [Tier.FULL, Tier.NONE])
        self.assertEqual(session.last_results, results)

        # Arrives 100ms later: dropped, previous results kept.
        self.clock.now += 0.1
        self.assertIsNone(session.submit(two_block_ticket()))
        self.assertEqual(session.last_results, results)

        self.clock.now += 0.5
        self.assertEqual(session.submit([]), [])
        self.assertEqual(session.gate.stats().admitted, 2)

    def test_failed_ocr_frame_is_skipped(self) -> None:
        session = self._session()
        failed = OcrFrameResult(
            ok=False,
            engine=OcrEngineName.TESSERACT_CLI,
            fragments=[],
            errors=[OcrError(code="OCR_TIMEOUT", message="OCR backend timed out")],
        )

        with self.assertLogs(self.log, level="WARNING") as captured:
            self.assertIsNone(session.submit_ocr(failed))

        self.assertIn("OCR_TIMEOUT", captured.output[0])
        self.assertEqual(session.gate.stats().admitted, 0)

    def test_ocr_frame_is_analyzed_with_its_frame_size(self) -> None:
        session = self._session()
        ok = OcrFrameResult(
            ok=True,
            engine=OcrEngineName.TESSERACT_CLI,
            fragments=two_block_ticket(),
            errors=[],
            image_width=720,
            image_height=1280,
        )

        results = session.submit_ocr(ok)
        self.assertEqual([r.block_index for r in results], [1, 2])

    def test_slow_frame_logs_warning(self) -> None:
        session = self._session(session_config=SessionConfig(latency_warn_ms=1e-9))

        with self.assertLogs(self.log, level="WARNING") as captured:
            session.submit(two_block_ticket())

        self.assertTrue(any("Frame analysis took" in line for line in captured.output))

    def test_gate_released_when_analysis_raises(self) -> None:
        session = self._session()

        with self.assertRaises(AttributeError):
            session.submit([object()])  # not a TextFragment

        self.assertFalse(session.gate.busy)

    def test_status_text(self) -> None:
        session = self._session()
        results = session.submit(two_block_ticket())

        self.assertEqual(
            format_status(results),
            "BLOCK 1 (UPPER): FULL MATCH (15/15)\nBLOCK 2 (LOWER): NO MATCH (0/15)",
        )


if __name__ == "__main__":
    unittest.main()
