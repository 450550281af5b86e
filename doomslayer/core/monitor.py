"""
Tick driver.

Feeds camera frames to the detector at a fixed cadence on a background thread
and keeps the session statistics and feedback text current.
"""

import threading
import time
from typing import Callable, Optional

from .detector import DoomscrollDetector
from .feedback import FeedbackSelector
from .result import DetectionResult
from .session import SessionTracker
from ..utils.config import config
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Monitor:
    """Drives DoomscrollDetector.process_tick from a frame source."""

    def __init__(self, detector: DoomscrollDetector, frame_source,
                 tick_interval_sec: float = 0.1,
                 on_result: Optional[Callable[[DetectionResult], None]] = None,
                 session: Optional[SessionTracker] = None,
                 feedback: Optional[FeedbackSelector] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            detector: Initialized detection engine
            frame_source: Object with read_frame() -> (ok, frame)
            tick_interval_sec: Time between ticks
            on_result: Called with each tick's DetectionResult
            session: Statistics tracker; a new one is created if omitted
            feedback: Roast/encouragement selector
            clock: Time source in seconds
        """
        if tick_interval_sec <= 0:
            raise ValueError(f"tick_interval_sec must be positive, got {tick_interval_sec}")

        self.detector = detector
        self.frame_source = frame_source
        self.tick_interval_sec = tick_interval_sec
        self.on_result = on_result
        self.clock = clock
        self.session = session or SessionTracker(clock=clock)
        self.feedback = feedback or FeedbackSelector(cooldown_sec=config.feedback.roast_cooldown_sec,
                                                     clock=clock)

        self.last_result: Optional[DetectionResult] = None
        self.last_frame = None
        self.last_feedback = ""
        self.last_latency_ms = 0.0
        self.skipped_frames = 0

        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[DetectionResult]:
        """Run a single tick; returns None when no frame could be read."""
        with self._tick_lock:
            ok, frame = self.frame_source.read_frame()
            if not ok or frame is None:
                self.skipped_frames += 1
                return None

            started = self.clock()
            result = self.detector.process_tick(frame)
            now = self.clock()
            self.last_latency_ms = (now - started) * 1000.0
            self.session.update(result.classification, now)
            self.last_feedback = self.feedback.select(result.classification, now)
            self.last_result = result
            self.last_frame = frame

        if self.on_result is not None:
            self.on_result(result)
        return result

    def start(self) -> None:
        """Start the tick loop on a daemon thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="doomslayer-monitor", daemon=True)
        self._thread.start()
        logger.info(f"Started monitor thread ({1.0 / self.tick_interval_sec:.1f} Hz)")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the loop; the tick in flight is allowed to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Stopped monitor thread")

    def reset_stats(self) -> None:
        """Zero session statistics and rebuild the baseline between ticks."""
        with self._tick_lock:
            self.session.reset_stats()
            self.detector.recalibrate()

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            started = self.clock()
            try:
                self.run_once()
            except Exception as e:
                logger.log_error_with_context(e, "monitor_tick")
            elapsed = self.clock() - started
            self._stop_event.wait(max(0.0, self.tick_interval_sec - elapsed))
