"""
Phone Detection Module

Fuses an external object detector into the engine as an auxiliary signal.
The detector is expensive, so it is polled at most once per interval and the
last signal is reused in between. Any detector failure degrades to "no phone"
so the engine keeps running on face geometry alone.
"""

import time
from typing import Callable, Iterable, Optional

import numpy as np

from .types import NO_PHONE, ObjectDetection, PhoneSignal
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_MS = 500
DEFAULT_MIN_CONFIDENCE = 0.25
PHONE_LABEL = "cell phone"


class PhoneSignalAdapter:
    """Rate-limited wrapper turning detector output into a PhoneSignal."""

    def __init__(self, detector=None,
                 poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
                 min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                 target_label: str = PHONE_LABEL,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            detector: Object with detect(frame) -> List[ObjectDetection], or None
            poll_interval_ms: Minimum wall-clock time between detector calls
            min_confidence: Candidates must score strictly above this
            target_label: Detector class treated as the tracked object
            clock: Time source in seconds
        """
        self.detector = detector
        self.poll_interval_sec = poll_interval_ms / 1000.0
        self.min_confidence = min_confidence
        self.target_label = target_label
        self.clock = clock

        self.last_signal: PhoneSignal = NO_PHONE
        self.last_poll_time: Optional[float] = None
        self.poll_count = 0

    @property
    def available(self) -> bool:
        return self.detector is not None

    def poll(self, frame: np.ndarray, now: Optional[float] = None) -> PhoneSignal:
        """Return the current signal, refreshing it if the interval elapsed."""
        if self.detector is None:
            return NO_PHONE

        now = self.clock() if now is None else now
        if self.last_poll_time is not None and now - self.last_poll_time < self.poll_interval_sec:
            return self.last_signal

        self.last_poll_time = now
        self.poll_count += 1
        start_time = time.time()

        try:
            candidates = self.detector.detect(frame)
            self.last_signal = self.select(candidates)
        except Exception as e:
            logger.log_error_with_context(e, "phone_detection")
            self.last_signal = NO_PHONE

        processing_time = (time.time() - start_time) * 1000
        logger.log_phone_detection(self.last_signal.detected, self.last_signal.score, processing_time)
        return self.last_signal

    def select(self, candidates: Iterable[ObjectDetection]) -> PhoneSignal:
        """Pick the most confident qualifying candidate."""
        best = None
        for candidate in candidates:
            if candidate.label != self.target_label or candidate.confidence <= self.min_confidence:
                continue
            if best is None or candidate.confidence > best.confidence:
                best = candidate

        if best is None:
            return NO_PHONE
        return PhoneSignal(detected=True, box=best.box, score=float(best.confidence))

    def reset(self) -> None:
        """Forget the cached signal so the next poll hits the detector."""
        self.last_signal = NO_PHONE
        self.last_poll_time = None
