"""
Session Statistics Module

Tracks how the running session splits between focused and distracted time and
counts doomscrolling alerts.
"""

import json
import time
from typing import Any, Dict, Optional

from .types import Classification
from ..utils.logger import get_logger

logger = get_logger(__name__)


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins}:{secs:02d}"


class SessionTracker:
    """Accumulates focused/distracted time and alert count for one session."""

    def __init__(self, session_id: Optional[str] = None, clock=time.monotonic):
        """
        Args:
            session_id: Unique session identifier
            clock: Time source in seconds
        """
        self.session_id = session_id or f"session_{int(time.time())}"
        self.clock = clock
        self.tracking_state: Optional[Classification] = None
        self._reset_counters()
        logger.info(f"Session tracker initialized for session: {self.session_id}")

    def _reset_counters(self) -> None:
        self.session_start_time = time.time()
        self.focused_seconds = 0.0
        self.distracted_seconds = 0.0
        self.alert_count = 0
        self.total_ticks = 0
        self.state_counts: Dict[str, int] = {c.value: 0 for c in Classification}
        self._last_update: Optional[float] = None
        self._alert_active = False

    def update(self, classification: Classification, now: Optional[float] = None) -> None:
        """
        Record one tick.

        Time since the previous update is credited to the tracking state: the
        last stable classification seen (focused for normal, distracted for
        doomscrolling). Monitoring, no-face, calibrating and error ticks keep
        the tracking state running rather than pausing it.
        """
        now = self.clock() if now is None else now

        if self._last_update is not None:
            elapsed = max(0.0, now - self._last_update)
            if self.tracking_state == Classification.NORMAL:
                self.focused_seconds += elapsed
            elif self.tracking_state == Classification.DOOMSCROLLING:
                self.distracted_seconds += elapsed

        if classification in (Classification.NORMAL, Classification.DOOMSCROLLING):
            self.tracking_state = classification

        if classification == Classification.DOOMSCROLLING:
            if not self._alert_active:
                self.alert_count += 1
                self._alert_active = True
                logger.info(f"Doomscrolling alert #{self.alert_count}")
        else:
            self._alert_active = False

        self.total_ticks += 1
        self.state_counts[classification.value] += 1
        self._last_update = now

    @property
    def focus_percentage(self) -> float:
        tracked = self.focused_seconds + self.distracted_seconds
        if tracked <= 0:
            return 0.0
        return self.focused_seconds / tracked * 100.0

    def reset_stats(self) -> None:
        """Zero all statistics, keeping the session id and tracking state."""
        self._reset_counters()
        logger.info(f"Session stats reset: {self.session_id}")

    def get_session_summary(self) -> Dict[str, Any]:
        """Get comprehensive session summary."""
        return {
            'session_id': self.session_id,
            'session_duration': time.time() - self.session_start_time,
            'total_ticks': self.total_ticks,
            'focused_seconds': round(self.focused_seconds, 2),
            'distracted_seconds': round(self.distracted_seconds, 2),
            'focused_time': format_time(self.focused_seconds),
            'distracted_time': format_time(self.distracted_seconds),
            'focus_percentage': round(self.focus_percentage, 1),
            'alert_count': self.alert_count,
            'state_counts': dict(self.state_counts),
        }

    def save_session_data(self, filepath: Optional[str] = None) -> str:
        """Save session summary to a JSON file; returns the path or '' on failure."""
        if filepath is None:
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            filepath = f"session_data_{self.session_id}_{timestamp}.json"

        session_data = {
            'session_id': self.session_id,
            'session_start_time': self.session_start_time,
            'session_end_time': time.time(),
            'summary': self.get_session_summary(),
        }

        try:
            with open(filepath, 'w') as f:
                json.dump(session_data, f, indent=2)
            logger.info(f"Session data saved to: {filepath}")
            return filepath
        except OSError as e:
            logger.error(f"Error saving session data: {e}")
            return ""
