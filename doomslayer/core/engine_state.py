"""
Mutable session state for the doomscroll detector.
"""

from dataclasses import dataclass, field
from typing import Optional

from .calibration import CalibrationAccumulator, DEFAULT_CALIBRATION_FRAMES
from .types import Baseline, Classification


@dataclass
class EngineState:
    """State container owned by exactly one detector and mutated once per tick."""
    # Hysteresis counters
    consecutive_detected: int = 0
    consecutive_normal: int = 0
    classification: Classification = Classification.MONITORING

    # Calibration
    calibration: CalibrationAccumulator = field(
        default_factory=lambda: CalibrationAccumulator(DEFAULT_CALIBRATION_FRAMES))

    # Timing bookkeeping
    last_tick_time: Optional[float] = None
    fps: int = 0
    tick_count: int = 0

    # Set when neither provider could start; cleared by initialize()
    initialization_failed: bool = False

    @property
    def baseline(self) -> Optional[Baseline]:
        return self.calibration.baseline

    @property
    def is_calibrating(self) -> bool:
        return not self.calibration.is_complete

    def reset_counters(self) -> None:
        self.consecutive_detected = 0
        self.consecutive_normal = 0
