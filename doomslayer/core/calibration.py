"""
Baseline Calibration Module

Collects gaze and head pose metrics over the first frames of a session and
freezes their means as the user's neutral reference. Scoring is measured as
offsets from this baseline, so the same posture reads as neutral across
different users and camera placements.
"""

from typing import Dict, List, Optional

import numpy as np

from .types import Baseline, GazeMetrics, HeadPoseMetrics
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CALIBRATION_FRAMES = 30


class CalibrationAccumulator:
    """Accumulates per-frame metrics until the baseline window is full."""

    def __init__(self, required_samples: int = DEFAULT_CALIBRATION_FRAMES):
        if required_samples <= 0:
            raise ValueError("required_samples must be positive")
        self.required_samples = required_samples
        self.samples: List[Dict[str, float]] = []
        self.baseline: Optional[Baseline] = None

    @property
    def samples_collected(self) -> int:
        return len(self.samples)

    @property
    def is_complete(self) -> bool:
        return self.baseline is not None

    @property
    def progress(self) -> str:
        return f"{self.samples_collected}/{self.required_samples}"

    def add_sample(self, gaze: GazeMetrics, head_pose: HeadPoseMetrics) -> Optional[Baseline]:
        """
        Append one valid frame's metrics.

        Returns the frozen Baseline once the window is full, otherwise None.
        Samples offered after completion are ignored.
        """
        if self.baseline is not None:
            return self.baseline

        self.samples.append({
            'gaze_vertical': gaze.vertical,
            'gaze_horizontal': gaze.horizontal,
            'nose_y': head_pose.nose_y,
            'face_ratio': head_pose.face_ratio,
            'head_rotation': head_pose.horizontal_rotation,
        })
        logger.log_calibration(self.samples_collected, self.required_samples)

        if self.samples_collected == self.required_samples:
            self.baseline = self._finalize()
            logger.log_calibration(self.samples_collected, self.required_samples, self.baseline)
        return self.baseline

    def _finalize(self) -> Baseline:
        """Freeze per-field arithmetic means."""
        return Baseline(**{
            key: float(np.mean([sample[key] for sample in self.samples]))
            for key in self.samples[0]
        })

    def clear(self) -> None:
        """Drop samples and baseline, restarting the window."""
        self.samples = []
        self.baseline = None
