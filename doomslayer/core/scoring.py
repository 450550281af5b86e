"""
Doomscroll Scoring Module

Combines baseline-relative offsets and the phone signal into one score per
frame. Each signal family is checked independently against a fixed tier table
and the points are summed, so no single noisy ratio decides the outcome. The
user-facing sensitivity slider shifts the whole score linearly.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Sequence, Tuple

from .types import Baseline, GazeMetrics, HeadPoseMetrics, PhoneSignal

# (minimum offset, points), checked from the largest tier down
VERTICAL_TIERS: Tuple[Tuple[float, int], ...] = ((0.12, 4), (0.09, 3), (0.06, 2))
HORIZONTAL_GAZE_TIERS: Tuple[Tuple[float, int], ...] = ((0.12, 4), (0.08, 3), (0.05, 2))
HEAD_ROTATION_TIERS: Tuple[Tuple[float, int], ...] = ((0.08, 3), (0.05, 2), (0.03, 1))
PHONE_POINTS = 5

NEUTRAL_SENSITIVITY = 0.55
SENSITIVITY_SCALE = 8.0
DETECTION_CUTOFF = 3.0

REASON_PHONE = "Phone detected!"
REASON_LOOKING_DOWN = "Looking down"
REASON_EYES_AWAY = "Eyes looking away"
REASON_HEAD_TURNED = "Head turned away"


@dataclass
class ScoreBreakdown:
    """Per-frame score and the offsets that produced it."""
    gaze_vertical_offset: float = 0.0
    head_vertical_offset: float = 0.0
    vertical_offset: float = 0.0
    horizontal_offset: float = 0.0
    rotation_offset: float = 0.0
    face_ratio_offset: float = 0.0
    vertical_points: int = 0
    horizontal_points: int = 0
    rotation_points: int = 0
    phone_points: int = 0
    sensitivity_bonus: float = 0.0
    reasons: List[str] = field(default_factory=list)

    @property
    def raw_score(self) -> int:
        """Score before the sensitivity bonus."""
        return self.vertical_points + self.horizontal_points + self.rotation_points + self.phone_points

    @property
    def score(self) -> float:
        return self.raw_score + self.sensitivity_bonus

    @property
    def raw_detection(self) -> bool:
        return self.score >= DETECTION_CUTOFF

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['raw_score'] = self.raw_score
        data['score'] = self.score
        return data


def tier_points(offset: float, tiers: Sequence[Tuple[float, int]]) -> int:
    """Points for the highest tier the offset reaches, 0 below all tiers."""
    for minimum, points in tiers:
        if offset >= minimum:
            return points
    return 0


def sensitivity_bonus(sensitivity: float) -> float:
    """Linear shift: +1.2 at sensitivity 0.4, -1.2 at 0.7, 0 at 0.55."""
    return (NEUTRAL_SENSITIVITY - sensitivity) * SENSITIVITY_SCALE


def score_frame(gaze: GazeMetrics, head_pose: HeadPoseMetrics, baseline: Baseline,
                phone: PhoneSignal, sensitivity: float) -> ScoreBreakdown:
    """
    Score one frame against the calibrated baseline.

    Args:
        gaze: Current gaze metrics
        head_pose: Current head pose metrics
        baseline: Frozen calibration reference
        phone: Latest auxiliary signal
        sensitivity: Clamped user sensitivity

    Returns:
        ScoreBreakdown; raw_detection is score >= 3
    """
    result = ScoreBreakdown()

    # Looking down: gaze or head, whichever moved further
    result.gaze_vertical_offset = gaze.vertical - baseline.gaze_vertical
    result.head_vertical_offset = head_pose.nose_y - baseline.nose_y
    result.vertical_offset = max(result.gaze_vertical_offset, result.head_vertical_offset)
    result.vertical_points = tier_points(result.vertical_offset, VERTICAL_TIERS)

    result.horizontal_offset = abs(gaze.horizontal - baseline.gaze_horizontal)
    result.horizontal_points = tier_points(result.horizontal_offset, HORIZONTAL_GAZE_TIERS)

    result.rotation_offset = abs(head_pose.horizontal_rotation - baseline.head_rotation)
    result.rotation_points = tier_points(result.rotation_offset, HEAD_ROTATION_TIERS)

    # Reported for debugging only
    result.face_ratio_offset = head_pose.face_ratio - baseline.face_ratio

    if phone.detected:
        result.phone_points = PHONE_POINTS

    result.sensitivity_bonus = sensitivity_bonus(sensitivity)
    result.reasons = _rank_reasons(result)
    return result


def _rank_reasons(result: ScoreBreakdown) -> List[str]:
    """Phone first, then geometry reasons by points awarded."""
    geometry = [
        (result.vertical_points, REASON_LOOKING_DOWN),
        (result.horizontal_points, REASON_EYES_AWAY),
        (result.rotation_points, REASON_HEAD_TURNED),
    ]
    # sorted() is stable, so ties keep the table order above
    reasons = [reason for points, reason in sorted(geometry, key=lambda item: -item[0]) if points > 0]
    if result.phone_points:
        reasons.insert(0, REASON_PHONE)
    return reasons
