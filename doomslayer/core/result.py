"""
Detection result assembly.

Packages the classification, a user-facing message, bounding boxes and debug
metrics. No decisions are made here.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from .scoring import REASON_PHONE, ScoreBreakdown
from .types import Box, Classification, LandmarkFrame, PhoneSignal

MESSAGES = {
    Classification.MONITORING: "Monitoring...",
    Classification.NORMAL: "Good posture!",
    Classification.DOOMSCROLLING: "Doomscrolling detected!",
    Classification.NO_FACE: "No face detected",
    Classification.ERROR: "Model not initialized",
}


@dataclass
class DebugMetrics:
    gaze_vertical_offset: float = 0.0
    head_vertical_offset: float = 0.0
    vertical_offset: float = 0.0
    horizontal_offset: float = 0.0
    rotation_offset: float = 0.0
    face_ratio_offset: float = 0.0
    raw_score: int = 0
    sensitivity_bonus: float = 0.0
    score: float = 0.0
    phone_score: float = 0.0
    fps: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DetectionResult:
    classification: Classification
    message: str
    face_box: Optional[Box] = None
    phone_box: Optional[Box] = None
    debug: DebugMetrics = field(default_factory=DebugMetrics)
    calibration_progress: Optional[str] = None

    @property
    def is_looking_down(self) -> bool:
        return self.classification == Classification.DOOMSCROLLING

    @property
    def state(self) -> str:
        return self.classification.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state,
            'is_looking_down': self.is_looking_down,
            'message': self.message,
            'face_box': self.face_box.to_dict() if self.face_box else None,
            'phone_box': self.phone_box.to_dict() if self.phone_box else None,
            'debug': self.debug.to_dict(),
            'calibration_progress': self.calibration_progress,
        }


def face_bounding_box(landmarks: LandmarkFrame, frame_width: int, frame_height: int) -> Box:
    """Min/max of all landmark coordinates scaled to the frame size."""
    xs = [lm.x for lm in landmarks]
    ys = [lm.y for lm in landmarks]
    min_x, max_x = min(xs) * frame_width, max(xs) * frame_width
    min_y, max_y = min(ys) * frame_height, max(ys) * frame_height
    return Box(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def message_for(classification: Classification, breakdown: Optional[ScoreBreakdown] = None) -> str:
    """Phone reasons outrank geometry reasons when both contributed."""
    if classification == Classification.DOOMSCROLLING and breakdown is not None and breakdown.reasons:
        return breakdown.reasons[0]
    return MESSAGES.get(classification, MESSAGES[Classification.MONITORING])


def assemble_result(classification: Classification,
                    breakdown: Optional[ScoreBreakdown] = None,
                    phone: Optional[PhoneSignal] = None,
                    face_box: Optional[Box] = None,
                    fps: int = 0,
                    message: Optional[str] = None,
                    calibration_progress: Optional[str] = None) -> DetectionResult:
    """Build a DetectionResult from the tick's intermediate values."""
    debug = DebugMetrics(fps=fps)
    if breakdown is not None:
        debug.gaze_vertical_offset = round(breakdown.gaze_vertical_offset, 3)
        debug.head_vertical_offset = round(breakdown.head_vertical_offset, 3)
        debug.vertical_offset = round(breakdown.vertical_offset, 3)
        debug.horizontal_offset = round(breakdown.horizontal_offset, 3)
        debug.rotation_offset = round(breakdown.rotation_offset, 3)
        debug.face_ratio_offset = round(breakdown.face_ratio_offset, 3)
        debug.raw_score = breakdown.raw_score
        debug.sensitivity_bonus = round(breakdown.sensitivity_bonus, 3)
        debug.score = round(breakdown.score, 3)
    if phone is not None:
        debug.phone_score = round(phone.score, 3)

    if message is None:
        if phone is not None and phone.detected and classification == Classification.DOOMSCROLLING and breakdown is None:
            message = REASON_PHONE
        else:
            message = message_for(classification, breakdown)

    return DetectionResult(
        classification=classification,
        message=message,
        face_box=face_box,
        phone_box=phone.box if phone is not None and phone.detected else None,
        debug=debug,
        calibration_progress=calibration_progress,
    )
