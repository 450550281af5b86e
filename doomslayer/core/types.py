from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class Classification(str, Enum):
    CALIBRATING = "calibrating"
    MONITORING = "monitoring"
    NORMAL = "normal"
    DOOMSCROLLING = "doomscrolling"
    NO_FACE = "no-face"
    ERROR = "error"


@dataclass(frozen=True)
class Landmark:
    """Normalized face landmark; x and y are in [0, 1] of the frame."""
    x: float
    y: float


# One tracked face, MediaPipe FaceMesh topology (468 points, 478 refined)
LandmarkFrame = Tuple[Landmark, ...]


def as_landmark_frame(points: Sequence[Sequence[float]]) -> LandmarkFrame:
    """Build a LandmarkFrame from (x, y[, z]) sequences."""
    return tuple(Landmark(float(p[0]), float(p[1])) for p in points)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class GazeMetrics:
    vertical: float
    horizontal: float
    openness: float


@dataclass(frozen=True)
class HeadPoseMetrics:
    nose_y: float
    face_ratio: float
    horizontal_rotation: float
    face_center_x: float
    face_center_y: float


@dataclass(frozen=True)
class Baseline:
    gaze_vertical: float
    gaze_horizontal: float
    nose_y: float
    face_ratio: float
    head_rotation: float


@dataclass(frozen=True)
class ObjectDetection:
    label: str
    confidence: float
    box: Box


@dataclass(frozen=True)
class PhoneSignal:
    detected: bool = False
    box: Optional[Box] = None
    score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'detected': self.detected,
            'box': self.box.to_dict() if self.box else None,
            'score': self.score,
        }


NO_PHONE = PhoneSignal()
