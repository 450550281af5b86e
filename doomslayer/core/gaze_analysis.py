"""
Gaze Analysis Module

This module estimates where the eyes are pointing from FaceMesh landmarks.
The iris center is located inside each eye's bounding box, giving a vertical
ratio (0 = top lid, 1 = bottom lid) and a horizontal ratio (0.5 = centered).
When refined iris landmarks are unavailable the pupil is approximated by the
centroid of the eye contour.
"""

from typing import Sequence, Tuple

import numpy as np

from .types import GazeMetrics, Landmark, LandmarkFrame

EPSILON = 1e-6
MIN_SPAN = 1e-4
NEUTRAL = 0.5

# Eye indices in image orientation (the subject's right eye is on image left)
LEFT_EYE_CORNERS = (33, 133)
LEFT_EYE_LIDS = (159, 145)
LEFT_IRIS_CENTER = 468
LEFT_EYE_CONTOUR = (33, 7, 163, 144, 145, 153, 154, 155, 133, 173, 157, 158, 159, 160, 161, 246)

RIGHT_EYE_CORNERS = (362, 263)
RIGHT_EYE_LIDS = (386, 374)
RIGHT_IRIS_CENTER = 473
RIGHT_EYE_CONTOUR = (362, 382, 381, 380, 374, 373, 390, 249, 263, 466, 388, 387, 386, 385, 384, 398)

# Face mesh without iris refinement
BASE_LANDMARK_COUNT = 468
REFINED_LANDMARK_COUNT = 478


def safe_ratio(numerator: float, span: float) -> float:
    """Divide by span with an epsilon guard; degenerate spans give NEUTRAL."""
    if not np.isfinite(numerator) or not np.isfinite(span) or abs(span) < MIN_SPAN:
        return NEUTRAL
    return float(numerator / (span + EPSILON))


def has_iris_landmarks(landmarks: LandmarkFrame) -> bool:
    return len(landmarks) >= REFINED_LANDMARK_COUNT


def _pupil(landmarks: LandmarkFrame, iris_index: int, contour: Sequence[int],
           refine_landmarks: bool) -> Tuple[float, float]:
    if refine_landmarks and has_iris_landmarks(landmarks):
        iris = landmarks[iris_index]
        return iris.x, iris.y
    points = np.array([(landmarks[i].x, landmarks[i].y) for i in contour], dtype=np.float64)
    center = points.mean(axis=0)
    return float(center[0]), float(center[1])


def _eye_metrics(landmarks: LandmarkFrame, corners: Tuple[int, int], lids: Tuple[int, int],
                 iris_index: int, contour: Sequence[int],
                 refine_landmarks: bool) -> Tuple[float, float, float]:
    """Return (vertical, horizontal, openness) for one eye."""
    corner_a: Landmark = landmarks[corners[0]]
    corner_b: Landmark = landmarks[corners[1]]
    top: Landmark = landmarks[lids[0]]
    bottom: Landmark = landmarks[lids[1]]

    pupil_x, pupil_y = _pupil(landmarks, iris_index, contour, refine_landmarks)

    eye_left = min(corner_a.x, corner_b.x)
    eye_width = abs(corner_b.x - corner_a.x)
    eye_height = bottom.y - top.y

    horizontal = safe_ratio(pupil_x - eye_left, eye_width)
    vertical = safe_ratio(pupil_y - top.y, eye_height)
    openness = safe_ratio(eye_height, eye_width)

    return vertical, horizontal, openness


def analyze_gaze(landmarks: LandmarkFrame, refine_landmarks: bool = True) -> GazeMetrics:
    """
    Compute gaze metrics averaged over both eyes.

    Args:
        landmarks: FaceMesh landmarks for one face (at least 468 points)
        refine_landmarks: Use the iris centers when the frame carries them

    Returns:
        GazeMetrics with finite vertical, horizontal and openness ratios
    """
    left = _eye_metrics(landmarks, LEFT_EYE_CORNERS, LEFT_EYE_LIDS,
                        LEFT_IRIS_CENTER, LEFT_EYE_CONTOUR, refine_landmarks)
    right = _eye_metrics(landmarks, RIGHT_EYE_CORNERS, RIGHT_EYE_LIDS,
                         RIGHT_IRIS_CENTER, RIGHT_EYE_CONTOUR, refine_landmarks)

    vertical, horizontal, openness = np.mean([left, right], axis=0)

    return GazeMetrics(
        vertical=float(vertical),
        horizontal=float(horizontal),
        openness=float(openness),
    )
