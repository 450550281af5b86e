"""
Head Pose Analysis Module

This module derives head tilt and rotation indicators from FaceMesh landmarks.
It works on normalized 2D geometry only; no camera model or solvePnP is needed
because every indicator is later compared against the user's own baseline.
"""

from .gaze_analysis import safe_ratio
from .types import HeadPoseMetrics, LandmarkFrame

# MediaPipe face mesh indices for key facial points
NOSE_TIP = 1
FOREHEAD = 10
CHIN = 152
LEFT_CHEEK = 234
RIGHT_CHEEK = 454


def analyze_head_pose(landmarks: LandmarkFrame) -> HeadPoseMetrics:
    """
    Compute head pose indicators.

    face_ratio grows as the chin becomes more visible than the forehead
    (looking down). horizontal_rotation is the nose position between the
    cheek edges, 0.5 when facing the camera.
    """
    nose = landmarks[NOSE_TIP]
    forehead = landmarks[FOREHEAD]
    chin = landmarks[CHIN]
    left_cheek = landmarks[LEFT_CHEEK]
    right_cheek = landmarks[RIGHT_CHEEK]

    nose_to_chin = chin.y - nose.y
    nose_to_forehead = nose.y - forehead.y
    face_ratio = safe_ratio(nose_to_chin, nose_to_forehead)

    horizontal_rotation = safe_ratio(nose.x - left_cheek.x, right_cheek.x - left_cheek.x)

    return HeadPoseMetrics(
        nose_y=float(nose.y),
        face_ratio=face_ratio,
        horizontal_rotation=horizontal_rotation,
        face_center_x=float((left_cheek.x + right_cheek.x) / 2),
        face_center_y=float((forehead.y + chin.y) / 2),
    )
