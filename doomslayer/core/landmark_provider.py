"""
Landmark Provider Module

Default landmark provider backed by MediaPipe FaceMesh. It tracks at most one
face and returns its normalized landmarks, with iris points when refinement is
enabled.
"""

import logging
import os
import warnings
from typing import Optional

import cv2
import numpy as np

# Suppress TensorFlow warnings
os.environ['TF_CPP_MIN_LOG_LEVEL'] = '3'
warnings.filterwarnings('ignore')

try:
    import mediapipe as mp
    MP_AVAILABLE = True
except Exception as e:
    MP_AVAILABLE = False
    logging.getLogger(__name__).debug(f"MediaPipe not available: {e}")
    mp = None

from .types import LandmarkFrame, as_landmark_frame
from ..utils.config import config
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MediaPipeLandmarkProvider:
    """Extracts FaceMesh landmarks for a single face."""

    def __init__(self, refine_landmarks: Optional[bool] = None,
                 min_detection_confidence: Optional[float] = None,
                 min_tracking_confidence: Optional[float] = None):
        """
        Initialize the provider.

        Args:
            refine_landmarks: Add the 10 iris landmarks (478 points instead of 468)
            min_detection_confidence: FaceMesh detection confidence floor
            min_tracking_confidence: FaceMesh tracking confidence floor
        """
        if not MP_AVAILABLE or mp is None:
            raise RuntimeError("MediaPipe is not installed")

        self.refine_landmarks = (config.detection.refine_landmarks
                                 if refine_landmarks is None else refine_landmarks)

        self.mp_face_mesh = mp.solutions.face_mesh
        self.face_mesh = self.mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=1,
            refine_landmarks=self.refine_landmarks,
            min_detection_confidence=(config.model.min_detection_confidence
                                      if min_detection_confidence is None else min_detection_confidence),
            min_tracking_confidence=(config.model.min_tracking_confidence
                                     if min_tracking_confidence is None else min_tracking_confidence)
        )

        logger.info(f"MediaPipe FaceMesh initialized (refine_landmarks={self.refine_landmarks})")

    def detect(self, frame: np.ndarray) -> Optional[LandmarkFrame]:
        """Return landmarks for the first face, or None when no face is found."""
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb_frame)

        if not results.multi_face_landmarks:
            return None

        landmarks = results.multi_face_landmarks[0]
        return as_landmark_frame([(lm.x, lm.y) for lm in landmarks.landmark])

    def close(self) -> None:
        """Release the FaceMesh graph."""
        if self.face_mesh is not None:
            self.face_mesh.close()
            self.face_mesh = None
