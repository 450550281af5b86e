"""
Object Detector Module

Default object detector backed by an ultralytics YOLO model trained on COCO,
whose class 67 is "cell phone".
"""

import os
import warnings
from typing import List, Optional

import numpy as np

warnings.filterwarnings('ignore')

try:
    from ultralytics import YOLO
    YOLO_AVAILABLE = True
except ImportError:
    YOLO = None
    YOLO_AVAILABLE = False

from .types import Box, ObjectDetection
from ..utils.config import config
from ..utils.logger import get_logger

logger = get_logger(__name__)


class YoloObjectDetector:
    """Runs YOLO on a BGR frame and returns labelled boxes in pixels."""

    def __init__(self, model_path: Optional[str] = None, confidence: float = 0.25,
                 device: Optional[str] = None, image_size: int = 320):
        """
        Initialize the detector.

        Args:
            model_path: YOLO weights; ultralytics downloads known names on first use
            confidence: Floor passed to the model to prune weak candidates
            device: 'cpu' or 'cuda'; picked from config when omitted
            image_size: Inference resolution
        """
        if not YOLO_AVAILABLE:
            raise RuntimeError("ultralytics is not installed")

        self.model_path = model_path or config.model.yolo_model_path
        self.confidence = confidence
        self.device = device or config.get_device()
        self.image_size = image_size

        os.environ.setdefault('YOLO_VERBOSE', 'False')
        self.model = YOLO(self.model_path)

        logger.info(f"YOLO object detector loaded: {self.model_path} on {self.device}")

    def detect(self, frame: np.ndarray) -> List[ObjectDetection]:
        """Detect objects in the frame."""
        results = self.model(
            frame, conf=self.confidence, imgsz=self.image_size,
            device=self.device, verbose=False
        )

        detections = []
        for result in results:
            boxes = result.boxes
            if boxes is None:
                continue
            names = result.names
            for box in boxes:
                class_id = int(box.cls[0])
                x1, y1, x2, y2 = (float(v) for v in box.xyxy[0].tolist())
                detections.append(ObjectDetection(
                    label=names.get(class_id, str(class_id)) if isinstance(names, dict) else names[class_id],
                    confidence=float(box.conf[0]),
                    box=Box(x=x1, y=y1, width=x2 - x1, height=y2 - y1),
                ))
        return detections
