"""
Camera frame source for the tick driver.
"""

import time
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from ..utils.config import config
from ..utils.logger import get_logger, log_performance_metrics

logger = get_logger(__name__)


class VideoCapture:
    """OpenCV camera wrapper returning BGR frames."""

    def __init__(self, device_id: Optional[int] = None,
                 width: Optional[int] = None, height: Optional[int] = None):
        """Open the camera device; raises RuntimeError if it cannot be opened."""
        self.device_id = config.camera.device_id if device_id is None else device_id
        self.width = config.camera.width if width is None else width
        self.height = config.camera.height if height is None else height
        self.cap = None

        # Performance tracking
        self.fps_counter = 0
        self.last_fps_time = time.time()
        self.current_fps = 0.0

        self._initialize_camera()

    def _initialize_camera(self) -> None:
        try:
            self.cap = cv2.VideoCapture(self.device_id)

            if not self.cap.isOpened():
                raise RuntimeError(f"Could not open camera device {self.device_id}")

            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            # Keep only the newest frame so ticks see a fresh image
            self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

            logger.info(f"Camera initialized: device {self.device_id}, {self.width}x{self.height}")

        except Exception as e:
            logger.log_error_with_context(e, "camera_initialization")
            if self.cap is not None:
                self.cap.release()
                self.cap = None
            raise

    @property
    def is_opened(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    @log_performance_metrics
    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read a frame from the camera."""
        if not self.is_opened:
            return False, None

        ret, frame = self.cap.read()
        if not ret or frame is None:
            logger.warning("Failed to read frame from camera")
            return False, None

        self._update_fps()
        return True, frame

    def _update_fps(self) -> None:
        self.fps_counter += 1
        current_time = time.time()

        if current_time - self.last_fps_time >= 1.0:
            self.current_fps = self.fps_counter / (current_time - self.last_fps_time)
            self.fps_counter = 0
            self.last_fps_time = current_time

    def get_camera_info(self) -> Dict[str, Any]:
        """Get camera information."""
        if not self.is_opened:
            return {}

        return {
            'device_id': self.device_id,
            'width': int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            'height': int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            'fps': self.current_fps,
            'backend': self.cap.getBackendName(),
        }

    def release(self) -> None:
        """Release camera resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("Camera resources released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
