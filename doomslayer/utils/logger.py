"""
Logging utilities for the doomscroll detection system.
"""

import logging
import sys
import time
from datetime import datetime
from typing import Optional
from pathlib import Path

from .config import config


_file_handler: Optional[logging.Handler] = None


def _shared_file_handler() -> Optional[logging.Handler]:
    """One timestamped log file per process, shared by every module logger."""
    global _file_handler
    if _file_handler is None and config.logging.enable_file_logging:
        logs_dir = Path(config.logging.log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"doomslayer_{timestamp}.log"

        _file_handler = logging.FileHandler(log_file)
        _file_handler.setLevel(getattr(logging, config.logging.log_level.upper(), logging.INFO))
        _file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        ))
    return _file_handler


class DoomscrollLogger:
    """Custom logger for the doomscroll detection system."""

    def __init__(self, name: str = "doomslayer", log_file: Optional[str] = None):
        """Initialize the logger."""
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if self.logger.handlers:
            return

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.ERROR)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))
        self.logger.addHandler(console_handler)

        if log_file is not None:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)
        else:
            shared = _shared_file_handler()
            if shared is not None:
                self.logger.addHandler(shared)

        self.logger.propagate = False

    def debug(self, message: str) -> None:
        """Log debug message."""
        self.logger.debug(message)

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log error message."""
        self.logger.error(message)

    def critical(self, message: str) -> None:
        """Log critical message."""
        self.logger.critical(message)

    def log_performance(self, fps: float, latency: float) -> None:
        """Log performance metrics."""
        self.info(f"Performance - FPS: {fps:.2f}, Latency: {latency:.2f}ms")

    def log_calibration(self, samples: int, required: int, baseline=None) -> None:
        """Log calibration progress, or the frozen baseline once complete."""
        if baseline is None:
            self.debug(f"Calibration - {samples}/{required} samples")
        else:
            self.info(f"Baseline calibrated: gaze=({baseline.gaze_vertical:.3f}, "
                      f"{baseline.gaze_horizontal:.3f}), noseY={baseline.nose_y:.3f}, "
                      f"faceRatio={baseline.face_ratio:.3f}, rotation={baseline.head_rotation:.3f}")

    def log_detection(self, score: float, raw_detection: bool, classification: str) -> None:
        """Log per-tick scoring details."""
        self.debug(f"Detection - Score: {score:.2f}, Raw: {raw_detection}, State: {classification}")

    def log_phone_detection(self, detected: bool, score: float, processing_time: float) -> None:
        """Log object detector poll results."""
        self.debug(f"Phone Detection - Detected: {detected}, Score: {score:.2f}, "
                   f"Time: {processing_time:.2f}ms")

    def log_state_change(self, previous: str, current: str) -> None:
        """Log a committed classification change."""
        self.info(f"State change: {previous} -> {current}")

    def log_error_with_context(self, error: Exception, context: str) -> None:
        """Log error with additional context."""
        self.error(f"Error in {context}: {str(error)}")
        import traceback
        self.debug(f"Traceback: {''.join(traceback.format_exception(type(error), error, error.__traceback__))}")

    def log_system_info(self) -> None:
        """Log system information."""
        import cv2

        self.info("=== System Information ===")
        self.info(f"Python Version: {sys.version}")
        self.info(f"OpenCV Version: {cv2.__version__}")
        try:
            import torch
            self.info(f"PyTorch Version: {torch.__version__}")
            self.info(f"CUDA Available: {torch.cuda.is_available()}")
        except ImportError:
            self.info("PyTorch not installed")

        self.info("=== Configuration ===")
        self.info(f"Camera: {config.camera.width}x{config.camera.height} @ {config.camera.tick_hz}Hz ticks")
        self.info(f"Sensitivity: {config.detection.sensitivity:.2f}, "
                  f"Threshold: {config.detection.detection_threshold} frames")
        self.info(f"Refine landmarks: {config.detection.refine_landmarks}")


# Global logger instance
logger = DoomscrollLogger()


def get_logger(name: str = "doomslayer") -> DoomscrollLogger:
    """Get a logger instance."""
    return DoomscrollLogger(name)


def log_performance_metrics(func):
    """Decorator to log performance metrics."""
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = func(*args, **kwargs)
            processing_time = (time.time() - start_time) * 1000
            logger.debug(f"{func.__name__} took {processing_time:.2f}ms")
            return result
        except Exception as e:
            logger.log_error_with_context(e, func.__name__)
            raise
    return wrapper
