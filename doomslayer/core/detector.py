"""
Doomscroll Detector

The detection engine: per tick it extracts gaze and head pose from the face
landmarks, builds the calibration baseline, scores the frame against it with
the phone signal fused in, and debounces the result through the hysteresis
state machine.
"""

import threading
import time
from typing import Callable, Optional, Tuple

import numpy as np

from .engine_state import EngineState
from .calibration import CalibrationAccumulator
from .gaze_analysis import BASE_LANDMARK_COUNT, analyze_gaze
from .head_pose import analyze_head_pose
from .hysteresis import apply_no_face, update_hysteresis
from .phone_detection import PhoneSignalAdapter
from .result import DetectionResult, assemble_result, face_bounding_box
from .scoring import score_frame
from .types import Classification, LandmarkFrame
from ..utils.config import config, clamp_sensitivity
from ..utils.logger import get_logger

logger = get_logger(__name__)


class InvalidFrameError(ValueError):
    """Raised when process_tick receives something that is not an image."""


def create_default_landmark_provider():
    from .landmark_provider import MediaPipeLandmarkProvider
    return MediaPipeLandmarkProvider()


def create_default_object_detector():
    from .object_detector import YoloObjectDetector
    return YoloObjectDetector(confidence=config.detection.phone_confidence_threshold)


class DoomscrollDetector:
    """Classifies attention state from a stream of camera frames."""

    def __init__(self,
                 sensitivity: Optional[float] = None,
                 detection_threshold: Optional[int] = None,
                 calibration_frames: Optional[int] = None,
                 refine_landmarks: Optional[bool] = None,
                 landmark_provider=None,
                 object_detector=None,
                 landmark_factory: Optional[Callable] = create_default_landmark_provider,
                 detector_factory: Optional[Callable] = create_default_object_detector,
                 phone_poll_interval_ms: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize detector. Providers are created in initialize().

        Args:
            sensitivity: User sensitivity, clamped to [0.4, 0.7]
            detection_threshold: Consecutive identical raw outcomes needed to commit a state
            calibration_frames: Valid frames averaged into the baseline
            refine_landmarks: Use iris landmarks for gaze when available
            landmark_provider: Object with detect(frame) -> Optional[LandmarkFrame]
            object_detector: Object with detect(frame) -> List[ObjectDetection]
            landmark_factory: Builds the landmark provider when none is given
            detector_factory: Builds the object detector when none is given
            phone_poll_interval_ms: Minimum time between object detector calls
            clock: Time source in seconds
        """
        detection_cfg = config.detection

        threshold = detection_cfg.detection_threshold if detection_threshold is None else detection_threshold
        if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold <= 0:
            raise ValueError(f"detection_threshold must be a positive integer, got {threshold!r}")

        self.sensitivity = clamp_sensitivity(detection_cfg.sensitivity if sensitivity is None else sensitivity)
        self.detection_threshold = threshold
        self.calibration_frames = detection_cfg.calibration_frames if calibration_frames is None else calibration_frames
        self.refine_landmarks = detection_cfg.refine_landmarks if refine_landmarks is None else refine_landmarks
        self.phone_poll_interval_ms = (detection_cfg.phone_poll_interval_ms
                                       if phone_poll_interval_ms is None else phone_poll_interval_ms)
        self.clock = clock

        self.landmark_provider = landmark_provider
        self.object_detector = object_detector
        self.landmark_factory = landmark_factory
        self.detector_factory = detector_factory
        self.phone_adapter: Optional[PhoneSignalAdapter] = None

        self.is_initialized = False
        self.state = self._new_state()
        self._last_reported: Optional[Classification] = None
        self._lock = threading.Lock()

    def _new_state(self) -> EngineState:
        return EngineState(calibration=CalibrationAccumulator(self.calibration_frames))

    def initialize(self) -> bool:
        """
        Start both providers.

        Fails only when neither the landmark provider nor the object detector
        is usable; the engine then stays in the error state until initialize()
        is called again.
        """
        with self._lock:
            if self.landmark_provider is None:
                self.landmark_provider = self._start_provider(self.landmark_factory, "landmark provider")
            if self.object_detector is None:
                self.object_detector = self._start_provider(self.detector_factory, "object detector")

            self.phone_adapter = PhoneSignalAdapter(
                self.object_detector,
                poll_interval_ms=self.phone_poll_interval_ms,
                min_confidence=config.detection.phone_confidence_threshold,
                target_label=config.model.phone_label,
                clock=self.clock,
            )

            if self.landmark_provider is None and self.object_detector is None:
                logger.error("No detection provider could be initialized")
                self.is_initialized = False
                self.state.initialization_failed = True
                self.state.classification = Classification.ERROR
                return False

            self.is_initialized = True
            self.state.initialization_failed = False
            if self.state.classification == Classification.ERROR:
                self.state.classification = Classification.MONITORING

            logger.info(f"Doomscroll detector initialized (landmarks: {self.landmark_provider is not None}, "
                        f"phone: {self.object_detector is not None}, sensitivity: {self.sensitivity:.2f})")
            return True

    @staticmethod
    def _start_provider(factory: Optional[Callable], name: str):
        if factory is None:
            return None
        try:
            return factory()
        except Exception as e:
            logger.log_error_with_context(e, f"{name}_initialization")
            return None

    def process_tick(self, frame: np.ndarray) -> DetectionResult:
        """
        Run one detection tick on a BGR frame.

        Args:
            frame: Camera image as an (H, W) or (H, W, C) array

        Returns:
            DetectionResult for this tick
        """
        if not isinstance(frame, np.ndarray) or frame.ndim not in (2, 3) or frame.size == 0:
            raise InvalidFrameError("frame must be a non-empty (H, W) or (H, W, C) image array")

        with self._lock:
            if self.state.initialization_failed:
                return self._report(assemble_result(
                    Classification.ERROR, message="No detection provider available"))
            if not self.is_initialized:
                return self._report(assemble_result(Classification.ERROR))

            now = self.clock()
            self._update_timing(now)
            frame_height, frame_width = frame.shape[:2]

            landmarks, landmark_error = self._detect_landmarks(frame)
            phone = self.phone_adapter.poll(frame, now)

            if landmark_error is not None and not self.phone_adapter.available:
                return self._report(assemble_result(
                    Classification.ERROR, fps=self.state.fps,
                    message=f"Landmark detection failed: {landmark_error}"))

            if landmarks is None:
                classification = apply_no_face(self.state, phone.detected)
                return self._report(assemble_result(classification, phone=phone, fps=self.state.fps))

            gaze = analyze_gaze(landmarks, self.refine_landmarks)
            head_pose = analyze_head_pose(landmarks)
            face_box = face_bounding_box(landmarks, frame_width, frame_height)

            if self.state.is_calibrating:
                self.state.calibration.add_sample(gaze, head_pose)
                progress = self.state.calibration.progress
                return self._report(assemble_result(
                    Classification.CALIBRATING, phone=phone, face_box=face_box, fps=self.state.fps,
                    message=f"Calibrating... {progress}", calibration_progress=progress))

            breakdown = score_frame(gaze, head_pose, self.state.baseline, phone, self.sensitivity)
            classification = update_hysteresis(self.state, breakdown.raw_detection, self.detection_threshold)
            logger.log_detection(breakdown.score, breakdown.raw_detection, classification.value)

            return self._report(assemble_result(
                classification, breakdown=breakdown, phone=phone, face_box=face_box, fps=self.state.fps))

    def _detect_landmarks(self, frame: np.ndarray) -> Tuple[Optional[LandmarkFrame], Optional[Exception]]:
        """Query the landmark provider; failures count as no face this tick."""
        if self.landmark_provider is None:
            return None, None
        try:
            landmarks = self.landmark_provider.detect(frame)
        except Exception as e:
            logger.log_error_with_context(e, "landmark_detection")
            return None, e

        if landmarks is not None and len(landmarks) < BASE_LANDMARK_COUNT:
            logger.warning(f"Incomplete landmark set ({len(landmarks)} points), treating as no face")
            return None, None
        return landmarks, None

    def _update_timing(self, now: float) -> None:
        if self.state.last_tick_time is not None:
            elapsed = now - self.state.last_tick_time
            if elapsed > 0:
                self.state.fps = int(round(1.0 / elapsed))
        self.state.last_tick_time = now
        self.state.tick_count += 1

    def _report(self, result: DetectionResult) -> DetectionResult:
        if result.classification != self._last_reported:
            previous = self._last_reported.value if self._last_reported else "none"
            logger.log_state_change(previous, result.classification.value)
            self._last_reported = result.classification
        return result

    def set_sensitivity(self, value: float) -> None:
        """Update sensitivity; out-of-range values are clamped."""
        with self._lock:
            self.sensitivity = clamp_sensitivity(value)
        logger.info(f"Sensitivity set to {self.sensitivity:.2f}")

    def reset(self) -> None:
        """Reset detection state and calibration."""
        with self._lock:
            initialization_failed = self.state.initialization_failed
            self.state = self._new_state()
            self.state.initialization_failed = initialization_failed
            if initialization_failed:
                self.state.classification = Classification.ERROR
            if self.phone_adapter is not None:
                self.phone_adapter.reset()
            self._last_reported = None
        logger.info("Detector reset")

    def recalibrate(self) -> None:
        """Force a new baseline; detection resumes once it is rebuilt."""
        with self._lock:
            self.state.calibration.clear()
            self.state.reset_counters()
        logger.info("Recalibrating baseline...")

    def get_fps(self) -> int:
        return self.state.fps

    def close(self) -> None:
        """Release provider resources."""
        with self._lock:
            if self.landmark_provider is not None and hasattr(self.landmark_provider, 'close'):
                self.landmark_provider.close()
            self.is_initialized = False
