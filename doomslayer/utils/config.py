"""
Configuration management for the doomscroll detection system.
"""

import os
from dataclasses import dataclass
from typing import Dict, Any, Optional
import json


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    tick_hz: float = 10.0  # detection cadence, not camera fps


@dataclass
class DetectionConfig:
    """Detection engine settings."""
    sensitivity: float = 0.55
    detection_threshold: int = 3
    calibration_frames: int = 30
    phone_poll_interval_ms: int = 500
    phone_confidence_threshold: float = 0.25
    refine_landmarks: bool = True


@dataclass
class ModelConfig:
    """Model configuration settings."""
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    yolo_model_path: str = "yolov8n.pt"
    phone_label: str = "cell phone"
    use_gpu: bool = True


@dataclass
class LoggingConfig:
    """Logging settings."""
    enable_file_logging: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"


@dataclass
class FeedbackConfig:
    """User feedback settings."""
    roast_cooldown_sec: float = 3.0


SENSITIVITY_MIN = 0.4
SENSITIVITY_MAX = 0.7


def clamp_sensitivity(value: float) -> float:
    """Clamp sensitivity to the supported slider range."""
    return max(SENSITIVITY_MIN, min(SENSITIVITY_MAX, float(value)))


class Config:
    """Main configuration class for the doomscroll detection system."""

    SECTIONS = ('camera', 'detection', 'model', 'logging', 'feedback')

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration with optional config file."""
        self.camera = CameraConfig()
        self.detection = DetectionConfig()
        self.model = ModelConfig()
        self.logging = LoggingConfig()
        self.feedback = FeedbackConfig()

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str) -> bool:
        """Load configuration from JSON file. Unknown keys are ignored."""
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            print(f"Warning: Could not load config file {config_file}: {e}")
            return False

        for section_name, section_data in config_data.items():
            if section_name not in self.SECTIONS or not isinstance(section_data, dict):
                continue
            section = getattr(self, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)

        # Persisted sensitivity may come from an older slider range
        self.detection.sensitivity = clamp_sensitivity(self.detection.sensitivity)
        return True

    def save_to_file(self, config_file: str) -> bool:
        """Save current configuration to JSON file."""
        config_data = self.to_dict()

        try:
            directory = os.path.dirname(config_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(config_file, 'w') as f:
                json.dump(config_data, f, indent=2)
        except OSError as e:
            print(f"Warning: Could not save config file {config_file}: {e}")
            return False
        return True

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert each config section to a dictionary."""
        return {
            section_name: {
                key: getattr(getattr(self, section_name), key)
                for key in getattr(self, section_name).__dataclass_fields__.keys()
            }
            for section_name in self.SECTIONS
        }

    def get_gpu_info(self) -> Dict[str, Any]:
        """Get GPU information for the object detector."""
        import torch

        available = torch.cuda.is_available()
        return {
            'available': available,
            'device_count': torch.cuda.device_count() if available else 0,
            'device_name': torch.cuda.get_device_name(0) if available else None,
        }

    def get_device(self) -> str:
        """Pick the inference device for the object detector."""
        if not self.model.use_gpu:
            return 'cpu'
        try:
            return 'cuda' if self.get_gpu_info()['available'] else 'cpu'
        except ImportError:
            return 'cpu'

    def validate_config(self) -> bool:
        """Validate configuration settings."""
        errors = []

        if self.camera.width <= 0 or self.camera.height <= 0:
            errors.append("Camera dimensions must be positive")

        if self.camera.tick_hz <= 0:
            errors.append("Tick rate must be positive")

        if not SENSITIVITY_MIN <= self.detection.sensitivity <= SENSITIVITY_MAX:
            errors.append(f"Sensitivity must be between {SENSITIVITY_MIN} and {SENSITIVITY_MAX}")

        threshold = self.detection.detection_threshold
        if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold <= 0:
            errors.append("Detection threshold must be a positive integer")

        if self.detection.calibration_frames <= 0:
            errors.append("Calibration frame count must be positive")

        if self.detection.phone_poll_interval_ms < 0:
            errors.append("Phone poll interval must not be negative")

        if not 0 <= self.detection.phone_confidence_threshold <= 1:
            errors.append("Phone confidence threshold must be between 0 and 1")

        for name in ('min_detection_confidence', 'min_tracking_confidence'):
            value = getattr(self.model, name)
            if value < 0 or value > 1:
                errors.append(f"{name} must be between 0 and 1")

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True


# Global configuration instance
config = Config()

# Default configuration file path
DEFAULT_CONFIG_FILE = "data/configs/default_config.json"

# Load default configuration if available
if os.path.exists(DEFAULT_CONFIG_FILE):
    config.load_from_file(DEFAULT_CONFIG_FILE)
