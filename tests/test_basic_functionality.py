"""
Basic functionality tests for configuration and logging.
"""

import json
import os
import tempfile
import unittest

import face_fixtures  # noqa: F401

from doomslayer.utils.config import Config, clamp_sensitivity, config
from doomslayer.utils.logger import DoomscrollLogger, get_logger, log_performance_metrics, logger


class TestBasicFunctionality(unittest.TestCase):
    """Test basic system functionality."""

    def setUp(self):
        """Set up test environment."""
        logger.info("Setting up test environment")
        self.config = Config()

    def test_config_loading(self):
        """Test configuration loading."""
        self.assertIsNotNone(config)
        self.assertIsNotNone(config.camera)
        self.assertIsNotNone(config.detection)
        self.assertIsNotNone(config.model)
        self.assertIsNotNone(config.logging)
        self.assertIsNotNone(config.feedback)

    def test_defaults(self):
        self.assertEqual(self.config.detection.sensitivity, 0.55)
        self.assertEqual(self.config.detection.detection_threshold, 3)
        self.assertEqual(self.config.detection.calibration_frames, 30)
        self.assertEqual(self.config.detection.phone_poll_interval_ms, 500)
        self.assertEqual(self.config.model.phone_label, "cell phone")
        self.assertEqual(self.config.feedback.roast_cooldown_sec, 3.0)

    def test_config_validation(self):
        """Test configuration validation."""
        self.assertTrue(self.config.validate_config())

        self.config.camera.width = -1
        self.assertFalse(self.config.validate_config())

    def test_validation_rejects_bad_detection_settings(self):
        self.config.detection.sensitivity = 0.9
        self.assertFalse(self.config.validate_config())

        self.config.detection.sensitivity = 0.55
        self.config.detection.detection_threshold = 0
        self.assertFalse(self.config.validate_config())

    def test_clamp_sensitivity(self):
        self.assertEqual(clamp_sensitivity(0.1), 0.4)
        self.assertEqual(clamp_sensitivity(0.5), 0.5)
        self.assertEqual(clamp_sensitivity(5), 0.7)

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "configs", "test_config.json")
            self.config.detection.detection_threshold = 5
            self.assertTrue(self.config.save_to_file(path))

            loaded = Config()
            self.assertTrue(loaded.load_from_file(path))
            self.assertEqual(loaded.detection.detection_threshold, 5)
            self.assertEqual(loaded.to_dict(), self.config.to_dict())

    def test_load_clamps_and_ignores_unknown_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, 'w') as f:
                json.dump({
                    'detection': {'sensitivity': 0.95, 'unknown_key': 1},
                    'gpu': {'use_gpu': False},
                }, f)

            self.assertTrue(self.config.load_from_file(path))

        self.assertEqual(self.config.detection.sensitivity, 0.7)
        self.assertFalse(hasattr(self.config.detection, 'unknown_key'))
        self.assertFalse(hasattr(self.config, 'gpu'))

    def test_load_missing_file(self):
        self.assertFalse(self.config.load_from_file("/nonexistent/doomslayer/config.json"))

    def test_device_selection(self):
        self.config.model.use_gpu = False
        self.assertEqual(self.config.get_device(), 'cpu')

    def test_logger_functionality(self):
        """Test logger functionality."""
        test_logger = get_logger("doomslayer.tests")
        self.assertIsInstance(test_logger, DoomscrollLogger)

        test_logger.info("Test info message")
        test_logger.warning("Test warning message")
        test_logger.log_performance(10.0, 35.0)
        test_logger.log_detection(4.0, True, "doomscrolling")
        test_logger.log_state_change("normal", "doomscrolling")
        test_logger.log_phone_detection(True, 0.8, 12.5)
        test_logger.log_calibration(3, 30)
        logger.log_system_info()

    def test_performance_decorator(self):
        @log_performance_metrics
        def double(value):
            return value * 2

        @log_performance_metrics
        def explode():
            raise KeyError("boom")

        self.assertEqual(double(4), 8)
        with self.assertRaises(KeyError):
            explode()


if __name__ == "__main__":
    unittest.main()
