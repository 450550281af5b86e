"""
Tests for the command-line entry point's option handling.
"""

import copy
import json
import os
import tempfile
import unittest
from unittest import mock

import face_fixtures  # noqa: F401

import main
from doomslayer.utils.config import config


class TestMainConfiguration(unittest.TestCase):

    def setUp(self):
        self.saved_sections = {name: copy.deepcopy(getattr(config, name)) for name in config.SECTIONS}
        self.tmp = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.tmp.name, "doomslayer.json")
        with open(self.config_path, 'w') as f:
            json.dump({
                "camera": {"device_id": 2, "width": 320, "height": 240},
                "detection": {"sensitivity": 0.7, "detection_threshold": 5},
            }, f)

    def tearDown(self):
        for name, section in self.saved_sections.items():
            setattr(config, name, section)
        self.tmp.cleanup()

    def run_main(self, *argv, initialized=False):
        """Run main() until it exits, returning the detector and camera mocks."""
        with mock.patch('sys.argv', ['main.py', *argv]), \
                mock.patch.object(main, 'DoomscrollDetector') as detector_cls, \
                mock.patch.object(main, 'VideoCapture', side_effect=RuntimeError("no camera")) as capture_cls, \
                mock.patch.object(main.logger, 'log_system_info') as log_system_info, \
                mock.patch('builtins.print'):
            detector_cls.return_value.initialize.return_value = initialized
            with self.assertRaises(SystemExit) as ctx:
                main.main()
        self.assertEqual(ctx.exception.code, 1)
        log_system_info.assert_called_once()
        return detector_cls, capture_cls

    def test_config_file_values_reach_detector(self):
        detector_cls, capture_cls = self.run_main('--config', self.config_path)

        detector_cls.assert_called_once_with(sensitivity=0.7, detection_threshold=5)
        capture_cls.assert_not_called()

    def test_config_file_values_reach_camera(self):
        detector_cls, capture_cls = self.run_main('--config', self.config_path, initialized=True)

        capture_cls.assert_called_once_with(2, 320, 240)
        detector_cls.return_value.close.assert_called_once()

    def test_command_line_overrides_config_file(self):
        detector_cls, capture_cls = self.run_main('--config', self.config_path, '--sensitivity', '0.45',
                                                  '--width', '800', initialized=True)

        detector_cls.assert_called_once_with(sensitivity=0.45, detection_threshold=5)
        capture_cls.assert_called_once_with(2, 800, 240)

    def test_defaults_without_config_file(self):
        detector_cls, _ = self.run_main()

        detector_cls.assert_called_once_with(sensitivity=0.55, detection_threshold=3)

    def test_unreadable_config_file_exits(self):
        with mock.patch('sys.argv', ['main.py', '--config', os.path.join(self.tmp.name, "missing.json")]), \
                mock.patch.object(main, 'DoomscrollDetector') as detector_cls, \
                mock.patch('builtins.print'):
            with self.assertRaises(SystemExit):
                main.main()
        detector_cls.assert_not_called()


if __name__ == '__main__':
    unittest.main()
