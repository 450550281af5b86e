"""
Tests for the tick driver and the camera wrapper.
"""

import threading
import time
import unittest
from unittest import mock

import numpy as np

from face_fixtures import FakeClock, FakeFrameSource, FakeLandmarkProvider, FakeObjectDetector

from doomslayer.core import video_capture as video_capture_module
from doomslayer.core.detector import DoomscrollDetector
from doomslayer.core.feedback import ENCOURAGEMENTS
from doomslayer.core.monitor import Monitor
from doomslayer.core.session import SessionTracker
from doomslayer.core.types import Classification


class TestMonitor(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.landmarks = FakeLandmarkProvider()
        self.detector = DoomscrollDetector(landmark_provider=self.landmarks,
                                           object_detector=FakeObjectDetector(),
                                           calibration_frames=2, clock=self.clock)
        self.detector.initialize()
        self.source = FakeFrameSource()
        self.results = []
        self.monitor = Monitor(self.detector, self.source, on_result=self.results.append,
                               session=SessionTracker(session_id="monitor_test", clock=self.clock),
                               clock=self.clock)

    def run_ticks(self, count):
        for _ in range(count):
            self.clock.advance(0.1)
            self.monitor.run_once()

    def test_run_once_feeds_session_and_callback(self):
        self.run_ticks(6)

        self.assertEqual(len(self.results), 6)
        self.assertEqual(self.results[-1].classification, Classification.NORMAL)
        self.assertIs(self.monitor.last_result, self.results[-1])
        self.assertIsNotNone(self.monitor.last_frame)
        self.assertEqual(self.monitor.session.total_ticks, 6)
        self.assertIn(self.monitor.last_feedback, ENCOURAGEMENTS)

    def test_latency_covers_detector_tick(self):
        detect = self.landmarks.detect

        def slow_detect(frame):
            self.clock.advance(0.025)
            return detect(frame)

        self.landmarks.detect = slow_detect
        self.run_ticks(1)

        self.assertAlmostEqual(self.monitor.last_latency_ms, 25.0, places=3)

    def test_failed_read_skips_tick(self):
        self.source.ok = False

        self.assertIsNone(self.monitor.run_once())

        self.assertEqual(self.monitor.skipped_frames, 1)
        self.assertEqual(self.landmarks.calls, 0)
        self.assertEqual(self.results, [])

    def test_reset_stats_recalibrates(self):
        self.run_ticks(6)

        self.monitor.reset_stats()

        self.assertEqual(self.monitor.session.total_ticks, 0)
        self.assertTrue(self.detector.state.is_calibrating)

    def test_reset_stats_waits_for_tick_in_flight(self):
        self.run_ticks(6)
        done = threading.Event()

        def reset():
            self.monitor.reset_stats()
            done.set()

        with self.monitor._tick_lock:
            worker = threading.Thread(target=reset)
            worker.start()
            self.assertFalse(done.wait(0.1))
            self.assertEqual(self.monitor.session.total_ticks, 6)

        worker.join(timeout=2.0)
        self.assertTrue(done.is_set())
        self.assertEqual(self.monitor.session.total_ticks, 0)

    def test_rejects_non_positive_interval(self):
        with self.assertRaises(ValueError):
            Monitor(self.detector, self.source, tick_interval_sec=0)

    def test_background_loop(self):
        monitor = Monitor(self.detector, self.source, tick_interval_sec=0.01)

        monitor.start()
        self.assertTrue(monitor.is_running)
        time.sleep(0.2)
        monitor.stop()

        self.assertFalse(monitor.is_running)
        self.assertGreater(self.landmarks.calls, 0)


class TestVideoCapture(unittest.TestCase):

    def test_unopened_camera_raises(self):
        with mock.patch.object(video_capture_module.cv2, 'VideoCapture') as capture_cls:
            capture_cls.return_value.isOpened.return_value = False
            with self.assertRaises(RuntimeError):
                video_capture_module.VideoCapture(3)
            capture_cls.return_value.release.assert_called_once()

    def test_read_frame(self):
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        with mock.patch.object(video_capture_module.cv2, 'VideoCapture') as capture_cls:
            camera = capture_cls.return_value
            camera.isOpened.return_value = True
            camera.read.return_value = (True, frame)

            with video_capture_module.VideoCapture(0, 64, 48) as cap:
                ok, read = cap.read_frame()
                self.assertTrue(ok)
                self.assertIs(read, frame)

                camera.read.return_value = (False, None)
                self.assertEqual(cap.read_frame(), (False, None))

            camera.release.assert_called_once()
            self.assertIsNone(cap.cap)
            self.assertEqual(cap.read_frame(), (False, None))


if __name__ == '__main__':
    unittest.main()
