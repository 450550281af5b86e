"""
Tests for the rate-limited phone signal adapter.
"""

import unittest

from face_fixtures import FakeObjectDetector, blank_frame, phone_detection

from doomslayer.core.phone_detection import PhoneSignalAdapter
from doomslayer.core.types import NO_PHONE


class TestPhoneSignalAdapter(unittest.TestCase):

    def setUp(self):
        self.detector = FakeObjectDetector([phone_detection(0.8)])
        self.adapter = PhoneSignalAdapter(self.detector, poll_interval_ms=500)
        self.frame = blank_frame()

    def test_without_detector(self):
        adapter = PhoneSignalAdapter(None)
        self.assertFalse(adapter.available)
        self.assertEqual(adapter.poll(self.frame, now=0.0), NO_PHONE)

    def test_detects_phone(self):
        signal = self.adapter.poll(self.frame, now=0.0)
        self.assertTrue(signal.detected)
        self.assertAlmostEqual(signal.score, 0.8)
        self.assertEqual(signal.box.width, 30.0)

    def test_polls_at_most_once_per_interval(self):
        self.adapter.poll(self.frame, now=10.0)
        self.detector.detections = []

        cached = self.adapter.poll(self.frame, now=10.3)
        self.assertTrue(cached.detected)
        self.assertEqual(self.detector.calls, 1)

        refreshed = self.adapter.poll(self.frame, now=10.6)
        self.assertFalse(refreshed.detected)
        self.assertEqual(self.detector.calls, 2)

    def test_detector_failure_degrades_to_no_phone(self):
        self.detector.error = RuntimeError("inference failed")

        signal = self.adapter.poll(self.frame, now=0.0)

        self.assertEqual(signal, NO_PHONE)
        self.detector.error = None
        self.assertTrue(self.adapter.poll(self.frame, now=1.0).detected)

    def test_confidence_must_exceed_threshold(self):
        self.assertFalse(self.adapter.select([phone_detection(0.25)]).detected)
        self.assertTrue(self.adapter.select([phone_detection(0.26)]).detected)

    def test_other_labels_ignored(self):
        signal = self.adapter.select([phone_detection(0.9, label="person")])
        self.assertFalse(signal.detected)

    def test_most_confident_candidate_wins(self):
        signal = self.adapter.select([phone_detection(0.4), phone_detection(0.7), phone_detection(0.5)])
        self.assertAlmostEqual(signal.score, 0.7)

    def test_reset_forces_next_poll(self):
        self.adapter.poll(self.frame, now=0.0)
        self.adapter.reset()

        self.assertEqual(self.adapter.last_signal, NO_PHONE)
        self.adapter.poll(self.frame, now=0.1)
        self.assertEqual(self.detector.calls, 2)


if __name__ == '__main__':
    unittest.main()
