"""
Tests for the hysteresis state machine.
"""

import unittest

import face_fixtures  # noqa: F401

from doomslayer.core.engine_state import EngineState
from doomslayer.core.hysteresis import apply_no_face, update_hysteresis
from doomslayer.core.types import Classification


class TestHysteresis(unittest.TestCase):

    def setUp(self):
        self.state = EngineState()

    def feed(self, outcomes, threshold=3):
        return [update_hysteresis(self.state, outcome, threshold) for outcome in outcomes]

    def test_commits_after_threshold(self):
        states = self.feed([True, True, True])
        self.assertEqual(states, [Classification.MONITORING, Classification.MONITORING,
                                  Classification.DOOMSCROLLING])

    def test_normal_after_threshold(self):
        states = self.feed([False] * 3)
        self.assertEqual(states[-1], Classification.NORMAL)

    def test_dissenting_frame_restarts_run(self):
        self.feed([True, True, False])
        self.assertEqual(self.state.consecutive_detected, 0)
        self.assertEqual(self.state.consecutive_normal, 1)

        states = self.feed([True, True])
        self.assertEqual(states[-1], Classification.MONITORING)

        self.assertEqual(self.feed([True])[-1], Classification.DOOMSCROLLING)

    def test_stays_committed_while_run_continues(self):
        states = self.feed([True] * 6)
        self.assertEqual(states[2:], [Classification.DOOMSCROLLING] * 4)
        self.assertEqual(self.state.consecutive_detected, 6)

    def test_threshold_of_one(self):
        self.assertEqual(self.feed([True], threshold=1)[-1], Classification.DOOMSCROLLING)
        self.assertEqual(self.feed([False], threshold=1)[-1], Classification.NORMAL)

    def test_no_face_with_phone_bypasses_counters(self):
        self.feed([False, False])

        classification = apply_no_face(self.state, phone_detected=True)

        self.assertEqual(classification, Classification.DOOMSCROLLING)
        self.assertEqual(self.state.consecutive_normal, 2)
        self.assertEqual(self.state.consecutive_detected, 0)

    def test_no_face_without_phone(self):
        self.feed([True])

        classification = apply_no_face(self.state, phone_detected=False)

        self.assertEqual(classification, Classification.NO_FACE)
        self.assertEqual(self.state.consecutive_detected, 1)

    def test_run_resumes_after_no_face(self):
        self.feed([True, True])
        apply_no_face(self.state, phone_detected=False)
        self.assertEqual(self.feed([True])[-1], Classification.DOOMSCROLLING)


if __name__ == '__main__':
    unittest.main()
