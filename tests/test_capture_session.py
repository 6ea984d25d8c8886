"""
Test cases for the gesture sequence rules and the capture countdown.
"""
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from capture_session import (
    STATUS_SHOW_ONE,
    CaptureSession,
    Countdown,
    advance_sequence,
)
from tests.fakes import FakeClock


class TestAdvanceSequence(unittest.TestCase):
    """Test the edge-triggered 1-2-3 sequence."""

    def test_scenario_from_mixed_counts(self):
        sequence = []
        progression = []
        for count in [0, 1, 1, 2, 0, 2, 3]:
            advance_sequence(sequence, count)
            progression.append(list(sequence))

        self.assertEqual(
            progression,
            [[], [1], [1], [1, 2], [1, 2], [1, 2], [1, 2, 3]],
        )

    def test_out_of_order_two_is_ignored(self):
        sequence = []
        self.assertFalse(advance_sequence(sequence, 2))
        self.assertEqual(sequence, [])

    def test_three_requires_two_first(self):
        sequence = [1]
        self.assertFalse(advance_sequence(sequence, 3))
        self.assertEqual(sequence, [1])

    def test_one_does_not_reappend_after_progress(self):
        sequence = [1, 2]
        self.assertFalse(advance_sequence(sequence, 1))
        self.assertEqual(sequence, [1, 2])

    def test_other_counts_leave_sequence_unchanged(self):
        sequence = [1]
        for count in (0, 4, 5):
            self.assertFalse(advance_sequence(sequence, count))
        self.assertEqual(sequence, [1])

    def test_complete_sequence_never_grows(self):
        sequence = [1, 2, 3]
        for count in range(6):
            self.assertFalse(advance_sequence(sequence, count))
        self.assertEqual(sequence, [1, 2, 3])

    def test_only_prefixes_of_required_sequence_appear(self):
        sequence = []
        seen = set()
        for count in [3, 2, 1, 3, 1, 2, 1, 2, 3, 1, 2, 3]:
            advance_sequence(sequence, count)
            seen.add(tuple(sequence))
        self.assertTrue(seen <= {(), (1,), (1, 2), (1, 2, 3)})


class TestCountdown(unittest.TestCase):
    """Test the 3-2-1 countdown against a fake clock."""

    def setUp(self):
        self.clock = FakeClock()
        self.countdown = Countdown(self.clock)

    def test_counts_down_one_step_per_second(self):
        values = [self.countdown.begin()]
        for _ in range(35):
            self.clock.advance(0.1)
            value = self.countdown.remaining()
            if value != values[-1]:
                values.append(value)

        self.assertEqual(values, [3, 2, 1, 0])

    def test_expires_after_three_seconds(self):
        self.countdown.begin()
        self.clock.advance(2.99)
        self.assertFalse(self.countdown.expired())
        self.assertEqual(self.countdown.remaining(), 1)
        self.clock.advance(0.02)
        self.assertTrue(self.countdown.expired())

    def test_stopped_countdown_is_not_running(self):
        self.countdown.begin()
        self.countdown.stop()
        self.assertFalse(self.countdown.running)
        self.assertFalse(self.countdown.expired())
        self.assertEqual(self.countdown.remaining(), 0)


class TestCaptureSession(unittest.TestCase):
    """Test session resets between detection runs."""

    def test_begin_detection_resets_gesture_state(self):
        session = CaptureSession(gesture_sequence=[1, 2], current_finger_count=2, countdown=2)
        generation = session.begin_detection()

        self.assertEqual(generation, 1)
        self.assertTrue(session.is_capturing)
        self.assertEqual(session.gesture_sequence, [])
        self.assertEqual(session.current_finger_count, 0)
        self.assertIsNone(session.countdown)
        self.assertEqual(session.status_message, STATUS_SHOW_ONE)

    def test_generation_increases_per_run(self):
        session = CaptureSession()
        session.begin_detection()
        self.assertEqual(session.begin_detection(), 2)

    def test_sequence_complete(self):
        self.assertTrue(CaptureSession(gesture_sequence=[1, 2, 3]).sequence_complete)
        self.assertFalse(CaptureSession(gesture_sequence=[1, 2]).sequence_complete)


if __name__ == '__main__':
    unittest.main()
