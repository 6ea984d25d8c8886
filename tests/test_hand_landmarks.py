"""
Test cases for finger counting on synthetic landmark sets.
"""
import sys
import unittest
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from hand_landmarks import (
    EXTENSION_THRESHOLD,
    INDEX_PIP,
    INDEX_TIP,
    THUMB_IP,
    THUMB_TIP,
    as_landmark_array,
    count_fingers,
    extended_fingers,
)
from tests.fakes import make_hand


class TestCountFingers(unittest.TestCase):
    """Test the per-finger extension predicates and the total count."""

    def test_closed_hand_counts_zero(self):
        self.assertEqual(count_fingers(make_hand()), 0)

    def test_all_fingers_extended_counts_five(self):
        hand = make_hand(["thumb", "index", "middle", "ring", "pinky"])
        self.assertEqual(count_fingers(hand), 5)

    def test_separations_within_threshold_are_not_extended(self):
        """Tips that clear their joint by less than the threshold do not count."""
        hand = make_hand(["thumb", "index", "middle", "ring", "pinky"], offset=EXTENSION_THRESHOLD - 0.01)
        self.assertEqual(count_fingers(hand), 0)

    def test_separations_just_over_threshold_are_extended(self):
        hand = make_hand(["index", "middle"], offset=EXTENSION_THRESHOLD + 0.001)
        self.assertEqual(count_fingers(hand), 2)

    def test_thumb_extension_is_direction_independent(self):
        hand = make_hand()
        hand[THUMB_TIP][0] = hand[THUMB_IP][0] - 0.1
        self.assertTrue(extended_fingers(hand)["thumb"])
        self.assertEqual(count_fingers(hand), 1)

    def test_finger_pointing_down_is_not_extended(self):
        hand = make_hand()
        hand[INDEX_TIP][1] = hand[INDEX_PIP][1] + 0.2
        self.assertFalse(extended_fingers(hand)["index"])

    def test_vertical_thumb_movement_is_ignored(self):
        hand = make_hand()
        hand[THUMB_TIP][1] = hand[THUMB_IP][1] - 0.2
        self.assertEqual(count_fingers(hand), 0)

    def test_accepts_two_dimensional_points(self):
        hand = [(x, y) for x, y, _ in make_hand(["index"])]
        self.assertEqual(count_fingers(hand), 1)

    def test_reports_each_finger(self):
        state = extended_fingers(make_hand(["index", "pinky"]))
        self.assertEqual(
            state,
            {"thumb": False, "index": True, "middle": False, "ring": False, "pinky": True},
        )


class TestLandmarkValidation(unittest.TestCase):
    """Landmark sets must keep the fixed 21-point layout."""

    def test_rejects_wrong_length(self):
        with self.assertRaises(ValueError):
            count_fingers(np.zeros((20, 3)))

    def test_rejects_wrong_dimension(self):
        with self.assertRaises(ValueError):
            as_landmark_array(np.zeros((21, 4)))

    def test_returns_float_array(self):
        coords = as_landmark_array([[0, 0]] * 21)
        self.assertEqual(coords.shape, (21, 2))
        self.assertEqual(coords.dtype, np.float64)


if __name__ == '__main__':
    unittest.main()
