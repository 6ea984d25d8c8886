"""Finger counting on MediaPipe hand landmark sets."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

import numpy as np

NUM_LANDMARKS = 21

WRIST = 0
THUMB_IP = 3
THUMB_TIP = 4
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_PIP = 14
RING_TIP = 16
PINKY_PIP = 18
PINKY_TIP = 20

# (reference joint, tip) per finger
FINGER_JOINTS: Dict[str, Tuple[int, int]] = {
    "thumb": (THUMB_IP, THUMB_TIP),
    "index": (INDEX_PIP, INDEX_TIP),
    "middle": (MIDDLE_PIP, MIDDLE_TIP),
    "ring": (RING_PIP, RING_TIP),
    "pinky": (PINKY_PIP, PINKY_TIP),
}

# Normalized distance a tip must clear its reference joint by.
EXTENSION_THRESHOLD = 0.03


def as_landmark_array(landmarks: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Validate a hand landmark set and return it as a float array."""
    coords = np.asarray(landmarks, dtype=float)
    if coords.ndim != 2 or coords.shape[0] != NUM_LANDMARKS:
        raise ValueError(
            f"Expected {NUM_LANDMARKS} landmarks, got shape {coords.shape}"
        )
    if coords.shape[1] not in (2, 3):
        raise ValueError(f"Landmarks must be 2-D or 3-D points, got {coords.shape[1]}-D")
    return coords


def is_thumb_extended(coords: np.ndarray) -> bool:
    # The thumb folds sideways, so compare horizontally in either direction.
    return abs(coords[THUMB_TIP][0] - coords[THUMB_IP][0]) > EXTENSION_THRESHOLD


def is_finger_extended(coords: np.ndarray, finger: str) -> bool:
    if finger == "thumb":
        return is_thumb_extended(coords)
    pip, tip = FINGER_JOINTS[finger]
    # y grows downwards in image space
    return coords[pip][1] - coords[tip][1] > EXTENSION_THRESHOLD


def extended_fingers(landmarks: Sequence[Sequence[float]] | np.ndarray) -> Dict[str, bool]:
    coords = as_landmark_array(landmarks)
    return {finger: is_finger_extended(coords, finger) for finger in FINGER_JOINTS}


def count_fingers(landmarks: Sequence[Sequence[float]] | np.ndarray) -> int:
    """Return how many of the five fingers are extended (0-5)."""
    return sum(1 for value in extended_fingers(landmarks).values() if value)
