"""Hand landmark detection powered by MediaPipe Hand Landmarker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.request import urlretrieve

import numpy as np

try:
    import cv2
except ImportError as exc:
    raise ImportError("OpenCV (opencv-python) is required for gesture detection") from exc

try:
    from mediapipe import Image as MPImage
    from mediapipe import ImageFormat
    from mediapipe.tasks import python as mp_python
    from mediapipe.tasks.python import vision
except ImportError as exc:
    raise ImportError("MediaPipe is required for gesture detection. Install mediapipe.") from exc

from hand_landmarks import NUM_LANDMARKS

logger = logging.getLogger(__name__)

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/latest/hand_landmarker.task"
)
DEFAULT_MODEL_PATH = Path("models/hand_landmarker.task")

MIN_HAND_DETECTION_CONFIDENCE = 0.7
MIN_HAND_PRESENCE_CONFIDENCE = 0.7
MIN_TRACKING_CONFIDENCE = 0.7


def ensure_model_exists(model_path: Path | str | None = None) -> Path:
    """Download the MediaPipe model locally if it is absent."""
    path = Path(model_path) if model_path else DEFAULT_MODEL_PATH
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {path}")
        urlretrieve(MODEL_URL, path)
    return path


class HandLandmarkDetector:
    """Single-hand landmarker in video mode.

    ``detect`` is synchronous: one frame in, at most one set of 21 landmarks
    out. MediaPipe requires strictly increasing timestamps in video mode, so
    repeated or stale timestamps are bumped forward.
    """

    def __init__(self, model_path: Path | str | None = None) -> None:
        self.model_path = ensure_model_exists(model_path)
        self._landmarker = self._create_landmarker()
        self._last_timestamp_ms = -1

    def _create_landmarker(self) -> vision.HandLandmarker:
        base_options = mp_python.BaseOptions(model_asset_path=str(self.model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=1,
            min_hand_detection_confidence=MIN_HAND_DETECTION_CONFIDENCE,
            min_hand_presence_confidence=MIN_HAND_PRESENCE_CONFIDENCE,
            min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
        )
        return vision.HandLandmarker.create_from_options(options)

    def detect(self, frame: np.ndarray, timestamp_ms: int) -> Optional[np.ndarray]:
        """Return a (21, 3) array of normalized landmarks, or None if no hand is visible."""
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = MPImage(image_format=ImageFormat.SRGB, data=rgb_frame)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        return self._first_hand(result)

    @staticmethod
    def _first_hand(result: vision.HandLandmarkerResult) -> Optional[np.ndarray]:
        if not result.hand_landmarks:
            return None
        landmarks = result.hand_landmarks[0]
        if len(landmarks) != NUM_LANDMARKS:
            return None
        return np.array([[lm.x, lm.y, lm.z] for lm in landmarks])

    def close(self) -> None:
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
