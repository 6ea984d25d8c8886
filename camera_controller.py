"""Webcam access and still-image capture."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720
CAMERA_FPS = 30
JPEG_QUALITY = 92


@dataclass
class CapturedImage:
    """A still frame taken from the video source, with its JPEG encoding."""

    frame: np.ndarray
    data: bytes
    captured_at: float
    trigger: str
    mime_type: str = "image/jpeg"

    @property
    def size(self) -> tuple[int, int]:
        height, width = self.frame.shape[:2]
        return width, height

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def encode_jpeg(frame: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not ok:
        raise ValueError("Unable to encode frame as JPEG")
    return buffer.tobytes()


def capture_still(
    frame: np.ndarray,
    trigger: str,
    captured_at: float,
    mirror: bool = True,
) -> CapturedImage:
    """Freeze ``frame`` into a CapturedImage, mirrored like the preview by default."""
    still = cv2.flip(frame, 1) if mirror else frame.copy()
    return CapturedImage(
        frame=still,
        data=encode_jpeg(still),
        captured_at=captured_at,
        trigger=trigger,
    )


class VideoSource:
    """Live camera frames from ``cv2.VideoCapture``.

    The last successfully read frame is kept as ``current_frame`` so a still
    can be taken at any time without waiting for the next read.
    """

    def __init__(
        self,
        camera_index: int = 0,
        width: int = CAMERA_WIDTH,
        height: int = CAMERA_HEIGHT,
        fps: int = CAMERA_FPS,
        backend: int = cv2.CAP_ANY,
    ) -> None:
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.fps = fps
        self.backend = backend
        self._cap: Optional[cv2.VideoCapture] = None
        self.current_frame: Optional[np.ndarray] = None

    @property
    def is_opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> bool:
        if self.is_opened:
            return True

        cap = cv2.VideoCapture(self.camera_index, self.backend)
        if not cap.isOpened():
            cap.release()
            logger.error(f"Unable to open camera {self.camera_index}")
            return False

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)

        actual_width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera native resolution: {actual_width}x{actual_height}")
        self._cap = cap
        return True

    def read(self) -> Optional[np.ndarray]:
        if not self.is_opened:
            return None
        success, frame = self._cap.read()
        if not success:
            return None
        self.current_frame = frame
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self.current_frame = None
