"""Entry point for the gesture-confirmed webcam photo capture.

Usage:
    pip install -e .
    python main.py

Keys:
    g      start gesture capture (show 1, then 2, then 3 fingers)
    space  capture immediately
    x      cancel gesture capture
    r      retake
    s      save the captured photo
    q      quit
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from camera_controller import VideoSource
from capture_session import Mode
from gesture_capture import GestureCaptureController
from lazy_detector import LazyDetector
from photo_sink import DEFAULT_OUTPUT_DIR, DirectoryPhotoSink, PhotoSink, PhotoUploadError, UploadPhotoSink
from utils.drawing import (
    draw_countdown,
    draw_hand_box,
    draw_landmarks,
    draw_mode_banner,
    draw_prompts,
    draw_status,
    guidance_text,
)


logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

WINDOW_NAME = "Gesture Photo Capture"
DISPLAY_WIDTH = 1280
DISPLAY_HEIGHT = 720
MIRROR_PREVIEW = True

KEY_START = ord("g")
KEY_MANUAL = ord(" ")
KEY_CANCEL = ord("x")
KEY_RETAKE = ord("r")
KEY_SAVE = ord("s")
KEY_QUIT = ord("q")


def mode_prompts(controller: GestureCaptureController) -> List[str]:
    """Key hints for the current mode; gesture hints only once detection is usable."""
    mode = controller.mode
    if mode is Mode.PREVIEW:
        prompts = []
        if controller.gesture_available:
            prompts.append("G: Start gesture capture")
        elif controller.detector_loading:
            prompts.append("Loading hand detector...")
        prompts.append("Space: Capture now")
        return prompts
    if mode is Mode.DETECTING:
        return ["Show 1, 2, then 3 fingers", "Space: Capture now", "X: Cancel"]
    if mode is Mode.COUNTDOWN:
        return ["Countdown in progress...", "X: Cancel"]
    if mode is Mode.REVIEW:
        return ["S: Save", "R: Retake"]
    return []


def render(controller: GestureCaptureController, frame: np.ndarray) -> np.ndarray:
    session = controller.session
    if controller.mode is Mode.REVIEW and session.captured_image is not None:
        output = session.captured_image.frame.copy()
    else:
        output = cv2.flip(frame, 1) if MIRROR_PREVIEW else frame.copy()
        landmarks = controller.last_landmarks
        if controller.mode is Mode.DETECTING and landmarks is not None:
            output = draw_landmarks(output, landmarks, mirrored=MIRROR_PREVIEW)
            label = guidance_text(session.current_finger_count, len(session.gesture_sequence))
            output = draw_hand_box(output, landmarks, label, mirrored=MIRROR_PREVIEW)
        if controller.mode is Mode.COUNTDOWN and session.countdown is not None:
            output = draw_countdown(output, session.countdown)

    if output.shape[0] != DISPLAY_HEIGHT or output.shape[1] != DISPLAY_WIDTH:
        output = cv2.resize(output, (DISPLAY_WIDTH, DISPLAY_HEIGHT), interpolation=cv2.INTER_LINEAR)

    output = draw_mode_banner(output, controller.mode.value)
    output = draw_prompts(output, mode_prompts(controller), origin=(20, 87))
    return draw_status(output, session.status_message)


def handle_key(controller: GestureCaptureController, key: int) -> bool:
    """Apply a key press; returns False when the application should quit."""
    if key == KEY_QUIT:
        return False
    if key == KEY_START:
        controller.start_gesture_capture()
    elif key == KEY_MANUAL:
        controller.manual_capture()
    elif key == KEY_CANCEL:
        controller.cancel_capture()
    elif key == KEY_RETAKE:
        controller.retake()
    elif key == KEY_SAVE:
        try:
            location = controller.save()
        except (OSError, PhotoUploadError) as exc:
            controller.session.status_message = f"Save failed: {exc}"
            return True
        if location is not None:
            logger.info(f"Photo stored at {location}")
            return False
    return True


def run(
    camera_index: int = 0,
    output_dir: Path | str = DEFAULT_OUTPUT_DIR,
    model_path: Path | str | None = None,
    upload_url: Optional[str] = None,
) -> None:
    from gesture_detector import HandLandmarkDetector

    sink: PhotoSink = UploadPhotoSink(upload_url) if upload_url else DirectoryPhotoSink(output_dir)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="landmarker")
    detector = LazyDetector(lambda: HandLandmarkDetector(model_path), executor=executor)
    controller = GestureCaptureController(
        VideoSource(camera_index),
        detector,
        sink,
        auto_start=True,
        mirror_capture=MIRROR_PREVIEW,
    )

    try:
        if controller.open_capture() is Mode.UNAVAILABLE:
            logger.error(controller.session.status_message)
            return

        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(WINDOW_NAME, DISPLAY_WIDTH, DISPLAY_HEIGHT)

        while controller.mode is not Mode.IDLE:
            frame = controller.tick()
            if frame is None:
                logger.error("Failed to read frame from camera")
                break

            cv2.imshow(WINDOW_NAME, render(controller, frame))

            if not handle_key(controller, cv2.waitKey(1) & 0xFF):
                break
    finally:
        controller.close()
        executor.shutdown(wait=False)
        if isinstance(sink, UploadPhotoSink):
            sink.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    run()
