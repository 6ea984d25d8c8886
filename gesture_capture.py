"""Webcam photo capture confirmed by a 1-2-3 finger gesture sequence."""

from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from camera_controller import CapturedImage, VideoSource, capture_still
from capture_session import (
    SEQUENCE_PROMPTS,
    STATUS_CAMERA_UNAVAILABLE,
    STATUS_CANCELLED,
    STATUS_CAPTURED,
    STATUS_CAPTURING,
    STATUS_DETECTION_UNAVAILABLE,
    STATUS_LOADING,
    STATUS_READY,
    STATUS_SAVED,
    CaptureSession,
    Clock,
    Countdown,
    Mode,
    MonotonicClock,
    advance_sequence,
)
from hand_landmarks import count_fingers
from lazy_detector import DetectorState, LazyDetector
from photo_sink import PhotoSink

logger = logging.getLogger(__name__)

CAMERA_ACTIVE_MODES = {Mode.PREVIEW, Mode.DETECTING, Mode.COUNTDOWN, Mode.REVIEW}
# Starting again while detecting or counting down replaces the running session.
DETECTION_START_MODES = {Mode.PREVIEW, Mode.DETECTING, Mode.COUNTDOWN}


class GestureCaptureController:
    """Drive a guided webcam capture with a manual fallback.

    The controller is polled: the UI loop calls ``tick()`` once per frame.
    Detection runs one frame at a time; every run belongs to a session
    generation, and a scheduled step whose generation is no longer current
    is dropped, so restarting capture never leaves two runs interleaved.
    """

    def __init__(
        self,
        video: VideoSource,
        detector: LazyDetector,
        sink: PhotoSink,
        clock: Optional[Clock] = None,
        auto_start: bool = False,
        mirror_capture: bool = True,
    ) -> None:
        self.video = video
        self.detector = detector
        self.sink = sink
        self.clock = clock or MonotonicClock()
        self.auto_start = auto_start
        self.mirror_capture = mirror_capture

        self.mode = Mode.IDLE
        self.session = CaptureSession()
        self.countdown = Countdown(self.clock)
        self.last_landmarks: Optional[np.ndarray] = None
        self._scheduled_generation: Optional[int] = None
        self._detector_state = DetectorState.NOT_LOADED

    # ------------------------------------------------------------------
    # State queries for the UI
    # ------------------------------------------------------------------
    @property
    def detector_loading(self) -> bool:
        return self.detector.state is DetectorState.LOADING

    @property
    def gesture_available(self) -> bool:
        return self.detector.ready and self.mode in DETECTION_START_MODES

    @property
    def manual_capture_available(self) -> bool:
        return self.mode in {Mode.PREVIEW, Mode.DETECTING, Mode.COUNTDOWN}

    @property
    def captured_image(self) -> Optional[CapturedImage]:
        return self.session.captured_image

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def open_capture(self) -> Mode:
        if self.mode is not Mode.IDLE and self.mode is not Mode.UNAVAILABLE:
            return self.mode

        self.session.reset()
        if not self.video.open():
            self.mode = Mode.UNAVAILABLE
            self.session.status_message = STATUS_CAMERA_UNAVAILABLE
            logger.error("Camera unavailable, capture controls disabled")
            return self.mode

        self.mode = Mode.PREVIEW
        logger.info("Camera preview active")
        self._detector_state = DetectorState.NOT_LOADED
        self._on_detector_state(self.detector.request_load())
        return self.mode

    def start_gesture_capture(self) -> bool:
        if self.mode not in DETECTION_START_MODES:
            return False
        if not self.detector.ready:
            self.session.status_message = (
                STATUS_LOADING if self.detector_loading else STATUS_DETECTION_UNAVAILABLE
            )
            return False

        self.countdown.stop()
        self.last_landmarks = None
        generation = self.session.begin_detection()
        self._scheduled_generation = generation
        self.mode = Mode.DETECTING
        logger.info(f"Gesture capture started (session {generation})")
        return True

    def cancel_capture(self) -> None:
        if self.mode not in {Mode.DETECTING, Mode.COUNTDOWN}:
            return
        self._stop_loop()
        self.mode = Mode.PREVIEW
        self.session.status_message = STATUS_CANCELLED
        logger.info("Gesture capture cancelled")

    def manual_capture(self) -> Optional[CapturedImage]:
        if not self.manual_capture_available:
            return None
        frame = self.video.current_frame
        if frame is None:
            frame = self.video.read()
        if frame is None:
            logger.warning("Manual capture requested but no frame is available")
            return None

        self._stop_loop()
        return self._store_capture(frame, trigger="manual")

    def retake(self) -> bool:
        if self.mode is not Mode.REVIEW:
            return False
        self.session.captured_image = None
        self.mode = Mode.PREVIEW
        logger.info("Capture discarded for retake")
        return self.start_gesture_capture()

    def save(self) -> Optional[str]:
        """Hand the captured image to the sink and close the capture flow."""
        image = self.session.captured_image
        if image is None:
            return None
        try:
            location = self.sink.save(image)
        except Exception:
            logger.exception("Saving the captured photo failed")
            raise
        logger.info(f"{STATUS_SAVED}: {location}")
        self.close()
        return location

    def close(self) -> None:
        self._stop_loop()
        self.video.release()
        self.detector.close()
        self._detector_state = DetectorState.NOT_LOADED
        self.session.reset()
        self.last_landmarks = None
        self.mode = Mode.IDLE

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------
    def tick(self) -> Optional[np.ndarray]:
        """Run one cooperative iteration and return the frame to display."""
        if self.mode not in CAMERA_ACTIVE_MODES:
            return None

        self._on_detector_state(self.detector.poll())

        frame = self.video.read()
        if frame is None:
            return None

        if self.mode is Mode.COUNTDOWN:
            self._advance_countdown(frame)
        elif self._scheduled_generation is not None:
            self._process_frame(frame, self._scheduled_generation)
        return frame

    def _process_frame(self, frame: np.ndarray, generation: int) -> None:
        session = self.session
        if generation != session.generation:
            return
        self._scheduled_generation = None
        if not session.is_capturing or session.countdown is not None:
            return

        timestamp_ms = int(self.clock.monotonic() * 1000)
        landmarks = self.detector.detect(frame, timestamp_ms)
        self.last_landmarks = landmarks
        session.current_finger_count = 0 if landmarks is None else count_fingers(landmarks)

        if landmarks is not None and advance_sequence(session.gesture_sequence, session.current_finger_count):
            session.status_message = SEQUENCE_PROMPTS[len(session.gesture_sequence)]
            logger.info(f"Gesture step {session.gesture_sequence[-1]} recognised")

        if session.sequence_complete:
            self._begin_countdown()
            return

        self._scheduled_generation = generation

    def _begin_countdown(self) -> None:
        self.session.status_message = STATUS_CAPTURING
        self.session.countdown = self.countdown.begin()
        self.mode = Mode.COUNTDOWN
        logger.info("Gesture sequence complete, countdown started")

    def _advance_countdown(self, frame: np.ndarray) -> None:
        remaining = self.countdown.remaining()
        if remaining > 0:
            self.session.countdown = remaining
            return
        self.countdown.stop()
        self._store_capture(frame, trigger="gesture")

    def _store_capture(self, frame: np.ndarray, trigger: str) -> CapturedImage:
        image = capture_still(
            frame,
            trigger=trigger,
            captured_at=time.time(),
            mirror=self.mirror_capture,
        )
        self.session.stop_detection()
        self.session.captured_image = image
        self.session.status_message = STATUS_CAPTURED
        self.mode = Mode.REVIEW
        logger.info(f"Capture completed ({trigger}), entering review mode")
        return image

    def _stop_loop(self) -> None:
        self._scheduled_generation = None
        self.countdown.stop()
        self.session.stop_detection()

    def _on_detector_state(self, state: DetectorState) -> None:
        if state is self._detector_state:
            return
        self._detector_state = state

        if state is DetectorState.LOADING:
            self.session.status_message = STATUS_LOADING
        elif state is DetectorState.FAILED:
            logger.warning("Falling back to manual capture only")
            if self.mode is Mode.PREVIEW:
                self.session.status_message = STATUS_DETECTION_UNAVAILABLE
        elif state is DetectorState.READY:
            if self.mode is Mode.PREVIEW:
                self.session.status_message = STATUS_READY
                if self.auto_start and self.session.captured_image is None:
                    self.start_gesture_capture()
