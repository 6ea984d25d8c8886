"""Capture session state, gesture sequence rules and the capture countdown."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from camera_controller import CapturedImage


REQUIRED_SEQUENCE = (1, 2, 3)
COUNTDOWN_START = 3
COUNTDOWN_INTERVAL = 1.0

STATUS_IDLE = ""
STATUS_LOADING = "Loading hand detector... Manual capture is available."
STATUS_READY = "Hand detector ready. Start gesture capture or capture manually."
STATUS_SHOW_ONE = "Show 1 finger to start"
STATUS_SHOW_TWO = "Show 2 fingers"
STATUS_SHOW_THREE = "Show 3 fingers"
STATUS_CAPTURING = "Capturing..."
STATUS_CAPTURED = "Photo captured! Review and save or retake."
STATUS_CANCELLED = "Gesture capture cancelled"
STATUS_DETECTION_UNAVAILABLE = "Automatic gesture detection unavailable. Use manual capture."
STATUS_CAMERA_UNAVAILABLE = "Camera unavailable. Check the device and camera permissions."
STATUS_SAVED = "Photo saved"

SEQUENCE_PROMPTS = {
    0: STATUS_SHOW_ONE,
    1: STATUS_SHOW_TWO,
    2: STATUS_SHOW_THREE,
    3: STATUS_CAPTURING,
}


class Mode(enum.Enum):
    IDLE = "Idle"
    PREVIEW = "Preview"
    DETECTING = "Gesture Mode"
    COUNTDOWN = "Capture Countdown"
    REVIEW = "Review"
    UNAVAILABLE = "Camera Unavailable"


class Clock(Protocol):
    def monotonic(self) -> float:
        ...


class MonotonicClock:
    """Wall clock backed by ``time.monotonic``."""

    def monotonic(self) -> float:
        return time.monotonic()


@dataclass
class CaptureSession:
    """Transient state of one capture attempt."""

    is_capturing: bool = False
    gesture_sequence: List[int] = field(default_factory=list)
    current_finger_count: int = 0
    countdown: Optional[int] = None
    status_message: str = STATUS_IDLE
    captured_image: Optional["CapturedImage"] = None
    generation: int = 0

    @property
    def sequence_complete(self) -> bool:
        return tuple(self.gesture_sequence) == REQUIRED_SEQUENCE

    def begin_detection(self) -> int:
        """Reset the gesture state for a new detection run and return its generation."""
        self.generation += 1
        self.is_capturing = True
        self.gesture_sequence = []
        self.current_finger_count = 0
        self.countdown = None
        self.status_message = STATUS_SHOW_ONE
        return self.generation

    def stop_detection(self) -> None:
        self.is_capturing = False
        self.countdown = None

    def reset(self) -> None:
        self.stop_detection()
        self.gesture_sequence = []
        self.current_finger_count = 0
        self.captured_image = None
        self.status_message = STATUS_IDLE


def advance_sequence(sequence: List[int], finger_count: int) -> bool:
    """Append ``finger_count`` to ``sequence`` if it is the next required step.

    Steps are edge-triggered: 1 is accepted only on an empty sequence, 2 only
    right after 1, and 3 only right after 2. Holding a count, or showing one
    out of order, leaves the sequence as it is. Returns True when it grew.
    """
    if tuple(sequence) == REQUIRED_SEQUENCE:
        return False

    last = sequence[-1] if sequence else None
    if finger_count == 1 and last is None:
        sequence.append(1)
        return True
    if finger_count == 2 and last == 1:
        sequence.append(2)
        return True
    if finger_count == 3 and last == 2:
        sequence.append(3)
        return True
    return False


class Countdown:
    """Fixed 3-2-1 countdown measured against an injectable clock."""

    def __init__(
        self,
        clock: Clock,
        start: int = COUNTDOWN_START,
        interval: float = COUNTDOWN_INTERVAL,
    ) -> None:
        self.clock = clock
        self.start = start
        self.interval = interval
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def begin(self) -> int:
        self._started_at = self.clock.monotonic()
        return self.start

    def remaining(self) -> int:
        """Current displayed value; 0 once the countdown has expired."""
        if self._started_at is None:
            return 0
        elapsed = self.clock.monotonic() - self._started_at
        steps = int(elapsed // self.interval)
        return max(self.start - steps, 0)

    def expired(self) -> bool:
        return self.running and self.remaining() == 0

    def stop(self) -> None:
        self._started_at = None
