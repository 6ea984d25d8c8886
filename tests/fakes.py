"""Synthetic hands and stand-in collaborators for the capture tests."""

from collections import deque
from concurrent.futures import Future
from typing import Iterable, List, Optional

import numpy as np

from hand_landmarks import FINGER_JOINTS, NUM_LANDMARKS

FINGER_ORDER = ("index", "middle", "ring", "pinky", "thumb")


def make_hand(extended: Iterable[str] = (), offset: float = 0.1) -> np.ndarray:
    """Build a (21, 3) landmark array with exactly the named fingers extended."""
    coords = np.full((NUM_LANDMARKS, 3), 0.5)
    coords[:, 2] = 0.0
    for finger in extended:
        joint, tip = FINGER_JOINTS[finger]
        if finger == "thumb":
            coords[tip][0] = coords[joint][0] + offset
        else:
            coords[tip][1] = coords[joint][1] - offset
    return coords


def hand_showing(count: int) -> np.ndarray:
    return make_hand(FINGER_ORDER[:count])


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeVideoSource:
    def __init__(self, available: bool = True, shape=(48, 64, 3)) -> None:
        self.available = available
        self.shape = shape
        self.opened = False
        self.reads = 0
        self.current_frame: Optional[np.ndarray] = None

    def open(self) -> bool:
        self.opened = self.available
        return self.opened

    def read(self) -> Optional[np.ndarray]:
        if not self.opened:
            return None
        self.reads += 1
        frame = np.full(self.shape, self.reads % 255, dtype=np.uint8)
        self.current_frame = frame
        return frame

    def release(self) -> None:
        self.opened = False
        self.current_frame = None


class ScriptedDetector:
    """Replays a queue of landmark results, one per detect() call."""

    def __init__(self, results: Iterable[Optional[np.ndarray]] = ()) -> None:
        self.results = deque(results)
        self.calls: List[int] = []
        self.closed = False

    def feed(self, *results: Optional[np.ndarray]) -> None:
        self.results.extend(results)

    def detect(self, frame: np.ndarray, timestamp_ms: int) -> Optional[np.ndarray]:
        self.calls.append(timestamp_ms)
        if not self.results:
            return None
        return self.results.popleft()

    def close(self) -> None:
        self.closed = True


class RecordingSink:
    def __init__(self) -> None:
        self.saved = []

    def save(self, image) -> str:
        self.saved.append(image)
        return f"memory://{len(self.saved)}"


class ManualExecutor:
    """Executor whose futures complete only when the test says so."""

    def __init__(self) -> None:
        self.pending = []

    def submit(self, fn):
        future = Future()
        self.pending.append((future, fn))
        return future

    def run_all(self) -> None:
        for future, fn in self.pending:
            try:
                future.set_result(fn())
            except Exception as exc:
                future.set_exception(exc)
        self.pending = []
