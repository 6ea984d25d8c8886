"""Load-once wrapper that owns the hand landmark detector for a controller."""

from __future__ import annotations

import enum
import logging
from concurrent.futures import Executor, Future
from typing import Callable, Optional, Protocol

import numpy as np

from hand_landmarks import as_landmark_array

logger = logging.getLogger(__name__)


class DetectorState(enum.Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class LandmarkDetector(Protocol):
    def detect(self, frame: np.ndarray, timestamp_ms: int) -> Optional[np.ndarray]:
        ...

    def close(self) -> None:
        ...


class LazyDetector:
    """Create the detector on first request and cache it.

    With an ``executor`` the factory runs in the background and ``poll()``
    picks the result up on the caller's thread, so all state changes happen
    on the UI loop. Without one the detector is built inline.
    """

    def __init__(
        self,
        factory: Callable[[], LandmarkDetector],
        executor: Optional[Executor] = None,
    ) -> None:
        self._factory = factory
        self._executor = executor
        self._future: Optional[Future] = None
        self._detector: Optional[LandmarkDetector] = None
        self.state = DetectorState.NOT_LOADED
        self.error: Optional[BaseException] = None

    @property
    def ready(self) -> bool:
        return self.state is DetectorState.READY

    def request_load(self) -> DetectorState:
        if self.state is not DetectorState.NOT_LOADED:
            return self.poll()

        self.state = DetectorState.LOADING
        self.error = None
        logger.info("Loading hand landmark detector")
        if self._executor is None:
            try:
                detector = self._factory()
            except Exception as exc:
                self._mark_failed(exc)
            else:
                self._mark_ready(detector)
            return self.state

        self._future = self._executor.submit(self._factory)
        return self.poll()

    def poll(self) -> DetectorState:
        if self.state is DetectorState.LOADING and self._future is not None and self._future.done():
            future, self._future = self._future, None
            exc = future.exception()
            if exc is not None:
                self._mark_failed(exc)
            else:
                self._mark_ready(future.result())
        return self.state

    def detect(self, frame: np.ndarray, timestamp_ms: int) -> Optional[np.ndarray]:
        """Return the landmarks of one hand, or None when there is nothing to report."""
        if self._detector is None or self.state is not DetectorState.READY:
            return None
        try:
            landmarks = self._detector.detect(frame, timestamp_ms)
        except Exception as exc:
            logger.warning(f"Hand detection failed on frame at {timestamp_ms} ms: {exc}")
            return None
        if landmarks is None:
            return None
        try:
            return as_landmark_array(landmarks)
        except ValueError as exc:
            logger.warning(f"Discarding malformed landmarks at {timestamp_ms} ms: {exc}")
            return None

    def close(self) -> None:
        if self._future is not None:
            if not self._future.cancel():
                self._future.add_done_callback(_close_orphan)
            self._future = None
        if self._detector is not None:
            self._detector.close()
            self._detector = None
        self.state = DetectorState.NOT_LOADED

    def _mark_ready(self, detector: LandmarkDetector) -> None:
        self._detector = detector
        self.state = DetectorState.READY
        logger.info("Hand landmark detector ready")

    def _mark_failed(self, exc: BaseException) -> None:
        self.error = exc
        self.state = DetectorState.FAILED
        logger.warning(f"Hand landmark detector failed to load: {exc}")


def _close_orphan(future: Future) -> None:
    # A load that finished after close() still owns native resources.
    if not future.cancelled() and future.exception() is None:
        future.result().close()
