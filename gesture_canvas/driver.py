"""
Driver Module - Frame Loop
===========================
Pulls the latest camera frame, runs hand tracking and hands the result to
the session, one frame at a time. The next frame is only requested after
the current one is fully processed, so nothing queues up; a slow tick just
lowers the frame rate.
"""

import numpy as np
from typing import Callable, Optional, Protocol, Tuple
import logging
import time

from .landmarks import HandFrame
from .session import DrawingSession, StepResult

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def read(self) -> Tuple[int, Optional[np.ndarray]]: ...


class LandmarkSource(Protocol):
    def process(self, frame: np.ndarray) -> Optional[HandFrame]: ...


# Called after each tick with the camera frame and the applied step;
# returning False stops the loop
TickCallback = Callable[[np.ndarray, StepResult], Optional[bool]]


class FrameDriver:
    """
    Synchronous pull-process loop over a camera and a hand tracker.

    stop() ends the loop; a stroke in progress at that point is discarded.
    """

    def __init__(
        self,
        source: FrameSource,
        tracker: LandmarkSource,
        session: DrawingSession,
        on_tick: Optional[TickCallback] = None,
        idle_sleep: float = 0.001
    ):
        self.source = source
        self.tracker = tracker
        self.session = session
        self.on_tick = on_tick
        self.idle_sleep = idle_sleep

        self._running = False
        self._last_frame_id: Optional[int] = None
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        """Number of frames processed so far."""
        return self._ticks

    def tick(self) -> Optional[StepResult]:
        """
        Process the latest frame if there is a new one.

        Returns:
            The applied StepResult, or None if no new frame was available
        """
        frame_id, frame = self.source.read()
        if frame is None or frame_id == self._last_frame_id:
            return None
        self._last_frame_id = frame_id

        height, width = frame.shape[:2]
        self.session.canvas.resize(width, height)

        hand = self.tracker.process(frame)
        result = self.session.process(hand)
        self._ticks += 1

        if self.on_tick is not None and self.on_tick(frame, result) is False:
            self.stop()

        return result

    def run(self):
        """Run until stop() is called or the source stops."""
        self._running = True
        logger.info("Frame loop started")

        try:
            while self._running:
                if not getattr(self.source, 'is_running', True):
                    break
                if self.tick() is None:
                    time.sleep(self.idle_sleep)
        finally:
            self.stop()

    def stop(self):
        """Stop invoking the session and discard any in-progress stroke."""
        was_running = self._running
        self._running = False
        self.session.stop()
        if was_running:
            logger.info("Frame loop stopped after %d frames", self._ticks)
