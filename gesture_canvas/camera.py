"""
Camera Module - Latest-Frame Webcam Source
==========================================
A background thread drains the capture device and keeps only the newest
frame, numbered so the frame loop can tell whether it has seen it.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
import logging
import sys
import threading
import time

logger = logging.getLogger(__name__)


class Camera:
    """
    Webcam source for FrameDriver.

    Frames come out exactly as captured; the display flips them, the hand
    tracker must not see them flipped.
    """

    def __init__(self, camera_id: int = 0, width: int = 1280, height: int = 720, fps: int = 30):
        self.camera_id = camera_id
        # Requested size; replaced by what the device reports after start()
        self.width = width
        self.height = height
        self.fps = fps

        self.cap: Optional[cv2.VideoCapture] = None
        self._latest: Optional[np.ndarray] = None
        self._latest_id = 0
        self._lock = threading.Lock()
        self._running = False
        self._worker: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Open the device and begin grabbing frames. False if it cannot be opened."""
        # DirectShow backend on Windows
        backend = cv2.CAP_DSHOW if sys.platform == 'win32' else cv2.CAP_ANY
        self.cap = cv2.VideoCapture(self.camera_id, backend)
        if not self.cap.isOpened():
            logger.error("Failed to open camera %d", self.camera_id)
            return False

        for prop, value in (
            (cv2.CAP_PROP_FRAME_WIDTH, self.width),
            (cv2.CAP_PROP_FRAME_HEIGHT, self.height),
            (cv2.CAP_PROP_FPS, self.fps),
            (cv2.CAP_PROP_BUFFERSIZE, 1),
        ):
            self.cap.set(prop, value)

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info("Camera started: %dx%d @ %dfps", self.width, self.height, self.fps)

        self._running = True
        self._worker = threading.Thread(target=self._grab, daemon=True)
        self._worker.start()
        return True

    def _grab(self):
        while self._running:
            ok, frame = self.cap.read()
            if not ok:
                time.sleep(0.001)
                continue
            with self._lock:
                self._latest = frame
                self._latest_id += 1

    def read(self) -> Tuple[int, Optional[np.ndarray]]:
        """Id and copy of the newest frame; the frame is None until one arrives."""
        with self._lock:
            frame = None if self._latest is None else self._latest.copy()
            return self._latest_id, frame

    def stop(self):
        """Stop grabbing and release the device."""
        self._running = False
        if self._worker is not None:
            self._worker.join(timeout=1.0)
            self._worker = None
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        logger.info("Camera stopped")
