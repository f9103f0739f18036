"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
=========================================================
Detects the hand in a camera frame with MediaPipe's Hand Landmarker
(Tasks API, VIDEO mode) and returns it as a HandFrame.

Frames must be passed unmirrored; mirroring is applied when drawing.
"""

import cv2
import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision
from typing import Optional
import urllib.request
from pathlib import Path
import logging
import time

from .landmarks import HandFrame

logger = logging.getLogger(__name__)


MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    logger.info("Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    logger.info("Model downloaded to %s", model_path)


def hand_frame_from_result(result) -> Optional[HandFrame]:
    """
    Take the first detected hand from a HandLandmarkerResult.

    Returns:
        HandFrame, or None if there is no hand or the payload is malformed
    """
    if not result.hand_landmarks:
        return None
    return HandFrame.from_points(result.hand_landmarks[0])


class HandTracker:
    """
    Single-hand tracking using MediaPipe Hand Landmarker (Tasks API).

    Uses VIDEO running mode, which tracks between sequential frames
    instead of running full detection every time.
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.7,
        model_path: Optional[Path] = None
    ):
        """
        Initialize the hand tracker.

        Args:
            min_detection_confidence: Minimum confidence for detection
            min_tracking_confidence: Minimum confidence for tracking
            model_path: Location of hand_landmarker.task (downloaded if missing)
        """
        self._model_path = model_path or Path(__file__).parent.parent / "models" / "hand_landmarker.task"

        if not self._model_path.exists():
            _download_model(self._model_path)

        base_options = python.BaseOptions(model_asset_path=str(self._model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=1,
            min_hand_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            min_hand_presence_confidence=min_detection_confidence
        )

        self.detector = vision.HandLandmarker.create_from_options(options)

        # VIDEO mode needs strictly increasing timestamps
        self._start_time = time.monotonic()
        self._last_timestamp_ms = -1

    def process(self, frame: np.ndarray) -> Optional[HandFrame]:
        """
        Detect the hand in a frame.

        Args:
            frame: BGR image from camera (not mirrored)

        Returns:
            HandFrame with normalized landmarks, or None when no hand is found
        """
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        timestamp_ms = int((time.monotonic() - self._start_time) * 1000)
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        result = self.detector.detect_for_video(mp_image, timestamp_ms)
        return hand_frame_from_result(result)

    def release(self):
        """Release resources."""
        if self.detector:
            self.detector.close()
            self.detector = None
