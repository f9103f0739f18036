"""
Landmarks Module - Hand Landmark Data Model
============================================
Normalized hand landmarks as produced by the pose-estimation engine.
A HandFrame is one tick's 21-point hand pose; anything else is "no hand".
"""

import numpy as np
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple


NUM_LANDMARKS = 21


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# Skeleton connectivity, same graph as MediaPipe's HAND_CONNECTIONS
HAND_CONNECTIONS: Tuple[Tuple[HandLandmark, HandLandmark], ...] = (
    # Thumb
    (HandLandmark.WRIST, HandLandmark.THUMB_CMC),
    (HandLandmark.THUMB_CMC, HandLandmark.THUMB_MCP),
    (HandLandmark.THUMB_MCP, HandLandmark.THUMB_IP),
    (HandLandmark.THUMB_IP, HandLandmark.THUMB_TIP),
    # Index
    (HandLandmark.WRIST, HandLandmark.INDEX_MCP),
    (HandLandmark.INDEX_MCP, HandLandmark.INDEX_PIP),
    (HandLandmark.INDEX_PIP, HandLandmark.INDEX_DIP),
    (HandLandmark.INDEX_DIP, HandLandmark.INDEX_TIP),
    # Middle
    (HandLandmark.MIDDLE_MCP, HandLandmark.MIDDLE_PIP),
    (HandLandmark.MIDDLE_PIP, HandLandmark.MIDDLE_DIP),
    (HandLandmark.MIDDLE_DIP, HandLandmark.MIDDLE_TIP),
    # Ring
    (HandLandmark.RING_MCP, HandLandmark.RING_PIP),
    (HandLandmark.RING_PIP, HandLandmark.RING_DIP),
    (HandLandmark.RING_DIP, HandLandmark.RING_TIP),
    # Pinky
    (HandLandmark.WRIST, HandLandmark.PINKY_MCP),
    (HandLandmark.PINKY_MCP, HandLandmark.PINKY_PIP),
    (HandLandmark.PINKY_PIP, HandLandmark.PINKY_DIP),
    (HandLandmark.PINKY_DIP, HandLandmark.PINKY_TIP),
    # Palm
    (HandLandmark.INDEX_MCP, HandLandmark.MIDDLE_MCP),
    (HandLandmark.MIDDLE_MCP, HandLandmark.RING_MCP),
    (HandLandmark.RING_MCP, HandLandmark.PINKY_MCP),
)


@dataclass(frozen=True)
class Landmark:
    """A normalized 2D point (origin top-left, y grows downward)."""
    x: float
    y: float


@dataclass(frozen=True)
class HandFrame:
    """
    One tick's hand pose.

    Attributes:
        landmarks: Exactly 21 normalized points, indexed by HandLandmark
    """
    landmarks: Tuple[Landmark, ...]

    def __post_init__(self):
        if len(self.landmarks) != NUM_LANDMARKS:
            raise ValueError(
                f"HandFrame needs {NUM_LANDMARKS} landmarks, got {len(self.landmarks)}"
            )

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]

    def __len__(self) -> int:
        return len(self.landmarks)

    @property
    def index_tip(self) -> Landmark:
        """Fingertip that drives drawing and erasing."""
        return self.landmarks[HandLandmark.INDEX_TIP]

    @classmethod
    def from_points(cls, points: Optional[Iterable]) -> Optional['HandFrame']:
        """
        Build a frame from (x, y) pairs or objects with .x/.y attributes.

        Returns None for a missing payload or one that does not carry
        exactly 21 points; callers treat that as "no hand".
        """
        if points is None:
            return None

        converted: List[Landmark] = []
        for point in points:
            if isinstance(point, Landmark):
                converted.append(point)
            elif hasattr(point, 'x') and hasattr(point, 'y'):
                converted.append(Landmark(float(point.x), float(point.y)))
            else:
                x, y = point[0], point[1]
                converted.append(Landmark(float(x), float(y)))

        if len(converted) != NUM_LANDMARKS:
            return None
        return cls(tuple(converted))


def landmarks_to_array(points: Sequence[Landmark]):
    """Stack landmarks into an (N, 2) float array."""
    return np.array([[p.x, p.y] for p in points], dtype=np.float64).reshape(-1, 2)
