"""
Gestures Module - Hand Pose Classification
===========================================
Classifies a single hand frame into one of four gestures.
Classification is stateless: the same frame always yields the same gesture.
"""

import numpy as np
from enum import Enum
from typing import Optional

from .landmarks import HandFrame, HandLandmark


# Normalized-units margin that keeps near-straight fingers from flickering
GESTURE_MARGIN = 0.02


class Gesture(Enum):
    """Recognized gestures for the drawing application."""
    FIST = "FIST"                        # All four fingers curled - clear
    OPEN_HAND = "OPEN_HAND"              # All fingers and thumb out - analyze
    INDEX_FINGER_UP = "INDEX_FINGER_UP"  # Pointing - draw or erase
    NONE = "NONE"                        # No recognized gesture


# (tip, pip, mcp) per finger, thumb excluded
_FINGERS = (
    (HandLandmark.INDEX_TIP, HandLandmark.INDEX_PIP, HandLandmark.INDEX_MCP),
    (HandLandmark.MIDDLE_TIP, HandLandmark.MIDDLE_PIP, HandLandmark.MIDDLE_MCP),
    (HandLandmark.RING_TIP, HandLandmark.RING_PIP, HandLandmark.RING_MCP),
    (HandLandmark.PINKY_TIP, HandLandmark.PINKY_PIP, HandLandmark.PINKY_MCP),
)


def _usable(frame: Optional[HandFrame]) -> bool:
    return frame is not None and len(frame) == 21


def is_fist(frame: Optional[HandFrame]) -> bool:
    """All four fingertips below their lower knuckle (MCP)."""
    if not _usable(frame):
        return False
    return all(frame[tip].y > frame[mcp].y for tip, _, mcp in _FINGERS)


def is_open_hand(frame: Optional[HandFrame], margin: float = GESTURE_MARGIN) -> bool:
    """
    All four fingertips clearly above their PIP joints and the thumb
    extended sideways (tip left of the IP joint).
    """
    if not _usable(frame):
        return False

    fingers_extended = all(
        frame[tip].y < frame[pip].y - margin for tip, pip, _ in _FINGERS
    )
    thumb_extended = frame[HandLandmark.THUMB_TIP].x < frame[HandLandmark.THUMB_IP].x

    return fingers_extended and thumb_extended


def is_index_finger_up(frame: Optional[HandFrame], margin: float = GESTURE_MARGIN) -> bool:
    """Index tip clearly above its PIP joint, other fingertips below theirs."""
    if not _usable(frame):
        return False

    index_up = frame[HandLandmark.INDEX_TIP].y < frame[HandLandmark.INDEX_PIP].y - margin
    others_down = all(frame[tip].y > frame[pip].y for tip, pip, _ in _FINGERS[1:])

    return index_up and others_down


def classify_gesture(frame: Optional[HandFrame]) -> Gesture:
    """
    Classify a hand frame.

    Rules overlap on ambiguous poses, so they are checked in a fixed
    priority order and the first match wins: FIST, OPEN_HAND,
    INDEX_FINGER_UP, then NONE. A missing or malformed frame is NONE.

    Args:
        frame: Hand landmarks for this tick, or None when no hand is visible

    Returns:
        The detected Gesture
    """
    if is_fist(frame):
        return Gesture.FIST
    if is_open_hand(frame):
        return Gesture.OPEN_HAND
    if is_index_finger_up(frame):
        return Gesture.INDEX_FINGER_UP
    return Gesture.NONE


_GESTURE_INFO = {
    Gesture.NONE: {
        'name': 'None',
        'description': 'No gesture detected',
    },
    Gesture.INDEX_FINGER_UP: {
        'name': 'Pointing',
        'description': 'Index finger up - Draw / erase',
    },
    Gesture.FIST: {
        'name': 'Fist',
        'description': 'Closed fist - Clear canvas',
    },
    Gesture.OPEN_HAND: {
        'name': 'Open hand',
        'description': 'Open palm - Analyze drawing',
    },
}


def get_gesture_info(gesture: Gesture) -> dict:
    """
    Get display information about a gesture.

    Returns:
        Dict with gesture name and description
    """
    return _GESTURE_INFO.get(gesture, _GESTURE_INFO[Gesture.NONE])


def draw_gesture_ui(frame: np.ndarray, gesture: Gesture, mode_name: str) -> np.ndarray:
    """
    Draw the gesture status box in the bottom-left corner.

    Args:
        frame: BGR image to draw on
        gesture: Gesture classified this tick
        mode_name: Current drawing mode label

    Returns:
        Frame with gesture UI overlay
    """
    import cv2

    h, w = frame.shape[:2]
    info = get_gesture_info(gesture)

    box_h = 70
    cv2.rectangle(frame, (10, h - box_h - 10), (330, h - 10), (0, 0, 0), -1)
    cv2.rectangle(frame, (10, h - box_h - 10), (330, h - 10), (255, 255, 255), 2)

    color = (0, 255, 0) if gesture != Gesture.NONE else (0, 255, 255)
    cv2.putText(
        frame, f"{info['name']}  [{mode_name}]",
        (20, h - box_h + 18),
        cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2
    )
    cv2.putText(
        frame, info['description'],
        (20, h - 25),
        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1
    )

    return frame
