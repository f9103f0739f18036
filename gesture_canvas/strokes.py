"""
Strokes Module - Stroke/Erase State Machine
============================================
Turns the per-tick gesture and fingertip into canvas effects.

The engine is a pure transition over (is_drawing, stroke). It never touches
pixels itself; it returns effect records that apply_effects() replays onto
a LayeredCanvas. This keeps the state machine testable without a canvas.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

from .canvas import LayeredCanvas
from .gestures import Gesture
from .landmarks import HandFrame, Landmark


# Eraser disc radius in canvas pixels
ERASE_RADIUS = 25

Stroke = Tuple[Landmark, ...]


class Mode(Enum):
    """What an INDEX_FINGER_UP episode does."""
    DRAW = "draw"
    ERASE = "erase"


# Canvas effects

@dataclass(frozen=True)
class ClearInteraction:
    """Wipe the interaction layer."""


@dataclass(frozen=True)
class DrawSkeleton:
    """Draw the hand skeleton on the interaction layer."""
    frame: HandFrame


@dataclass(frozen=True)
class PreviewStroke:
    """Stroke the whole in-progress polyline on the interaction layer."""
    points: Stroke


@dataclass(frozen=True)
class CommitStroke:
    """Stroke a finished polyline onto the persistent layer."""
    points: Stroke


@dataclass(frozen=True)
class EraseAt:
    """Punch a transparent disc into the persistent layer."""
    point: Landmark
    radius: int = ERASE_RADIUS


CanvasEffect = Union[ClearInteraction, DrawSkeleton, PreviewStroke, CommitStroke, EraseAt]


class StrokeUpdate(NamedTuple):
    is_drawing: bool
    stroke: Stroke
    effects: List[CanvasEffect]


def advance_stroke(
    is_drawing: bool,
    stroke: Stroke,
    gesture: Gesture,
    frame: Optional[HandFrame],
    mode: Mode
) -> StrokeUpdate:
    """
    Advance the stroke/erase state machine by one tick.

    Args:
        is_drawing: Whether an INDEX_FINGER_UP episode is in progress
        stroke: Points accumulated so far in this episode
        gesture: Gesture classified this tick
        frame: This tick's hand frame, or None when the hand is gone
        mode: Current drawing mode

    Returns:
        StrokeUpdate with the new state and the effects to apply, in order
    """
    effects: List[CanvasEffect] = [ClearInteraction()]
    if frame is not None:
        effects.append(DrawSkeleton(frame))

    if frame is not None and gesture == Gesture.INDEX_FINGER_UP:
        fingertip = frame.index_tip

        if mode == Mode.DRAW:
            stroke = stroke + (fingertip,)
            if len(stroke) >= 2:
                effects.append(PreviewStroke(stroke))
        else:
            effects.append(EraseAt(fingertip))

        return StrokeUpdate(True, stroke, effects)

    # Episode over (gesture changed or hand lost)
    if is_drawing and mode == Mode.DRAW and len(stroke) >= 2:
        effects.append(CommitStroke(stroke))

    return StrokeUpdate(False, (), effects)


def apply_effects(canvas: LayeredCanvas, effects: Sequence[CanvasEffect]):
    """Replay effect records onto the canvas, in order."""
    for effect in effects:
        if isinstance(effect, ClearInteraction):
            canvas.clear_interaction()
        elif isinstance(effect, DrawSkeleton):
            canvas.draw_hand(effect.frame)
        elif isinstance(effect, PreviewStroke):
            canvas.draw_preview(effect.points)
        elif isinstance(effect, CommitStroke):
            canvas.commit_stroke(effect.points)
        elif isinstance(effect, EraseAt):
            canvas.erase_at(effect.point, effect.radius)
        else:
            raise TypeError(f"Unknown canvas effect: {effect!r}")
