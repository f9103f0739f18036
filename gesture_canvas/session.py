"""
Session Module - Per-Frame Step and Drawing Session
====================================================
step() is the whole per-tick transition: classify the frame, advance the
stroke/erase machine, run the action dispatcher. It is pure; time comes in
as now_ms.

DrawingSession owns the mutable state and the canvas, applies the effects
step() returns and fires commands. It also exposes the small command
surface used by the host UI (set_mode, clear, analyze).
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional

from .actions import Command, dispatch_action
from .canvas import LayeredCanvas
from .classifier import AnalysisResult, AnalysisStatus, DrawingAnalyzer, DrawingClassifier
from .gestures import Gesture, classify_gesture
from .landmarks import HandFrame
from .strokes import CanvasEffect, Mode, Stroke, advance_stroke, apply_effects

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """
    Everything the core remembers between ticks.

    Attributes:
        is_drawing: An INDEX_FINGER_UP episode is in progress
        current_stroke: Points of the in-progress stroke (DRAW mode only)
        last_gesture: Gesture of the previous tick
        cooldown_end_ms: No command may fire at or before this time
    """
    is_drawing: bool = False
    current_stroke: Stroke = field(default_factory=tuple)
    last_gesture: Gesture = Gesture.NONE
    cooldown_end_ms: float = 0.0


class StepResult(NamedTuple):
    state: SessionState
    gesture: Gesture
    effects: List[CanvasEffect]
    commands: List[Command]


def step(
    frame: Optional[HandFrame],
    state: SessionState,
    mode: Mode,
    now_ms: float
) -> StepResult:
    """
    Run one tick of the core.

    Args:
        frame: This tick's hand, or None when no (usable) hand is visible
        state: State after the previous tick
        mode: Current drawing mode
        now_ms: Event clock in milliseconds

    Returns:
        StepResult with the next state, the classified gesture, canvas
        effects to apply in order and commands to fire
    """
    gesture = classify_gesture(frame)

    stroke_update = advance_stroke(
        state.is_drawing, state.current_stroke, gesture, frame, mode
    )

    dispatch = dispatch_action(
        gesture, now_ms, state.last_gesture, state.cooldown_end_ms
    )
    commands = [dispatch.command] if dispatch.command is not None else []

    new_state = SessionState(
        is_drawing=stroke_update.is_drawing,
        current_stroke=stroke_update.stroke,
        last_gesture=gesture,
        cooldown_end_ms=dispatch.cooldown_end_ms,
    )
    return StepResult(new_state, gesture, stroke_update.effects, commands)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class DrawingSession:
    """
    Stateful adapter around step().

    One call to process() is one atomic tick: nothing outside observes a
    half-applied frame. Not thread-safe; drive it from one thread.
    """

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        classifier: Optional[DrawingClassifier] = None,
        mode: Mode = Mode.DRAW,
        clock: Callable[[], float] = _monotonic_ms
    ):
        """
        Initialize the session.

        Args:
            width: Canvas width (match the video frame)
            height: Canvas height (match the video frame)
            classifier: Drawing classifier, or None to disable analysis
            mode: Initial drawing mode
            clock: Millisecond clock used to time commands
        """
        self.canvas = LayeredCanvas(width, height)
        self.analyzer = DrawingAnalyzer(classifier)
        self._clock = clock
        self._mode = mode
        self._state = SessionState()

        # Extra command listeners, called after the built-in handling
        self._callbacks: Dict[Command, List[Callable[[], None]]] = {}
        self._on_analysis: Optional[Callable[[AnalysisResult], None]] = None
        self._on_analysis_start: Optional[Callable[[], None]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def gesture(self) -> Gesture:
        """Gesture classified on the last tick."""
        return self._state.last_gesture

    def set_mode(self, mode: Mode):
        """Switch between drawing and erasing."""
        if not isinstance(mode, Mode):
            raise ValueError(f"Invalid mode: {mode!r}")
        if mode != self._mode:
            logger.info("Mode: %s", mode.value)
        self._mode = mode

    def register_callback(self, command: Command, callback: Callable[[], None]):
        """
        Register a listener for a gesture command.

        Args:
            command: Command that triggers the callback
            callback: Called with no arguments after the command ran
        """
        self._callbacks.setdefault(command, []).append(callback)

    def set_on_analysis(self, callback: Callable[[AnalysisResult], None]):
        """Set callback for analysis results (gesture-triggered or not)."""
        self._on_analysis = callback

    def set_on_analysis_start(self, callback: Callable[[], None]):
        """
        Set callback run right before a background analysis is submitted.
        Runs on the calling thread, before the result callback can fire.
        """
        self._on_analysis_start = callback

    def process(self, frame: Optional[HandFrame], now_ms: Optional[float] = None) -> StepResult:
        """
        Process one tick.

        Args:
            frame: Hand frame, or None for "no hand"
            now_ms: Event time; defaults to the session clock

        Returns:
            The StepResult that was applied
        """
        if now_ms is None:
            now_ms = self._clock()

        result = step(frame, self._state, self._mode, now_ms)

        apply_effects(self.canvas, result.effects)
        self._state = result.state

        for command in result.commands:
            self._fire(command)

        return result

    def _fire(self, command: Command):
        logger.debug("Command: %s", command.name)

        if command == Command.CLEAR:
            self.clear()
        elif command == Command.ANALYZE:
            self.request_analysis()

        for callback in self._callbacks.get(command, []):
            callback()

    def clear(self):
        """Clear the persistent layer."""
        self.canvas.clear()
        logger.info("Canvas cleared")

    def analyze(self) -> AnalysisResult:
        """
        Classify the current drawing, blocking.

        An empty canvas is rejected without invoking the classifier.
        """
        if self.canvas.is_empty():
            result = AnalysisResult(status=AnalysisStatus.EMPTY_CANVAS)
        else:
            result = self.analyzer.analyze(self.canvas.get_drawing())

        self._report(result)
        return result

    def request_analysis(self) -> Optional[AnalysisResult]:
        """
        Classify the current drawing without blocking the frame loop.

        Returns:
            An immediate rejection (empty, busy, unavailable), or None when
            the analysis started; the result arrives via set_on_analysis
        """
        if self.canvas.is_empty():
            result = AnalysisResult(status=AnalysisStatus.EMPTY_CANVAS)
        else:
            if self._on_analysis_start:
                self._on_analysis_start()
            result = self.analyzer.submit(self.canvas.get_drawing(), self._on_analysis)
            if result is None:
                return None

        self._report(result)
        return result

    def _report(self, result: AnalysisResult):
        if self._on_analysis:
            self._on_analysis(result)

    def stop(self):
        """
        End tracking. An in-progress stroke is discarded, not committed.
        Committed ink stays on the persistent layer.
        """
        if self._state.is_drawing and self._state.current_stroke:
            logger.debug("Discarding in-progress stroke of %d points",
                         len(self._state.current_stroke))
        self._state = SessionState()
        self.canvas.clear_interaction()

    def reset(self):
        """Drop all session state and ink."""
        self.stop()
        self.canvas.clear()
