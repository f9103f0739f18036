"""
UI Module - Main Application Interface
======================================
Real-time gesture drawing window with drawing recognition.
Combines camera, hand tracking, the drawing session and the classifier.
"""

import cv2
import numpy as np
from typing import Optional
import argparse
import logging
import os
from pathlib import Path
from datetime import datetime

from dotenv import find_dotenv, load_dotenv

from .actions import Command
from .camera import Camera
from .classifier import AnalysisResult, create_classifier
from .driver import FrameDriver
from .gestures import draw_gesture_ui
from .hand_tracking import HandTracker
from .session import DrawingSession, StepResult
from .strokes import Mode

logger = logging.getLogger(__name__)


class GestureCanvasApp:
    """
    Main application class for gesture drawing with recognition.

    The video is shown mirrored; the drawing layers are composited on top
    of the mirrored preview.
    """

    WINDOW_NAME = "Gesture Canvas"

    MAIN_WIDTH = 1280
    MAIN_HEIGHT = 720

    # UI Colors (BGR)
    UI_BG_COLOR = (30, 30, 30)
    UI_ACCENT_COLOR = (0, 200, 255)
    UI_ERROR_COLOR = (0, 0, 255)

    def __init__(
        self,
        camera_id: int = 0,
        width: int = MAIN_WIDTH,
        height: int = MAIN_HEIGHT,
        use_mock_classifier: bool = False,
        mode: Mode = Mode.DRAW,
        output_dir: str = "output"
    ):
        """
        Initialize the application.

        Args:
            camera_id: Camera device index
            width: Requested capture width
            height: Requested capture height
            use_mock_classifier: Use the offline classifier
            mode: Initial drawing mode
            output_dir: Where saved drawings go
        """
        self.camera = Camera(camera_id=camera_id, width=width, height=height, fps=30)
        self.hand_tracker: Optional[HandTracker] = None

        self.session = DrawingSession(
            width=width,
            height=height,
            classifier=create_classifier(use_mock=use_mock_classifier),
            mode=mode
        )
        self.session.set_on_analysis(self._on_analysis)
        self.session.register_callback(Command.CLEAR, self._on_clear)
        self.session.set_on_analysis_start(self._on_analysis_start)

        self._status = "Draw something and open your hand to analyze!"
        if not self.session.analyzer.available:
            self._status = self._unavailable_message()

        self._save_dir = Path(output_dir)
        self._driver: Optional[FrameDriver] = None

    def _unavailable_message(self) -> str:
        classifier = self.session.analyzer.classifier
        error = classifier.error if classifier is not None else "no classifier"
        return f"Error: Could not load the AI model ({error}). Drawing still works."

    def _on_clear(self):
        self._status = "Canvas cleared."

    def _on_analysis_start(self):
        self._status = "Analyzing..."

    def _on_analysis(self, result: AnalysisResult):
        """Called with every analysis outcome, possibly from a worker thread."""
        self._status = result.message

    def _save_drawing(self):
        """Save the committed drawing to disk."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self.session.canvas.save_png(self._save_dir / f"drawing_{timestamp}.png")
        self._status = f"Saved {path.name}" if path else "Error: could not save drawing"

    def _draw_ui(self, frame: np.ndarray, result: StepResult) -> np.ndarray:
        """Draw status bar and gesture box on the display frame."""
        h, w = frame.shape[:2]

        frame = draw_gesture_ui(frame, result.gesture, self.session.mode.value)

        cv2.rectangle(frame, (0, 0), (w, 50), self.UI_BG_COLOR, -1)
        status_color = self.UI_ERROR_COLOR if self._status.startswith("Error") else self.UI_ACCENT_COLOR
        cv2.putText(
            frame, self._status,
            (10, 35), cv2.FONT_HERSHEY_SIMPLEX, 0.7,
            status_color, 2
        )

        instructions = [
            "[D] Draw | [E] Erase",
            "[C] Clear | [A] Analyze",
            "[S] Save | [Q] Quit",
        ]
        y_pos = h - 70
        for inst in instructions:
            cv2.putText(
                frame, inst,
                (w - 230, y_pos), cv2.FONT_HERSHEY_SIMPLEX, 0.5,
                (150, 150, 150), 1
            )
            y_pos += 20

        return frame

    def _handle_keyboard(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key == ord('q') or key == 27:  # Q or Escape
            return False

        elif key == ord('d'):
            self.session.set_mode(Mode.DRAW)

        elif key == ord('e'):
            self.session.set_mode(Mode.ERASE)

        elif key == ord('c'):
            self.session.clear()
            self._status = "Canvas cleared."

        elif key == ord('a'):
            self.session.request_analysis()

        elif key == ord('s'):
            self._save_drawing()

        return True

    def _render(self, frame: np.ndarray, result: StepResult) -> bool:
        """Show one processed frame; returns False to stop the loop."""
        display = cv2.flip(frame, 1)
        display = self.session.canvas.overlay_on_frame(display)
        display = self._draw_ui(display, result)

        cv2.imshow(self.WINDOW_NAME, display)

        key = cv2.waitKey(1) & 0xFF
        return self._handle_keyboard(key)

    def run(self):
        """Run the main application loop."""
        print("\n" + "=" * 60)
        print("  Gesture Canvas - Draw in the air, let the model guess")
        print("=" * 60)
        print("\nGestures:")
        print("  Index finger up  -> Draw (or erase in erase mode)")
        print("  Closed fist      -> Clear canvas")
        print("  Open hand        -> Analyze drawing")
        print("\nKeyboard:")
        print("  [D] Draw mode | [E] Erase mode")
        print("  [C] Clear     | [A] Analyze")
        print("  [S] Save drawing | [Q] Quit")
        print("\n" + "=" * 60)

        if not self.camera.start():
            logger.error("Failed to start camera!")
            return

        try:
            self.hand_tracker = HandTracker()

            cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(self.WINDOW_NAME, self.camera.width, self.camera.height)

            self._driver = FrameDriver(
                self.camera, self.hand_tracker, self.session, on_tick=self._render
            )
            self._driver.run()

        finally:
            self.camera.stop()
            if self.hand_tracker is not None:
                self.hand_tracker.release()
            cv2.destroyAllWindows()
            logger.info("Application closed")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Gesture Canvas - Draw with gestures, recognize with AI")
    parser.add_argument('--camera', type=int, default=0, help='Camera device index')
    parser.add_argument('--width', type=int, default=GestureCanvasApp.MAIN_WIDTH, help='Capture width')
    parser.add_argument('--height', type=int, default=GestureCanvasApp.MAIN_HEIGHT, help='Capture height')
    parser.add_argument('--mock', action='store_true', help='Use mock classifier (no API needed)')
    parser.add_argument('--mode', choices=[m.value for m in Mode], default=Mode.DRAW.value,
                        help='Initial drawing mode')
    parser.add_argument('--output', default='output', help='Directory for saved drawings')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')

    args = parser.parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    # Support both HF_TOKEN and HF_API_KEY
    api_key = os.environ.get('HF_TOKEN') or os.environ.get('HF_API_KEY')
    if not args.mock and not api_key:
        logger.info("HF_TOKEN not set. Using mock classifier.")
        logger.info("For real recognition, set HF_TOKEN in your .env file")
        args.mock = True

    app = GestureCanvasApp(
        camera_id=args.camera,
        width=args.width,
        height=args.height,
        use_mock_classifier=args.mock,
        mode=Mode(args.mode),
        output_dir=args.output
    )
    app.run()


if __name__ == "__main__":
    main()
