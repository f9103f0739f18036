"""Tests for the application status line and keyboard commands."""

import pytest

pytest.importorskip("mediapipe")

from gesture_canvas.classifier import ClassificationResult, MockDrawingClassifier
from gesture_canvas.landmarks import Landmark
from gesture_canvas.strokes import Mode
from gesture_canvas.ui import GestureCanvasApp

from hands import open_hand


class InstantClassifier(MockDrawingClassifier):
    def classify(self, drawing):
        return ClassificationResult(label="heart", confidence=0.9)


RESULT_MESSAGE = "I see a heart! (Confidence: 90%)"


@pytest.fixture
def app(tmp_path):
    app = GestureCanvasApp(width=200, height=100, use_mock_classifier=True, output_dir=str(tmp_path))
    app.session.analyzer.classifier = InstantClassifier()
    return app


def _ink(app):
    app.session.canvas.commit_stroke([Landmark(0.2, 0.5), Landmark(0.8, 0.5)])


class TestAnalysisStatus:
    def test_keyboard_analysis_shows_result(self, app):
        _ink(app)

        for _ in range(200):
            assert app._handle_keyboard(ord('a'))
            app.session.analyzer.wait(5.0)
            assert app._status == RESULT_MESSAGE

    def test_gesture_analysis_shows_result(self, app):
        _ink(app)

        app.session.process(None, now_ms=100.0)
        app.session.process(open_hand(), now_ms=133.0)
        app.session.analyzer.wait(5.0)

        assert app._status == RESULT_MESSAGE

    def test_empty_canvas(self, app):
        app._handle_keyboard(ord('a'))
        assert app._status == "Please draw something first!"


class TestKeyboard:
    def test_clear(self, app):
        _ink(app)
        app._handle_keyboard(ord('c'))

        assert app.session.canvas.is_empty()
        assert app._status == "Canvas cleared."

    def test_mode_keys(self, app):
        app._handle_keyboard(ord('e'))
        assert app.session.mode == Mode.ERASE
        app._handle_keyboard(ord('d'))
        assert app.session.mode == Mode.DRAW

    def test_save(self, app, tmp_path):
        _ink(app)
        app._handle_keyboard(ord('s'))

        assert app._status.startswith("Saved drawing_")
        assert len(list(tmp_path.glob("drawing_*.png"))) == 1

    def test_quit(self, app):
        assert app._handle_keyboard(ord('q')) is False
        assert app._handle_keyboard(27) is False
