# Gesture Canvas - Real-time Gesture-Driven Drawing and Recognition
# Author: Gesture Canvas Team
# Version: 1.0.0

"""
Core modules for the gesture-driven drawing system:
- landmarks: Hand landmark data model
- transform: Mirrored landmark to canvas pixel mapping
- gestures: Hand pose to gesture classification
- canvas: Two-layer raster drawing surface
- strokes: Stroke/erase state machine
- actions: Debounced clear/analyze dispatcher
- session: Per-frame step and the drawing session adapter
- sketch_processor: Drawing preprocessing for recognition
- classifier: Drawing recognition backends
- hand_tracking: MediaPipe hand landmark detection
- camera: Webcam stream handler
- driver: Frame loop with cancellation
- ui: Main application interface
"""

__version__ = "1.0.0"
__author__ = "Gesture Canvas Team"
