"""Tests for the landmark data model and the mirror transform."""

from types import SimpleNamespace

import numpy as np
import pytest

from gesture_canvas.landmarks import (
    HAND_CONNECTIONS,
    NUM_LANDMARKS,
    HandFrame,
    HandLandmark,
    Landmark,
    landmarks_to_array,
)
from gesture_canvas.transform import MirrorTransform


class TestHandFrame:
    def test_from_pairs(self):
        points = [(i / 20.0, 1.0 - i / 20.0) for i in range(NUM_LANDMARKS)]
        frame = HandFrame.from_points(points)

        assert frame is not None
        assert len(frame) == 21
        assert frame[HandLandmark.INDEX_TIP] == Landmark(8 / 20.0, 1.0 - 8 / 20.0)
        assert frame.index_tip == frame[8]

    def test_from_objects_with_xy(self):
        # Shape of a MediaPipe NormalizedLandmark
        points = [SimpleNamespace(x=0.5, y=0.25, z=0.0) for _ in range(21)]
        frame = HandFrame.from_points(points)

        assert frame is not None
        assert frame[0] == Landmark(0.5, 0.25)

    def test_wrong_count_is_no_hand(self):
        assert HandFrame.from_points([(0.5, 0.5)] * 20) is None
        assert HandFrame.from_points([(0.5, 0.5)] * 22) is None
        assert HandFrame.from_points([]) is None

    def test_none_is_no_hand(self):
        assert HandFrame.from_points(None) is None

    def test_constructor_validates_count(self):
        with pytest.raises(ValueError):
            HandFrame(tuple(Landmark(0.5, 0.5) for _ in range(5)))

    def test_connections_reference_valid_indices(self):
        assert len(HAND_CONNECTIONS) == 21
        for start, end in HAND_CONNECTIONS:
            assert 0 <= start < NUM_LANDMARKS
            assert 0 <= end < NUM_LANDMARKS

    def test_landmarks_to_array(self):
        arr = landmarks_to_array([Landmark(0.1, 0.2), Landmark(0.3, 0.4)])
        assert arr.shape == (2, 2)
        np.testing.assert_allclose(arr, [[0.1, 0.2], [0.3, 0.4]])


class TestMirrorTransform:
    def test_mirrors_x(self):
        transform = MirrorTransform(640, 480)

        assert transform.to_pixel(Landmark(0.0, 0.0)) == (640.0, 0.0)
        assert transform.to_pixel(Landmark(1.0, 1.0)) == (0.0, 480.0)
        assert transform.to_pixel(Landmark(0.25, 0.5)) == (480.0, 240.0)

    def test_to_pixels_matches_single_points(self):
        transform = MirrorTransform(200, 100)
        points = [Landmark(0.1, 0.9), Landmark(0.75, 0.3)]

        coords = transform.to_pixels(points)
        for row, point in zip(coords, points):
            assert tuple(row) == pytest.approx(transform.to_pixel(point))

    def test_int_pixels_are_rounded(self):
        transform = MirrorTransform(200, 100)
        coords = transform.to_int_pixels([Landmark(0.3333, 0.5049)])

        assert coords.dtype == np.int32
        assert coords.tolist() == [[133, 50]]

    def test_resize(self):
        transform = MirrorTransform(200, 100)
        transform.resize(400, 300)
        assert transform.to_pixel(Landmark(0.5, 0.5)) == (200.0, 150.0)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            MirrorTransform(0, 100)
        with pytest.raises(ValueError):
            MirrorTransform(100, 100).resize(100, -1)
