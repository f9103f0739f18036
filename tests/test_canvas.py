"""Tests for the raster layers and the layered canvas."""

import cv2
import numpy as np
import pytest

from gesture_canvas.canvas import (
    INK_COLOR,
    BlendMode,
    LayeredCanvas,
    LineCap,
    LineJoin,
    RasterLayer,
    hex_to_bgr,
)
from gesture_canvas.landmarks import Landmark

from hands import pointing_hand


class TestHexToBgr:
    def test_converts(self):
        assert hex_to_bgr("#56DFCF") == (0xCF, 0xDF, 0x56)
        assert hex_to_bgr("FF0000") == (0, 0, 255)

    def test_rejects_bad_input(self):
        with pytest.raises(ValueError):
            hex_to_bgr("#FFF")


class TestRasterLayer:
    def test_new_layer_is_empty(self):
        layer = RasterLayer(100, 50)
        assert layer.is_empty()
        assert layer.data.shape == (50, 100, 4)

    def test_stroke_polyline(self):
        layer = RasterLayer(100, 50)
        layer.stroke_polyline(np.array([[10, 25], [90, 25]]), (1, 2, 3), 8)

        assert not layer.is_empty()
        assert layer.data[25, 50].tolist() == [1, 2, 3, 255]
        assert layer.alpha_at(50, 40) == 0

    def test_round_caps(self):
        layer = RasterLayer(100, 50)
        layer.stroke_polyline(np.array([[10, 25], [90, 25]]), (255, 255, 255), 8)

        # Inside the cap disc beyond the last vertex
        assert layer.alpha_at(93, 25) > 0
        assert layer.alpha_at(97, 25) == 0

    def test_butt_and_square_caps(self):
        line = np.array([[10, 25], [90, 25]])
        butt = RasterLayer(100, 50)
        butt.stroke_polyline(line, (255, 255, 255), 8, cap=LineCap.BUTT)
        square = RasterLayer(100, 50)
        square.stroke_polyline(line, (255, 255, 255), 8, cap=LineCap.SQUARE)

        assert butt.alpha_at(50, 25) == 255
        assert butt.alpha_at(93, 25) == 0
        assert butt.alpha_at(7, 25) == 0

        # Square caps reach half the width past each end
        assert square.alpha_at(92, 25) == 255
        assert square.alpha_at(8, 25) == 255
        assert square.alpha_at(97, 25) == 0

    def test_round_vs_bevel_join(self):
        corner = np.array([[10, 20], [60, 20], [60, 70]])
        rounded = RasterLayer(100, 100)
        rounded.stroke_polyline(corner, (255, 255, 255), 20, cap=LineCap.BUTT)
        bevel = RasterLayer(100, 100)
        bevel.stroke_polyline(corner, (255, 255, 255), 20, cap=LineCap.BUTT, join=LineJoin.BEVEL)

        # Outer corner of the bend
        assert rounded.alpha_at(66, 14) > bevel.alpha_at(66, 14)
        assert bevel.alpha_at(68, 12) == 0
        assert bevel.alpha_at(62, 18) == 255
        # Both cover the segments themselves
        for layer in (rounded, bevel):
            assert layer.alpha_at(35, 20) == 255
            assert layer.alpha_at(60, 45) == 255

    def test_repeated_points_are_skipped(self):
        layer = RasterLayer(100, 50)
        layer.stroke_polyline(
            np.array([[10, 25], [10, 25], [50, 25], [50, 25], [90, 25]]), (1, 2, 3), 8
        )
        assert layer.data[25, 30].tolist() == [1, 2, 3, 255]
        assert layer.data[25, 70].tolist() == [1, 2, 3, 255]

    def test_single_point_draws_nothing(self):
        layer = RasterLayer(100, 50)
        layer.stroke_polyline(np.array([[10, 25]]), (255, 255, 255), 8)
        assert layer.is_empty()

    def test_erase_clears_alpha(self):
        layer = RasterLayer(100, 50)
        layer.stroke_polyline(np.array([[10, 25], [90, 25]]), (255, 255, 255), 8)

        layer.fill_circle((50, 25), 10, blend=BlendMode.ERASE)

        assert layer.alpha_at(50, 25) == 0
        assert layer.alpha_at(20, 25) == 255

    def test_erase_on_empty_layer_is_noop(self):
        layer = RasterLayer(100, 50)
        layer.fill_circle((50, 25), 10, blend=BlendMode.ERASE)
        assert layer.is_empty()

    def test_normal_blend_paints_over(self):
        layer = RasterLayer(100, 50)
        layer.fill_circle((50, 25), 10, (0, 0, 255))
        layer.fill_circle((50, 25), 10, (255, 0, 0))
        assert layer.data[25, 50].tolist() == [255, 0, 0, 255]

    def test_to_rgba_swaps_channels(self):
        layer = RasterLayer(20, 20)
        layer.fill_circle((10, 10), 5, (255, 0, 0))
        assert layer.to_rgba()[10, 10].tolist() == [0, 0, 255, 255]

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            RasterLayer(0, 10)


class TestLayeredCanvas:
    def test_commit_stroke_is_mirrored(self):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.3, 0.5)])

        # x=0.1..0.3 lands at pixels 180..140 on a mirrored canvas
        assert canvas.persistent.alpha_at(160, 50) == 255
        assert canvas.persistent.alpha_at(40, 50) == 0
        assert canvas.persistent.data[50, 160, :3].tolist() == list(INK_COLOR)
        assert canvas.interaction.is_empty()

    def test_preview_goes_to_interaction_layer(self):
        canvas = LayeredCanvas(200, 100)
        canvas.draw_preview([Landmark(0.1, 0.5), Landmark(0.3, 0.5)])

        assert canvas.is_empty()
        assert not canvas.interaction.is_empty()

        canvas.clear_interaction()
        assert canvas.interaction.is_empty()

    def test_draw_hand(self):
        canvas = LayeredCanvas(200, 100)
        canvas.draw_hand(pointing_hand(0.5, 0.3))

        assert not canvas.interaction.is_empty()
        assert canvas.is_empty()

    def test_erase_at(self):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.9, 0.5)])

        canvas.erase_at(Landmark(0.5, 0.5), 25)

        assert canvas.persistent.alpha_at(100, 50) == 0
        assert canvas.persistent.alpha_at(40, 50) == 255

    def test_clear(self):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.9, 0.5)])
        assert not canvas.is_empty()

        canvas.clear()
        assert canvas.is_empty()

    def test_get_drawing_is_rgba_copy(self):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.9, 0.5)])

        drawing = canvas.get_drawing()
        assert drawing.shape == (100, 200, 4)
        r, g, b, a = drawing[50, 100].tolist()
        assert (b, g, r) == INK_COLOR
        assert a == 255

        drawing[:] = 0
        assert not canvas.is_empty()

    def test_overlay_on_frame(self):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.9, 0.5)])
        frame = np.full((100, 200, 3), 40, dtype=np.uint8)

        result = canvas.overlay_on_frame(frame)

        assert result.shape == frame.shape
        assert result[50, 100].tolist() == list(INK_COLOR)
        assert result[5, 5].tolist() == [40, 40, 40]
        # Input frame untouched
        assert frame[50, 100].tolist() == [40, 40, 40]

    def test_overlay_follows_frame_size(self):
        canvas = LayeredCanvas(200, 100)
        frame = np.zeros((240, 320, 3), dtype=np.uint8)

        result = canvas.overlay_on_frame(frame)

        assert result.shape == (240, 320, 3)
        assert (canvas.width, canvas.height) == (320, 240)
        assert canvas.persistent.data.shape == (240, 320, 4)

    def test_save_png(self, tmp_path):
        canvas = LayeredCanvas(200, 100)
        canvas.commit_stroke([Landmark(0.1, 0.5), Landmark(0.9, 0.5)])

        path = canvas.save_png(tmp_path / "out" / "drawing.png")

        assert path is not None and path.exists()
        saved = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        assert saved.shape == (100, 200, 4)
        assert saved[50, 100, 3] == 255
        assert saved[5, 5, 3] == 0
