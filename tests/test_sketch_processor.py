"""Tests for drawing preprocessing."""

import numpy as np
import pytest

from gesture_canvas.sketch_processor import SketchProcessor


def _drawing(width=200, height=100):
    return np.zeros((height, width, 4), dtype=np.uint8)


def _with_block(x, y, w, h, color=(86, 223, 207)):
    drawing = _drawing()
    drawing[y:y + h, x:x + w, :3] = color
    drawing[y:y + h, x:x + w, 3] = 255
    return drawing


class TestContentBbox:
    def test_empty(self):
        processor = SketchProcessor()
        assert processor.find_content_bbox(_drawing()) is None

    def test_block(self):
        processor = SketchProcessor()
        assert processor.find_content_bbox(_with_block(20, 10, 40, 20)) == (20, 10, 40, 20)

    def test_dark_pixels_are_not_content(self):
        processor = SketchProcessor()
        drawing = _with_block(20, 10, 40, 20)
        # Opaque but nearly black
        drawing[80:90, 150:160, :3] = 5
        drawing[80:90, 150:160, 3] = 255

        assert processor.find_content_bbox(drawing) == (20, 10, 40, 20)


class TestProcess:
    def test_empty_drawing_is_black(self):
        processor = SketchProcessor()
        output = processor.process(_drawing())

        assert output.shape == (192, 192, 3)
        assert output.dtype == np.uint8
        assert not output.any()

    def test_wide_content_is_centered_vertically(self):
        processor = SketchProcessor()
        output = processor.process(_with_block(20, 10, 40, 20))

        # 40x20 scales to 192x96, padded 48 rows top and bottom
        assert output[96, 96].tolist() == [86, 223, 207]
        assert output[50, 5].any()
        assert not output[10].any()
        assert not output[180].any()

    def test_tall_content_is_centered_horizontally(self):
        processor = SketchProcessor(target_size=64)
        output = processor.process(_with_block(20, 10, 10, 40))

        # 10x40 scales to 16x64
        assert output.shape == (64, 64, 3)
        assert output[32, 32].any()
        assert not output[:, :20].any()
        assert not output[:, 44:].any()

    def test_transparent_ink_is_flattened_on_black(self):
        processor = SketchProcessor(target_size=8)
        drawing = _with_block(0, 0, 200, 100, color=(200, 200, 200))
        drawing[:, :, 3] = 128

        output = processor.process(drawing)

        assert output[4, 4].tolist() == pytest.approx([100, 100, 100], abs=1)


class TestConversions:
    def test_to_pil(self):
        image = SketchProcessor().to_pil(_with_block(20, 10, 40, 20))
        assert image.mode == 'RGB'
        assert image.size == (192, 192)

    def test_to_png_bytes(self):
        data = SketchProcessor().to_png_bytes(_with_block(20, 10, 40, 20))
        assert data.startswith(b'\x89PNG')


class TestAnalyzeSketch:
    def test_empty(self):
        stats = SketchProcessor().analyze_sketch(_drawing())
        assert stats == {'density': 0.0, 'aspect_ratio': 0.0, 'num_shapes': 0}

    def test_solid_block(self):
        stats = SketchProcessor().analyze_sketch(_with_block(20, 10, 40, 20))

        assert stats['density'] == pytest.approx(1.0)
        assert stats['aspect_ratio'] == pytest.approx(2.0)
        assert stats['num_shapes'] == 1

    def test_separate_shapes(self):
        drawing = _with_block(10, 10, 10, 10)
        drawing[50:60, 100:110, :3] = 255
        drawing[50:60, 100:110, 3] = 255

        stats = SketchProcessor().analyze_sketch(drawing)

        assert stats['num_shapes'] == 2
        assert stats['density'] < 0.5
