"""
Sketch Processor Module - Prepare Drawing for Recognition
==========================================================
Crops the drawing to its content, fits it into a square on black and
converts it to the formats the recognition backends expect.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
from PIL import Image
import io


class SketchProcessor:
    """
    Turns an RGBA drawing into a fixed-size, centered RGB image.

    Pixels count as content when they have any alpha and at least one
    color channel above COLOR_THRESHOLD.
    """

    COLOR_THRESHOLD = 10

    def __init__(self, target_size: int = 192):
        """
        Initialize the sketch processor.

        Args:
            target_size: Side length of the square output image
        """
        self.target_size = target_size

    def content_mask(self, drawing: np.ndarray) -> np.ndarray:
        """Boolean mask of content pixels in an RGBA drawing."""
        alpha = drawing[:, :, 3]
        colored = drawing[:, :, :3].max(axis=2) > self.COLOR_THRESHOLD
        return (alpha > 0) & colored

    def find_content_bbox(self, drawing: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
        """
        Bounding box of the drawing content.

        Returns:
            (x, y, w, h) in pixels, or None for an empty drawing
        """
        mask = self.content_mask(drawing).astype(np.uint8)
        coords = cv2.findNonZero(mask)
        if coords is None:
            return None
        x, y, w, h = cv2.boundingRect(coords)
        return (int(x), int(y), int(w), int(h))

    def process(self, drawing: np.ndarray) -> np.ndarray:
        """
        Crop, resize and pad a drawing.

        Args:
            drawing: RGBA image (persistent layer snapshot)

        Returns:
            (target_size, target_size, 3) uint8 RGB image, content centered
            on black with its aspect ratio preserved
        """
        size = self.target_size
        output = np.zeros((size, size, 3), dtype=np.uint8)

        bbox = self.find_content_bbox(drawing)
        if bbox is None:
            return output

        x, y, w, h = bbox

        # Flatten onto black before cropping
        alpha = drawing[:, :, 3:4].astype(np.float32) / 255.0
        flat = (drawing[:, :, :3].astype(np.float32) * alpha).astype(np.uint8)
        cropped = flat[y:y + h, x:x + w]

        if w > h:
            new_w = size
            new_h = max(int(size * (h / w)), 1)
        else:
            new_h = size
            new_w = max(int(size * (w / h)), 1)

        resized = cv2.resize(cropped, (new_w, new_h), interpolation=cv2.INTER_AREA)

        top = (size - new_h) // 2
        left = (size - new_w) // 2
        output[top:top + new_h, left:left + new_w] = resized

        return output

    def to_pil(self, drawing: np.ndarray) -> Image.Image:
        """Processed drawing as a PIL RGB image."""
        return Image.fromarray(self.process(drawing)).convert('RGB')

    def to_png_bytes(self, drawing: np.ndarray) -> bytes:
        """Processed drawing encoded as PNG."""
        buffer = io.BytesIO()
        self.to_pil(drawing).save(buffer, format='PNG')
        return buffer.getvalue()

    def analyze_sketch(self, drawing: np.ndarray) -> dict:
        """
        Simple shape statistics of the drawing content.

        Returns:
            Dict with density, aspect_ratio and num_shapes
        """
        mask = self.content_mask(drawing).astype(np.uint8) * 255
        bbox = self.find_content_bbox(drawing)
        if bbox is None:
            return {'density': 0.0, 'aspect_ratio': 0.0, 'num_shapes': 0}

        x, y, w, h = bbox
        density = float(np.count_nonzero(mask[y:y + h, x:x + w])) / float(w * h)

        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        return {
            'density': density,
            'aspect_ratio': w / h,
            'num_shapes': len(contours),
        }
