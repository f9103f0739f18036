"""
Transform Module - Landmark to Canvas Mapping
==============================================
The camera preview is shown mirrored, so everything drawn from landmarks
is flipped horizontally before it reaches the canvas. Every drawing
operation goes through MirrorTransform so ink stays under the fingertip.
"""

import numpy as np
from typing import Sequence, Tuple

from .landmarks import Landmark, landmarks_to_array


class MirrorTransform:
    """
    Maps normalized landmark coordinates to mirrored canvas pixels.

        pixel_x = width - x * width
        pixel_y = y * height
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        self.width = width
        self.height = height

    def to_pixel(self, point: Landmark) -> Tuple[float, float]:
        """Map a single landmark to (pixel_x, pixel_y)."""
        return (
            self.width - point.x * self.width,
            point.y * self.height,
        )

    def to_pixels(self, points: Sequence[Landmark]) -> np.ndarray:
        """Map landmarks to an (N, 2) float array of pixel coordinates."""
        coords = landmarks_to_array(points)
        coords[:, 0] = self.width - coords[:, 0] * self.width
        coords[:, 1] = coords[:, 1] * self.height
        return coords

    def to_int_pixels(self, points: Sequence[Landmark]) -> np.ndarray:
        """Pixel coordinates rounded to the int32 grid OpenCV draws on."""
        return np.rint(self.to_pixels(points)).astype(np.int32)

    def resize(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid canvas size: {width}x{height}")
        self.width = width
        self.height = height
