"""
Canvas Module - Layered Drawing Surface
========================================
Two transparent BGRA layers that are overlaid on the mirrored video feed:
a persistent layer holding committed ink (also the erase target) and an
interaction layer that is redrawn from scratch every tick.
"""

import cv2
import numpy as np
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union
import logging

from .landmarks import HAND_CONNECTIONS, HandFrame, Landmark
from .transform import MirrorTransform

logger = logging.getLogger(__name__)


Color = Tuple[int, int, int]


def hex_to_bgr(value: str) -> Color:
    """Convert '#RRGGBB' to an OpenCV BGR tuple."""
    value = value.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB color, got {value!r}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


# Stroke styling
STROKE_WIDTH = 8
INK_COLOR = hex_to_bgr("#56DFCF")
PREVIEW_COLOR = hex_to_bgr("#898AC4")

# Skeleton styling
SKELETON_COLOR = hex_to_bgr("#00FF00")
SKELETON_WIDTH = 5
LANDMARK_COLOR = hex_to_bgr("#FF0000")
LANDMARK_RADIUS = 4


class BlendMode(Enum):
    """How new coverage combines with existing pixels."""
    NORMAL = auto()  # source-over
    ERASE = auto()   # destination-out, subtracts alpha


class LineCap(Enum):
    ROUND = auto()
    BUTT = auto()    # ends flush with the end points
    SQUARE = auto()  # ends extended by half the width


class LineJoin(Enum):
    ROUND = auto()
    BEVEL = auto()


# Fractional bits for sub-pixel polygon and disc coordinates
_SHIFT = 4
_SCALE = 1 << _SHIFT


def _normal(direction: np.ndarray, length: float) -> np.ndarray:
    return np.array([-direction[1], direction[0]]) * length


def _fill_polygon(mask: np.ndarray, corners):
    poly = np.rint(np.asarray(corners, dtype=np.float64) * _SCALE).astype(np.int32)
    cv2.fillPoly(mask, [poly.reshape(-1, 1, 2)], 255, lineType=cv2.LINE_AA, shift=_SHIFT)


def _fill_disc(mask: np.ndarray, center: np.ndarray, radius: float):
    cx, cy = (int(round(c * _SCALE)) for c in center)
    r = max(int(round(radius * _SCALE)), _SCALE)
    cv2.circle(mask, (cx, cy), r, 255, -1, cv2.LINE_AA, _SHIFT)


class RasterLayer:
    """
    A single BGRA raster with the fixed drawing operations the core needs.

    Coordinates passed here are already in pixel space. Shapes are first
    rasterized into an anti-aliased coverage mask, then composited with
    the requested blend mode.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid layer size: {width}x{height}")
        self.width = width
        self.height = height
        self._data = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def data(self) -> np.ndarray:
        """Underlying BGRA buffer (not a copy)."""
        return self._data

    def clear(self):
        self._data[:] = 0

    def is_empty(self) -> bool:
        """True when no pixel has any alpha."""
        return not np.any(self._data[:, :, 3])

    def alpha_at(self, x: int, y: int) -> int:
        return int(self._data[y, x, 3])

    def stroke_polyline(
        self,
        points: np.ndarray,
        color: Color,
        width: int,
        blend: BlendMode = BlendMode.NORMAL,
        cap: LineCap = LineCap.ROUND,
        join: LineJoin = LineJoin.ROUND
    ):
        """
        Stroke an open polyline.

        Each segment is filled as a quad of the given width; caps are added
        at the two ends and joins at every interior vertex.

        Args:
            points: (N, 2) pixel coordinates, N >= 2
            color: BGR color
            width: Line width in pixels
            blend: Blend mode
            cap: End shape
            join: Corner shape
        """
        if len(points) < 2:
            return

        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        half = width / 2.0
        mask = self._new_mask()

        # (start, end, unit direction) of every non-degenerate segment
        segments = []
        for start, end in zip(pts[:-1], pts[1:]):
            length = float(np.hypot(*(end - start)))
            if length > 0:
                segments.append((start.copy(), end.copy(), (end - start) / length))

        for (_, vertex, d_in), (_, _, d_out) in zip(segments, segments[1:]):
            if join == LineJoin.ROUND:
                _fill_disc(mask, vertex, half)
            else:
                n_in = _normal(d_in, half)
                n_out = _normal(d_out, half)
                _fill_polygon(mask, [vertex, vertex + n_in, vertex + n_out])
                _fill_polygon(mask, [vertex, vertex - n_in, vertex - n_out])

        if cap == LineCap.ROUND:
            _fill_disc(mask, pts[0], half)
            _fill_disc(mask, pts[-1], half)
        elif cap == LineCap.SQUARE and segments:
            segments[0][0][:] -= segments[0][2] * half
            segments[-1][1][:] += segments[-1][2] * half

        for start, end, direction in segments:
            n = _normal(direction, half)
            _fill_polygon(mask, [start + n, end + n, end - n, start - n])

        self._composite(mask, color, blend)

    def fill_circle(
        self,
        center: Tuple[int, int],
        radius: int,
        color: Color = (0, 0, 0),
        blend: BlendMode = BlendMode.NORMAL
    ):
        """Fill a disc. Color is ignored for BlendMode.ERASE."""
        mask = self._new_mask()
        cv2.circle(mask, (int(center[0]), int(center[1])), int(radius), 255, -1, cv2.LINE_AA)
        self._composite(mask, color, blend)

    def draw_skeleton(
        self,
        points: np.ndarray,
        connections: Sequence[Tuple[int, int]] = HAND_CONNECTIONS,
        connection_color: Color = SKELETON_COLOR,
        connection_width: int = SKELETON_WIDTH,
        point_color: Color = LANDMARK_COLOR,
        point_radius: int = LANDMARK_RADIUS
    ):
        """
        Draw a connectivity graph over landmark pixels plus point markers.

        Args:
            points: (21, 2) int pixel coordinates
            connections: Pairs of landmark indices to join
        """
        pts = np.asarray(points, dtype=np.int32).reshape(-1, 2)

        mask = self._new_mask()
        for start, end in connections:
            p1 = (int(pts[start][0]), int(pts[start][1]))
            p2 = (int(pts[end][0]), int(pts[end][1]))
            cv2.line(mask, p1, p2, 255, connection_width, cv2.LINE_AA)
        self._composite(mask, connection_color, BlendMode.NORMAL)

        mask = self._new_mask()
        for x, y in pts:
            cv2.circle(mask, (int(x), int(y)), point_radius, 255, -1, cv2.LINE_AA)
        self._composite(mask, point_color, BlendMode.NORMAL)

    def to_rgba(self) -> np.ndarray:
        return cv2.cvtColor(self._data, cv2.COLOR_BGRA2RGBA)

    def resize(self, width: int, height: int):
        """Resize the layer, scaling existing content."""
        if width == self.width and height == self.height:
            return
        self._data = cv2.resize(self._data, (width, height), interpolation=cv2.INTER_LINEAR)
        self.width = width
        self.height = height

    def _new_mask(self) -> np.ndarray:
        return np.zeros((self.height, self.width), dtype=np.uint8)

    def _composite(self, mask: np.ndarray, color: Color, blend: BlendMode):
        touched = mask > 0
        if not touched.any():
            return

        coverage = mask[touched].astype(np.float32) / 255.0
        pixels = self._data[touched].astype(np.float32)
        dst_alpha = pixels[:, 3] / 255.0

        if blend == BlendMode.ERASE:
            pixels[:, 3] = dst_alpha * (1.0 - coverage) * 255.0
        else:
            out_alpha = coverage + dst_alpha * (1.0 - coverage)
            src = np.asarray(color, dtype=np.float32)
            keep = (dst_alpha * (1.0 - coverage))[:, None]
            rgb = (src[None, :] * coverage[:, None] + pixels[:, :3] * keep)
            pixels[:, :3] = rgb / np.maximum(out_alpha, 1e-6)[:, None]
            pixels[:, 3] = out_alpha * 255.0

        self._data[touched] = np.clip(np.rint(pixels), 0, 255).astype(np.uint8)


class LayeredCanvas:
    """
    Persistent + interaction layers sharing one mirror transform.

    All methods here take normalized landmarks; mirroring to canvas pixels
    happens in this class and nowhere else.
    """

    def __init__(self, width: int = 1280, height: int = 720):
        """
        Initialize the canvas.

        Args:
            width: Canvas width in pixels (match the video frame)
            height: Canvas height in pixels (match the video frame)
        """
        self.transform = MirrorTransform(width, height)
        self.persistent = RasterLayer(width, height)
        self.interaction = RasterLayer(width, height)

    @property
    def width(self) -> int:
        return self.transform.width

    @property
    def height(self) -> int:
        return self.transform.height

    def clear_interaction(self):
        self.interaction.clear()

    def draw_hand(self, frame: HandFrame):
        """Draw the hand skeleton on the interaction layer."""
        self.interaction.draw_skeleton(self.transform.to_int_pixels(frame.landmarks))

    def draw_preview(self, points: Sequence[Landmark]):
        """Stroke the whole in-progress polyline on the interaction layer."""
        if len(points) < 2:
            return
        self.interaction.stroke_polyline(
            self.transform.to_int_pixels(points), PREVIEW_COLOR, STROKE_WIDTH
        )

    def commit_stroke(self, points: Sequence[Landmark]):
        """Stroke a finished polyline permanently onto the persistent layer."""
        if len(points) < 2:
            return
        self.persistent.stroke_polyline(
            self.transform.to_int_pixels(points), INK_COLOR, STROKE_WIDTH, BlendMode.NORMAL
        )

    def erase_at(self, point: Landmark, radius: int):
        """Punch a transparent disc into the persistent layer."""
        x, y = self.transform.to_pixel(point)
        self.persistent.fill_circle(
            (int(round(x)), int(round(y))), radius, blend=BlendMode.ERASE
        )

    def clear(self):
        """Clear committed ink."""
        self.persistent.clear()

    def is_empty(self) -> bool:
        """True when the persistent layer has no non-transparent pixels."""
        return self.persistent.is_empty()

    def get_drawing(self) -> np.ndarray:
        """Snapshot of the persistent layer as RGBA."""
        return self.persistent.to_rgba()

    def resize(self, width: int, height: int):
        """Follow a change in video resolution."""
        if width == self.width and height == self.height:
            return
        logger.info("Canvas resized: %dx%d -> %dx%d", self.width, self.height, width, height)
        self.transform.resize(width, height)
        self.persistent.resize(width, height)
        self.interaction.resize(width, height)

    def overlay_on_frame(self, frame: np.ndarray, alpha: float = 1.0) -> np.ndarray:
        """
        Overlay both layers on a (mirrored) BGR video frame.

        Args:
            frame: BGR video frame already flipped for display
            alpha: Opacity multiplier for the layers (0-1)

        Returns:
            New frame with the drawing composited on top
        """
        if frame.shape[:2] != (self.height, self.width):
            self.resize(frame.shape[1], frame.shape[0])

        result = frame.astype(np.float32)
        for layer in (self.persistent, self.interaction):
            data = layer.data
            layer_alpha = (data[:, :, 3:4].astype(np.float32) / 255.0) * alpha
            result = result * (1.0 - layer_alpha) + data[:, :, :3].astype(np.float32) * layer_alpha

        return np.clip(result, 0, 255).astype(np.uint8)

    def save_png(self, path: Union[str, Path]) -> Optional[Path]:
        """
        Export the persistent layer as a transparent PNG.

        Returns:
            The written path, or None if encoding failed
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(path), self.persistent.data):
            logger.error("Failed to write drawing to %s", path)
            return None
        logger.info("Saved drawing: %s", path)
        return path
