"""
Coordinate transforms between the pipeline's coordinate frames.

Frames, in the order a stage-A box travels through them:
- square tensor space: the frame centered on a max(W, H) square canvas
- raw frame space: original frame pixels
- display space: the viewport, frame fitted with a uniform letterbox scale
- crop space: pixels of the margin-padded crop passed to stage B
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from models.detection import Box, DisplayBox, DisplayOrientedBox, OrientedBox, RawDetection
from models.errors import InvalidGeometry


@dataclass(frozen=True)
class SquarePadding:
    """
    Placement of a W x H frame centered on a square canvas.

    pad_x / pad_y may be fractional when the size difference is odd.
    """
    square: int
    pad_x: float
    pad_y: float

    @classmethod
    def for_size(cls, width: int, height: int) -> "SquarePadding":
        square = max(width, height)
        return cls(square=square, pad_x=(square - width) / 2, pad_y=(square - height) / 2)

    def to_frame(
        self,
        cx: float,
        cy: float,
        w: float,
        h: float,
        frame_width: int,
        frame_height: int,
    ) -> Box:
        """
        Map a normalized center box on the square canvas to frame pixels.

        The top-left corner is clamped at 0 and the extent is cut at the
        frame's right/bottom edge, so the result may have non-positive size
        when the box lies entirely in the padding.
        """
        cx_px = cx * self.square
        cy_px = cy * self.square
        w_px = w * self.square
        h_px = h * self.square

        left = max(cx_px - self.pad_x - w_px / 2, 0.0)
        top = max(cy_px - self.pad_y - h_px / 2, 0.0)
        width = min(w_px, frame_width - left)
        height = min(h_px, frame_height - top)
        return Box(left=left, top=top, width=width, height=height)


@dataclass(frozen=True)
class Letterbox:
    """
    Fit-to-view mapping from frame pixels to display space.

    A single scale is used for both axes; the leftover space is split
    evenly as offsets.
    """
    scale: float
    off_x: float
    off_y: float

    @classmethod
    def fit(cls, frame_width: int, frame_height: int, view_width: int, view_height: int) -> "Letterbox":
        if frame_width <= 0 or frame_height <= 0:
            raise ValueError(f"Invalid frame size: {frame_width}x{frame_height}")
        scale = min(view_width / frame_width, view_height / frame_height)
        return cls(
            scale=scale,
            off_x=(view_width - frame_width * scale) / 2,
            off_y=(view_height - frame_height * scale) / 2,
        )

    def to_display(self, box: Box, score: float = 0.0) -> DisplayBox:
        return DisplayBox(
            left=self.off_x + box.left * self.scale,
            top=self.off_y + box.top * self.scale,
            width=box.width * self.scale,
            height=box.height * self.scale,
            score=score,
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def compose_to_display(
    box: OrientedBox,
    detection: RawDetection,
) -> DisplayOrientedBox:
    """
    Re-express a crop-space oriented box inside the parent display box.

    Scale factors come from the unmargined raw detection size, not the crop
    size. The result is clamped so its envelope stays inside the parent
    display box; an envelope larger than the parent is first cut to the
    parent's size.

    Args:
        box: Oriented box in crop pixels.
        detection: Selected stage-A detection (raw + display boxes).

    Raises:
        InvalidGeometry: If the reference or the result has no extent.
    """
    parent = detection.display
    raw_w, raw_h = detection.raw.width, detection.raw.height
    if raw_w <= 0 or raw_h <= 0:
        raise InvalidGeometry(f"raw detection has no extent: {raw_w}x{raw_h}")

    scale_x = parent.width / raw_w
    scale_y = parent.height / raw_h

    width = min(box.width * scale_x, parent.width)
    height = min(box.height * scale_y, parent.height)
    if width <= 0 or height <= 0:
        raise InvalidGeometry(f"composed box has no extent: {width}x{height}")

    left = _clamp(parent.left + box.left * scale_x, parent.left, parent.right - width)
    top = _clamp(parent.top + box.top * scale_y, parent.top, parent.bottom - height)

    return DisplayOrientedBox(left=left, top=top, width=width, height=height, angle=box.angle)


def rotated_corners(box: OrientedBox) -> List[Tuple[float, float]]:
    """
    Corner points of an oriented box, rotated about its center.

    Order: top-left, top-right, bottom-right, bottom-left of the unrotated
    envelope. Each half-extent offset (dx, dy) maps to
    (cx + dx*cos - dy*sin, cy + dx*sin + dy*cos).
    """
    cx, cy = box.center
    hw = box.width / 2
    hh = box.height / 2
    rad = math.radians(box.angle)
    c = math.cos(rad)
    s = math.sin(rad)

    corners = []
    for dx, dy in ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)):
        corners.append((cx + dx * c - dy * s, cy + dx * s + dy * c))
    return corners
