"""
Detection models for the two-stage meter pipeline.

Boxes are stored as (left, top, width, height). Raw-frame boxes are in
original frame pixels, display boxes are in the viewport coordinate space
after letterbox fitting, and oriented boxes carry a rotation in degrees
applied about the box center.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Box:
    """
    An axis-aligned box.

    Attributes:
        left: Left edge x coordinate.
        top: Top edge y coordinate.
        width: Box width.
        height: Box height.
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (left, top, width, height) tuple."""
        return (int(self.left), int(self.top), int(self.width), int(self.height))

    @classmethod
    def from_center(cls, cx: float, cy: float, w: float, h: float) -> "Box":
        """Create from (cx, cy, width, height) format."""
        return cls(left=cx - w / 2, top=cy - h / 2, width=w, height=h)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "Box":
        return cls(left=x1, top=y1, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class DisplayBox(Box):
    """A stage-A box in display space, with its confidence score."""
    score: float = 0.0


@dataclass(frozen=True)
class RawDetection:
    """
    The selected stage-A detection.

    Carries the box in original frame pixels (`raw`) and the same box
    projected into display space (`display`). The display box is also the
    clamp/scale reference for the stage-B result.
    """
    raw: Box
    display: DisplayBox

    @property
    def score(self) -> float:
        return self.display.score


@dataclass(frozen=True)
class OrientedBox:
    """
    A rotated rectangle: axis-aligned envelope plus rotation.

    angle is in degrees, applied about the box center.
    """
    left: float
    top: float
    width: float
    height: float
    angle: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def corners(self) -> List[Tuple[float, float]]:
        """Four rotated corner points, clockwise from the top-left."""
        from algorithms.transforms import rotated_corners

        return rotated_corners(self)


@dataclass(frozen=True)
class DisplayOrientedBox(OrientedBox):
    """An oriented box expressed in display space."""
