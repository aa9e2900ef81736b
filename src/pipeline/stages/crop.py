"""
Region cropping around the selected meter detection.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from models.detection import RawDetection
from models.errors import InvalidGeometry
from models.frame import FrameData


@dataclass(frozen=True)
class Crop:
    """A sub-image of a frame and its placement in frame pixels."""
    image: np.ndarray
    left: int
    top: int
    width: int
    height: int
    channel_order: str = "bgr"


class RegionCropper:
    """Extract the detection expanded by `margin` of its size on each side."""

    def __init__(self, margin: float = 0.2):
        if margin < 0:
            raise ValueError(f"margin must be non-negative, got {margin}")
        self.margin = margin

    def crop(self, frame: FrameData, detection: RawDetection) -> Crop:
        raw = detection.raw
        raw_left, raw_top = int(raw.left), int(raw.top)
        raw_w, raw_h = int(raw.width), int(raw.height)

        mx = int(raw_w * self.margin)
        my = int(raw_h * self.margin)
        left = max(raw_left - mx, 0)
        top = max(raw_top - my, 0)
        right = min(raw_left + raw_w + mx, frame.width)
        bottom = min(raw_top + raw_h + my, frame.height)

        if right <= left or bottom <= top:
            raise InvalidGeometry(
                f"empty crop region ({left}, {top}, {right}, {bottom}) for {raw}"
            )

        return Crop(
            image=frame.frame[top:bottom, left:right].copy(),
            left=left,
            top=top,
            width=right - left,
            height=bottom - top,
            channel_order=frame.channel_order,
        )
