"""
Coordinate composition: crop-space oriented box to display space.
"""

from __future__ import annotations

from typing import List, Tuple

from algorithms.transforms import compose_to_display, rotated_corners
from models.detection import DisplayOrientedBox, OrientedBox, RawDetection


class CoordinateComposer:
    """
    Places the stage-B box inside the stage-A display box.

    Scale is taken from the unmargined raw detection; the envelope is
    clamped into the parent display box. Corners are clamped only through
    that envelope, so a rotated polygon may still poke out of the parent.
    """

    def compose(self, box: OrientedBox, detection: RawDetection) -> DisplayOrientedBox:
        return compose_to_display(box, detection)

    @staticmethod
    def corners(box: OrientedBox) -> List[Tuple[float, float]]:
        """Polygon for renderers that cannot draw box + angle directly."""
        return rotated_corners(box)
