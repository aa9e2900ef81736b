"""
Geometry algorithms: overlap/suppression and coordinate transforms.
"""

from .nms import iou, non_max_suppression
from .transforms import (
    SquarePadding,
    Letterbox,
    compose_to_display,
    rotated_corners,
)

__all__ = [
    "iou",
    "non_max_suppression",
    "SquarePadding",
    "Letterbox",
    "compose_to_display",
    "rotated_corners",
]
