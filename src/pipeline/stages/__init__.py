from .normalize import FrameNormalizer, NormalizedFrame
from .detect import DetectionSelector
from .crop import Crop, RegionCropper
from .orient import OrientedBoxSelector
from .compose import CoordinateComposer

__all__ = [
    "FrameNormalizer",
    "NormalizedFrame",
    "DetectionSelector",
    "Crop",
    "RegionCropper",
    "OrientedBoxSelector",
    "CoordinateComposer",
]
