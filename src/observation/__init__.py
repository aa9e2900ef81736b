"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (camera, video file, stream)
from the detection pipeline. Each source returns FrameData objects.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig, apply_transforms, describe_device

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "apply_transforms",
    "describe_device",
]
