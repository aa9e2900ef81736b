"""
Typed models for the meter vision pipeline.

All detection and result models are frozen value objects created and
discarded within the processing of a single frame.
"""

from .frame import FrameData
from .detection import Box, DisplayBox, RawDetection, OrientedBox, DisplayOrientedBox
from .result import FrameResult, ResultStatus
from .config import (
    Config,
    CameraConfig,
    StageConfig,
    SelectionConfig,
    PreprocessConfig,
    DisplayConfig,
    SchedulerConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Box",
    "DisplayBox",
    "RawDetection",
    "OrientedBox",
    "DisplayOrientedBox",
    # Result
    "FrameResult",
    "ResultStatus",
    # Config
    "Config",
    "CameraConfig",
    "StageConfig",
    "SelectionConfig",
    "PreprocessConfig",
    "DisplayConfig",
    "SchedulerConfig",
]
