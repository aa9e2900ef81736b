"""
Per-frame pipeline result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .detection import DisplayBox, DisplayOrientedBox


class ResultStatus(str, Enum):
    """Terminal state of one pipeline run."""
    EMPTY = "empty"        # stage A found nothing above threshold
    PARTIAL = "partial"    # meter found, no index region
    DETECTED = "detected"  # meter and index region found
    FAILED = "failed"      # an inference call raised


@dataclass(frozen=True)
class FrameResult:
    """
    Output of processing one frame.

    Both lists hold 0 or 1 element in the single-target setup.
    """
    boxes: List[DisplayBox] = field(default_factory=list)
    oriented_boxes: List[DisplayOrientedBox] = field(default_factory=list)
    status: ResultStatus = ResultStatus.EMPTY
    frame_index: int = 0
    error: Optional[str] = None

    @property
    def has_detection(self) -> bool:
        return bool(self.boxes)

    @classmethod
    def empty(cls, frame_index: int = 0) -> "FrameResult":
        return cls(frame_index=frame_index)

    @classmethod
    def failed(cls, error: str, frame_index: int = 0) -> "FrameResult":
        return cls(status=ResultStatus.FAILED, frame_index=frame_index, error=error)
