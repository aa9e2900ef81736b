from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from models.detection import DisplayBox, DisplayOrientedBox
from models.result import FrameResult


class DisplayBoxModel(BaseModel):
    left: float
    top: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    score: float = Field(..., ge=0, le=1)

    @classmethod
    def from_box(cls, box: DisplayBox) -> "DisplayBoxModel":
        return cls(left=box.left, top=box.top, width=box.width, height=box.height, score=box.score)


class DisplayOrientedBoxModel(BaseModel):
    left: float
    top: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    angle: float = Field(..., description="Rotation in degrees about the box center")
    corners: List[Tuple[float, float]] = Field(
        default_factory=list, description="Rotated corners, clockwise from top-left"
    )

    @classmethod
    def from_box(cls, box: DisplayOrientedBox) -> "DisplayOrientedBoxModel":
        return cls(
            left=box.left,
            top=box.top,
            width=box.width,
            height=box.height,
            angle=box.angle,
            corners=box.corners(),
        )


class FrameResultResponse(BaseModel):
    """
    One frame's result as delivered to consumers.

    boxes and oriented_boxes each hold 0 or 1 element.
    """
    frame_index: int
    timestamp: Optional[float] = None
    source: Optional[str] = None
    status: str = Field(..., description="empty|partial|detected|failed")
    boxes: List[DisplayBoxModel] = Field(default_factory=list)
    oriented_boxes: List[DisplayOrientedBoxModel] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        result: FrameResult,
        timestamp: Optional[float] = None,
        source: Optional[str] = None,
    ) -> "FrameResultResponse":
        return cls(
            frame_index=result.frame_index,
            timestamp=timestamp,
            source=source,
            status=result.status.value,
            boxes=[DisplayBoxModel.from_box(b) for b in result.boxes],
            oriented_boxes=[DisplayOrientedBoxModel.from_box(b) for b in result.oriented_boxes],
            error=result.error,
        )
