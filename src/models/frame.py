"""
FrameData model for captured video frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class FrameData:
    """
    Metadata and payload for a captured video frame.

    Frames are never mutated once captured; stages that need a different
    image (padding, crops) build a new array.

    Attributes:
        frame: The raw frame data as a numpy array (H, W, 3).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when frame was captured.
        frame_index: Sequential frame number since start.
        source: Identifier for the camera/video source.
        channel_order: Channel layout of `frame` ("bgr" for OpenCV captures).
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float = 0.0
    frame_index: int = 0
    source: Optional[str] = None
    channel_order: str = "bgr"

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float = 0.0,
        frame_index: int = 0,
        source: Optional[str] = None,
        channel_order: str = "bgr",
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
            channel_order=channel_order,
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        """Return (height, width, channels)."""
        return self.frame.shape

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
