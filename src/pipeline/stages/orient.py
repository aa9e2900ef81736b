"""
Stage-B oriented box selection.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from inference.backend import StageBOutput
from models.detection import OrientedBox


class OrientedBoxSelector:
    """Pick the single best oriented box above the confidence threshold."""

    def __init__(self, conf_threshold: float = 0.6):
        self.conf_threshold = conf_threshold

    def select(self, output: StageBOutput, crop_width: int, crop_height: int) -> Optional[OrientedBox]:
        """
        Returns:
            The best candidate in crop pixels, or None if no score reaches
            the threshold.
        """
        finite = (
            np.isfinite(output.cx)
            & np.isfinite(output.cy)
            & np.isfinite(output.w)
            & np.isfinite(output.h)
            & np.isfinite(output.angle)
        )
        above = np.flatnonzero((output.score >= self.conf_threshold) & finite)
        if above.size == 0:
            return None
        best = int(above[np.argmax(output.score[above])])

        w = float(output.w[best]) * crop_width
        h = float(output.h[best]) * crop_height
        cx = float(output.cx[best]) * crop_width
        cy = float(output.cy[best]) * crop_height
        return OrientedBox(
            left=cx - w / 2,
            top=cy - h / 2,
            width=w,
            height=h,
            angle=float(output.angle[best]),
        )
