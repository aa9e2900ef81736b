"""
Stage-A detection selection.

Filters the meter detector's candidates by confidence, maps them from the
square tensor to frame pixels and to display space, then reduces them with
greedy NMS to the best-scoring box.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np

from algorithms.nms import non_max_suppression
from algorithms.transforms import Letterbox, SquarePadding
from inference.backend import StageAOutput
from models.detection import RawDetection


class DetectionSelector:
    """
    Confidence filter + NMS over stage-A output.

    Example:
        selector = DetectionSelector(conf_threshold=0.6)
        detections = selector.select(output, padding, (1280, 720), (800, 800))
    """

    def __init__(
        self,
        conf_threshold: float = 0.6,
        iou_threshold: float = 0.5,
        max_detections: int = 1,
    ):
        self.conf_threshold = conf_threshold
        self.iou_threshold = iou_threshold
        self.max_detections = max_detections

    def select(
        self,
        output: StageAOutput,
        padding: SquarePadding,
        frame_size: Tuple[int, int],
        viewport: Tuple[int, int],
    ) -> List[RawDetection]:
        """
        Args:
            output: Parsed stage-A head.
            padding: Square canvas placement of the frame.
            frame_size: Original (width, height).
            viewport: Display (width, height).

        Returns:
            Up to max_detections RawDetections, best first.
        """
        orig_w, orig_h = frame_size
        letterbox = Letterbox.fit(orig_w, orig_h, viewport[0], viewport[1])

        candidates: List[RawDetection] = []
        finite = (
            np.isfinite(output.cx)
            & np.isfinite(output.cy)
            & np.isfinite(output.w)
            & np.isfinite(output.h)
        )
        above = output.score >= self.conf_threshold
        if np.any(above & ~finite):
            logging.debug(f"Dropping {int(np.sum(above & ~finite))} candidates with non-finite geometry")

        for i in np.flatnonzero(above & finite):
            raw = padding.to_frame(
                float(output.cx[i]),
                float(output.cy[i]),
                float(output.w[i]),
                float(output.h[i]),
                orig_w,
                orig_h,
            )
            if int(raw.width) <= 0 or int(raw.height) <= 0:
                logging.debug(f"Dropping candidate {i}: degenerate raw box {raw}")
                continue
            score = float(output.score[i])
            candidates.append(RawDetection(raw=raw, display=letterbox.to_display(raw, score)))

        if not candidates:
            return []

        kept = non_max_suppression(
            [c.display for c in candidates],
            [c.score for c in candidates],
            iou_threshold=self.iou_threshold,
            max_results=self.max_detections,
        )
        logging.debug(f"Stage A: {len(candidates)} candidates above threshold, kept {len(kept)}")
        return [candidates[k] for k in kept]
