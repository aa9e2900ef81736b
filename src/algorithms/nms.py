"""
Overlap metrics and greedy non-maximum suppression.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from models.detection import Box

IOU_EPS = 1e-6


def iou(a: Box, b: Box, eps: float = IOU_EPS) -> float:
    """
    Intersection-over-Union of two axis-aligned boxes.

    eps keeps the ratio defined for two zero-area boxes.
    """
    x1 = max(a.left, b.left)
    y1 = max(a.top, b.top)
    x2 = min(a.right, b.right)
    y2 = min(a.bottom, b.bottom)
    inter = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    return inter / (a.area + b.area - inter + eps)


def non_max_suppression(
    boxes: Sequence[Box],
    scores: Sequence[float],
    iou_threshold: float = 0.5,
    max_results: Optional[int] = None,
) -> List[int]:
    """
    Greedy NMS.

    Candidates are visited in descending score order; a candidate is kept
    only if its IoU with every already-kept box is <= iou_threshold.

    Args:
        boxes: Candidate boxes.
        scores: Score per box, same length as boxes.
        iou_threshold: Maximum allowed overlap with a kept box.
        max_results: Truncate the kept list to this many entries.

    Returns:
        Indices into `boxes` of the kept candidates, best first.
    """
    if len(boxes) != len(scores):
        raise ValueError(f"boxes/scores length mismatch: {len(boxes)} != {len(scores)}")

    order = sorted(range(len(boxes)), key=lambda i: scores[i], reverse=True)
    kept: List[int] = []
    for i in order:
        if all(iou(boxes[k], boxes[i]) <= iou_threshold for k in kept):
            kept.append(i)
            if max_results is not None and len(kept) >= max_results:
                break
    return kept
