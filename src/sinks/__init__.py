"""
Result sinks: where per-frame results are delivered.
"""

from .api_models import DisplayBoxModel, DisplayOrientedBoxModel, FrameResultResponse
from .jsonl import JsonLinesSink, LatestResultHolder

__all__ = [
    "DisplayBoxModel",
    "DisplayOrientedBoxModel",
    "FrameResultResponse",
    "JsonLinesSink",
    "LatestResultHolder",
]
