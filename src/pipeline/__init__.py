"""
Pipeline module for the meter vision system.

The pipeline orchestrates the per-frame processing flow:
- Frame normalization
- Meter detection and selection (NMS)
- Cropping and index detection
- Composition of the index box into display space
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats, create_engine_from_config
from .scheduler import LatestFrameScheduler, SchedulerStats

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
    "create_engine_from_config",
    "LatestFrameScheduler",
    "SchedulerStats",
]
