"""
Pipeline error types.

All errors are frame-scoped: the engine converts them into a structured
FrameResult and the next frame starts from a clean state.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for pipeline errors."""


class InferenceFailure(PipelineError):
    """An inference call raised or returned unusable output."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class InvalidOutputShape(InferenceFailure):
    """Raw output does not expose the channels the stage needs."""


class InvalidGeometry(PipelineError):
    """A computed box has non-positive width or height."""
