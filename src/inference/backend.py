"""
Inference backend interface and detector stage adapters.

A backend is any callable taking a preprocessed tensor and returning the
model's raw output array. Both detector heads emit a (channel, candidate)
layout with box values normalized to the model input side:

- stage A (meter): cx, cy, w, h, score [, extra channels ignored]
- stage B (index): cx, cy, w, h, score, angle (degrees)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np

from models.errors import InferenceFailure, InvalidOutputShape


class InferenceBackend(Protocol):
    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        ...


InferFn = Callable[[np.ndarray], np.ndarray]


def _as_channel_major(raw: np.ndarray, channels: int, stage: str) -> np.ndarray:
    """Squeeze a leading batch dimension and check the channel count."""
    arr = np.asarray(raw, dtype=np.float32)
    if arr.ndim == 3 and arr.shape[0] == 1:
        arr = arr[0]
    if arr.ndim != 2 or arr.shape[0] < channels:
        raise InvalidOutputShape(
            stage, f"expected ({channels}+, N) output, got shape {tuple(np.shape(raw))}"
        )
    return arr


@dataclass(frozen=True)
class StageAOutput:
    """Typed view over the stage-A head: normalized boxes and scores."""
    cx: np.ndarray
    cy: np.ndarray
    w: np.ndarray
    h: np.ndarray
    score: np.ndarray

    CHANNELS = 5

    @property
    def num_candidates(self) -> int:
        return int(self.score.shape[0])

    @classmethod
    def from_raw(cls, raw: np.ndarray, stage: str = "meter") -> "StageAOutput":
        arr = _as_channel_major(raw, cls.CHANNELS, stage)
        return cls(cx=arr[0], cy=arr[1], w=arr[2], h=arr[3], score=arr[4])


@dataclass(frozen=True)
class StageBOutput:
    """Typed view over the stage-B head: normalized oriented boxes."""
    cx: np.ndarray
    cy: np.ndarray
    w: np.ndarray
    h: np.ndarray
    score: np.ndarray
    angle: np.ndarray

    CHANNELS = 6

    @property
    def num_candidates(self) -> int:
        return int(self.score.shape[0])

    @classmethod
    def from_raw(cls, raw: np.ndarray, stage: str = "index") -> "StageBOutput":
        arr = _as_channel_major(raw, cls.CHANNELS, stage)
        return cls(cx=arr[0], cy=arr[1], w=arr[2], h=arr[3], score=arr[4], angle=arr[5])


class DetectorStage:
    """
    Wraps one inference callable.

    Any exception raised by the backend is re-raised as InferenceFailure
    naming the stage; no retries happen here.
    """

    def __init__(self, infer: InferFn, name: str):
        self._infer = infer
        self.name = name

    def run(self, tensor: np.ndarray) -> np.ndarray:
        try:
            raw = self._infer(tensor)
        except InferenceFailure:
            raise
        except Exception as e:
            raise InferenceFailure(self.name, f"inference call failed: {e}") from e
        if raw is None:
            raise InvalidOutputShape(self.name, "backend returned no output")
        logging.debug(f"[{self.name}] raw output shape={np.shape(raw)}")
        return raw


class MeterDetector(DetectorStage):
    """Stage-A adapter returning a StageAOutput."""

    def __init__(self, infer: InferFn, name: str = "meter"):
        super().__init__(infer, name)

    def detect(self, tensor: np.ndarray) -> StageAOutput:
        return StageAOutput.from_raw(self.run(tensor), stage=self.name)


class IndexDetector(DetectorStage):
    """Stage-B adapter returning a StageBOutput."""

    def __init__(self, infer: InferFn, name: str = "index"):
        super().__init__(infer, name)

    def detect(self, tensor: np.ndarray) -> StageBOutput:
        return StageBOutput.from_raw(self.run(tensor), stage=self.name)
