"""
ONNX Runtime inference backend.

Loads a detector exported to ONNX and exposes it as an
`infer(tensor) -> array` callable. onnxruntime is an optional extra so the
geometry core stays importable on machines without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .backend import InferenceBackend


@dataclass(frozen=True)
class OnnxConfig:
    model: str
    providers: Optional[Sequence[str]] = None


class OnnxBackend(InferenceBackend):
    def __init__(self, cfg: OnnxConfig):
        self.cfg = cfg
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is not installed. Install with `pip install meter-vision[onnx]`."
            ) from e

        providers: List[str] = list(cfg.providers) if cfg.providers else list(ort.get_available_providers())
        self._session = ort.InferenceSession(cfg.model, providers=providers)
        self._input_name = self._session.get_inputs()[0].name
        logging.info(f"ONNX model loaded: {cfg.model} (providers={providers})")

    @property
    def input_shape(self) -> List:
        return list(self._session.get_inputs()[0].shape)

    def __call__(self, tensor: np.ndarray) -> np.ndarray:
        outputs = self._session.run(None, {self._input_name: tensor.astype(np.float32, copy=False)})
        return np.asarray(outputs[0])
