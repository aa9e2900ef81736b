"""
Inference layer: backend callables and the two detector stage adapters.
"""

from models.config import StageConfig

from .backend import (
    InferenceBackend,
    InferFn,
    DetectorStage,
    MeterDetector,
    IndexDetector,
    StageAOutput,
    StageBOutput,
)


def create_backend(cfg: StageConfig) -> InferFn:
    """
    Factory function to build an inference callable from a stage config.

    Args:
        cfg: Stage configuration (backend name, model path, providers).
    """
    if cfg.backend == "onnx":
        from .onnx_backend import OnnxBackend, OnnxConfig

        return OnnxBackend(OnnxConfig(model=cfg.model, providers=cfg.providers))
    raise ValueError(f"Unknown inference backend: {cfg.backend}")


__all__ = [
    "InferenceBackend",
    "InferFn",
    "DetectorStage",
    "MeterDetector",
    "IndexDetector",
    "StageAOutput",
    "StageBOutput",
    "create_backend",
]
