"""
Pipeline engine for the meter vision system.

Runs the two chained detectors over one frame:

    normalize -> meter detector -> select (NMS) -> crop
              -> index detector -> select (best) -> compose

and returns display-space results. Every run is independent; a failed
inference call only affects the frame it happened on.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from inference.backend import IndexDetector, InferFn, MeterDetector
from models.config import Config
from models.errors import InferenceFailure, InvalidGeometry
from models.frame import FrameData
from models.result import FrameResult, ResultStatus
from pipeline.stages.compose import CoordinateComposer
from pipeline.stages.crop import RegionCropper
from pipeline.stages.detect import DetectionSelector
from pipeline.stages.normalize import FrameNormalizer
from pipeline.stages.orient import OrientedBoxSelector


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        input_size: Tensor side S for the meter detector.
        index_input_size: Tensor side for the index detector.
        meter_conf_threshold: Stage-A confidence threshold.
        index_conf_threshold: Stage-B confidence threshold.
        iou_threshold: Stage-A NMS overlap threshold.
        max_detections: Stage-A boxes kept after NMS.
        crop_margin: Crop expansion ratio around the meter box.
        pad_value: Fill value of the square canvas.
        channel_order: Channel order the models expect.
        tensor_layout: "nhwc" or "nchw".
    """
    input_size: int = 224
    index_input_size: int = 224
    meter_conf_threshold: float = 0.6
    index_conf_threshold: float = 0.6
    iou_threshold: float = 0.5
    max_detections: int = 1
    crop_margin: float = 0.2
    pad_value: int = 0
    channel_order: str = "rgb"
    tensor_layout: str = "nhwc"

    @classmethod
    def from_config(cls, config: Config) -> "PipelineConfig":
        """Adapter: Build from the application Config."""
        return cls(
            input_size=config.meter.input_size,
            index_input_size=config.index.input_size,
            meter_conf_threshold=config.meter.conf_threshold,
            index_conf_threshold=config.index.conf_threshold,
            iou_threshold=config.selection.iou_threshold,
            max_detections=config.selection.max_detections,
            crop_margin=config.selection.crop_margin,
            pad_value=config.preprocess.pad_value,
            channel_order=config.preprocess.channel_order,
            tensor_layout=config.preprocess.tensor_layout,
        )


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    meter_count: int = 0
    index_count: int = 0
    failure_count: int = 0
    last_latency_ms: float = 0.0
    start_time: float = field(default_factory=time.time)


class PipelineEngine:
    """
    Per-frame orchestrator for the two detector stages.

    Example:
        engine = PipelineEngine(meter_infer, index_infer, PipelineConfig())
        result = engine.process(frame_data, viewport=(800, 800))
        for box in result.boxes:
            ...
    """

    def __init__(
        self,
        meter_infer: InferFn,
        index_infer: InferFn,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or PipelineConfig()
        self.stats = PipelineStats()
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []

        cfg = self.config
        self._meter = MeterDetector(meter_infer)
        self._index = IndexDetector(index_infer)
        self._normalizer = FrameNormalizer(
            input_size=cfg.input_size,
            pad_value=cfg.pad_value,
            channel_order=cfg.channel_order,
            tensor_layout=cfg.tensor_layout,
        )
        self._selector = DetectionSelector(
            conf_threshold=cfg.meter_conf_threshold,
            iou_threshold=cfg.iou_threshold,
            max_detections=cfg.max_detections,
        )
        self._index_normalizer = FrameNormalizer(
            input_size=cfg.index_input_size,
            pad_value=cfg.pad_value,
            channel_order=cfg.channel_order,
            tensor_layout=cfg.tensor_layout,
        )
        self._cropper = RegionCropper(margin=cfg.crop_margin)
        self._oriented_selector = OrientedBoxSelector(conf_threshold=cfg.index_conf_threshold)
        self._composer = CoordinateComposer()

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, result) as arguments.
        """
        self._callbacks.append(callback)

    def process(self, frame_data: FrameData, viewport: Tuple[int, int]) -> FrameResult:
        """
        Process a single frame through both stages.

        Inference failures are logged and returned as a FAILED result with
        no boxes; they never propagate past this call.
        """
        start = time.perf_counter()
        self.stats.frame_count += 1
        try:
            result = self._run(frame_data, viewport)
        except InferenceFailure as e:
            self.stats.failure_count += 1
            logging.warning(f"Frame {frame_data.frame_index}: inference failed ({e})")
            result = FrameResult.failed(str(e), frame_index=frame_data.frame_index)
        self.stats.last_latency_ms = (time.perf_counter() - start) * 1000.0

        for callback in self._callbacks:
            try:
                callback(frame_data, result)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

        return result

    def _run(self, frame_data: FrameData, viewport: Tuple[int, int]) -> FrameResult:
        frame_index = frame_data.frame_index

        try:
            normalized = self._normalizer.normalize(frame_data)
        except InvalidGeometry as e:
            logging.debug(f"Frame {frame_index}: {e}")
            return FrameResult.empty(frame_index=frame_index)
        meter_output = self._meter.detect(normalized.tensor)
        detections = self._selector.select(
            meter_output, normalized.padding, frame_data.size, viewport
        )
        if not detections:
            logging.debug(f"Frame {frame_index}: no meter above threshold")
            return FrameResult.empty(frame_index=frame_index)

        best = detections[0]
        self.stats.meter_count += 1
        boxes = [d.display for d in detections]
        partial = FrameResult(boxes=boxes, status=ResultStatus.PARTIAL, frame_index=frame_index)

        try:
            crop = self._cropper.crop(frame_data, best)
        except InvalidGeometry as e:
            logging.debug(f"Frame {frame_index}: {e}")
            return partial

        index_tensor = self._index_normalizer.to_tensor(crop.image, source_order=crop.channel_order)
        index_output = self._index.detect(index_tensor)
        oriented = self._oriented_selector.select(index_output, crop.width, crop.height)
        if oriented is None:
            logging.debug(f"Frame {frame_index}: no index region above threshold")
            return partial

        try:
            composed = self._composer.compose(oriented, best)
        except InvalidGeometry as e:
            logging.debug(f"Frame {frame_index}: dropping index box ({e})")
            return partial

        self.stats.index_count += 1
        return FrameResult(
            boxes=boxes,
            oriented_boxes=[composed],
            status=ResultStatus.DETECTED,
            frame_index=frame_index,
        )


def create_engine_from_config(
    config: Config,
    meter_infer: Optional[InferFn] = None,
    index_infer: Optional[InferFn] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the application config.

    Inference callables default to the backends named in the config.

    Args:
        config: Typed application config.
        meter_infer: Stage-A callable override.
        index_infer: Stage-B callable override.
    """
    from inference import create_backend

    if meter_infer is None:
        meter_infer = create_backend(config.meter)
    if index_infer is None:
        index_infer = create_backend(config.index)

    return PipelineEngine(meter_infer, index_infer, PipelineConfig.from_config(config))
