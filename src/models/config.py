"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30
    swap_rb: bool = False
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
            swap_rb=d.get("swap_rb", False),
            rotate=d.get("rotate", 0) or 0,
            flip_horizontal=d.get("flip_horizontal", False),
            flip_vertical=d.get("flip_vertical", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "swap_rb": self.swap_rb,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }


@dataclass
class StageConfig:
    """Configuration for one detector stage."""
    model: str = ""
    backend: str = "onnx"
    input_size: int = 224
    conf_threshold: float = 0.6
    providers: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StageConfig":
        return cls(
            model=d.get("model", ""),
            backend=d.get("backend", "onnx"),
            input_size=d.get("input_size", 224),
            conf_threshold=d.get("conf_threshold", 0.6),
            providers=d.get("providers"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "model": self.model,
            "backend": self.backend,
            "input_size": self.input_size,
            "conf_threshold": self.conf_threshold,
        }
        if self.providers is not None:
            d["providers"] = self.providers
        return d


@dataclass
class SelectionConfig:
    """Stage-A suppression and cropping parameters."""
    iou_threshold: float = 0.5
    max_detections: int = 1
    crop_margin: float = 0.2

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SelectionConfig":
        return cls(
            iou_threshold=d.get("iou_threshold", 0.5),
            max_detections=d.get("max_detections", 1),
            crop_margin=d.get("crop_margin", 0.2),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iou_threshold": self.iou_threshold,
            "max_detections": self.max_detections,
            "crop_margin": self.crop_margin,
        }


@dataclass
class PreprocessConfig:
    """
    Tensor preparation.

    pad_value fills the square canvas; channel_order is the order the
    models expect; tensor_layout is "nhwc" or "nchw".
    """
    pad_value: int = 0
    channel_order: str = "rgb"
    tensor_layout: str = "nhwc"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PreprocessConfig":
        return cls(
            pad_value=d.get("pad_value", 0),
            channel_order=d.get("channel_order", "rgb"),
            tensor_layout=d.get("tensor_layout", "nhwc"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pad_value": self.pad_value,
            "channel_order": self.channel_order,
            "tensor_layout": self.tensor_layout,
        }


@dataclass
class DisplayConfig:
    """Render surface the display-space results are expressed in."""
    viewport: List[int] = field(default_factory=lambda: [800, 800])

    @property
    def size(self) -> Tuple[int, int]:
        return (int(self.viewport[0]), int(self.viewport[1]))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        return cls(viewport=d.get("viewport", [800, 800]))

    def to_dict(self) -> Dict[str, Any]:
        return {"viewport": self.viewport}


@dataclass
class SchedulerConfig:
    """Latest-wins frame scheduling."""
    drop_superseded_results: bool = False
    join_timeout: float = 5.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SchedulerConfig":
        return cls(
            drop_superseded_results=d.get("drop_superseded_results", False),
            join_timeout=d.get("join_timeout", 5.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "drop_superseded_results": self.drop_superseded_results,
            "join_timeout": self.join_timeout,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    meter: StageConfig = field(default_factory=StageConfig)
    index: StageConfig = field(default_factory=StageConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    log_path: str = "logs/meter_vision.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        detection = d.get("detection", {}) or {}
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            meter=StageConfig.from_dict(detection.get("meter", {}) or {}),
            index=StageConfig.from_dict(detection.get("index", {}) or {}),
            selection=SelectionConfig.from_dict(detection.get("selection", {}) or {}),
            preprocess=PreprocessConfig.from_dict(d.get("preprocess", {}) or {}),
            display=DisplayConfig.from_dict(d.get("display", {}) or {}),
            scheduler=SchedulerConfig.from_dict(d.get("scheduler", {}) or {}),
            log_path=d.get("log_path", "logs/meter_vision.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "camera": self.camera.to_dict(),
            "detection": {
                "meter": self.meter.to_dict(),
                "index": self.index.to_dict(),
                "selection": self.selection.to_dict(),
            },
            "preprocess": self.preprocess.to_dict(),
            "display": self.display.to_dict(),
            "scheduler": self.scheduler.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
