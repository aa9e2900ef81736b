"""
Meter vision command line application.

Reads frames from a camera or video file, runs the two-stage meter/index
detection pipeline on a worker thread and delivers per-frame results.

Usage:
    python src/main.py --config config/config.yaml --display
    python src/main.py --config config/config.yaml --jsonl results.jsonl

Arguments:
    --config: Path to configuration file
    --display: Show a letterboxed preview with the detected boxes
    --jsonl: Append one JSON document per frame result to this file
    --max-frames: Stop after this many frames
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np
import yaml

from algorithms.transforms import Letterbox
from models.config import Config
from models.result import FrameResult
from observation import OpenCVSource, OpenCVSourceConfig
from ops.logging import setup_logging
from pipeline import LatestFrameScheduler, create_engine_from_config
from sinks import JsonLinesSink, LatestResultHolder

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_BACKENDS = ("onnx",)

COLOR_METER = (0, 0, 255)  # Red
COLOR_INDEX = (0, 255, 0)  # Green


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        local_overrides_path = os.path.join(config_dir, "config.yaml")

        merged: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        if (
            os.path.exists(config_path)
            and os.path.abspath(config_path) != os.path.abspath(local_overrides_path)
            and os.path.abspath(config_path) != os.path.abspath(base_path)
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_stage(name: str, stage: Dict[str, Any]) -> Optional[str]:
    if not isinstance(stage, dict):
        return f"detection.{name} must be a mapping"
    if not isinstance(stage.get("model"), str) or not stage.get("model"):
        return f"detection.{name}.model is required"
    if stage.get("backend", "onnx") not in VALID_BACKENDS:
        return f"detection.{name}.backend must be one of: {', '.join(VALID_BACKENDS)}"
    size = stage.get("input_size", 224)
    if not isinstance(size, int) or size <= 0:
        return f"detection.{name}.input_size must be a positive integer"
    conf = stage.get("conf_threshold", 0.6)
    if not _is_number(conf) or not (0 <= conf <= 1):
        return f"detection.{name}.conf_threshold must be between 0 and 1"
    return None


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ["camera", "detection", "display", "log_path", "log_level"]
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get("camera", {}) or {}
    if "device_id" not in camera:
        return False, "Missing camera.device_id"
    device_id = camera["device_id"]
    if isinstance(device_id, bool) or not isinstance(device_id, (int, str)):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    resolution = camera.get("resolution", [1280, 720])
    if not isinstance(resolution, list) or len(resolution) != 2:
        return False, "camera.resolution must be a list of [width, height]"
    if not all(isinstance(x, int) and x > 0 for x in resolution):
        return False, "camera.resolution values must be positive integers"
    if camera.get("rotate", 0) not in (0, 90, 180, 270, None):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"

    detection = config.get("detection", {}) or {}
    for name in ("meter", "index"):
        if name not in detection:
            return False, f"Missing detection.{name}"
        error = _validate_stage(name, detection[name])
        if error:
            return False, error

    selection = detection.get("selection", {}) or {}
    iou = selection.get("iou_threshold", 0.5)
    if not _is_number(iou) or not (0 < iou <= 1):
        return False, "detection.selection.iou_threshold must be between 0 and 1"
    max_det = selection.get("max_detections", 1)
    if not isinstance(max_det, int) or max_det <= 0:
        return False, "detection.selection.max_detections must be a positive integer"
    margin = selection.get("crop_margin", 0.2)
    if not _is_number(margin) or margin < 0:
        return False, "detection.selection.crop_margin must be a non-negative number"

    preprocess = config.get("preprocess", {}) or {}
    if preprocess.get("channel_order", "rgb") not in ("rgb", "bgr"):
        return False, "preprocess.channel_order must be one of: rgb, bgr"
    if preprocess.get("tensor_layout", "nhwc") not in ("nhwc", "nchw"):
        return False, "preprocess.tensor_layout must be one of: nhwc, nchw"

    viewport = (config.get("display", {}) or {}).get("viewport")
    if not isinstance(viewport, list) or len(viewport) != 2:
        return False, "display.viewport must be a list of [width, height]"
    if not all(isinstance(x, int) and x > 0 for x in viewport):
        return False, "display.viewport values must be positive integers"

    if config["log_level"] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def render_preview(frame: np.ndarray, result: Optional[FrameResult], viewport: Tuple[int, int]) -> np.ndarray:
    """
    Letterbox `frame` into the viewport and draw the display-space results.

    The meter box is drawn as a rectangle, the index box as its rotated
    polygon.
    """
    view_w, view_h = viewport
    h, w = frame.shape[:2]
    fit = Letterbox.fit(w, h, view_w, view_h)
    canvas = np.zeros((view_h, view_w, 3), dtype=np.uint8)
    new_w, new_h = int(round(w * fit.scale)), int(round(h * fit.scale))
    x0, y0 = int(fit.off_x), int(fit.off_y)
    resized = cv2.resize(frame, (new_w, new_h))
    canvas[y0:y0 + new_h, x0:x0 + new_w] = resized[: view_h - y0, : view_w - x0]

    if result is None:
        return canvas

    for box in result.boxes:
        x1, y1 = int(box.left), int(box.top)
        x2, y2 = int(box.right), int(box.bottom)
        cv2.rectangle(canvas, (x1, y1), (x2, y2), COLOR_METER, 2)
        cv2.putText(canvas, f"{box.score:.2f}", (x1 + 2, y1 - 4),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, COLOR_METER, 1)

    for obox in result.oriented_boxes:
        pts = np.array(obox.corners(), dtype=np.float32).round().astype(np.int32)
        cv2.polylines(canvas, [pts.reshape(-1, 1, 2)], True, COLOR_INDEX, 2)

    return canvas


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description="Meter Vision - two-stage meter/index detection")
    parser.add_argument("--config", type=str, default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--display", action="store_true",
                        help="Enable preview window")
    parser.add_argument("--jsonl", type=str, default=None,
                        help="Append per-frame results as JSON lines to this file")
    parser.add_argument("--max-frames", type=int, default=0,
                        help="Stop after this many frames (0 = unlimited)")
    args = parser.parse_args()

    raw_config = load_config(args.config)
    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Meter Vision")

    engine = create_engine_from_config(config)
    viewport = config.display.size

    latest = LatestResultHolder()
    sink = JsonLinesSink.open(args.jsonl) if args.jsonl else None

    def on_result(frame_data, result):
        latest(frame_data, result)
        if sink is not None:
            sink(frame_data, result)

    scheduler = LatestFrameScheduler(engine, lambda: viewport, on_result, config.scheduler)
    source = OpenCVSource(OpenCVSourceConfig.from_camera_config(config.camera, source_id="meter-camera"))

    try:
        scheduler.start()
        with source:
            logging.info(f"Video source {source.source_id}: {source.get_video_info()}")
            for frame_data in source:
                scheduler.submit(frame_data)

                if args.display:
                    cv2.imshow("Meter Vision", render_preview(frame_data.frame, latest.get(), viewport))
                    if cv2.waitKey(1) & 0xFF == ord("q"):
                        break

                if args.max_frames and frame_data.frame_index >= args.max_frames:
                    break
        scheduler.wait_idle(timeout=config.scheduler.join_timeout)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        scheduler.stop()
        if sink is not None:
            sink.close()
        if args.display:
            cv2.destroyAllWindows()
        stats = engine.stats
        logging.info(
            f"Pipeline stats: frames={stats.frame_count}, meters={stats.meter_count}, "
            f"indexes={stats.index_count}, failures={stats.failure_count}"
        )


if __name__ == "__main__":
    main()
