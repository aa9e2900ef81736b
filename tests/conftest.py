"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


def _head(candidates, channels):
    """Build a (1, channels, N) raw output from per-candidate tuples."""
    arr = np.zeros((1, channels, max(len(candidates), 1)), dtype=np.float32)
    for i, cand in enumerate(candidates):
        arr[0, : len(cand), i] = cand
    return arr


@pytest.fixture
def stage_a_raw():
    """Factory: [(cx, cy, w, h, score), ...] -> raw stage-A output."""
    def make(candidates, channels=5):
        return _head(candidates, channels)
    return make


@pytest.fixture
def stage_b_raw():
    """Factory: [(cx, cy, w, h, score, angle), ...] -> raw stage-B output."""
    def make(candidates):
        return _head(candidates, 6)
    return make


class StubInference:
    """Inference callable returning a fixed output and recording its inputs."""

    def __init__(self, output=None, error=None):
        self.output = output
        self.error = error
        self.calls = []

    def __call__(self, tensor):
        self.calls.append(tensor)
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def stub_inference():
    return StubInference


@pytest.fixture
def frame_640x480():
    from models.frame import FrameData

    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    return FrameData.from_numpy(frame, timestamp=1.0, frame_index=1, source="test")


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  meter:
    model: "models/meter.onnx"
    conf_threshold: 0.6
  index:
    model: "models/index.onnx"
    conf_threshold: 0.6
  selection:
    iou_threshold: 0.5
    crop_margin: 0.2

display:
  viewport: [800, 800]

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
            "rotate": 0,
        },
        "detection": {
            "meter": {"backend": "onnx", "model": "models/meter.onnx", "input_size": 224, "conf_threshold": 0.6},
            "index": {"backend": "onnx", "model": "models/index.onnx", "input_size": 224, "conf_threshold": 0.6},
            "selection": {"iou_threshold": 0.5, "max_detections": 1, "crop_margin": 0.2},
        },
        "preprocess": {"pad_value": 0, "channel_order": "rgb", "tensor_layout": "nhwc"},
        "display": {"viewport": [800, 800]},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
