"""
Smoke tests for typed models and adapters.
"""

import pytest
import numpy as np

from models.frame import FrameData
from models.detection import Box, DisplayBox, RawDetection, OrientedBox, DisplayOrientedBox
from models.result import FrameResult, ResultStatus
from models.config import Config, StageConfig, SelectionConfig, DisplayConfig


class TestBox:
    def test_properties(self):
        box = Box(left=100, top=100, width=100, height=50)
        assert box.right == 200
        assert box.bottom == 150
        assert box.center == (150.0, 125.0)
        assert box.area == 5000

    def test_from_center(self):
        box = Box.from_center(112, 112, 44.8, 44.8)
        assert box.left == pytest.approx(89.6)
        assert box.top == pytest.approx(89.6)
        assert box.center == pytest.approx((112, 112))

    def test_xyxy(self):
        box = Box.from_xyxy(10, 20, 30, 60)
        assert box.width == 20
        assert box.height == 40
        assert box.as_xyxy() == (10, 20, 30, 60)
        assert Box(10.7, 20.2, 5.9, 3.1).as_int_tuple() == (10, 20, 5, 3)

    def test_display_box_carries_score(self):
        box = DisplayBox(left=1, top=2, width=3, height=4, score=0.9)
        assert box.score == 0.9
        assert box.right == 4

    def test_boxes_are_frozen(self):
        box = Box(0, 0, 1, 1)
        with pytest.raises(Exception):
            box.left = 5


class TestRawDetection:
    def test_score_from_display(self):
        det = RawDetection(
            raw=Box(10, 10, 20, 20),
            display=DisplayBox(5, 5, 10, 10, score=0.75),
        )
        assert det.score == 0.75


class TestOrientedBox:
    def test_center(self):
        box = OrientedBox(left=10, top=20, width=40, height=10, angle=15)
        assert box.center == (30.0, 25.0)

    def test_corners_unrotated(self):
        box = DisplayOrientedBox(left=0, top=0, width=4, height=2, angle=0)
        corners = box.corners()
        flat = [v for point in corners for v in point]
        assert flat == pytest.approx([0, 0, 4, 0, 4, 2, 0, 2])


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, timestamp=12.5, frame_index=42)

        assert fd.width == 640
        assert fd.height == 480
        assert fd.frame_index == 42
        assert fd.size == (640, 480)
        assert fd.shape == (480, 640, 3)
        assert fd.channel_order == "bgr"


class TestFrameResult:
    def test_empty(self):
        result = FrameResult.empty(frame_index=3)
        assert result.status == ResultStatus.EMPTY
        assert result.boxes == []
        assert result.oriented_boxes == []
        assert not result.has_detection

    def test_failed(self):
        result = FrameResult.failed("meter: boom", frame_index=4)
        assert result.status == ResultStatus.FAILED
        assert result.error == "meter: boom"
        assert result.frame_index == 4
        assert not result.has_detection


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.meter.input_size == 224
        assert cfg.meter.conf_threshold == 0.6
        assert cfg.index.conf_threshold == 0.6
        assert cfg.selection.iou_threshold == 0.5
        assert cfg.selection.max_detections == 1
        assert cfg.selection.crop_margin == 0.2
        assert cfg.preprocess.channel_order == "rgb"

    def test_from_dict(self, valid_config):
        cfg = Config.from_dict(valid_config)
        assert cfg.camera.resolution == [1280, 720]
        assert cfg.meter.model == "models/meter.onnx"
        assert cfg.index.model == "models/index.onnx"
        assert cfg.display.size == (800, 800)
        assert cfg.log_level == "INFO"

    def test_to_dict_roundtrip(self, valid_config):
        cfg = Config.from_dict(valid_config)
        again = Config.from_dict(cfg.to_dict())
        assert again == cfg

    def test_stage_config_providers_optional(self):
        assert "providers" not in StageConfig().to_dict()
        d = StageConfig(providers=["CPUExecutionProvider"]).to_dict()
        assert d["providers"] == ["CPUExecutionProvider"]

    def test_partial_dicts_fall_back_to_defaults(self):
        assert SelectionConfig.from_dict({"crop_margin": 0.1}).iou_threshold == 0.5
        assert DisplayConfig.from_dict({}).size == (800, 800)
