"""
Tests for coordinate transforms and oriented box geometry.
"""

import math

import numpy as np
import pytest

from algorithms.transforms import Letterbox, SquarePadding, compose_to_display, rotated_corners
from models.detection import Box, DisplayBox, OrientedBox, RawDetection
from models.errors import InvalidGeometry


class TestSquarePadding:
    def test_landscape(self):
        pad = SquarePadding.for_size(640, 480)
        assert pad.square == 640
        assert pad.pad_x == 0
        assert pad.pad_y == 80

    def test_portrait_odd_difference(self):
        pad = SquarePadding.for_size(479, 640)
        assert pad.square == 640
        assert pad.pad_x == 80.5
        assert pad.pad_y == 0

    def test_square_frame_has_no_padding(self):
        pad = SquarePadding.for_size(300, 300)
        assert pad.pad_x == pad.pad_y == 0

    def test_non_square_pads_one_axis_only(self):
        for w, h in [(640, 480), (480, 640), (1, 2), (1999, 7)]:
            pad = SquarePadding.for_size(w, h)
            assert pad.pad_x >= 0 and pad.pad_y >= 0
            assert pad.pad_x != pad.pad_y
            assert pad.square == max(w, h)

    def test_to_frame_removes_padding(self):
        pad = SquarePadding.for_size(640, 480)
        box = pad.to_frame(0.5, 0.5, 0.25, 0.25, 640, 480)
        assert box == Box(left=240, top=160, width=160, height=160)

    def test_to_frame_clamps_at_edges(self):
        pad = SquarePadding.for_size(100, 100)
        box = pad.to_frame(0.05, 0.95, 0.2, 0.2, 100, 100)
        assert box.left == 0
        assert box.top == pytest.approx(85)
        assert box.width == pytest.approx(20)
        assert box.height == pytest.approx(15)

    def test_box_inside_padding_has_no_extent(self):
        pad = SquarePadding.for_size(640, 480)
        # Center in the bottom padding band
        box = pad.to_frame(0.5, 0.98, 0.01, 0.01, 640, 480)
        assert box.height <= 0


class TestLetterbox:
    def test_wide_frame_into_square_view(self):
        fit = Letterbox.fit(1000, 500, 800, 800)
        assert fit.scale == pytest.approx(0.8)
        assert fit.off_x == pytest.approx(0)
        assert fit.off_y == pytest.approx(200)

    def test_preserves_aspect_ratio(self):
        fit = Letterbox.fit(640, 480, 1920, 1080)
        display = fit.to_display(Box(0, 0, 640, 480))
        assert display.width / display.height == pytest.approx(640 / 480)

    def test_display_box_inside_viewport(self):
        rng = np.random.default_rng(3)
        for _ in range(200):
            ow, oh = rng.integers(1, 2000, size=2)
            vw, vh = rng.integers(1, 2000, size=2)
            fit = Letterbox.fit(int(ow), int(oh), int(vw), int(vh))
            left = float(rng.uniform(0, ow))
            top = float(rng.uniform(0, oh))
            box = Box(left, top, float(rng.uniform(0, ow - left)), float(rng.uniform(0, oh - top)))
            d = fit.to_display(box, score=0.7)
            assert d.left >= -1e-9 and d.top >= -1e-9
            assert d.right <= vw + 1e-6
            assert d.bottom <= vh + 1e-6
            assert d.score == 0.7

    def test_invalid_frame_size(self):
        with pytest.raises(ValueError):
            Letterbox.fit(0, 480, 800, 800)


def _detection(raw, display):
    return RawDetection(raw=raw, display=DisplayBox(*display, score=0.9))


class TestComposeToDisplay:
    def test_identity_with_unit_scale_and_zero_offset(self):
        det = _detection(Box(0, 0, 100, 80), (0, 0, 100, 80))
        box = OrientedBox(left=10, top=20, width=30, height=15, angle=12.5)
        out = compose_to_display(box, det)
        assert (out.left, out.top, out.width, out.height, out.angle) == pytest.approx(
            (10, 20, 30, 15, 12.5)
        )

    def test_scales_by_unmargined_raw_size(self):
        det = _detection(Box(300, 200, 100, 50), (100, 50, 200, 100))
        box = OrientedBox(left=10, top=10, width=20, height=10, angle=0)
        out = compose_to_display(box, det)
        assert out.left == pytest.approx(120)
        assert out.top == pytest.approx(70)
        assert out.width == pytest.approx(40)
        assert out.height == pytest.approx(20)

    def test_scale_only_from_detection(self):
        det = _detection(Box(300, 200, 100, 50), (100, 50, 200, 100))
        box = OrientedBox(left=10, top=10, width=20, height=10, angle=0)
        with pytest.raises(TypeError):
            compose_to_display(box, det, raw_size=(50, 25))

    def test_clamps_into_parent(self):
        det = _detection(Box(0, 0, 100, 100), (50, 50, 100, 100))
        box = OrientedBox(left=90, top=-20, width=30, height=30, angle=45)
        out = compose_to_display(box, det)
        assert out.left == pytest.approx(120)  # 150 - 30
        assert out.top == pytest.approx(50)
        assert out.angle == 45

    def test_oversized_box_cut_to_parent(self):
        det = _detection(Box(0, 0, 100, 100), (0, 0, 100, 100))
        box = OrientedBox(left=-10, top=-10, width=140, height=50, angle=0)
        out = compose_to_display(box, det)
        assert out.width == pytest.approx(100)
        assert out.left == pytest.approx(0)

    def test_containment(self):
        rng = np.random.default_rng(5)
        for _ in range(300):
            raw = Box(*rng.uniform(0, 500, size=2), *rng.uniform(1, 300, size=2))
            parent = rng.uniform(0, 800, size=2).tolist() + rng.uniform(1, 400, size=2).tolist()
            det = _detection(raw, parent)
            crop_w, crop_h = raw.width * 1.4, raw.height * 1.4
            box = OrientedBox(
                left=float(rng.uniform(-0.2, 1.0) * crop_w),
                top=float(rng.uniform(-0.2, 1.0) * crop_h),
                width=float(rng.uniform(0.01, 1.0) * crop_w),
                height=float(rng.uniform(0.01, 1.0) * crop_h),
                angle=float(rng.uniform(-90, 90)),
            )
            out = compose_to_display(box, det)
            p = det.display
            assert out.left >= p.left - 1e-6
            assert out.top >= p.top - 1e-6
            assert out.left + out.width <= p.right + 1e-6
            assert out.top + out.height <= p.bottom + 1e-6

    def test_zero_size_box_is_invalid(self):
        det = _detection(Box(0, 0, 100, 100), (0, 0, 100, 100))
        with pytest.raises(InvalidGeometry):
            compose_to_display(OrientedBox(10, 10, 0, 20, 0), det)

    def test_degenerate_reference_is_invalid(self):
        det = _detection(Box(0, 0, 0, 100), (0, 0, 10, 10))
        with pytest.raises(InvalidGeometry):
            compose_to_display(OrientedBox(1, 1, 2, 2, 0), det)


class TestRotatedCorners:
    def test_zero_angle_is_envelope(self):
        corners = rotated_corners(OrientedBox(10, 20, 40, 10, 0))
        flat = [v for point in corners for v in point]
        assert flat == pytest.approx([10, 20, 50, 20, 50, 30, 10, 30])

    def test_quarter_turn_swaps_extents(self):
        corners = rotated_corners(OrientedBox(0, 0, 40, 10, 90))
        xs = [c[0] for c in corners]
        ys = [c[1] for c in corners]
        assert max(xs) - min(xs) == pytest.approx(10)
        assert max(ys) - min(ys) == pytest.approx(40)
        # top-left offset (-20, -5) rotates to (5, -20) around (20, 5)
        assert corners[0] == pytest.approx((25, -15))

    def test_corners_preserve_center_and_side_lengths(self):
        box = OrientedBox(5, 5, 30, 12, 33)
        corners = rotated_corners(box)
        cx = sum(c[0] for c in corners) / 4
        cy = sum(c[1] for c in corners) / 4
        assert (cx, cy) == pytest.approx(box.center)
        assert math.dist(corners[0], corners[1]) == pytest.approx(30)
        assert math.dist(corners[1], corners[2]) == pytest.approx(12)
