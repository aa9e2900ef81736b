"""
Frame normalization stage.

Turns a decoded frame of any size into the float tensor the detectors
consume: centered on a square canvas, resized to S x S, channel values
scaled to [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from algorithms.transforms import SquarePadding
from models.errors import InvalidGeometry
from models.frame import FrameData


@dataclass(frozen=True)
class NormalizedFrame:
    """
    A detector-ready tensor plus what is needed to invert the padding.

    Attributes:
        tensor: (1, S, S, 3) or (1, 3, S, S) float32 tensor.
        padding: Square canvas side and centering offsets.
        input_size: Tensor side S.
    """
    tensor: np.ndarray
    padding: SquarePadding
    input_size: int


def _three_channels(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return image[..., :3]
    return image


class FrameNormalizer:
    """
    Square-pad, resize and scale frames into model tensors.

    Example:
        normalizer = FrameNormalizer(input_size=224)
        normalized = normalizer.normalize(frame_data)
        raw = infer(normalized.tensor)
    """

    def __init__(
        self,
        input_size: int = 224,
        pad_value: int = 0,
        channel_order: str = "rgb",
        tensor_layout: str = "nhwc",
    ):
        if input_size <= 0:
            raise ValueError(f"input_size must be positive, got {input_size}")
        if tensor_layout not in ("nhwc", "nchw"):
            raise ValueError(f"tensor_layout must be 'nhwc' or 'nchw', got {tensor_layout!r}")
        self.input_size = input_size
        self.pad_value = pad_value
        self.channel_order = channel_order
        self.tensor_layout = tensor_layout

    def pad_to_square(self, image: np.ndarray) -> np.ndarray:
        """Center `image` on a max(W, H) square filled with pad_value."""
        image = _three_channels(image)
        h, w = image.shape[:2]
        padding = SquarePadding.for_size(w, h)
        canvas = np.full((padding.square, padding.square, 3), self.pad_value, dtype=image.dtype)
        x0 = int(padding.pad_x)
        y0 = int(padding.pad_y)
        canvas[y0:y0 + h, x0:x0 + w] = image
        return canvas

    def to_tensor(self, image: np.ndarray, source_order: str = "bgr") -> np.ndarray:
        """
        Resize `image` to S x S (no aspect preservation) and scale to [0, 1].

        Used directly for stage-B crops, and after square padding for stage A.
        """
        image = _three_channels(image)
        resized = cv2.resize(image, (self.input_size, self.input_size), interpolation=cv2.INTER_LINEAR)
        if source_order != self.channel_order:
            resized = resized[..., ::-1]
        tensor = resized.astype(np.float32) / 255.0
        if self.tensor_layout == "nchw":
            tensor = tensor.transpose(2, 0, 1)
        return np.ascontiguousarray(tensor[np.newaxis])

    def normalize(self, frame: FrameData) -> NormalizedFrame:
        """Square-pad and tensorize a full frame.

        Raises:
            InvalidGeometry: If the frame has no pixels.
        """
        if frame.width <= 0 or frame.height <= 0 or frame.frame.size == 0:
            raise InvalidGeometry(f"empty frame {frame.width}x{frame.height}")
        padding = SquarePadding.for_size(frame.width, frame.height)
        padded = self.pad_to_square(frame.frame)
        tensor = self.to_tensor(padded, source_order=frame.channel_order)
        return NormalizedFrame(tensor=tensor, padding=padding, input_size=self.input_size)
