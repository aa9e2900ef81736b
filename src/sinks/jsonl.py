"""
JSON-lines result sink.

Writes one FrameResultResponse document per delivered frame. Usable
directly as the scheduler's on_result callback.
"""

from __future__ import annotations

import logging
import threading
from typing import IO, Optional

from models.frame import FrameData
from models.result import FrameResult
from .api_models import FrameResultResponse


class JsonLinesSink:
    def __init__(self, stream: IO[str], skip_empty: bool = False):
        self._stream = stream
        self._skip_empty = skip_empty
        self._lock = threading.Lock()
        self.written = 0

    def __call__(self, frame_data: FrameData, result: FrameResult) -> None:
        if self._skip_empty and not result.has_detection and result.error is None:
            return
        payload = FrameResultResponse.from_result(
            result, timestamp=frame_data.timestamp, source=frame_data.source
        )
        with self._lock:
            self._stream.write(payload.model_dump_json() + "\n")
            self._stream.flush()
            self.written += 1

    @classmethod
    def open(cls, path: str, skip_empty: bool = False) -> "JsonLinesSink":
        logging.info(f"Writing frame results to {path}")
        return cls(open(path, "a", encoding="utf-8"), skip_empty=skip_empty)

    def close(self) -> None:
        with self._lock:
            self._stream.close()


class LatestResultHolder:
    """Keeps the most recent result for a display loop on another thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._result: Optional[FrameResult] = None

    def __call__(self, frame_data: FrameData, result: FrameResult) -> None:
        with self._lock:
            self._result = result

    def get(self) -> Optional[FrameResult]:
        with self._lock:
            return self._result
