"""
Latest-wins frame scheduling.

Frames are handed over from the capture thread and processed on a single
worker thread. At most one frame is in flight; a frame that arrives while
another is waiting replaces it (the older one is dropped, never queued).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from models.config import SchedulerConfig
from models.frame import FrameData
from models.result import FrameResult
from pipeline.engine import PipelineEngine

ViewportFn = Callable[[], Tuple[int, int]]
ResultCallback = Callable[[FrameData, FrameResult], None]


@dataclass
class SchedulerStats:
    """Counters for the latest-wins scheduler."""
    submitted: int = 0
    dropped: int = 0
    processed: int = 0
    discarded: int = 0


class LatestFrameScheduler:
    """
    Runs a PipelineEngine off the capture thread with latest-wins backpressure.

    The viewport is read once per frame, right before processing. Every
    finished run is delivered unless drop_superseded_results is set, in
    which case a result whose frame was superseded by a newer submission
    while it ran is discarded.

    Example:
        scheduler = LatestFrameScheduler(engine, lambda: (800, 800), on_result)
        scheduler.start()
        for frame_data in source:
            scheduler.submit(frame_data)
        scheduler.stop()
    """

    def __init__(
        self,
        engine: PipelineEngine,
        viewport: ViewportFn,
        on_result: ResultCallback,
        config: Optional[SchedulerConfig] = None,
    ):
        self.engine = engine
        self.config = config or SchedulerConfig()
        self.stats = SchedulerStats()
        self._viewport = viewport
        self._on_result = on_result
        self._cond = threading.Condition()
        self._pending: Optional[FrameData] = None
        self._generation = 0
        self._busy = False
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the worker thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._worker, name="pipeline-worker", daemon=True)
        self._thread.start()
        logging.info("Frame scheduler started")

    def submit(self, frame_data: FrameData) -> bool:
        """
        Offer a frame for processing.

        Returns:
            True if an older pending frame was dropped to make room.
        """
        with self._cond:
            dropped = self._pending is not None
            if dropped:
                self.stats.dropped += 1
                logging.debug(f"Dropping pending frame {self._pending.frame_index}")
            self._pending = frame_data
            self._generation += 1
            self.stats.submitted += 1
            self._cond.notify()
        return dropped

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until nothing is pending or in flight."""
        with self._cond:
            return self._cond.wait_for(lambda: self._pending is None and not self._busy, timeout)

    def stop(self) -> None:
        """Stop the worker after the in-flight frame, dropping any pending one."""
        with self._cond:
            self._running = False
            self._pending = None
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout=self.config.join_timeout)
            self._thread = None
        logging.info(
            f"Frame scheduler stopped: submitted={self.stats.submitted}, "
            f"processed={self.stats.processed}, dropped={self.stats.dropped}, "
            f"discarded={self.stats.discarded}"
        )

    def _worker(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending is not None or not self._running)
                if not self._running:
                    return
                frame_data = self._pending
                self._pending = None
                generation = self._generation
                self._busy = True

            try:
                result = self.engine.process(frame_data, self._viewport())
                self._deliver(frame_data, result, generation)
            except Exception as e:
                logging.error(f"Frame {frame_data.frame_index} processing error: {e}")
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()

    def _deliver(self, frame_data: FrameData, result: FrameResult, generation: int) -> None:
        with self._cond:
            self.stats.processed += 1
            superseded = generation != self._generation
            if superseded and self.config.drop_superseded_results:
                self.stats.discarded += 1
                logging.debug(f"Discarding result for superseded frame {frame_data.frame_index}")
                return
        try:
            self._on_result(frame_data, result)
        except Exception as e:
            logging.warning(f"Result callback error: {e}")
