"""
Performance Monitoring Module
==============================

Rolling FPS and per-stage timing for the capture/detect/draw loop.
"""

import time
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from collections import deque
from contextlib import contextmanager
import threading

logger = logging.getLogger(__name__)


@dataclass
class PerformanceMetrics:
    """Snapshot of loop performance."""
    fps: float = 0.0
    frame_time_ms: float = 0.0
    capture_time_ms: float = 0.0
    hand_detection_time_ms: float = 0.0
    pose_detection_time_ms: float = 0.0
    render_time_ms: float = 0.0
    total_frames: int = 0


class PerformanceMonitor:
    """
    Rolling performance monitor for the display loop.

    Example:
        >>> monitor = PerformanceMonitor()
        >>> monitor.start()
        >>> monitor.frame_start()
        >>> with monitor.measure("hand_detection"):
        ...     hands = hand_detector.detect(rgb)
        >>> monitor.frame_complete()
    """

    def __init__(self, window_size: int = 30):
        self.window_size = window_size
        self._frame_times: deque = deque(maxlen=window_size)
        self._stage_times: Dict[str, deque] = {}
        self._frame_start: Optional[float] = None
        self._total_frames = 0
        self._lock = threading.Lock()

    def start(self) -> None:
        self._total_frames = 0
        self._frame_times.clear()
        self._stage_times.clear()
        logger.debug("Performance monitor started")

    def stop(self) -> None:
        logger.info("Performance monitor stopped after %d frames (%.1f FPS)",
                    self._total_frames, self.fps)

    def frame_start(self) -> None:
        self._frame_start = time.perf_counter()

    def frame_complete(self) -> None:
        if self._frame_start is None:
            return
        frame_time = time.perf_counter() - self._frame_start
        with self._lock:
            self._frame_times.append(frame_time)
            self._total_frames += 1
        self._frame_start = None

    @contextmanager
    def measure(self, stage: str):
        """Time one named stage of the current frame."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                if stage not in self._stage_times:
                    self._stage_times[stage] = deque(maxlen=self.window_size)
                self._stage_times[stage].append(elapsed)

    @property
    def fps(self) -> float:
        with self._lock:
            if not self._frame_times:
                return 0.0
            avg_frame_time = sum(self._frame_times) / len(self._frame_times)
        return 1.0 / avg_frame_time if avg_frame_time > 0 else 0.0

    @property
    def frame_time_ms(self) -> float:
        with self._lock:
            if not self._frame_times:
                return 0.0
            return (sum(self._frame_times) / len(self._frame_times)) * 1000

    def stage_time_ms(self, stage: str) -> float:
        with self._lock:
            times = self._stage_times.get(stage)
            if not times:
                return 0.0
            return (sum(times) / len(times)) * 1000

    def get_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(
            fps=self.fps,
            frame_time_ms=self.frame_time_ms,
            capture_time_ms=self.stage_time_ms("capture"),
            hand_detection_time_ms=self.stage_time_ms("hand_detection"),
            pose_detection_time_ms=self.stage_time_ms("pose_detection"),
            render_time_ms=self.stage_time_ms("render"),
            total_frames=self._total_frames,
        )

    def get_report(self) -> str:
        """Formatted report for the console."""
        m = self.get_metrics()
        return (
            f"Performance Report\n"
            f"{'=' * 40}\n"
            f"FPS: {m.fps:.1f}  Frame time: {m.frame_time_ms:.1f}ms\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Capture: {m.capture_time_ms:.2f}ms\n"
            f"  Hand detection: {m.hand_detection_time_ms:.2f}ms\n"
            f"  Pose detection: {m.pose_detection_time_ms:.2f}ms\n"
            f"  Render: {m.render_time_ms:.2f}ms\n"
            f"\nTotal frames: {m.total_frames}\n"
        )
