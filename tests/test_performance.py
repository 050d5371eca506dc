"""
Tests for Performance Module
=============================
"""

import pytest
import time
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from armtrack.utils.performance import PerformanceMonitor


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor class."""

    @pytest.fixture
    def monitor(self):
        monitor = PerformanceMonitor(window_size=10)
        monitor.start()
        return monitor

    def test_initial_metrics(self, monitor):
        metrics = monitor.get_metrics()

        assert metrics.fps == 0.0
        assert metrics.total_frames == 0

    def test_frame_counting(self, monitor):
        for _ in range(3):
            monitor.frame_start()
            time.sleep(0.01)
            monitor.frame_complete()

        metrics = monitor.get_metrics()
        assert metrics.total_frames == 3
        assert 0 < metrics.fps < 150

    def test_complete_without_start_is_ignored(self, monitor):
        monitor.frame_complete()

        assert monitor.get_metrics().total_frames == 0

    def test_stage_timing(self, monitor):
        with monitor.measure("hand_detection"):
            time.sleep(0.01)

        assert monitor.stage_time_ms("hand_detection") >= 8
        assert monitor.stage_time_ms("pose_detection") == 0.0

    def test_stage_recorded_on_error(self, monitor):
        with pytest.raises(ValueError):
            with monitor.measure("render"):
                raise ValueError("draw failed")

        assert monitor.stage_time_ms("render") >= 0.0
        assert monitor.get_metrics().render_time_ms == monitor.stage_time_ms("render")

    def test_report(self, monitor):
        report = monitor.get_report()

        assert "Performance Report" in report
        assert "Pose detection" in report


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
