"""
Tests for Chart Builder
========================
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import matplotlib
matplotlib.use("Agg")

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from armtrack.charting.chart_builder import ChartBuilder, ChartConfig
from armtrack.events import EventBus, Events
from armtrack.recording.session import Sample, SessionRecorder
from armtrack.recording.tracking_state import TrackingState
from armtrack.types import Point3D


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def samples():
    return [
        Sample(frame=i, hand=Point3D(0.1 * i, 0.2, 0.0), elbow=Point3D(0.5, 0.05 * i, 0.0))
        for i in range(5)
    ]


@pytest.fixture
def builder(tmp_path, event_bus):
    config = ChartConfig(output_dir=str(tmp_path), show_window=False, width=4, height=3, dpi=50)
    return ChartBuilder(config, event_bus)


class TestChartConfig:
    """Test suite for ChartConfig."""

    def test_from_dict_partial(self):
        config = ChartConfig.from_dict({"output_dir": "charts", "show_window": False})

        assert config.output_dir == "charts"
        assert config.show_window is False
        assert config.save is True
        assert config.dpi == 100


class TestBuildSeries:
    """Test suite for series extraction."""

    def test_series_values(self, samples):
        series = ChartBuilder.build_series(samples)

        assert list(series.frames) == [0, 1, 2, 3, 4]
        assert series.hand_x[2] == pytest.approx(0.2)
        assert list(series.hand_y) == [0.2] * 5
        assert list(series.elbow_x) == [0.5] * 5
        assert series.elbow_y[4] == pytest.approx(0.2)

    def test_does_not_modify_buffer(self, samples):
        before = list(samples)

        ChartBuilder.build_series(samples)

        assert samples == before

    def test_empty_buffer(self):
        series = ChartBuilder.build_series([])

        assert series.is_empty
        assert len(series) == 0


class TestRender:
    """Test suite for chart rendering."""

    def test_four_labelled_series(self, builder, samples):
        fig = builder.render(samples)
        ax = fig.axes[0]

        labels = [line.get_label() for line in ax.get_lines()]
        assert labels == ["Hand X", "Hand Y", "Elbow X", "Elbow Y"]
        assert ax.get_xlabel() == "Frame"
        assert ax.get_ylim() == pytest.approx((0.0, 1.0))

    def test_x_axis_is_frame_index(self, builder, samples):
        fig = builder.render(samples)
        line = fig.axes[0].get_lines()[0]

        assert list(line.get_xdata()) == [0, 1, 2, 3, 4]

    def test_render_empty(self, builder):
        fig = builder.render([])

        assert all(len(line.get_xdata()) == 0 for line in fig.axes[0].get_lines())

    def test_to_image(self, builder, samples):
        image = ChartBuilder.to_image(builder.render(samples))

        assert image.ndim == 3
        assert image.shape[2] == 3
        assert image.shape[:2] == (150, 200)


class TestSessionStoppedHandler:
    """Test suite for the SESSION_STOPPED handler."""

    def test_saves_png(self, builder, samples, tmp_path):
        builder.handle_session_stopped(buffer=samples)

        assert builder.last_chart_path is not None
        path = Path(builder.last_chart_path)
        assert path.parent == tmp_path
        assert path.suffix == ".png"
        assert path.stat().st_size > 0

    def test_emits_chart_rendered(self, builder, samples, event_bus):
        handler = Mock()
        event_bus.subscribe(Events.CHART_RENDERED, handler)

        builder.handle_session_stopped(buffer=samples)

        handler.assert_called_once_with(path=builder.last_chart_path, sample_count=5)

    def test_empty_session_still_renders(self, builder, event_bus):
        handler = Mock()
        event_bus.subscribe(Events.CHART_RENDERED, handler)

        builder.handle_session_stopped(buffer=[])

        assert handler.call_args.kwargs["sample_count"] == 0

    def test_no_save_clears_previous_path(self, builder, samples):
        builder.handle_session_stopped(buffer=samples)
        builder.config.save = False

        builder.handle_session_stopped(buffer=samples)

        assert builder.last_chart_path is None

    def test_window_image(self, tmp_path, event_bus, samples):
        builder = ChartBuilder(ChartConfig(output_dir=str(tmp_path), save=False, dpi=50), event_bus)

        builder.handle_session_stopped(buffer=samples)

        assert builder.last_chart_image is not None
        assert list(tmp_path.iterdir()) == []

    def test_subscribed_to_recorder_stop(self, builder, samples, event_bus):
        event_bus.subscribe(Events.SESSION_STOPPED, builder.handle_session_stopped)

        event_bus.emit(Events.SESSION_STOPPED, buffer=samples)

        assert builder.last_chart_path is not None

    def test_sessions_in_same_second_keep_separate_charts(self, builder, event_bus, tmp_path):
        """Stops within one clock second, repeated stop included, keep separate charts."""
        tracking = TrackingState()
        tracking.update_hand([[Point3D(0.1, 0.2, 0.0)]])
        tracking.update_elbow([Point3D(0.4, 0.5, 0.0)] * 15)
        recorder = SessionRecorder(tracking, event_bus)
        event_bus.subscribe(Events.SESSION_STOPPED, builder.handle_session_stopped)

        paths = []
        with patch("armtrack.charting.chart_builder.time") as mock_time:
            mock_time.strftime.return_value = "20261019_120000"
            for ticks in (2, 3):
                recorder.start()
                for _ in range(ticks):
                    recorder.sample_tick()
                recorder.stop()
                paths.append(builder.last_chart_path)
            recorder.stop()
            paths.append(builder.last_chart_path)

        assert len(set(paths)) == 3
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "motion_chart_20261019_120000.png",
            "motion_chart_20261019_120000_1.png",
            "motion_chart_20261019_120000_2.png",
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
