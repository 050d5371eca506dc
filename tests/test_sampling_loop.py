"""
Tests for Sampling Loop
========================
"""

import pytest
import sys
import threading
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from armtrack.recording.sampling_loop import SamplingLoop, SamplingLoopConfig


@pytest.fixture
def recorder():
    mock = MagicMock()
    mock.is_recording = False
    return mock


class TestSamplingLoopConfig:
    """Test suite for SamplingLoopConfig."""

    def test_default_values(self):
        config = SamplingLoopConfig()

        assert config.tick_hz == 60.0
        assert config.gate_on_state is False

    def test_from_dict(self):
        config = SamplingLoopConfig.from_dict({"tick_hz": 30, "gate_on_state": True})

        assert config.tick_hz == 30
        assert config.gate_on_state is True

    @pytest.mark.parametrize("tick_hz", [0, -5.0])
    def test_from_dict_rejects_non_positive_rate(self, tick_hz):
        """A zero or negative rate would make run() busy-loop."""
        config = SamplingLoopConfig.from_dict({"tick_hz": tick_hz})

        assert config.tick_hz == 60.0
        assert config.interval == pytest.approx(1 / 60)

    def test_interval(self):
        assert SamplingLoopConfig(tick_hz=50).interval == pytest.approx(0.02)
        assert SamplingLoopConfig(tick_hz=0).interval == 0.0


class TestSamplingLoop:
    """Test suite for SamplingLoop."""

    def test_tick_calls_recorder_even_when_idle(self, recorder):
        """Without gating the recorder decides; it ignores ticks while idle."""
        loop = SamplingLoop(recorder)

        loop.tick()

        recorder.sample_tick.assert_called_once_with()
        assert loop.tick_count == 1

    def test_gated_tick_skips_idle_recorder(self, recorder):
        loop = SamplingLoop(recorder, SamplingLoopConfig(gate_on_state=True))

        loop.tick()
        recorder.is_recording = True
        loop.tick()

        assert recorder.sample_tick.call_count == 1
        assert loop.tick_count == 2

    def test_step_returning_false_stops_loop(self, recorder):
        loop = SamplingLoop(recorder, SamplingLoopConfig(tick_hz=0))
        results = iter([True, None, False])

        loop.run(step=lambda: next(results))

        assert loop.is_cancelled
        assert loop.tick_count == 2
        assert recorder.sample_tick.call_count == 2

    def test_step_runs_before_tick(self, recorder):
        order = []
        recorder.sample_tick.side_effect = lambda: order.append("tick")
        loop = SamplingLoop(recorder, SamplingLoopConfig(tick_hz=0))

        def step():
            order.append("step")
            return len(order) < 4

        loop.run(step=step)

        assert order == ["step", "tick", "step", "tick", "step"]

    def test_preset_token_prevents_ticks(self, recorder):
        token = threading.Event()
        token.set()
        loop = SamplingLoop(recorder, cancel_token=token)

        loop.run()

        assert loop.tick_count == 0
        recorder.sample_tick.assert_not_called()

    def test_cancel_from_other_thread(self, recorder):
        loop = SamplingLoop(recorder, SamplingLoopConfig(tick_hz=200))
        timer = threading.Timer(0.05, loop.cancel)
        timer.start()

        loop.run()
        timer.join()

        assert loop.is_cancelled
        assert loop.tick_count > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
