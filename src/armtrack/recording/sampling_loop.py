"""
Sampling Loop
==============

Periodic tick driver bound to a cancellation token.

The loop keeps ticking for as long as the application runs, whether or not
a session is recording; the recorder itself ignores ticks while idle. With
``gate_on_state`` enabled the recorder is not even called while idle, which
is externally equivalent.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .session import SessionRecorder

logger = logging.getLogger(__name__)


@dataclass
class SamplingLoopConfig:
    """Sampling loop configuration."""
    tick_hz: float = 60.0        # Nominal display refresh rate
    gate_on_state: bool = False  # Skip recorder calls while idle

    @classmethod
    def from_dict(cls, config: dict) -> "SamplingLoopConfig":
        """Create config from dictionary; a non-positive rate falls back to 60 Hz."""
        tick_hz = config.get("tick_hz", 60.0)
        if isinstance(tick_hz, (int, float)) and tick_hz <= 0:
            logger.warning("recording.tick_hz must be positive, got %r; using 60", tick_hz)
            tick_hz = 60.0
        return cls(
            tick_hz=tick_hz,
            gate_on_state=config.get("gate_on_state", False),
        )

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.tick_hz if self.tick_hz > 0 else 0.0


class SamplingLoop:
    """
    Fires ``recorder.sample_tick()`` once per tick until cancelled.

    An optional per-tick step (frame capture, detection, drawing) runs
    before each sample so that the tick reads the freshest points. The step
    may return False to request shutdown.

    Example:
        >>> loop = SamplingLoop(recorder)
        >>> loop.run(step=app.process_frame)   # blocks until cancel()
    """

    def __init__(
        self,
        recorder: SessionRecorder,
        config: Optional[SamplingLoopConfig] = None,
        cancel_token: Optional[threading.Event] = None,
    ):
        self.recorder = recorder
        self.config = config or SamplingLoopConfig()
        self.cancel_token = cancel_token or threading.Event()
        self._tick_count = 0

    def tick(self) -> None:
        """Fire a single tick."""
        self._tick_count += 1
        if self.config.gate_on_state and not self.recorder.is_recording:
            return
        self.recorder.sample_tick()

    def run(self, step: Optional[Callable[[], Optional[bool]]] = None) -> None:
        """
        Tick until the cancellation token is set.

        Args:
            step: Called before every tick. Returning False cancels the loop.
        """
        interval = self.config.interval
        logger.info("Sampling loop started (%.0f Hz)", self.config.tick_hz)

        while not self.cancel_token.is_set():
            tick_start = time.perf_counter()

            if step is not None and step() is False:
                self.cancel()
                break

            self.tick()

            remaining = interval - (time.perf_counter() - tick_start)
            if remaining > 0:
                self.cancel_token.wait(remaining)

        logger.info("Sampling loop stopped after %d ticks", self._tick_count)

    def cancel(self) -> None:
        """Request the loop to stop after the current tick."""
        self.cancel_token.set()

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_token.is_set()

    @property
    def tick_count(self) -> int:
        return self._tick_count
