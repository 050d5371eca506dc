"""
Session Recorder
=================

Start/stop gated recording of hand and elbow samples.

A sample is appended on a tick only while recording and only when both the
hand and the elbow point are present at that moment. Ticks where either
point is missing are skipped without a placeholder and without advancing
the frame counter, so ``frame`` counts recorded samples, not elapsed ticks.
Once a tick has been skipped the frame axis is no longer proportional to
wall-clock time. Skipped ticks are counted and logged at stop so the loss is
visible.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..events import EventBus, Events
from ..types import Point3D
from .tracking_state import TrackingState

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Recording session status."""
    IDLE = "idle"
    RECORDING = "recording"


@dataclass(frozen=True)
class Sample:
    """One recorded tick: both points as they were when the tick fired."""
    frame: int
    hand: Point3D
    elbow: Point3D


# Append-only during a session, replaced (never cleared in place) by start()
RecordingBuffer = List[Sample]


class SessionRecorder:
    """
    Records samples between start() and stop().

    The buffer handed out by stop() is never touched again: start() binds a
    brand-new list instead of clearing the old one, so a chart built from a
    previous session cannot see samples from the next one.

    Example:
        >>> recorder = SessionRecorder(tracking_state)
        >>> recorder.start()
        >>> for _ in range(ticks):
        ...     recorder.sample_tick()
        >>> samples = recorder.stop()
    """

    def __init__(self, tracking: TrackingState, event_bus: Optional[EventBus] = None):
        self.tracking = tracking
        self.event_bus = event_bus or EventBus()

        self._state = SessionState.IDLE
        self._buffer: RecordingBuffer = []
        self._frame_counter = 0
        self._skipped_ticks = 0
        self._session_started_at: Optional[float] = None

    def start(self) -> None:
        """Begin a new session, discarding any previous samples."""
        if self._state is SessionState.RECORDING:
            logger.info("Recording restarted, discarding %d samples", len(self._buffer))

        self._buffer = []
        self._frame_counter = 0
        self._skipped_ticks = 0
        self._session_started_at = time.time()
        self._state = SessionState.RECORDING

        logger.info("Recording started")
        self.event_bus.emit(Events.SESSION_STARTED)

    def stop(self) -> RecordingBuffer:
        """
        End the session and hand the buffer to the chart stage.

        The buffer is kept as-is until the next start(). Calling stop() again
        re-sends the same buffer.

        Returns:
            The recorded samples (by reference; treat as read-only)
        """
        was_recording = self._state is SessionState.RECORDING
        self._state = SessionState.IDLE

        if was_recording:
            duration = time.time() - (self._session_started_at or time.time())
            logger.info(
                "Recording stopped: %d samples in %.1fs (%d ticks skipped without both points)",
                len(self._buffer), duration, self._skipped_ticks,
            )

        self.event_bus.emit(Events.SESSION_STOPPED, buffer=self._buffer)
        return self._buffer

    def sample_tick(self) -> Optional[Sample]:
        """
        Sample the current points once.

        Returns:
            The appended Sample, or None when idle or when either point is
            missing on this tick.
        """
        if self._state is not SessionState.RECORDING:
            return None

        hand, elbow = self.tracking.snapshot()
        if hand is None or elbow is None:
            self._skipped_ticks += 1
            return None

        sample = Sample(frame=self._frame_counter, hand=hand, elbow=elbow)
        self._buffer.append(sample)
        self._frame_counter += 1
        return sample

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def sample_count(self) -> int:
        return len(self._buffer)

    @property
    def frame_count(self) -> int:
        """Frame index the next sample will get."""
        return self._frame_counter

    @property
    def buffer(self) -> Tuple[Sample, ...]:
        """Read-only view of the current buffer."""
        return tuple(self._buffer)

    @property
    def skipped_ticks(self) -> int:
        """Recording ticks skipped in the current session."""
        return self._skipped_ticks
