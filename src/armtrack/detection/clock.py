"""Frame timestamps for MediaPipe VIDEO and LIVE_STREAM running modes."""

from typing import Optional


class FrameClock:
    """
    Produces strictly increasing millisecond timestamps.

    MediaPipe rejects a frame whose timestamp is not greater than the previous
    one. Camera timestamps can repeat or step back, so each one is bumped past
    the last one issued. Frames without a timestamp advance by ~33 ms (30 FPS).
    """

    FRAME_STEP_MS = 33

    def __init__(self):
        self._synthetic = 0
        self._last = -1

    def next(self, timestamp_ms: Optional[int] = None) -> int:
        if timestamp_ms is None:
            self._synthetic += self.FRAME_STEP_MS
            timestamp_ms = self._synthetic
        self._last = max(int(timestamp_ms), self._last + 1)
        return self._last
