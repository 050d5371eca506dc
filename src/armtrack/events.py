"""
Session event hand-off.

The recorder announces session boundaries on a bus; the chart stage and the
application subscribe instead of being called by the recorder directly.

Usage:
    bus = EventBus()
    bus.subscribe(Events.SESSION_STOPPED, chart_builder.handle_session_stopped)
    bus.emit(Events.SESSION_STOPPED, buffer=samples)
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe.

    Listeners run in the emitting thread in subscription order. A listener
    that raises is logged and the remaining listeners still run.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_name: str, callback: Callable) -> None:
        """Register ``callback`` to receive the keyword arguments of every emit."""
        with self._lock:
            self._listeners[event_name].append(callback)
        logger.debug("Subscribed to '%s': %s",
                     event_name, getattr(callback, "__name__", repr(callback)))

    def emit(self, event_name: str, **kwargs) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event_name, ()))

        for callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", repr(callback)), e)


class Events:
    """Event names."""

    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"  # buffer=<RecordingBuffer>
    CHART_RENDERED = "chart_rendered"    # path=<str or None>, sample_count=<int>
    CAMERA_ERROR = "camera_error"        # device_id=<int>
