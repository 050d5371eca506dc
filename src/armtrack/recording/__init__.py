"""Point selection and session recording."""
from .point_selector import select_elbow_point, select_hand_point
from .tracking_state import TrackingState
from .session import RecordingBuffer, Sample, SessionRecorder, SessionState
from .sampling_loop import SamplingLoop, SamplingLoopConfig

__all__ = [
    "select_hand_point",
    "select_elbow_point",
    "TrackingState",
    "RecordingBuffer",
    "Sample",
    "SessionRecorder",
    "SessionState",
    "SamplingLoop",
    "SamplingLoopConfig",
]
