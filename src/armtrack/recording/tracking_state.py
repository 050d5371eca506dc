"""
Tracking State
===============

Latest-known hand and elbow points shared between the detector result
callbacks (writers) and the sampling tick (reader).

Each slot has exactly one writer: the hand detector callback writes
``current_hand`` and the pose detector callback writes ``current_elbow``.
Every callback overwrites its slot, so a frame without a detection clears a
previously present value. No staleness is tracked.

The two slots are not updated atomically as a pair. A reader sees whatever
each writer delivered last, which may come from different video frames.
No lock is taken because a lock would not make the pair consistent either.
"""

import logging
from typing import Any, Optional, Sequence, Tuple

from ..types import Point3D
from .point_selector import select_elbow_point, select_hand_point

logger = logging.getLogger(__name__)


class TrackingState:
    """
    Holds the current hand and elbow points.

    Example:
        >>> state = TrackingState()
        >>> hand_detector.add_listener(lambda hands: state.update_hand(
        ...     [h.landmarks for h in hands]))
        >>> pose_detector.add_listener(lambda pose: state.update_elbow(
        ...     pose.landmarks if pose else None))
        >>> hand, elbow = state.snapshot()
    """

    def __init__(self):
        self._current_hand: Optional[Point3D] = None
        self._current_elbow: Optional[Point3D] = None

    def update_hand(self, hand_landmark_sets: Optional[Sequence[Sequence[Any]]]) -> Optional[Point3D]:
        """Overwrite the hand slot from one hand detector result."""
        point = select_hand_point(hand_landmark_sets)
        if (point is None) != (self._current_hand is None):
            logger.debug("Hand %s", "lost" if point is None else "acquired")
        self._current_hand = point
        return point

    def update_elbow(self, pose_landmarks: Optional[Sequence[Any]]) -> Optional[Point3D]:
        """Overwrite the elbow slot from one pose detector result."""
        point = select_elbow_point(pose_landmarks)
        if (point is None) != (self._current_elbow is None):
            logger.debug("Elbow %s", "lost" if point is None else "acquired")
        self._current_elbow = point
        return point

    @property
    def current_hand(self) -> Optional[Point3D]:
        return self._current_hand

    @property
    def current_elbow(self) -> Optional[Point3D]:
        return self._current_elbow

    def snapshot(self) -> Tuple[Optional[Point3D], Optional[Point3D]]:
        """Read both slots as they are right now."""
        return self._current_hand, self._current_elbow

    def reset(self) -> None:
        """Clear both slots."""
        self._current_hand = None
        self._current_elbow = None
