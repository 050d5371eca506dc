"""
Point Selector
===============

Reduces raw detector output to at most one representative point per
detector: the wrist of the first detected hand, and the right elbow
(falling back to the left elbow) of the detected pose.

Only the first hand in the detector's list is tracked. Every detected hand
is still drawn by the overlay; the others are simply never sampled. There is
no confidence-based re-ranking.
"""

from typing import Any, Optional, Sequence

from ..types import HandLandmarkIndex, Point3D, PoseLandmarkIndex

# Elbow lookup order: right elbow first, left elbow as fallback
ELBOW_PREFERENCE = (PoseLandmarkIndex.RIGHT_ELBOW, PoseLandmarkIndex.LEFT_ELBOW)


def _to_point(landmark: Any) -> Point3D:
    return Point3D(float(landmark.x), float(landmark.y), float(landmark.z))


def _landmark_at(landmarks: Sequence[Any], index: int) -> Optional[Any]:
    if index < len(landmarks):
        return landmarks[index]
    return None


def select_hand_point(hand_landmark_sets: Optional[Sequence[Sequence[Any]]]) -> Optional[Point3D]:
    """
    Select the wrist of the first detected hand.

    Args:
        hand_landmark_sets: Landmark sequences, one per detected hand, in
            detector order. Each landmark needs x, y and z attributes.

    Returns:
        Wrist point, or None when no hand was detected or the first hand
        has no landmarks.
    """
    if not hand_landmark_sets:
        return None

    first_hand = hand_landmark_sets[0]
    if first_hand is None or len(first_hand) == 0:
        return None

    wrist = first_hand[HandLandmarkIndex.WRIST]
    if wrist is None:
        return None
    return _to_point(wrist)


def select_elbow_point(pose_landmarks: Optional[Sequence[Any]]) -> Optional[Point3D]:
    """
    Select the right elbow, or the left elbow if the right one is missing.

    Args:
        pose_landmarks: Landmark sequence of the single detected pose, or
            None when no pose was detected.

    Returns:
        Elbow point, or None when neither elbow is present.
    """
    if not pose_landmarks:
        return None

    for index in ELBOW_PREFERENCE:
        landmark = _landmark_at(pose_landmarks, index)
        if landmark is not None:
            return _to_point(landmark)

    return None
