"""
Visualization Module
=====================

Overlays for the live view: every detected hand, the pose skeleton, the
tracked wrist and elbow, and the recording status.
"""

import cv2
import numpy as np
from typing import List, Optional, Tuple
from dataclasses import dataclass

from ..types import HAND_CONNECTIONS, POSE_CONNECTIONS, HandLandmarks, Point3D, PoseLandmarks


@dataclass
class VisualizerConfig:
    """Visualization settings."""
    show_hands: bool = True
    show_pose: bool = True
    show_tracked_points: bool = True
    show_status: bool = True

    # Colors (BGR format)
    hand_connection_color: Tuple[int, int, int] = (0, 255, 0)     # #00FF00
    hand_landmark_color: Tuple[int, int, int] = (0, 0, 255)       # #FF0000
    pose_connection_color: Tuple[int, int, int] = (255, 170, 0)   # #00AAFF
    pose_landmark_color: Tuple[int, int, int] = (0, 170, 255)     # #FFAA00
    tracked_color: Tuple[int, int, int] = (255, 255, 255)
    recording_color: Tuple[int, int, int] = (0, 0, 255)
    text_color: Tuple[int, int, int] = (0, 255, 255)

    font_scale: float = 0.6
    font_thickness: int = 2

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        return cls(
            show_hands=config.get("show_hands", True),
            show_pose=config.get("show_pose", True),
            show_tracked_points=config.get("show_tracked_points", True),
            show_status=config.get("show_status", True),
            font_scale=config.get("font_scale", 0.6),
            font_thickness=config.get("font_thickness", 2),
        )


class Visualizer:
    """
    Live view overlay.

    All detected hands are drawn even though only the first one is
    tracked; the tracked points get an extra ring.

    Example:
        >>> viz = Visualizer(VisualizerConfig())
        >>> viz.draw_hands(frame.image, hands)
        >>> viz.draw_pose(frame.image, pose)
        >>> viz.draw_status(frame.image, recording=True, sample_count=42, fps=30)
    """

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_hands(self, image: np.ndarray, hands: List[HandLandmarks]) -> np.ndarray:
        """Draw every detected hand."""
        if not self.config.show_hands:
            return image

        height, width = image.shape[:2]
        for hand in hands:
            count = len(hand.landmarks)
            for start_idx, end_idx in HAND_CONNECTIONS:
                if start_idx < count and end_idx < count:
                    cv2.line(image,
                             hand.landmarks[start_idx].to_pixel(width, height),
                             hand.landmarks[end_idx].to_pixel(width, height),
                             self.config.hand_connection_color, 2)
            for lm in hand.landmarks:
                cv2.circle(image, lm.to_pixel(width, height), 3,
                           self.config.hand_landmark_color, -1)
        return image

    def draw_pose(self, image: np.ndarray, pose: Optional[PoseLandmarks]) -> np.ndarray:
        """Draw the pose skeleton."""
        if not self.config.show_pose or pose is None:
            return image

        height, width = image.shape[:2]
        count = len(pose)
        for start_idx, end_idx in POSE_CONNECTIONS:
            if start_idx < count and end_idx < count:
                cv2.line(image,
                         pose.landmarks[start_idx].to_pixel(width, height),
                         pose.landmarks[end_idx].to_pixel(width, height),
                         self.config.pose_connection_color, 2)
        for lm in pose.landmarks:
            cv2.circle(image, lm.to_pixel(width, height), 3,
                       self.config.pose_landmark_color, -1)
        return image

    def draw_tracked_points(
        self,
        image: np.ndarray,
        hand: Optional[Point3D],
        elbow: Optional[Point3D],
    ) -> np.ndarray:
        """Ring the wrist and elbow currently used for recording."""
        if not self.config.show_tracked_points:
            return image

        height, width = image.shape[:2]
        for label, point in (("wrist", hand), ("elbow", elbow)):
            if point is None:
                continue
            x, y = point.to_pixel(width, height)
            cv2.circle(image, (x, y), 10, self.config.tracked_color, 2)
            cv2.putText(image, label, (x + 12, y - 8), self._font, 0.5,
                        self.config.tracked_color, 1)
        return image

    def draw_status(
        self,
        image: np.ndarray,
        recording: bool,
        sample_count: int,
        fps: float = 0.0,
    ) -> np.ndarray:
        """Draw recording indicator, sample count and FPS."""
        if not self.config.show_status:
            return image

        x, y = 20, 30
        if recording:
            cv2.circle(image, (x, y - 6), 8, self.config.recording_color, -1)
            cv2.putText(image, f"REC  {sample_count} samples", (x + 16, y),
                        self._font, self.config.font_scale,
                        self.config.recording_color, self.config.font_thickness)
        else:
            cv2.putText(image, f"IDLE  last session: {sample_count} samples", (x, y),
                        self._font, self.config.font_scale,
                        self.config.text_color, self.config.font_thickness)

        cv2.putText(image, f"FPS: {fps:.1f}", (x, y + 28),
                    self._font, self.config.font_scale,
                    self.config.text_color, self.config.font_thickness)
        return image

    def draw_instructions(self, image: np.ndarray, instructions: List[str]) -> np.ndarray:
        """Draw key help in the bottom-left corner."""
        height = image.shape[0]
        line_height = 20
        y = height - len(instructions) * line_height - 10

        for i, line in enumerate(instructions):
            cv2.putText(image, line, (10, y + i * line_height),
                        self._font, 0.5, self.config.text_color, 1)
        return image
