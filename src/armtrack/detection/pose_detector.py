"""
Pose Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe PoseLandmarker for a single person and forwards every
result (including "no pose") to registered listeners.
"""

import numpy as np
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple
from pathlib import Path

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..types import Point3D, PoseLandmarks
from .assets import MODELS_DIR, POSE_LANDMARKER_MODEL_URL, download_model
from .clock import FrameClock

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PATH = MODELS_DIR / "pose_landmarker_full.task"

PoseListener = Callable[[Optional[PoseLandmarks]], None]


@dataclass
class PoseDetectorConfig:
    """Configuration for pose detector."""
    model_path: str = ""
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"  # IMAGE, VIDEO, or LIVE_STREAM

    @classmethod
    def from_dict(cls, d: dict) -> "PoseDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "VIDEO"),
        )


def pose_from_result(result: Any, width: int, height: int) -> Optional[PoseLandmarks]:
    """Convert a PoseLandmarkerResult into PoseLandmarks for the first pose."""
    if not result.pose_landmarks:
        return None

    landmarks = result.pose_landmarks[0]
    if len(landmarks) == 0:
        return None

    return PoseLandmarks(
        landmarks=[Point3D(x=lm.x, y=lm.y, z=lm.z) for lm in landmarks],
        visibility=[float(getattr(lm, "visibility", None) or 0.0) for lm in landmarks],
        image_width=width,
        image_height=height,
    )


class PoseDetector:
    """
    Pose detection wrapper using MediaPipe Tasks API (PoseLandmarker).

    Only one pose is requested from the model. Delivery follows the same
    rules as HandDetector: synchronous in IMAGE/VIDEO mode, through
    MediaPipe's result callback in LIVE_STREAM mode.

    Example:
        >>> with PoseDetector() as detector:
        ...     pose = detector.detect(rgb_image)
        ...     if pose:
        ...         elbow = select_elbow_point(pose.landmarks)
    """

    def __init__(self, config: Optional[PoseDetectorConfig] = None):
        self.config = config or PoseDetectorConfig()
        self._landmarker: Optional[vision.PoseLandmarker] = None
        self._listeners: List[PoseListener] = []
        self._clock = FrameClock()
        self._image_size: Tuple[int, int] = (0, 0)
        self.last_pose: Optional[PoseLandmarks] = None

    def add_listener(self, callback: PoseListener) -> None:
        """Register a callback receiving every detection result."""
        self._listeners.append(callback)

    def start(self) -> bool:
        """Initialize the pose landmarker."""
        try:
            model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

            if not Path(model_path).exists():
                if not download_model(POSE_LANDMARKER_MODEL_URL, Path(model_path)):
                    logger.error("Could not download pose landmarker model")
                    return False

            if self.config.running_mode == "IMAGE":
                running_mode = vision.RunningMode.IMAGE
            elif self.config.running_mode == "LIVE_STREAM":
                running_mode = vision.RunningMode.LIVE_STREAM
            else:
                running_mode = vision.RunningMode.VIDEO

            options = vision.PoseLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=model_path),
                running_mode=running_mode,
                num_poses=1,
                min_pose_detection_confidence=self.config.min_detection_confidence,
                min_pose_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
                output_segmentation_masks=False,
                result_callback=self._on_async_result if running_mode == vision.RunningMode.LIVE_STREAM else None,
            )

            self._landmarker = vision.PoseLandmarker.create_from_options(options)

            logger.info(f"PoseLandmarker initialized with model: {model_path}")
            logger.info(f"Running mode: {self.config.running_mode}")

            return True

        except Exception as e:
            logger.error(f"Failed to initialize PoseLandmarker: {e}")
            return False

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
        logger.info("PoseLandmarker stopped")

    def detect(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> Optional[PoseLandmarks]:
        """
        Detect a pose in the given image.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Timestamp in milliseconds (VIDEO / LIVE_STREAM)

        Returns:
            The detected pose, or None (always None in LIVE_STREAM mode)
        """
        if self._landmarker is None:
            logger.warning("PoseLandmarker not initialized. Call start() first.")
            return None

        height, width = image.shape[:2]
        self._image_size = (width, height)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)

        if self.config.running_mode == "IMAGE":
            result = self._landmarker.detect(mp_image)
        else:
            timestamp_ms = self._clock.next(timestamp_ms)
            if self.config.running_mode == "LIVE_STREAM":
                self._landmarker.detect_async(mp_image, timestamp_ms)
                return None
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        pose = pose_from_result(result, width, height)
        self._publish(pose)
        return pose

    def _on_async_result(self, result: Any, output_image: Any, timestamp_ms: int) -> None:
        width, height = self._image_size
        self._publish(pose_from_result(result, width, height))

    def _publish(self, pose: Optional[PoseLandmarks]) -> None:
        self.last_pose = pose
        for callback in self._listeners:
            callback(pose)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
