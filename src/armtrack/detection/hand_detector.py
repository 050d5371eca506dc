"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker and forwards every result to registered
listeners. Up to two hands are detected by default; all of them are handed
on, and it is up to the listener which one it tracks.
"""

import numpy as np
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple
from pathlib import Path

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..types import HandLandmarks, Point3D
from .assets import HAND_LANDMARKER_MODEL_URL, MODELS_DIR, download_model
from .clock import FrameClock

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PATH = MODELS_DIR / "hand_landmarker.task"

HandListener = Callable[[List[HandLandmarks]], None]


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"  # IMAGE, VIDEO, or LIVE_STREAM

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            max_num_hands=d.get("max_num_hands", 2),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "VIDEO"),
        )


def hands_from_result(result: Any, width: int, height: int) -> List[HandLandmarks]:
    """Convert a HandLandmarkerResult into HandLandmarks, keeping detector order."""
    hands = []
    for i, hand_landmarks in enumerate(result.hand_landmarks or []):
        handedness = "Right"
        confidence = 0.0
        if result.handedness and len(result.handedness) > i and result.handedness[i]:
            handedness = result.handedness[i][0].category_name
            confidence = result.handedness[i][0].score

        hands.append(HandLandmarks(
            landmarks=[Point3D(x=lm.x, y=lm.y, z=lm.z) for lm in hand_landmarks],
            handedness=handedness,
            confidence=confidence,
            image_width=width,
            image_height=height,
        ))
    return hands


class HandDetector:
    """
    Hand detection wrapper using MediaPipe Tasks API (HandLandmarker).

    In IMAGE and VIDEO mode ``detect()`` runs synchronously, returns the
    hands and notifies listeners before returning. In LIVE_STREAM mode
    ``detect()`` only submits the frame; listeners are notified from
    MediaPipe's result callback once the frame has been processed.

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.add_listener(lambda hands: print(len(hands)))
        >>> detector.start()
        >>> hands = detector.detect(rgb_image)  # RGB format!
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._listeners: List[HandListener] = []
        self._clock = FrameClock()
        self._image_size: Tuple[int, int] = (0, 0)
        self.last_hands: List[HandLandmarks] = []

    def add_listener(self, callback: HandListener) -> None:
        """Register a callback receiving every detection result."""
        self._listeners.append(callback)

    def start(self) -> bool:
        """Initialize the hand landmarker."""
        try:
            model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

            if not Path(model_path).exists():
                if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                    logger.error("Could not download hand landmarker model")
                    return False

            if self.config.running_mode == "IMAGE":
                running_mode = vision.RunningMode.IMAGE
            elif self.config.running_mode == "LIVE_STREAM":
                running_mode = vision.RunningMode.LIVE_STREAM
            else:
                running_mode = vision.RunningMode.VIDEO

            base_options = python.BaseOptions(model_asset_path=model_path)

            options = vision.HandLandmarkerOptions(
                base_options=base_options,
                running_mode=running_mode,
                num_hands=self.config.max_num_hands,
                min_hand_detection_confidence=self.config.min_detection_confidence,
                min_hand_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
                result_callback=self._on_async_result if running_mode == vision.RunningMode.LIVE_STREAM else None,
            )

            self._landmarker = vision.HandLandmarker.create_from_options(options)

            logger.info(f"HandLandmarker initialized with model: {model_path}")
            logger.info(f"Running mode: {self.config.running_mode}, Max hands: {self.config.max_num_hands}")

            return True

        except Exception as e:
            logger.error(f"Failed to initialize HandLandmarker: {e}")
            return False

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
        logger.info("HandLandmarker stopped")

    def detect(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> List[HandLandmarks]:
        """
        Detect hands in the given image.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Timestamp in milliseconds (VIDEO / LIVE_STREAM)

        Returns:
            Detected hands in detector order. Empty in LIVE_STREAM mode,
            where results arrive through the listeners.
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []

        height, width = image.shape[:2]
        self._image_size = (width, height)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)

        if self.config.running_mode == "IMAGE":
            result = self._landmarker.detect(mp_image)
        else:
            timestamp_ms = self._clock.next(timestamp_ms)
            if self.config.running_mode == "LIVE_STREAM":
                self._landmarker.detect_async(mp_image, timestamp_ms)
                return []
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        hands = hands_from_result(result, width, height)
        self._publish(hands)
        return hands

    def _on_async_result(self, result: Any, output_image: Any, timestamp_ms: int) -> None:
        width, height = self._image_size
        self._publish(hands_from_result(result, width, height))

    def _publish(self, hands: List[HandLandmarks]) -> None:
        self.last_hands = hands
        for callback in self._listeners:
            callback(hands)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
