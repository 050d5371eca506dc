"""Hand and pose detection modules using MediaPipe."""
from .hand_detector import HandDetector, HandDetectorConfig
from .pose_detector import PoseDetector, PoseDetectorConfig

__all__ = ["HandDetector", "HandDetectorConfig", "PoseDetector", "PoseDetectorConfig"]
