"""
ArmTrack Motion Recorder
=========================

Records the trajectory of the wrist and elbow from a live camera feed and
charts it after each recording session.

Modules:
    - capture: Camera frame acquisition
    - detection: MediaPipe hand and pose landmark detection
    - recording: Point selection, session recording, sampling loop
    - charting: Post-session trajectory chart
    - utils: Configuration, logging, performance, visualization
"""

__version__ = "1.0.0"
__author__ = "ArmTrack Team"
