"""
ArmTrack Motion Recorder - Main Application
=============================================

Entry point for the wrist/elbow trajectory recorder.
Wires camera, hand and pose detectors, the session recorder and the chart
stage, and runs the live display loop.
"""

import cv2
import logging
import argparse
import signal
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .capture.camera import Camera, CameraConfig
from .charting.chart_builder import ChartBuilder, ChartConfig
from .detection.hand_detector import HandDetector, HandDetectorConfig
from .detection.pose_detector import PoseDetector, PoseDetectorConfig
from .events import EventBus, Events
from .recording.sampling_loop import SamplingLoop, SamplingLoopConfig
from .recording.session import SessionRecorder
from .recording.tracking_state import TrackingState
from .types import HandLandmarks, PoseLandmarks
from .utils.config import load_config
from .utils.logger import setup_logging
from .utils.performance import PerformanceMonitor
from .utils.visualization import Visualizer, VisualizerConfig

logger = logging.getLogger(__name__)

WINDOW_NAME = "ArmTrack"
CHART_WINDOW_NAME = "ArmTrack - motion chart"

INSTRUCTIONS = [
    "r: start recording",
    "s: stop recording + chart",
    "p: performance report",
    "q/ESC: quit",
]


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    hands: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    pose: PoseDetectorConfig = field(default_factory=PoseDetectorConfig)
    sampling: SamplingLoopConfig = field(default_factory=SamplingLoopConfig)
    chart: ChartConfig = field(default_factory=ChartConfig)
    visualization: VisualizerConfig = field(default_factory=VisualizerConfig)


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        hands=HandDetectorConfig.from_dict(config_dict.get("hands", {})),
        pose=PoseDetectorConfig.from_dict(config_dict.get("pose", {})),
        sampling=SamplingLoopConfig.from_dict(config_dict.get("recording", {})),
        chart=ChartConfig.from_dict(config_dict.get("chart", {})),
        visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
    )


class ArmTrackApplication:
    """
    Live wrist/elbow recorder.

    Per display tick: read the newest camera frame, run the hand detector
    and the pose detector (their listeners overwrite the current wrist and
    elbow), draw the overlay, then let the sampling loop take one sample.
    The loop keeps running between sessions; only start/stop decide whether
    samples are kept.
    """

    def __init__(self, config: AppConfig, event_bus: Optional[EventBus] = None):
        self.config = config
        self.event_bus = event_bus or EventBus()

        self.camera = Camera(config.camera)
        self.hand_detector = HandDetector(config.hands)
        self.pose_detector = PoseDetector(config.pose)
        self.tracking = TrackingState()
        self.recorder = SessionRecorder(self.tracking, self.event_bus)
        self.sampler = SamplingLoop(self.recorder, config.sampling)
        self.chart_builder = ChartBuilder(config.chart, self.event_bus)
        self.visualizer = Visualizer(config.visualization)
        self.performance = PerformanceMonitor()

        self.hand_detector.add_listener(self._on_hand_results)
        self.pose_detector.add_listener(self._on_pose_results)
        self.event_bus.subscribe(Events.SESSION_STOPPED, self.chart_builder.handle_session_stopped)
        self.event_bus.subscribe(Events.CHART_RENDERED, self._on_chart_rendered)

        self._chart_pending = False
        self._last_frame_number = -1

    # === Detector result callbacks ===

    def _on_hand_results(self, hands: List[HandLandmarks]) -> None:
        self.tracking.update_hand([hand.landmarks for hand in hands])

    def _on_pose_results(self, pose: Optional[PoseLandmarks]) -> None:
        self.tracking.update_elbow(pose.landmarks if pose is not None else None)

    def _on_chart_rendered(self, path: Optional[str] = None, sample_count: int = 0) -> None:
        self._chart_pending = self.chart_builder.last_chart_image is not None

    # === Commands ===

    def start_recording(self) -> None:
        self.recorder.start()

    def stop_recording(self) -> None:
        self.recorder.stop()

    # === Lifecycle ===

    def start(self) -> bool:
        """Start camera and detectors."""
        logger.info("Starting ArmTrack...")

        if not self.camera.start():
            logger.error("Camera unavailable; recorder cannot run")
            self.event_bus.emit(Events.CAMERA_ERROR, device_id=self.config.camera.device_id)
            return False

        if not self.hand_detector.start() or not self.pose_detector.start():
            logger.error("Landmark models could not be initialized")
            self.camera.stop()
            return False

        self.performance.start()
        logger.info("ArmTrack started. Press 'r' to record, 's' to stop.")
        return True

    def stop(self) -> None:
        """Stop all components."""
        if self.recorder.is_recording:
            self.recorder.stop()

        self.camera.stop()
        self.hand_detector.stop()
        self.pose_detector.stop()
        self.performance.stop()

        cv2.destroyAllWindows()
        logger.info("ArmTrack stopped")

    def run(self) -> bool:
        """
        Run until the user quits.

        Returns:
            False if startup failed (camera or models), True otherwise
        """
        if not self.start():
            return False

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self.sampler.run(step=self.process_frame)
        finally:
            self.stop()
        return True

    # === Per-tick step ===

    def process_frame(self) -> bool:
        """
        Capture, detect and draw one frame.

        Returns:
            False when the user asked to quit
        """
        self.performance.frame_start()

        with self.performance.measure("capture"):
            frame = self.camera.read()

        if frame is None:
            return self._handle_key(cv2.waitKey(1) & 0xFF)

        # The threaded camera may hand back the same frame twice
        if frame.frame_number != self._last_frame_number:
            self._last_frame_number = frame.frame_number
            rgb = frame.rgb
            with self.performance.measure("hand_detection"):
                self.hand_detector.detect(rgb, frame.timestamp_ms)
            with self.performance.measure("pose_detection"):
                self.pose_detector.detect(rgb, frame.timestamp_ms)

        with self.performance.measure("render"):
            display = frame.image.copy()
            self.visualizer.draw_pose(display, self.pose_detector.last_pose)
            self.visualizer.draw_hands(display, self.hand_detector.last_hands)
            hand, elbow = self.tracking.snapshot()
            self.visualizer.draw_tracked_points(display, hand, elbow)
            self.visualizer.draw_status(
                display,
                recording=self.recorder.is_recording,
                sample_count=self.recorder.sample_count,
                fps=self.performance.fps,
            )
            self.visualizer.draw_instructions(display, INSTRUCTIONS)
            cv2.imshow(WINDOW_NAME, display)

            if self._chart_pending:
                cv2.imshow(CHART_WINDOW_NAME, self.chart_builder.last_chart_image)
                self._chart_pending = False

        self.performance.frame_complete()
        return self._handle_key(cv2.waitKey(1) & 0xFF)

    def _handle_key(self, key: int) -> bool:
        if key in (ord('q'), 27):
            return False
        if key == ord('r'):
            self.start_recording()
        elif key == ord('s'):
            self.stop_recording()
        elif key == ord('p'):
            print(self.performance.get_report())
        return True

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self.sampler.cancel()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Record wrist and elbow trajectories from a webcam",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  r         - Start recording (restarts if already recording)
  s         - Stop recording and render the chart
  p         - Print performance report
  q/ESC     - Quit

Examples:
  armtrack
  armtrack --config config/config.yaml --device 1
        """
    )
    parser.add_argument("--config", "-c", default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--device", type=int, default=None,
                        help="Camera device index (overrides config)")
    parser.add_argument("--output-dir", default=None,
                        help="Directory for rendered charts (overrides config)")
    parser.add_argument("--no-chart-window", action="store_true",
                        help="Only save charts, do not open a chart window")
    parser.add_argument("--debug", "-d", action="store_true",
                        help="Enable debug logging")
    args = parser.parse_args(argv)

    config_dict = load_config(args.config)

    log_cfg = config_dict.get("logging", {})
    setup_logging(
        level="DEBUG" if args.debug else log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
    )

    app_config = create_app_config(config_dict)
    if args.device is not None:
        app_config.camera.device_id = args.device
    if args.output_dir:
        app_config.chart.output_dir = args.output_dir
    if args.no_chart_window:
        app_config.chart.show_window = False

    app = ArmTrackApplication(app_config)
    started_at = time.time()
    ok = app.run()
    if ok:
        logger.info("Session ended after %.0fs", time.time() - started_at)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
