"""
Chart Builder
==============

Turns a finished recording buffer into a line chart of the hand and elbow
trajectory: hand x, hand y, elbow x and elbow y against the frame index.
Depth (z) is recorded but not charted.

Rendering uses a matplotlib Figure with the Agg canvas directly, so it works
without a GUI backend. The rendered chart is saved as PNG and can be
rasterized for display in an OpenCV window.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import cv2
import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..events import EventBus, Events
from ..recording.session import Sample

logger = logging.getLogger(__name__)

# (label, RGBA color) per charted series
SERIES_STYLE = {
    "hand_x": ("Hand X", (255 / 255, 99 / 255, 132 / 255, 1.0)),
    "hand_y": ("Hand Y", (54 / 255, 162 / 255, 235 / 255, 1.0)),
    "elbow_x": ("Elbow X", (255 / 255, 206 / 255, 86 / 255, 1.0)),
    "elbow_y": ("Elbow Y", (75 / 255, 192 / 255, 192 / 255, 1.0)),
}


@dataclass
class ChartConfig:
    """Chart rendering configuration."""
    output_dir: str = "recordings"
    filename_prefix: str = "motion_chart"
    save: bool = True
    show_window: bool = True
    title: str = "Wrist / elbow trajectory"
    width: float = 10.0   # inches
    height: float = 5.0   # inches
    dpi: int = 100
    line_width: float = 1.0

    @classmethod
    def from_dict(cls, config: dict) -> "ChartConfig":
        """Create config from dictionary."""
        return cls(
            output_dir=config.get("output_dir", "recordings"),
            filename_prefix=config.get("filename_prefix", "motion_chart"),
            save=config.get("save", True),
            show_window=config.get("show_window", True),
            title=config.get("title", "Wrist / elbow trajectory"),
            width=config.get("width", 10.0),
            height=config.get("height", 5.0),
            dpi=config.get("dpi", 100),
            line_width=config.get("line_width", 1.0),
        )


@dataclass
class ChartSeries:
    """Four aligned series sharing one frame axis."""
    frames: np.ndarray
    hand_x: np.ndarray
    hand_y: np.ndarray
    elbow_x: np.ndarray
    elbow_y: np.ndarray

    def __len__(self) -> int:
        return int(self.frames.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0


class ChartBuilder:
    """
    Builds and renders the post-session trajectory chart.

    Example:
        >>> builder = ChartBuilder(ChartConfig(output_dir="out"), bus)
        >>> bus.subscribe(Events.SESSION_STOPPED, builder.handle_session_stopped)
        >>> # ... after recorder.stop()
        >>> builder.last_chart_path
        'out/motion_chart_20240101_120000.png'
    """

    def __init__(self, config: Optional[ChartConfig] = None, event_bus: Optional[EventBus] = None):
        self.config = config or ChartConfig()
        self.event_bus = event_bus or EventBus()
        self.last_chart_path: Optional[str] = None
        self.last_chart_image: Optional[np.ndarray] = None

    @staticmethod
    def build_series(buffer: Sequence[Sample]) -> ChartSeries:
        """Extract the charted series from a buffer without modifying it."""
        return ChartSeries(
            frames=np.array([s.frame for s in buffer], dtype=np.int64),
            hand_x=np.array([s.hand.x for s in buffer], dtype=np.float64),
            hand_y=np.array([s.hand.y for s in buffer], dtype=np.float64),
            elbow_x=np.array([s.elbow.x for s in buffer], dtype=np.float64),
            elbow_y=np.array([s.elbow.y for s in buffer], dtype=np.float64),
        )

    def render(self, buffer: Sequence[Sample]) -> Figure:
        """
        Render the trajectory chart.

        Args:
            buffer: Samples of one finished session

        Returns:
            matplotlib Figure with an Agg canvas attached
        """
        series = self.build_series(buffer)

        fig = Figure(figsize=(self.config.width, self.config.height), dpi=self.config.dpi)
        FigureCanvasAgg(fig)
        ax = fig.add_subplot(1, 1, 1)

        for key, (label, color) in SERIES_STYLE.items():
            ax.plot(
                series.frames,
                getattr(series, key),
                label=label,
                color=color,
                linewidth=self.config.line_width,
            )

        ax.set_title(self.config.title)
        ax.set_xlabel("Frame")
        ax.set_ylabel("Normalized coordinate")
        ax.set_ylim(0.0, 1.0)
        if not series.is_empty:
            ax.set_xlim(0, max(1, int(series.frames[-1])))
        ax.grid(True, alpha=0.3)
        ax.legend(loc="upper right")
        fig.tight_layout()

        return fig

    def save(self, figure: Figure, path: str) -> str:
        """Write the figure as PNG and return the path."""
        out_dir = os.path.dirname(path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        figure.savefig(path, dpi=self.config.dpi)
        logger.info("Chart saved to %s", path)
        return path

    @staticmethod
    def to_image(figure: Figure) -> np.ndarray:
        """Rasterize the figure to a BGR image for OpenCV display."""
        canvas = figure.canvas
        if not isinstance(canvas, FigureCanvasAgg):
            canvas = FigureCanvasAgg(figure)
        canvas.draw()
        rgba = np.asarray(canvas.buffer_rgba())
        return cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)

    def _next_chart_path(self) -> str:
        """Timestamped PNG path that does not overwrite an earlier chart."""
        stem = os.path.join(
            self.config.output_dir,
            f"{self.config.filename_prefix}_{time.strftime('%Y%m%d_%H%M%S')}",
        )
        path = f"{stem}.png"
        suffix = 1
        while os.path.exists(path):
            path = f"{stem}_{suffix}.png"
            suffix += 1
        return path

    def handle_session_stopped(self, buffer: Sequence[Sample]) -> None:
        """Event handler for Events.SESSION_STOPPED."""
        if not buffer:
            logger.warning("Session ended with no samples; rendering empty chart")

        figure = self.render(buffer)

        self.last_chart_path = None
        if self.config.save:
            self.last_chart_path = self.save(figure, self._next_chart_path())

        if self.config.show_window:
            self.last_chart_image = self.to_image(figure)

        self.event_bus.emit(
            Events.CHART_RENDERED,
            path=self.last_chart_path,
            sample_count=len(buffer),
        )
