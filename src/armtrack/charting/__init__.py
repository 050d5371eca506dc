"""Trajectory chart rendering."""
from .chart_builder import ChartBuilder, ChartConfig, ChartSeries

__all__ = ["ChartBuilder", "ChartConfig", "ChartSeries"]
