"""Offline evaluation of the local model against labeled comments."""

from .datasets import Sample, load_samples
from .metrics import ModerationMetrics, calculate_metrics

__all__ = ["ModerationMetrics", "Sample", "calculate_metrics", "load_samples"]
