"""Observability module - logging and metrics."""

from ocrcast.observability.logging import setup_logging, get_logger
from ocrcast.observability.metrics import get_metrics, OCRMetrics

__all__ = ["setup_logging", "get_logger", "get_metrics", "OCRMetrics"]
