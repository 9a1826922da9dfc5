"""
Prometheus metrics for monitoring.
"""

from functools import lru_cache
from prometheus_client import Counter, Histogram, Gauge, Info

from ocrcast import __version__


class OCRMetrics:
    """OCR service metrics."""

    def __init__(self):
        # Request metrics
        self.requests_total = Counter(
            "ocrcast_requests_total",
            "Total OCR requests",
            ["engine", "status"]
        )

        self.request_duration = Histogram(
            "ocrcast_request_duration_seconds",
            "OCR request duration",
            ["engine"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
        )

        # Processing metrics
        self.pipeline_duration = Histogram(
            "ocrcast_pipeline_duration_seconds",
            "Image transform pipeline duration",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0)
        )

        self.engine_duration = Histogram(
            "ocrcast_engine_duration_seconds",
            "Recognition engine call duration",
            ["engine"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
        )

        self.local_lock_wait = Histogram(
            "ocrcast_local_engine_lock_wait_seconds",
            "Time spent queueing for the local engine handle",
            buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0)
        )

        # Result metrics
        self.characters_delivered = Counter(
            "ocrcast_characters_delivered_total",
            "Total characters handed to subscribers"
        )

        # Error metrics
        self.errors_total = Counter(
            "ocrcast_errors_total",
            "Total errors",
            ["error_type"]
        )

        # System metrics
        self.active_requests = Gauge(
            "ocrcast_active_requests",
            "Currently active requests"
        )

        self.subscribers = Gauge(
            "ocrcast_connected_subscribers",
            "Currently connected WebSocket subscribers"
        )

        # Info
        self.info = Info(
            "ocrcast",
            "OCR service information"
        )
        self.info.info({
            "version": __version__,
            "engines": "tesseract,googleLens"
        })

    def record_request(self, engine: str, status: str, duration: float):
        """Record a completed request."""
        self.requests_total.labels(engine=engine, status=status).inc()
        self.request_duration.labels(engine=engine).observe(duration)

    def record_engine_call(self, engine: str, duration: float):
        self.engine_duration.labels(engine=engine).observe(duration)

    def record_delivery(self, char_count: int):
        self.characters_delivered.inc(char_count)

    def record_error(self, error_type: str):
        """Record an error."""
        self.errors_total.labels(error_type=error_type).inc()


@lru_cache()
def get_metrics() -> OCRMetrics:
    """Get singleton metrics instance."""
    return OCRMetrics()
