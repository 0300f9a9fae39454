"""
Metrics Collection with Prometheus.

Exposes callback URL and signature verification metrics for monitoring.
"""

from enum import StrEnum

from prometheus_client import Counter, Gauge, Histogram, Info

from signed_callbacks.config import settings


class MetricLabels(StrEnum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    STRATEGY = "strategy"
    ERROR_TYPE = "error_type"
    OPERATION = "operation"


class CallbackMetrics:
    """
    Centralized metrics for the signed callbacks API.

    Covers:
    - HTTP requests (rate, duration, errors)
    - Callback URL generation (signed vs unsigned)
    - Signature verification outcomes by strategy
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "callbacks_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "callbacks_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "callbacks_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "callbacks_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # ====================================================================
        # Callback URL Metrics
        # ====================================================================
        # Not labelled by provider: provider ids come from callers and are unbounded
        self.callback_urls_generated_total = Counter(
            "callbacks_urls_generated_total",
            "Total callback URLs generated",
            ["signed"],
        )

        # ====================================================================
        # Signature Verification Metrics
        # ====================================================================
        self.signature_verifications_total = Counter(
            "callbacks_signature_verifications_total",
            "Total callback signature verifications",
            [MetricLabels.STRATEGY, "valid"],
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "callbacks_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_url_generated(self, signed: bool) -> None:
        """Record callback URL generation."""
        self.callback_urls_generated_total.labels(signed=str(signed)).inc()

    def record_verification(self, strategy: str, valid: bool) -> None:
        """Record a signature verification outcome."""
        self.signature_verifications_total.labels(strategy=strategy, valid=str(valid)).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = CallbackMetrics()
