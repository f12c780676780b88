"""Prometheus metrics for the key-value client."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all client-side metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Transport metrics
        self.requests_total = Counter(
            "kv_client_http_requests_total",
            "Total HTTP requests performed",
            ["method", "code"],
            registry=self._registry,
        )

        self.failed_requests_total = Counter(
            "kv_client_http_failed_requests_total",
            "Requests whose response code was not expected",
            ["method"],
            registry=self._registry,
        )

        self.request_latency_seconds = Histogram(
            "kv_client_http_request_latency_seconds",
            "HTTP request latency in seconds",
            ["method"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        # Object mapping metrics
        self.objects_dumped_total = Counter(
            "kv_client_objects_dumped_total",
            "Objects serialized for storage",
            ["encoding"],  # binary, http
            registry=self._registry,
        )

        self.objects_loaded_total = Counter(
            "kv_client_objects_loaded_total",
            "Objects deserialized from responses",
            ["encoding"],
            registry=self._registry,
        )

        self.siblings_detected_total = Counter(
            "kv_client_siblings_detected_total",
            "Sibling content versions returned by the store",
            ["encoding"],
            registry=self._registry,
        )

        self.charset_unrecognized_total = Counter(
            "kv_client_charset_unrecognized_total",
            "Content versions carrying an unknown charset label",
            registry=self._registry,
        )

        self.info = Info(
            "kv_client",
            "Key-value client information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the metrics registry.

    The client does not serve metrics itself; the embedding application
    exposes the registry however it serves Prometheus.

    Args:
        registry: Optional custom registry

    Returns:
        MetricsRegistry instance
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    _metrics.info.info({
        "version": "0.1.0",
        "component": "kv_client",
    })

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
