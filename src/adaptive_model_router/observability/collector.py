# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unified metrics collector supporting both dict-based and Prometheus metrics.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Automatic Prometheus metric registration when available and enabled
    3. Dict-based snapshot for JSON export and tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from adaptive_model_router.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('adaptive_mr_routing_decisions_total',
    ...                       labels={'reason': 'degraded'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
)

from .constants import (
    CLASSIFICATIONS_TOTAL,
    CREDENTIAL_REFRESH_FAILURES_TOTAL,
    CREDENTIAL_ROTATIONS_TOTAL,
    CREDENTIAL_VALIDATIONS_TOTAL,
    LATENCY_BUCKETS,
    MODEL_LATENCY_BUCKETS,
    MODEL_LATENCY_SECONDS,
    ROTATION_LIST_SIZE,
    ROUTE_DURATION_SECONDS,
    ROUTING_DECISIONS_TOTAL,
    UPSTREAM_ERRORS_TOTAL,
    USER_STATE_CACHE_HITS_TOTAL,
    USER_STATE_CACHE_MISSES_TOTAL,
)

logger = logging.getLogger(__name__)

try:
    from prometheus_client import (
        REGISTRY as _REGISTRY,
        Counter as _Counter,
        Gauge as _Gauge,
        Histogram as _Histogram,
        start_http_server as _start_http_server,
    )

    _PROM_TYPES: dict[str, Any] = {
        "counter": _Counter,
        "gauge": _Gauge,
        "histogram": _Histogram,
    }
    REGISTRY: Any | None = _REGISTRY
    start_http_server: Callable[..., Any] | None = _start_http_server
    PROMETHEUS_AVAILABLE = True
except ImportError:
    _PROM_TYPES = {}
    REGISTRY = None
    start_http_server = None
    PROMETHEUS_AVAILABLE = False


@dataclass
class MetricDefinition:
    """
    Definition for a metric that can be instantiated.
    """

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    ROUTING_DECISIONS_TOTAL: MetricDefinition(
        ROUTING_DECISIONS_TOTAL,
        "counter",
        "Total routing decisions",
        ("reason",),
    ),
    ROUTE_DURATION_SECONDS: MetricDefinition(
        ROUTE_DURATION_SECONDS,
        "histogram",
        "Time spent deciding a route",
        (),
        buckets=LATENCY_BUCKETS,
    ),
    CLASSIFICATIONS_TOTAL: MetricDefinition(
        CLASSIFICATIONS_TOTAL,
        "counter",
        "Total classifications by category",
        ("category",),
    ),
    MODEL_LATENCY_SECONDS: MetricDefinition(
        MODEL_LATENCY_SECONDS,
        "histogram",
        "Observed backend model latency",
        ("model_id",),
        buckets=MODEL_LATENCY_BUCKETS,
    ),
    USER_STATE_CACHE_HITS_TOTAL: MetricDefinition(
        USER_STATE_CACHE_HITS_TOTAL,
        "counter",
        "Total user-state cache hits",
        (),
    ),
    USER_STATE_CACHE_MISSES_TOTAL: MetricDefinition(
        USER_STATE_CACHE_MISSES_TOTAL,
        "counter",
        "Total user-state cache misses",
        (),
    ),
    UPSTREAM_ERRORS_TOTAL: MetricDefinition(
        UPSTREAM_ERRORS_TOTAL,
        "counter",
        "Total account-service errors",
        ("kind",),
    ),
    CREDENTIAL_VALIDATIONS_TOTAL: MetricDefinition(
        CREDENTIAL_VALIDATIONS_TOTAL,
        "counter",
        "Total credential validation probes",
        ("result",),
    ),
    CREDENTIAL_ROTATIONS_TOTAL: MetricDefinition(
        CREDENTIAL_ROTATIONS_TOTAL,
        "counter",
        "Total credential rotation searches",
        ("outcome",),
    ),
    CREDENTIAL_REFRESH_FAILURES_TOTAL: MetricDefinition(
        CREDENTIAL_REFRESH_FAILURES_TOTAL,
        "counter",
        "Total failed credential refresh ticks",
        (),
    ),
    ROTATION_LIST_SIZE: MetricDefinition(
        ROTATION_LIST_SIZE,
        "gauge",
        "Credentials persisted in the rotation file",
        (),
    ),
}


class UnifiedMetricsCollector:
    """
    Unified metrics collector supporting both dict-based and Prometheus metrics.

    Thread Safety:
        All dict updates use an RLock. Prometheus client objects are
        themselves thread-safe.

    Cardinality Protection:
        A maximum of MAX_LABEL_COMBINATIONS unique label combinations are
        tracked per metric; further combinations are dropped with a warning.
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000
    MAX_HISTOGRAM_OBSERVATIONS: ClassVar[int] = 10000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: Any | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to enable Prometheus metrics (if available)
            registry: Optional Prometheus CollectorRegistry for testing
        """
        self._enable_prometheus = enable_prometheus and PROMETHEUS_AVAILABLE
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )

        self._lock = threading.RLock()
        self._prom_metrics: dict[str, Any] = {}
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._server_running = False

        logger.debug(
            f"UnifiedMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        """Return True if this label combination may be recorded."""
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom(self, name: str, metric_type: str) -> Any | None:
        """Get or lazily register the Prometheus object for a metric."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            defn = METRIC_DEFINITIONS.get(name)
            if defn is None or defn.metric_type != metric_type:
                defn = MetricDefinition(name, metric_type, f"Dynamic {metric_type}: {name}")

            kwargs: dict[str, Any] = {"registry": self._registry}
            if metric_type == "histogram":
                kwargs["buckets"] = defn.buckets or LATENCY_BUCKETS
            try:
                metric = _PROM_TYPES[metric_type](
                    name, defn.description, list(defn.label_names), **kwargs
                )
            except Exception as e:
                logger.warning(f"Failed to create Prometheus {metric_type} {name}: {e}")
                return None

            self._prom_metrics[name] = metric
            return metric

    def _apply_prom(
        self,
        name: str,
        metric_type: str,
        method: str,
        value: float,
        labels: dict[str, str] | None,
    ) -> None:
        prom = self._get_or_create_prom(name, metric_type)
        if prom is None:
            return
        try:
            target = prom.labels(**labels) if labels else prom
            getattr(target, method)(value)
        except Exception as e:
            logger.debug(f"Prometheus {metric_type} update failed for {name}: {e}")

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        self._apply_prom(name, "counter", "inc", value, labels)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to a specific value."""
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        self._apply_prom(name, "gauge", "set", value, labels)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record an observation in a histogram."""
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            if len(observations) > self.MAX_HISTOGRAM_OBSERVATIONS:
                self._histograms[name][label_key] = observations[
                    -(self.MAX_HISTOGRAM_OBSERVATIONS // 2) :
                ]

        self._apply_prom(name, "histogram", "observe", value, labels)

    # === Snapshot Operations ===

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {
                name: dict(label_values)
                for name, label_values in self._counters.items()
            }
            gauges = {
                name: dict(label_values) for name, label_values in self._gauges.items()
            }
            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {}
                for label_key, observations in label_values.items():
                    if observations:
                        histograms[name][label_key] = {
                            "count": len(observations),
                            "sum": sum(observations),
                            "avg": sum(observations) / len(observations),
                            "min": min(observations),
                            "max": max(observations),
                        }

        return {
            "counters": counters,
            "gauges": gauges,
            "histograms": histograms,
        }

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    # === Lifecycle ===

    def reset(self) -> None:
        """Reset all dict-based metrics to zero."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Returns:
            True if the server is running, False otherwise
        """
        if not PROMETHEUS_AVAILABLE or start_http_server is None:
            logger.warning(
                "Cannot start Prometheus server: prometheus_client not installed"
            )
            return False

        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
            self._server_running = True
            logger.info(f"Prometheus metrics server started on {host}:{port}")
            return True
        except Exception as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

    @property
    def prometheus_enabled(self) -> bool:
        """Check if Prometheus metrics are enabled."""
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Process-wide accessor
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(
    enable_prometheus: bool = True,
) -> UnifiedMetricsCollector:
    """
    Get or create the global metrics collector.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """Reset the global metrics collector (mainly for testing)."""
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "PROMETHEUS_AVAILABLE",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
