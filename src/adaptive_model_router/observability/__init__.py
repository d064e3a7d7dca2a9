# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for the Adaptive Model Router.

Classes:
    UnifiedMetricsCollector: Unified metrics collector supporting dict and Prometheus.

Protocols:
    MetricsCollectorProtocol: Protocol for metrics collection backends.

Functions:
    get_metrics_collector: Get the global metrics collector.
    reset_metrics_collector: Reset the global metrics collector.
"""

from .collector import (
    METRIC_DEFINITIONS,
    PROMETHEUS_AVAILABLE,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    CLASSIFICATIONS_TOTAL,
    CREDENTIAL_REFRESH_FAILURES_TOTAL,
    CREDENTIAL_ROTATIONS_TOTAL,
    CREDENTIAL_VALIDATIONS_TOTAL,
    LATENCY_BUCKETS,
    METRIC_PREFIX,
    MODEL_LATENCY_BUCKETS,
    MODEL_LATENCY_SECONDS,
    ROTATION_LIST_SIZE,
    ROUTE_DURATION_SECONDS,
    ROUTING_DECISIONS_TOTAL,
    UPSTREAM_ERRORS_TOTAL,
    USER_STATE_CACHE_HITS_TOTAL,
    USER_STATE_CACHE_MISSES_TOTAL,
)
from .protocols import MetricsCollectorProtocol

__all__ = [
    "CLASSIFICATIONS_TOTAL",
    "CREDENTIAL_REFRESH_FAILURES_TOTAL",
    "CREDENTIAL_ROTATIONS_TOTAL",
    "CREDENTIAL_VALIDATIONS_TOTAL",
    "LATENCY_BUCKETS",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "MODEL_LATENCY_BUCKETS",
    "MODEL_LATENCY_SECONDS",
    "PROMETHEUS_AVAILABLE",
    "ROTATION_LIST_SIZE",
    "ROUTE_DURATION_SECONDS",
    "ROUTING_DECISIONS_TOTAL",
    "UPSTREAM_ERRORS_TOTAL",
    "USER_STATE_CACHE_HITS_TOTAL",
    "USER_STATE_CACHE_MISSES_TOTAL",
    "MetricDefinition",
    "MetricsCollectorProtocol",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
