# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `adaptive_mr_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    Only categorical labels are used:
    - `model_id` - Model name (bounded by the policy table)
    - `reason` - Routing outcome reason (enum)
    - `category` - Operation category (enum)
    - `kind` - Upstream error kind (enum)
    - `result` / `outcome` - Small enums

    NEVER use request ids, user ids or secrets as label values.
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "adaptive_mr"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Routing Metrics (router/selector.py)
# =============================================================================

ROUTING_DECISIONS_TOTAL = f"{METRIC_PREFIX}_routing_decisions_total"
"""Total routing decisions, labelled by reason (pass-through reasons included)."""

ROUTE_DURATION_SECONDS = f"{METRIC_PREFIX}_route_duration_seconds"
"""Time spent deciding a route (histogram)."""

CLASSIFICATIONS_TOTAL = f"{METRIC_PREFIX}_classifications_total"
"""Total classifier invocations by resulting category."""


# =============================================================================
# Latency Telemetry (metrics/latency.py)
# =============================================================================

MODEL_LATENCY_SECONDS = f"{METRIC_PREFIX}_model_latency_seconds"
"""Observed backend model latency (histogram)."""


# =============================================================================
# User State Cache (state/user_state_cache.py)
# =============================================================================

USER_STATE_CACHE_HITS_TOTAL = f"{METRIC_PREFIX}_user_state_cache_hits_total"
"""Total user-state lookups answered from cache."""

USER_STATE_CACHE_MISSES_TOTAL = f"{METRIC_PREFIX}_user_state_cache_misses_total"
"""Total user-state lookups that required an upstream fetch."""

UPSTREAM_ERRORS_TOTAL = f"{METRIC_PREFIX}_upstream_errors_total"
"""Total account-service failures by kind (unavailable, credential, quota, malformed)."""


# =============================================================================
# Credential Lifecycle (credentials/store.py)
# =============================================================================

CREDENTIAL_VALIDATIONS_TOTAL = f"{METRIC_PREFIX}_credential_validations_total"
"""Total live credential probes by result (valid, invalid, unavailable)."""

CREDENTIAL_ROTATIONS_TOTAL = f"{METRIC_PREFIX}_credential_rotations_total"
"""Total rotation searches by outcome (rotated, discovered, exhausted)."""

CREDENTIAL_REFRESH_FAILURES_TOTAL = f"{METRIC_PREFIX}_credential_refresh_failures_total"
"""Total refresh ticks that ended without a fresh credential."""

ROTATION_LIST_SIZE = f"{METRIC_PREFIX}_rotation_list_size"
"""Number of credentials currently persisted in the rotation file."""


# =============================================================================
# Histogram Buckets
# =============================================================================

LATENCY_BUCKETS = [0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
"""Buckets for decision-time histograms (seconds)."""

MODEL_LATENCY_BUCKETS = [0.25, 0.5, 1.0, 2.5, 5.0, 8.0, 12.0, 15.0, 30.0, 60.0]
"""Buckets for backend model latency histograms (seconds)."""


__all__ = [
    "CLASSIFICATIONS_TOTAL",
    "CREDENTIAL_REFRESH_FAILURES_TOTAL",
    "CREDENTIAL_ROTATIONS_TOTAL",
    "CREDENTIAL_VALIDATIONS_TOTAL",
    "LATENCY_BUCKETS",
    "METRIC_PREFIX",
    "MODEL_LATENCY_BUCKETS",
    "MODEL_LATENCY_SECONDS",
    "ROTATION_LIST_SIZE",
    "ROUTE_DURATION_SECONDS",
    "ROUTING_DECISIONS_TOTAL",
    "UPSTREAM_ERRORS_TOTAL",
    "USER_STATE_CACHE_HITS_TOTAL",
    "USER_STATE_CACHE_MISSES_TOTAL",
]
