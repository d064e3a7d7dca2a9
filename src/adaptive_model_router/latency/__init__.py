# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Latency telemetry for backend models."""

from .store import DEFAULT_MAX_SAMPLES, LatencyStore

__all__ = ["DEFAULT_MAX_SAMPLES", "LatencyStore"]
