# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Rolling per-model latency samples used as a live health signal."""

import logging
import math
import threading
from collections import deque
from collections.abc import Iterable

from ..observability.constants import MODEL_LATENCY_SECONDS
from ..observability.protocols import MetricsCollectorProtocol

logger = logging.getLogger(__name__)

DEFAULT_MAX_SAMPLES = 100


class LatencyStore:
    """
    Bounded FIFO of recent latency samples per model.

    Appends for one model are serialized by a per-model lock; reads take a
    snapshot of the deque without locking. Nothing is persisted: the store
    describes current health, not history.

    Models without samples report ``math.inf``, which never satisfies a
    latency ceiling.
    """

    def __init__(
        self,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ):
        if max_samples < 1:
            raise ValueError("max_samples must be at least 1")
        self._max_samples = max_samples
        self._samples: dict[str, deque[float]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._metrics_collector = metrics_collector

    @property
    def max_samples(self) -> int:
        return self._max_samples

    def _lock_for(self, model: str) -> threading.Lock:
        lock = self._locks.get(model)
        if lock is None:
            with self._registry_lock:
                self._samples.setdefault(model, deque(maxlen=self._max_samples))
                lock = self._locks.setdefault(model, threading.Lock())
        return lock

    def record_latency(self, model: str, latency_ms: float) -> None:
        """
        Append one latency sample, evicting the oldest beyond capacity.

        Raises:
            ValueError: If latency_ms is negative or not a number
        """
        if math.isnan(latency_ms) or latency_ms < 0:
            raise ValueError("latency_ms must be a non-negative number")

        with self._lock_for(model):
            self._samples[model].append(float(latency_ms))

        if self._metrics_collector:
            self._metrics_collector.observe_histogram(
                MODEL_LATENCY_SECONDS, latency_ms / 1000.0, labels={"model_id": model}
            )
        logger.debug(f"Recorded latency for {model}: {latency_ms:.1f}ms")

    def mean_latency(self, model: str) -> float:
        """Mean of the current samples for a model, or infinity if none."""
        samples = self._samples.get(model)
        if not samples:
            return math.inf
        snapshot = tuple(samples)
        if not snapshot:
            return math.inf
        return sum(snapshot) / len(snapshot)

    def get_latencies(self, models: Iterable[str]) -> dict[str, float]:
        """Map each model to its mean latency in ms (infinity without samples)."""
        return {model: self.mean_latency(model) for model in models}

    def fastest_model(self, models: Iterable[str]) -> str | None:
        """
        Model with the lowest mean latency.

        Ties keep the earlier model; returns None for an empty input.
        """
        fastest: str | None = None
        fastest_latency = math.inf
        for model in models:
            latency = self.mean_latency(model)
            if fastest is None or latency < fastest_latency:
                fastest, fastest_latency = model, latency
        return fastest

    def sample_count(self, model: str) -> int:
        samples = self._samples.get(model)
        return len(samples) if samples else 0

    def clear(self, model: str | None = None) -> None:
        """Drop samples for one model, or for all models."""
        with self._registry_lock:
            targets = [model] if model is not None else list(self._samples)
        for name in targets:
            lock = self._locks.get(name)
            if lock is None:
                continue
            with lock:
                self._samples[name].clear()


__all__ = ["DEFAULT_MAX_SAMPLES", "LatencyStore"]
