"""Tests for LatencyStore."""

import math
import threading

import pytest

from adaptive_model_router.latency import DEFAULT_MAX_SAMPLES, LatencyStore
from adaptive_model_router.observability.constants import MODEL_LATENCY_SECONDS


class TestLatencyStore:
    """Tests for recording and reading latency samples."""

    @pytest.fixture
    def store(self):
        return LatencyStore(max_samples=3)

    def test_default_capacity(self):
        assert LatencyStore().max_samples == DEFAULT_MAX_SAMPLES == 100

    def test_invalid_capacity_rejected(self):
        with pytest.raises(ValueError):
            LatencyStore(max_samples=0)

    def test_no_samples_is_infinite(self, store):
        assert store.mean_latency("gemini-2.5-pro") == math.inf
        assert store.sample_count("gemini-2.5-pro") == 0

    def test_mean(self, store):
        store.record_latency("m", 100)
        store.record_latency("m", 300)
        assert store.mean_latency("m") == 200.0

    def test_oldest_sample_evicted(self, store):
        for value in (1000, 10, 20, 30):
            store.record_latency("m", value)
        assert store.sample_count("m") == 3
        assert store.mean_latency("m") == 20.0

    def test_models_are_independent(self, store):
        store.record_latency("a", 100)
        assert store.mean_latency("b") == math.inf

    @pytest.mark.parametrize("value", [-1.0, float("nan")])
    def test_invalid_sample_rejected(self, store, value):
        with pytest.raises(ValueError):
            store.record_latency("m", value)
        assert store.sample_count("m") == 0

    def test_get_latencies(self, store):
        store.record_latency("a", 50)
        latencies = store.get_latencies(["a", "b"])
        assert latencies == {"a": 50.0, "b": math.inf}

    def test_fastest_model(self, store):
        store.record_latency("slow", 900)
        store.record_latency("fast", 100)
        assert store.fastest_model(["slow", "fast", "unmeasured"]) == "fast"

    def test_fastest_model_tie_keeps_first(self, store):
        store.record_latency("a", 100)
        store.record_latency("b", 100)
        assert store.fastest_model(["b", "a"]) == "b"

    def test_fastest_model_without_samples(self, store):
        assert store.fastest_model(["a", "b"]) == "a"
        assert store.fastest_model([]) is None

    def test_clear_one_model(self, store):
        store.record_latency("a", 1)
        store.record_latency("b", 1)
        store.clear("a")
        assert store.sample_count("a") == 0
        assert store.sample_count("b") == 1

    def test_clear_all(self, store):
        store.record_latency("a", 1)
        store.record_latency("b", 1)
        store.clear()
        assert store.mean_latency("a") == math.inf
        assert store.mean_latency("b") == math.inf

    def test_concurrent_recording_respects_capacity(self):
        store = LatencyStore(max_samples=50)

        def worker():
            for _ in range(500):
                store.record_latency("m", 10)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert store.sample_count("m") == 50
        assert store.mean_latency("m") == 10.0

    def test_histogram_observed_in_seconds(self, collector):
        store = LatencyStore(metrics_collector=collector)
        store.record_latency("m", 1500)
        summary = collector.get_metrics()["histograms"][MODEL_LATENCY_SECONDS]["model_id=m"]
        assert summary["sum"] == 1.5
