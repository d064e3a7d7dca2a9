# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Model selection for incoming code-assistant requests.

For a privileged user whose fast quota is exhausted the router looks for a
cheaper or faster model that can serve the request equally well. Models are
evaluated in ascending priority; the first one whose degradation rules admit
the request's category, token count and the model's current mean latency is
selected. In every other case the request keeps its original model.

The router never raises: any internal failure results in pass-through.
"""

import contextlib
import logging
import time
from collections.abc import Callable
from typing import Any

from ..classifier.operation import OperationClassifier
from ..config import RouterConfig
from ..latency.store import LatencyStore
from ..observability.constants import ROUTE_DURATION_SECONDS, ROUTING_DECISIONS_TOTAL
from ..observability.protocols import MetricsCollectorProtocol
from ..policy.defaults import default_policy_table
from ..policy.table import PolicyTable
from ..protocols.classifier import ClassifierProtocol
from ..state.user_state_cache import UserStateCache
from ..types.classification import ClassificationResult
from ..types.request import RouteRequest, RoutingDecision

logger = logging.getLogger(__name__)

DecisionListener = Callable[[RoutingDecision], None]

REASON_NOT_PRIVILEGED = "not_privileged"
REASON_FAST_QUOTA = "fast_quota_available"
REASON_DEGRADED = "degraded"
REASON_NO_MATCH = "no_match"
REASON_ERROR = "error"


class ModelRouter:
    """
    Chooses the model that serves each request.

    Every call to ``route`` emits exactly one ``RoutingDecision``: it is
    logged, counted by reason and handed to registered listeners.
    """

    def __init__(
        self,
        user_state_cache: UserStateCache,
        classifier: ClassifierProtocol | None = None,
        latency_store: LatencyStore | None = None,
        policy_table: PolicyTable | None = None,
        config: RouterConfig | None = None,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ):
        """
        Initialize the router.

        Args:
            user_state_cache: Source of the user's tier and quota
            classifier: Operation classifier (default rule set when omitted)
            latency_store: Rolling latency samples per model
            policy_table: Static per-model policies (original three-model table when omitted)
            config: Router configuration
            metrics_collector: Optional metrics sink
        """
        self._user_state = user_state_cache
        self._classifier = classifier or OperationClassifier(metrics_collector=metrics_collector)
        self._latency = latency_store or LatencyStore(metrics_collector=metrics_collector)
        self._policies = policy_table if policy_table is not None else default_policy_table()
        self.config = config or RouterConfig()
        self._metrics_collector = metrics_collector
        self._listeners: list[DecisionListener] = []

    @property
    def policy_table(self) -> PolicyTable:
        return self._policies

    @property
    def latency_store(self) -> LatencyStore:
        return self._latency

    def add_listener(self, listener: DecisionListener) -> None:
        """Register a callback receiving every routing decision."""
        self._listeners.append(listener)

    def remove_listener(self, listener: DecisionListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    async def route(self, request: RouteRequest | dict[str, Any]) -> str:
        """
        Decide which model serves ``request``.

        Args:
            request: The request, or the host's raw payload dict

        Returns:
            The selected model id; the requested one on pass-through

        Raises:
            ValueError: If a payload dict has no model id string
        """
        start = time.perf_counter()
        if isinstance(request, dict):
            request = RouteRequest.from_dict(request)

        try:
            decision = await self._decide(request)
        except Exception as e:
            logger.error(f"Routing failed for request {request.request_id}, passing through: {e}")
            decision = RoutingDecision(
                request_id=request.request_id,
                original_model=request.model,
                selected_model=request.model,
                reason=REASON_ERROR,
            )

        self._emit(decision, time.perf_counter() - start)
        return decision.selected_model

    async def _decide(self, request: RouteRequest) -> RoutingDecision:
        state = await self._user_state.get_user_state()
        if not state.is_privileged:
            return self._pass_through(request, REASON_NOT_PRIVILEGED)

        if self.config.passthrough_when_quota_available and state.fast_quota_remaining > 0:
            return self._pass_through(request, REASON_FAST_QUOTA)

        classification = self._classifier.classify_request(request)
        selected = self._select(classification)
        if selected is None:
            return self._pass_through(request, REASON_NO_MATCH, classification)

        return RoutingDecision(
            request_id=request.request_id,
            original_model=request.model,
            selected_model=selected,
            category=classification.category,
            token_count=classification.token_count,
            reason=REASON_DEGRADED,
        )

    def _select(self, classification: ClassificationResult) -> str | None:
        """First qualifying model in ascending priority, or None."""
        latencies = self._latency.get_latencies(self._policies.model_ids)
        for policy in self._policies:
            if policy.qualifies(classification, latencies[policy.model_id]):
                return policy.model_id
        return None

    @staticmethod
    def _pass_through(
        request: RouteRequest,
        reason: str,
        classification: ClassificationResult | None = None,
    ) -> RoutingDecision:
        classification = classification or ClassificationResult.unknown()
        return RoutingDecision(
            request_id=request.request_id,
            original_model=request.model,
            selected_model=request.model,
            category=classification.category,
            token_count=classification.token_count,
            reason=reason,
        )

    def _emit(self, decision: RoutingDecision, duration: float) -> None:
        if decision.rerouted:
            logger.info(
                f"Routed {decision.request_id}: {decision.original_model} -> "
                f"{decision.selected_model} ({decision.category.value}, "
                f"{decision.token_count} tokens)"
            )
        else:
            logger.debug(
                f"Pass-through {decision.request_id}: {decision.original_model} "
                f"({decision.reason})"
            )

        if self._metrics_collector and self.config.metrics_enabled:
            self._metrics_collector.inc_counter(
                ROUTING_DECISIONS_TOTAL, labels={"reason": decision.reason}
            )
            self._metrics_collector.observe_histogram(ROUTE_DURATION_SECONDS, duration)

        for listener in list(self._listeners):
            try:
                listener(decision)
            except Exception as e:
                logger.error(f"Routing decision listener failed: {e}")


__all__ = [
    "REASON_DEGRADED",
    "REASON_ERROR",
    "REASON_FAST_QUOTA",
    "REASON_NOT_PRIVILEGED",
    "REASON_NO_MATCH",
    "DecisionListener",
    "ModelRouter",
]
