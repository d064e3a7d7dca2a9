# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Per-model routing policy models.

Policies are loaded once at startup and are immutable afterwards. Pydantic
validates each entry; both snake_case field names and the camelCase keys of
policy JSON files are accepted.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..types.classification import ClassificationResult, OperationCategory


class DegradationRules(BaseModel):
    """
    Constraints gating a model's eligibility as a substitute target.

    A model qualifies for a request only when all rules hold: the request's
    category is preferred, its token count lies in ``[min_tokens, max_tokens]``
    (inclusive) and the model's current mean latency is at most
    ``max_latency_ms``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_latency_ms: float = Field(alias="maxLatency", ge=0)
    min_tokens: int = Field(default=0, alias="minTokens", ge=0)
    max_tokens: int = Field(alias="maxTokens", ge=0)
    preferred_categories: frozenset[OperationCategory] = Field(
        default_factory=frozenset, alias="preferredForTypes"
    )

    @model_validator(mode="after")
    def _validate_token_range(self) -> "DegradationRules":
        """Validate that min_tokens does not exceed max_tokens."""
        if self.min_tokens > self.max_tokens:
            raise ValueError("min_tokens must not exceed max_tokens")
        return self

    def admits(self, classification: ClassificationResult, latency_ms: float) -> bool:
        """Whether a request with this classification may be sent here."""
        if classification.category not in self.preferred_categories:
            return False
        if not self.min_tokens <= classification.token_count <= self.max_tokens:
            return False
        if math.isnan(latency_ms) or math.isinf(latency_ms):
            return False
        return latency_ms <= self.max_latency_ms


class ModelPolicy(BaseModel):
    """
    Static routing policy for one backend model.

    Attributes:
        model_id: Model identifier used in requests
        priority: Evaluation order, lower is preferred
        average_latency_hint_ms: Typical latency, informational only
        cost_per_token: Price per token, informational only
        context_window_tokens: Context window size
        suitable_categories: Categories the model is generally good at
        best_for: Free-text notes on what the model is best at
        degradation: Rules making the model a substitution target; models
            without rules are never selected by the router
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    model_id: str = Field(min_length=1)
    priority: int
    average_latency_hint_ms: float = Field(default=0.0, alias="averageLatency", ge=0)
    cost_per_token: float = Field(default=0.0, alias="costPerToken", ge=0)
    context_window_tokens: int = Field(default=0, alias="contextWindow", ge=0)
    suitable_categories: frozenset[OperationCategory] = Field(
        default_factory=frozenset, alias="suitableCategories"
    )
    best_for: tuple[str, ...] = Field(default=(), alias="bestFor")
    degradation: DegradationRules | None = Field(default=None, alias="degradationRules")

    def qualifies(self, classification: ClassificationResult, latency_ms: float) -> bool:
        """Whether this model may replace the requested one."""
        if self.degradation is None:
            return False
        return self.degradation.admits(classification, latency_ms)


__all__ = ["DegradationRules", "ModelPolicy"]
