# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request and decision types for model routing.

This module defines the request passed to the router and the routing
decision event it emits for observability.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from .classification import OperationCategory


@dataclass
class RouteRequest:
    """
    A code-assistant request awaiting a routing decision.

    Attributes:
        model: Model the caller originally asked for (pass-through target)
        code_snippet: Code the operation applies to, if any
        prompt: Free-text instruction, if any
        code_context: Opaque surrounding context, carried but not inspected
        request_id: Identifier for correlating decision events
    """

    model: str
    code_snippet: str | None = None
    prompt: str | None = None
    code_context: Any = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def content(self) -> str:
        """Text to classify: the code snippet when present, else the prompt."""
        if self.code_snippet:
            return self.code_snippet
        return self.prompt or ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RouteRequest":
        """
        Build a request from the host's camelCase or snake_case payload.

        Raises:
            ValueError: If the payload has no model id string
        """
        model = data.get("model")
        if not isinstance(model, str) or not model:
            raise ValueError(f"Route request needs a model id string, got {model!r}")
        kwargs: dict[str, Any] = {
            "model": model,
            "code_snippet": data.get("code_snippet", data.get("codeSnippet")),
            "prompt": data.get("prompt"),
            "code_context": data.get("code_context", data.get("codeContext")),
        }
        request_id = data.get("request_id", data.get("requestId"))
        if request_id:
            kwargs["request_id"] = str(request_id)
        return cls(**kwargs)


@dataclass(frozen=True)
class RoutingDecision:
    """
    Telemetry event describing one routing outcome.

    Emitted for every request, pass-through included. Never persisted.

    Attributes:
        request_id: Identifier of the routed request
        original_model: Model the caller asked for
        selected_model: Model the router chose
        category: Operation category (UNKNOWN when classification was skipped)
        token_count: Estimated token cost (0 when classification was skipped)
        reason: Short machine-readable reason for the outcome
        timestamp: Unix timestamp of the decision
    """

    request_id: str
    original_model: str
    selected_model: str
    category: OperationCategory = OperationCategory.UNKNOWN
    token_count: int = 0
    reason: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def rerouted(self) -> bool:
        """True when the selected model differs from the requested one."""
        return self.selected_model != self.original_model

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "original_model": self.original_model,
            "selected_model": self.selected_model,
            "category": self.category.value,
            "token_count": self.token_count,
            "reason": self.reason,
            "timestamp": self.timestamp,
            "rerouted": self.rerouted,
        }


__all__ = ["RouteRequest", "RoutingDecision"]
