# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Subscription state of the calling user."""

from dataclasses import dataclass, field
from typing import Any

DEFAULT_TIER = "free"


@dataclass(frozen=True)
class UserState:
    """
    Immutable snapshot of the caller's subscription state.

    Produced by UserStateCache from the account service's status and usage
    endpoints. Instances are shared between concurrent callers, hence frozen.

    Attributes:
        is_privileged: Whether the tier is eligible for re-routing
        fast_quota_remaining: Remaining fast (premium) requests, never negative
        total_requests: Requests made in the current billing period
        accessible_models: Model ids the account may use
        tier: Raw tier name reported by the service
    """

    is_privileged: bool = False
    fast_quota_remaining: int = 0
    total_requests: int = 0
    accessible_models: frozenset[str] = field(default_factory=frozenset)
    tier: str = DEFAULT_TIER

    def __post_init__(self) -> None:
        if self.fast_quota_remaining < 0:
            raise ValueError("fast_quota_remaining must be non-negative")
        if self.total_requests < 0:
            raise ValueError("total_requests must be non-negative")

    @classmethod
    def fail_open(cls) -> "UserState":
        """Safe default returned whenever the account service misbehaves."""
        return cls()

    @classmethod
    def from_responses(
        cls,
        status: dict[str, Any],
        usage: dict[str, Any],
        privileged_tiers: tuple[str, ...],
    ) -> "UserState":
        """
        Merge ``/user/status`` and ``/user/usage`` payloads.

        Raises:
            KeyError, TypeError, ValueError: If either payload is malformed
        """
        tier = str(status.get("tier") or DEFAULT_TIER).lower()
        models = status.get("accessibleModels", status.get("accessible_models")) or []
        if not isinstance(models, list | tuple | set | frozenset):
            raise TypeError("accessibleModels must be a list")

        fast = usage.get("fastRequests", usage.get("fast_requests")) or {}
        remaining = int(fast.get("remaining", 0))
        total = int(usage.get("totalRequests", usage.get("total_requests", 0)) or 0)

        return cls(
            is_privileged=tier in privileged_tiers,
            fast_quota_remaining=max(0, remaining),
            total_requests=max(0, total),
            accessible_models=frozenset(str(m) for m in models),
            tier=tier,
        )


__all__ = ["DEFAULT_TIER", "UserState"]
