# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Core data types for the adaptive model router.

This module provides:
- OperationCategory / ClassificationResult: classifier output
- UserState: cached subscription state
- Credential / CredentialState: access credential and slot state
- RouteRequest / RoutingDecision: router input and telemetry event
"""

from .classification import CATEGORY_ORDER, ClassificationResult, OperationCategory
from .credential import Credential, CredentialState
from .request import RouteRequest, RoutingDecision
from .user_state import DEFAULT_TIER, UserState

__all__ = [
    "CATEGORY_ORDER",
    "DEFAULT_TIER",
    "ClassificationResult",
    "Credential",
    "CredentialState",
    "OperationCategory",
    "RouteRequest",
    "RoutingDecision",
    "UserState",
]
