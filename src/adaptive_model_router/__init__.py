# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Adaptive Model Router - quota-aware model selection for code assistants.

When a privileged user has exhausted their fast-request quota, the router
sends lightweight operations (completions, renames, doc comments) to a
faster or cheaper model that can serve them equally well, and leaves every
other request on the model the caller asked for.

Key Features:
    - Rule-based operation classification with token estimation
    - Rolling per-model latency tracking
    - Priority-ordered model policies with degradation rules
    - Cached, fail-open user subscription state
    - Credential discovery, rotation and background refresh

Quick Start:
    >>> from adaptive_model_router import create_router_service
    >>>
    >>> async with create_router_service() as service:
    ...     model = await service.route(
    ...         {"model": "claude-3.7-sonnet", "codeSnippet": "// rename x to y"}
    ...     )
    ...     service.record_latency(model, 840.0)

Main Exports:
    - RouterService, create_router_service: Composition root
    - ModelRouter: Model selection
    - OperationClassifier: Request classification
    - LatencyStore: Latency samples per model
    - UserStateCache: Subscription state cache
    - CredentialStore: Credential management
    - PolicyTable, ModelPolicy: Static model policies

Note: Prometheus export requires the 'prometheus' extra. Install with:
    pip install adaptive-model-router[prometheus]

Version: 1.0.0
"""

__version__ = "1.0.0"

from .account import AccountClient
from .classifier import OperationClassifier, estimate_tokens
from .config import (
    AccountClientConfig,
    CredentialConfig,
    RouterConfig,
    UserStateCacheConfig,
)
from .credentials import CredentialStore, MemorySecretStore, RotationFile
from .exceptions import (
    ConfigurationError,
    CredentialInvalidError,
    ModelRouterError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from .latency import LatencyStore
from .policy import (
    DegradationRules,
    ModelPolicy,
    PolicyTable,
    default_policy_table,
)
from .protocols import (
    AccountServiceProtocol,
    ClassifierProtocol,
    SecretStoreProtocol,
)
from .router import ModelRouter
from .service import RouterService, create_router_service
from .state import UserStateCache
from .types import (
    ClassificationResult,
    Credential,
    CredentialState,
    OperationCategory,
    RouteRequest,
    RoutingDecision,
    UserState,
)

__all__ = [
    # Account service
    "AccountClient",
    "AccountClientConfig",
    "AccountServiceProtocol",
    "ClassificationResult",
    "ClassifierProtocol",
    "ConfigurationError",
    # Credentials
    "Credential",
    "CredentialConfig",
    "CredentialInvalidError",
    "CredentialState",
    "CredentialStore",
    "DegradationRules",
    "LatencyStore",
    "MemorySecretStore",
    "ModelPolicy",
    # Exceptions
    "ModelRouterError",
    # Router
    "ModelRouter",
    "OperationCategory",
    "OperationClassifier",
    "PolicyTable",
    "QuotaExceededError",
    "RotationFile",
    "RouteRequest",
    "RouterConfig",
    # Service
    "RouterService",
    "RoutingDecision",
    "SecretStoreProtocol",
    "UpstreamUnavailableError",
    "UserState",
    "UserStateCache",
    "UserStateCacheConfig",
    "create_router_service",
    "default_policy_table",
    "estimate_tokens",
]
