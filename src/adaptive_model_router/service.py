# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Composition root wiring the router's components together.

``RouterService`` owns the lifecycle of the account client it created and of
the credential store's refresh task. Use it as an async context manager:

    >>> async with create_router_service() as service:
    ...     model = await service.route({"model": "claude-3.7-sonnet", "prompt": "..."})
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx
from typing_extensions import Self

from .account.client import AccountClient
from .classifier.operation import OperationClassifier
from .config import (
    AccountClientConfig,
    CredentialConfig,
    RouterConfig,
    UserStateCacheConfig,
)
from .credentials.store import CredentialStore, StateListener
from .latency.store import LatencyStore
from .observability.collector import UnifiedMetricsCollector
from .observability.protocols import MetricsCollectorProtocol
from .policy.defaults import default_policy_table
from .policy.table import PolicyTable
from .protocols.account import AccountServiceProtocol, SecretStoreProtocol
from .protocols.classifier import ClassifierProtocol
from .router.selector import DecisionListener, ModelRouter
from .state.user_state_cache import UserStateCache
from .types.request import RouteRequest
from .types.user_state import UserState

logger = logging.getLogger(__name__)


class RouterService:
    """
    Facade over the router, user-state cache, latency store and credentials.
    """

    def __init__(
        self,
        router: ModelRouter,
        user_state_cache: UserStateCache,
        latency_store: LatencyStore,
        credential_store: CredentialStore,
        account: AccountServiceProtocol,
        metrics_collector: MetricsCollectorProtocol | None = None,
        config: RouterConfig | None = None,
        owns_account: bool = False,
    ):
        self.router = router
        self.user_state_cache = user_state_cache
        self.latency_store = latency_store
        self.credential_store = credential_store
        self.account = account
        self.metrics_collector = metrics_collector
        self.config = config or router.config
        self._owns_account = owns_account
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Prime credentials, start refresh, and optionally serve Prometheus metrics."""
        if self._running:
            return
        self._running = True
        await self.credential_store.start()
        if (
            self.config.start_prometheus_server
            and isinstance(self.metrics_collector, UnifiedMetricsCollector)
        ):
            self.metrics_collector.start_http_server(
                host=self.config.prometheus_host, port=self.config.prometheus_port
            )
        logger.info("RouterService started")

    async def stop(self) -> None:
        """Stop the refresh task and close the account client if owned."""
        if not self._running:
            return
        self._running = False
        await self.credential_store.stop()
        if self._owns_account and isinstance(self.account, AccountClient):
            await self.account.aclose()
        logger.info("RouterService stopped")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.stop()

    # === Operations ===

    async def route(self, request: RouteRequest | dict[str, Any]) -> str:
        return await self.router.route(request)

    async def get_user_state(self) -> UserState:
        return await self.user_state_cache.get_user_state()

    async def get_token(self) -> str | None:
        return await self.credential_store.get_token()

    async def rotate_token(self) -> str | None:
        return await self.credential_store.rotate_token()

    def record_latency(self, model: str, latency_ms: float) -> None:
        self.latency_store.record_latency(model, latency_ms)

    def fastest_model(self, models: list[str] | None = None) -> str | None:
        """Fastest of ``models`` (all policy models when omitted)."""
        candidates = models if models is not None else self.router.policy_table.model_ids
        return self.latency_store.fastest_model(candidates)

    def add_listener(self, listener: DecisionListener) -> None:
        self.router.add_listener(listener)

    def add_credential_listener(self, listener: StateListener) -> None:
        self.credential_store.add_state_listener(listener)


def create_router_service(
    router_config: RouterConfig | None = None,
    cache_config: UserStateCacheConfig | None = None,
    credential_config: CredentialConfig | None = None,
    account_config: AccountClientConfig | None = None,
    account: AccountServiceProtocol | None = None,
    http_client: httpx.AsyncClient | None = None,
    secret_store: SecretStoreProtocol | None = None,
    policy_table: PolicyTable | None = None,
    policy_file: str | Path | None = None,
    classifier: ClassifierProtocol | None = None,
    metrics_collector: MetricsCollectorProtocol | None = None,
    environ: Mapping[str, str] | None = None,
) -> RouterService:
    """
    Factory function to create a RouterService with dependency injection.

    Args:
        router_config: Router configuration
        cache_config: User-state cache configuration
        credential_config: Credential discovery/rotation configuration
        account_config: Account service endpoint configuration
        account: Pre-built account service (overrides account_config/http_client)
        http_client: httpx client for the account service
        secret_store: Secure secret storage
        policy_table: Model policy table (overrides policy_file)
        policy_file: JSON policy file loaded when no table is given
        classifier: Operation classifier
        metrics_collector: Metrics sink; a collector is created when metrics are enabled
        environ: Environment searched during credential discovery

    Returns:
        Configured RouterService instance

    Raises:
        ConfigurationError: If ``policy_file`` cannot be loaded
    """
    router_config = router_config or RouterConfig()

    if metrics_collector is None and router_config.metrics_enabled:
        metrics_collector = UnifiedMetricsCollector(
            enable_prometheus=router_config.enable_prometheus
        )

    if policy_table is None:
        policy_table = (
            PolicyTable.from_json_file(policy_file)
            if policy_file is not None
            else default_policy_table()
        )

    owns_account = account is None
    if account is None:
        account = AccountClient(config=account_config, http_client=http_client)

    credential_store = CredentialStore(
        account,
        config=credential_config,
        secret_store=secret_store,
        environ=environ,
        metrics_collector=metrics_collector,
    )
    user_state_cache = UserStateCache(
        account,
        config=cache_config,
        token_provider=credential_store.get_token,
        on_credential_invalid=credential_store.mark_invalid,
        metrics_collector=metrics_collector,
    )
    latency_store = LatencyStore(metrics_collector=metrics_collector)
    router = ModelRouter(
        user_state_cache,
        classifier=classifier or OperationClassifier(metrics_collector=metrics_collector),
        latency_store=latency_store,
        policy_table=policy_table,
        config=router_config,
        metrics_collector=metrics_collector,
    )
    return RouterService(
        router=router,
        user_state_cache=user_state_cache,
        latency_store=latency_store,
        credential_store=credential_store,
        account=account,
        metrics_collector=metrics_collector,
        config=router_config,
        owns_account=owns_account,
    )


__all__ = ["RouterService", "create_router_service"]
