"""Tests for RouterService and create_router_service."""

import json

import httpx
import pytest

from adaptive_model_router import (
    AccountClient,
    AccountClientConfig,
    ConfigurationError,
    CredentialConfig,
    MemorySecretStore,
    RouterConfig,
    RouterService,
    create_router_service,
)
from adaptive_model_router.exceptions import CredentialInvalidError
from adaptive_model_router.observability import UnifiedMetricsCollector
from adaptive_model_router.types import CredentialState


@pytest.fixture
def credential_config(tmp_path):
    return CredentialConfig(
        rotation_path=tmp_path / "tokens.json",
        discovery_paths=(tmp_path / "config.json",),
    )


class TestCreateRouterService:
    def test_wires_components(self, account, credential_config, collector):
        service = create_router_service(
            account=account,
            credential_config=credential_config,
            metrics_collector=collector,
            environ={},
        )
        assert isinstance(service, RouterService)
        assert service.account is account
        assert service.metrics_collector is collector
        assert service.router.latency_store is service.latency_store
        assert service.router.policy_table.model_ids[0] == "claude-3.7-sonnet"

    def test_creates_collector_when_enabled(self, account, credential_config):
        service = create_router_service(
            account=account, credential_config=credential_config, environ={}
        )
        assert isinstance(service.metrics_collector, UnifiedMetricsCollector)

    def test_no_collector_when_disabled(self, account, credential_config):
        service = create_router_service(
            router_config=RouterConfig(metrics_enabled=False),
            account=account,
            credential_config=credential_config,
            environ={},
        )
        assert service.metrics_collector is None

    def test_policy_file(self, account, credential_config, tmp_path):
        path = tmp_path / "models.json"
        path.write_text(json.dumps({"only-model": {"priority": 1}}))
        service = create_router_service(
            account=account, credential_config=credential_config, policy_file=path
        )
        assert service.router.policy_table.model_ids == ("only-model",)

    def test_unreadable_policy_file(self, account, credential_config, tmp_path):
        with pytest.raises(ConfigurationError):
            create_router_service(
                account=account,
                credential_config=credential_config,
                policy_file=tmp_path / "missing.json",
            )

    def test_builds_account_client(self, credential_config):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )
        service = create_router_service(
            account_config=AccountClientConfig(base_url="https://accounts.example.test"),
            http_client=http_client,
            credential_config=credential_config,
        )
        assert isinstance(service.account, AccountClient)
        assert service.account.config.base_url == "https://accounts.example.test"


class TestRouterService:
    """End-to-end behavior through the composition root."""

    @pytest.mark.asyncio
    async def test_lifecycle(self, account, credential_config, collector):
        account.valid_tokens = {"from-env"}
        service = create_router_service(
            account=account,
            credential_config=credential_config,
            metrics_collector=collector,
            environ={"CURSOR_TOKEN": "from-env"},
        )

        async with service:
            assert service.is_running
            assert service.credential_store.is_running
            assert service.credential_store.state is CredentialState.VALID
            assert await service.get_token() == "from-env"
        assert not service.is_running
        assert not service.credential_store.is_running

        await service.stop()

    @pytest.mark.asyncio
    async def test_route_degrades_with_credential(self, account_factory, credential_config, collector):
        account = account_factory(
            status={"tier": "pro", "accessibleModels": ["gemini-2.5-pro"]},
            usage={"fastRequests": {"remaining": 0}},
            valid_tokens={"tok"},
        )
        service = create_router_service(
            account=account,
            credential_config=credential_config,
            secret_store=MemorySecretStore({"cursorApiToken": "tok"}),
            metrics_collector=collector,
            environ={},
        )
        decisions = []
        service.add_listener(decisions.append)

        async with service:
            service.record_latency("gemini-2.5-pro", 6000)
            model = await service.route(
                {
                    "model": "claude-3.7-sonnet",
                    "prompt": "finish this loop " + "x " * 60,
                }
            )

        assert model == "gemini-2.5-pro"
        assert account.status_calls == ["tok"]
        assert decisions[0].reason == "degraded"

    @pytest.mark.asyncio
    async def test_rejected_credential_marks_store_stale(
        self, account_factory, credential_config
    ):
        account = account_factory(
            status=CredentialInvalidError("401", 401),
            valid_tokens={"tok"},
        )
        service = create_router_service(
            account=account,
            credential_config=credential_config,
            environ={"CURSOR_TOKEN": "tok"},
        )
        async with service:
            state = await service.get_user_state()
            assert state.is_privileged is False
            assert service.credential_store.state is CredentialState.STALE

    @pytest.mark.asyncio
    async def test_fastest_model(self, account, credential_config):
        service = create_router_service(
            account=account, credential_config=credential_config, environ={}
        )
        service.record_latency("claude-3.5-sonnet", 300)
        service.record_latency("gemini-2.5-pro", 900)

        assert service.fastest_model() == "claude-3.5-sonnet"
        assert service.fastest_model(["gemini-2.5-pro"]) == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_rotate_token(self, account, credential_config):
        account.valid_tokens = {"from-file"}
        credential_config.discovery_paths[0].write_text(json.dumps({"token": "from-file"}))
        service = create_router_service(
            account=account, credential_config=credential_config, environ={}
        )
        assert await service.rotate_token() == "from-file"

    @pytest.mark.asyncio
    async def test_owned_account_client_closed(self, credential_config):
        service = create_router_service(credential_config=credential_config, environ={})
        service.credential_store.start = _noop
        async with service:
            pass
        assert service.account._client.is_closed


async def _noop() -> None:
    return None


class TestServiceListeners:
    @pytest.mark.asyncio
    async def test_credential_listener(self, account, credential_config):
        account.valid_tokens = {"tok"}
        service = create_router_service(
            account=account, credential_config=credential_config, environ={"CURSOR_TOKEN": "tok"}
        )
        seen = []
        service.add_credential_listener(seen.append)

        await service.get_token()
        assert seen[-1] is CredentialState.VALID
