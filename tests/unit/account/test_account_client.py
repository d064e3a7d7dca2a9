"""Tests for AccountClient against an httpx.MockTransport."""

import httpx
import pytest

from adaptive_model_router.account import AccountClient
from adaptive_model_router.config import AccountClientConfig
from adaptive_model_router.exceptions import (
    CredentialInvalidError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from adaptive_model_router.protocols import AccountServiceProtocol

BASE_URL = "https://accounts.example.test/v1"


def make_client(handler) -> AccountClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AccountClient(config=AccountClientConfig(base_url=BASE_URL), http_client=http_client)


class TestAccountClient:
    """Tests for response mapping."""

    def test_satisfies_protocol(self):
        assert isinstance(AccountClient(), AccountServiceProtocol)

    @pytest.mark.asyncio
    async def test_get_status(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"tier": "pro", "accessibleModels": ["a"]})

        client = make_client(handler)
        status = await client.get_status(token="tok-1")

        assert status == {"tier": "pro", "accessibleModels": ["a"]}
        assert seen["url"] == f"{BASE_URL}/user/status"
        assert seen["auth"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"fastRequests": {"remaining": 3}})

        usage = await make_client(handler).get_usage()
        assert usage["fastRequests"]["remaining"] == 3
        assert seen["auth"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credential(self, status):
        client = make_client(lambda request: httpx.Response(status))
        with pytest.raises(CredentialInvalidError) as exc_info:
            await client.get_status(token="bad")
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_rate_limited_with_retry_after(self):
        client = make_client(lambda request: httpx.Response(429, headers={"Retry-After": "12"}))
        with pytest.raises(QuotaExceededError) as exc_info:
            await client.get_usage(token="tok")
        assert exc_info.value.retry_after == 12.0

    @pytest.mark.asyncio
    async def test_rate_limited_with_unparseable_retry_after(self):
        client = make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": "soon"})
        )
        with pytest.raises(QuotaExceededError) as exc_info:
            await client.get_usage(token="tok")
        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_other_failures_unavailable(self, status):
        client = make_client(lambda request: httpx.Response(status))
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.get_status(token="tok")
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_transport_error_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler).get_status(token="tok")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
    async def test_bad_body_unavailable(self, body):
        client = make_client(lambda request: httpx.Response(200, content=body))
        with pytest.raises(UpstreamUnavailableError):
            await client.get_status(token="tok")

    @pytest.mark.asyncio
    async def test_issue_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"token": "fresh"})

        assert await make_client(handler).issue_token(token="old") == "fresh"
        assert seen == {"method": "POST", "url": f"{BASE_URL}/auth/token"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"token": ""}, {"token": 5}])
    async def test_issue_token_without_token(self, payload):
        client = make_client(lambda request: httpx.Response(200, json=payload))
        assert await client.issue_token(token="old") is None

    @pytest.mark.asyncio
    async def test_issue_token_rejected(self):
        client = make_client(lambda request: httpx.Response(401))
        with pytest.raises(CredentialInvalidError):
            await client.issue_token(token="old")

    @pytest.mark.asyncio
    async def test_probe(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.headers.get("authorization") == "Bearer good":
                return httpx.Response(200, json={"tier": "pro"})
            return httpx.Response(401)

        client = make_client(handler)
        assert await client.probe("good") is True
        assert await client.probe("bad") is False

    @pytest.mark.asyncio
    async def test_validation_server_error_is_invalid(self):
        client = make_client(lambda request: httpx.Response(500))
        assert await client.probe("tok") is False

    @pytest.mark.asyncio
    async def test_validation_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler).probe("tok")

    @pytest.mark.asyncio
    async def test_validation_rate_limited_raises(self):
        client = make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": "5"})
        )
        with pytest.raises(QuotaExceededError) as exc_info:
            await client.probe("tok")
        assert exc_info.value.retry_after == 5.0

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )
        async with AccountClient(http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = AccountClient()
        await client.aclose()
        assert client._client.is_closed
