# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
HTTP client for the external account service.

This is the only place where account-service HTTP responses are interpreted.
Status codes are mapped onto the library's error taxonomy so callers can
decide between failing open, rotating credentials and backing off.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import AccountClientConfig
from ..exceptions import (
    CredentialInvalidError,
    QuotaExceededError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class AccountClient:
    """
    Async client for the account service built on ``httpx.AsyncClient``.

    The credential is passed explicitly per call so the credential store can
    use the same client for validation probes without recursing into itself.

    Example:
        >>> async with AccountClient() as client:
        ...     status = await client.get_status(token="...")
    """

    def __init__(
        self,
        config: AccountClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint and timeout configuration
            http_client: Pre-built client (tests, custom transports). When
                omitted a client is created and owned by this instance.
        """
        self.config = config or AccountClientConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AccountClient:
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.aclose()

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{endpoint}"

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _send(
        self, method: str, endpoint: str, token: str | None
    ) -> httpx.Response:
        """
        Issue one request and map failures onto the error taxonomy.

        Raises:
            CredentialInvalidError: On 401/403
            QuotaExceededError: On 429
            UpstreamUnavailableError: On transport errors, timeouts and other
                non-success statuses
        """
        try:
            response = await self._client.request(
                method,
                self._url(endpoint),
                headers=self._headers(token),
                timeout=self.config.timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(
                f"{method} {endpoint} failed: {type(e).__name__}: {e}"
            ) from e

        status = response.status_code
        if status in (401, 403):
            raise CredentialInvalidError(
                f"{method} {endpoint} rejected credential ({status})",
                status_code=status,
            )
        if status == 429:
            raise QuotaExceededError(
                f"{method} {endpoint} rate limited",
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        if not response.is_success:
            raise UpstreamUnavailableError(
                f"{method} {endpoint} failed with status {status}",
                status_code=status,
            )
        return response

    async def _get_json(self, endpoint: str, token: str | None) -> dict[str, Any]:
        response = await self._send("GET", endpoint, token)
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"GET {endpoint} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(f"GET {endpoint} returned a non-object body")
        return data

    async def get_status(self, token: str | None = None) -> dict[str, Any]:
        """Fetch ``{tier, accessibleModels}``."""
        return await self._get_json(self.config.status_endpoint, token)

    async def get_usage(self, token: str | None = None) -> dict[str, Any]:
        """Fetch ``{fastRequests: {remaining}, totalRequests}``."""
        return await self._get_json(self.config.usage_endpoint, token)

    async def issue_token(self, token: str | None = None) -> str | None:
        """
        Request a newly issued credential.

        Returns:
            The new token, or None if the response carried none

        Raises:
            ModelRouterError subclasses as described in ``_send``
        """
        response = await self._send("POST", self.config.token_endpoint, token)
        try:
            data = response.json()
        except ValueError:
            logger.warning("Token endpoint returned invalid JSON")
            return None
        new_token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(new_token, str) or not new_token:
            return None
        return new_token

    async def probe(self, token: str) -> bool:
        """
        Validate a credential against the status endpoint.

        Returns:
            True on 2xx; False when the service answered with any other
            status (the credential is treated as invalid)

        Raises:
            QuotaExceededError: On 429; the credential's validity is unknown
            UpstreamUnavailableError: On transport errors and timeouts
        """
        try:
            await self._send("GET", self.config.status_endpoint, token)
        except CredentialInvalidError as e:
            logger.debug(f"Credential probe rejected: {e}")
            return False
        except UpstreamUnavailableError as e:
            if e.status_code is None:
                raise
            logger.debug(f"Credential probe failed: {e}")
            return False
        return True


__all__ = ["AccountClient"]
