# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocols for the external account service and secret storage."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

TokenProvider = Callable[[], Awaitable[str | None]]
"""Async callable returning the bearer credential to attach, if any."""


@runtime_checkable
class AccountServiceProtocol(Protocol):
    """
    Minimal interface of the account service consumed by the core.

    Implementations raise the library's error taxonomy:
    ``CredentialInvalidError`` for 401/403, ``QuotaExceededError`` for 429
    and ``UpstreamUnavailableError`` for anything else that went wrong.
    """

    async def get_status(self, token: str | None = None) -> dict[str, Any]:
        """``GET /user/status`` -> ``{tier, accessibleModels}``."""
        ...

    async def get_usage(self, token: str | None = None) -> dict[str, Any]:
        """``GET /user/usage`` -> ``{fastRequests: {remaining}, totalRequests}``."""
        ...

    async def issue_token(self, token: str | None = None) -> str | None:
        """``POST /auth/token`` -> new credential, or None when none was issued."""
        ...

    async def probe(self, token: str) -> bool:
        """
        Live validation of a credential.

        Returns False when the service rejects the credential. Raises
        ``QuotaExceededError`` or ``UpstreamUnavailableError`` when the
        service could not give an answer.
        """
        ...


@runtime_checkable
class SecretStoreProtocol(Protocol):
    """
    Secure secret storage (e.g. an OS keychain adapter supplied by the host).
    """

    async def get(self, key: str) -> str | None:
        ...

    async def store(self, key: str, value: str) -> None:
        ...


__all__ = ["AccountServiceProtocol", "SecretStoreProtocol", "TokenProvider"]
