# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import Any

import pytest

from adaptive_model_router.observability.collector import UnifiedMetricsCollector


class FakeAccountService:
    """
    In-memory AccountServiceProtocol implementation.

    Attributes can be replaced per test: set ``status`` / ``usage`` to a dict
    or an exception instance, ``valid_tokens`` to the secrets ``probe``
    accepts and ``issued`` to the token ``issue_token`` returns. Setting
    ``validation_error`` makes ``probe`` raise it.
    """

    def __init__(
        self,
        status: dict[str, Any] | BaseException | None = None,
        usage: dict[str, Any] | BaseException | None = None,
        valid_tokens: set[str] | None = None,
        issued: str | BaseException | None = None,
    ):
        self.status = status if status is not None else {"tier": "pro", "accessibleModels": []}
        self.usage = usage if usage is not None else {"fastRequests": {"remaining": 0}}
        self.valid_tokens = set(valid_tokens or ())
        self.issued = issued
        self.validation_error: BaseException | None = None
        self.status_calls: list[str | None] = []
        self.usage_calls: list[str | None] = []
        self.probe_calls: list[str] = []
        self.issue_calls: list[str | None] = []

    async def get_status(self, token: str | None = None) -> dict[str, Any]:
        self.status_calls.append(token)
        if isinstance(self.status, BaseException):
            raise self.status
        return self.status

    async def get_usage(self, token: str | None = None) -> dict[str, Any]:
        self.usage_calls.append(token)
        if isinstance(self.usage, BaseException):
            raise self.usage
        return self.usage

    async def issue_token(self, token: str | None = None) -> str | None:
        self.issue_calls.append(token)
        if isinstance(self.issued, BaseException):
            raise self.issued
        return self.issued

    async def probe(self, token: str) -> bool:
        self.probe_calls.append(token)
        if self.validation_error is not None:
            raise self.validation_error
        return token in self.valid_tokens


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def account() -> FakeAccountService:
    return FakeAccountService()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def collector() -> UnifiedMetricsCollector:
    """Dict-only collector so tests never touch the global Prometheus registry."""
    return UnifiedMetricsCollector(enable_prometheus=False)


@pytest.fixture
def account_factory() -> type[FakeAccountService]:
    """The fake account service class, for tests that need custom responses."""
    return FakeAccountService
