# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Cache of the caller's subscription state.

The combined status+usage entry lives for a fixed TTL. Concurrent callers
during a miss share one in-flight fetch (single-flight). Every upstream
failure degrades to ``UserState.fail_open()``; nothing is raised.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..config import UserStateCacheConfig
from ..exceptions import (
    CredentialInvalidError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from ..observability.constants import (
    UPSTREAM_ERRORS_TOTAL,
    USER_STATE_CACHE_HITS_TOTAL,
    USER_STATE_CACHE_MISSES_TOTAL,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..protocols.account import AccountServiceProtocol, TokenProvider
from ..types.user_state import UserState

logger = logging.getLogger(__name__)  # adaptive_model_router.state.user_state_cache


@dataclass(frozen=True)
class _CacheEntry:
    state: UserState
    expires_at: float


class UserStateCache:
    """
    TTL cache in front of the account service's status and usage endpoints.

    Error handling:
    - 401/403: the ``on_credential_invalid`` hook is called (the credential
      store marks its credential stale) and the fail-open state is returned
      without caching, so the next call retries with a rotated credential.
    - 429: no rotation; the fail-open state is cached for the back-off window.
    - Anything else: fail-open state, not cached.
    """

    def __init__(
        self,
        account: AccountServiceProtocol,
        config: UserStateCacheConfig | None = None,
        token_provider: TokenProvider | None = None,
        on_credential_invalid: Callable[[], None] | None = None,
        metrics_collector: MetricsCollectorProtocol | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            account: Account service client
            config: TTL, back-off and tier configuration
            token_provider: Async callable supplying the bearer credential
            on_credential_invalid: Called when the service rejects the credential
            metrics_collector: Optional metrics sink
            clock: Monotonic time source (injectable for tests)
        """
        self._account = account
        self.config = config or UserStateCacheConfig()
        self._token_provider = token_provider
        self._on_credential_invalid = on_credential_invalid
        self._metrics_collector = metrics_collector
        self._clock = clock

        self._entry: _CacheEntry | None = None
        self._inflight: asyncio.Task[UserState] | None = None
        self._fetch_count = 0

    @property
    def fetch_count(self) -> int:
        """Number of upstream fetches started so far."""
        return self._fetch_count

    def _inc(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector:
            self._metrics_collector.inc_counter(name, labels=labels)

    def _cached(self) -> UserState | None:
        entry = self._entry
        if entry is not None and entry.expires_at > self._clock():
            return entry.state
        return None

    def _store(self, state: UserState, ttl: float) -> None:
        self._entry = _CacheEntry(state=state, expires_at=self._clock() + ttl)

    def invalidate(self) -> None:
        """Drop the cached entry; the next lookup fetches again."""
        self._entry = None

    async def get_user_state(self) -> UserState:
        """
        Return the current user state, fetching it on a miss.

        Never raises; upstream failures yield ``UserState.fail_open()``.
        """
        state = self._cached()
        if state is not None:
            self._inc(USER_STATE_CACHE_HITS_TOTAL)
            logger.debug("User state served from cache")
            return state

        self._inc(USER_STATE_CACHE_MISSES_TOTAL)
        task = self._inflight
        if task is None or task.done():
            self._fetch_count += 1
            task = asyncio.create_task(self._fetch(), name="user_state_fetch")
            self._inflight = task
        # Shield so one cancelled caller does not cancel the shared fetch.
        return await asyncio.shield(task)

    async def _current_token(self) -> str | None:
        if self._token_provider is None:
            return None
        try:
            return await self._token_provider()
        except Exception as e:
            logger.warning(f"Token provider failed, fetching user state without credential: {e}")
            return None

    async def _fetch(self) -> UserState:
        try:
            token = await self._current_token()
            results = await asyncio.gather(
                self._account.get_status(token),
                self._account.get_usage(token),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            status, usage = results
            state = UserState.from_responses(
                status,  # type: ignore[arg-type]
                usage,  # type: ignore[arg-type]
                self.config.privileged_tiers,
            )
        except CredentialInvalidError as e:
            self._inc(UPSTREAM_ERRORS_TOTAL, {"kind": "credential"})
            logger.warning(f"Account service rejected credential, failing open: {e}")
            self._signal_credential_invalid()
            return UserState.fail_open()
        except QuotaExceededError as e:
            self._inc(UPSTREAM_ERRORS_TOTAL, {"kind": "quota"})
            backoff = e.retry_after if e.retry_after is not None else self.config.quota_backoff_seconds
            logger.warning(f"Account service rate limited, backing off {backoff:.0f}s: {e}")
            state = UserState.fail_open()
            if backoff > 0:
                self._store(state, backoff)
            return state
        except UpstreamUnavailableError as e:
            self._inc(UPSTREAM_ERRORS_TOTAL, {"kind": "unavailable"})
            logger.warning(f"Account service unavailable, failing open: {e}")
            return UserState.fail_open()
        except (KeyError, TypeError, ValueError) as e:
            self._inc(UPSTREAM_ERRORS_TOTAL, {"kind": "malformed"})
            logger.warning(f"Malformed account service response, failing open: {e}")
            return UserState.fail_open()
        except Exception as e:
            self._inc(UPSTREAM_ERRORS_TOTAL, {"kind": "unexpected"})
            logger.error(f"Unexpected error fetching user state, failing open: {e}")
            return UserState.fail_open()
        finally:
            self._inflight = None

        self._store(state, self.config.ttl)
        logger.info(
            f"User state refreshed: tier={state.tier} privileged={state.is_privileged} "
            f"fast_quota={state.fast_quota_remaining}"
        )
        return state

    def _signal_credential_invalid(self) -> None:
        if self._on_credential_invalid is None:
            return
        try:
            self._on_credential_invalid()
        except Exception as e:
            logger.error(f"Credential invalidation hook failed: {e}")

    # === Projections of the cached state ===

    async def has_model_access(self, model: str) -> bool:
        state = await self.get_user_state()
        return model in state.accessible_models

    async def check_privileged_status(self) -> bool:
        state = await self.get_user_state()
        return state.is_privileged

    async def remaining_quota(self) -> int:
        state = await self.get_user_state()
        return state.fast_quota_remaining


__all__ = ["UserStateCache"]
