# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Credential store with rotation, discovery and background refresh.

The store keeps one active credential. ``get_token`` returns it while it is
unexpired and passes live validation; otherwise a rotation runs: first the
rotation file (newest first), then discovery (secret store, local config
files, environment variables, and finally issuance by the account service).
Every candidate is validated before it becomes active.

Concurrent rotations are coalesced into one in-flight task. Writes to the
active slot and the rotation file happen under an ``asyncio.Lock``; no
network call is made while the lock is held.
"""

import asyncio
import contextlib
import logging
import os
import time
from collections.abc import Callable, Mapping
from typing import Any

from ..config import CredentialConfig
from ..exceptions import ModelRouterError, QuotaExceededError, UpstreamUnavailableError
from ..observability.constants import (
    CREDENTIAL_REFRESH_FAILURES_TOTAL,
    CREDENTIAL_ROTATIONS_TOTAL,
    CREDENTIAL_VALIDATIONS_TOTAL,
    ROTATION_LIST_SIZE,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..protocols.account import AccountServiceProtocol, SecretStoreProtocol
from ..types.credential import Credential, CredentialState
from .rotation import RotationFile
from .sources import read_token_file

logger = logging.getLogger(__name__)

StateListener = Callable[[CredentialState], None]


class CredentialStore:
    """
    Owner of the access credential used against the account service.

    Lifecycle:
        ``start()`` primes the store and launches the refresh loop;
        ``stop()`` cancels it. Both are idempotent. The store can also be
        used as an async context manager.
    """

    def __init__(
        self,
        account: AccountServiceProtocol,
        config: CredentialConfig | None = None,
        secret_store: SecretStoreProtocol | None = None,
        environ: Mapping[str, str] | None = None,
        metrics_collector: MetricsCollectorProtocol | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the store.

        Args:
            account: Account service used for validation and issuance
            config: Discovery, rotation and refresh configuration
            secret_store: Optional secure storage for the active credential
            environ: Environment to search (defaults to ``os.environ``)
            metrics_collector: Optional metrics sink
            clock: Wall-clock time source; expiries are persisted
        """
        self._account = account
        self.config = config or CredentialConfig()
        self._secret_store = secret_store
        self._environ = os.environ if environ is None else environ
        self._metrics_collector = metrics_collector
        self._clock = clock

        self._rotation = RotationFile(self.config.rotation_path, self.config.rotation_size)
        self._lock = asyncio.Lock()
        self._active: Credential | None = None
        self._state = CredentialState.UNKNOWN
        self._rejected = False
        self._listeners: list[StateListener] = []

        self._rotation_task: asyncio.Task[str | None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._running = False

    # === State ===

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def active(self) -> Credential | None:
        """The active credential, if any (may be expired or stale)."""
        return self._active

    @property
    def is_running(self) -> bool:
        return self._running

    def add_state_listener(self, listener: StateListener) -> None:
        """Register a callback invoked on every state transition."""
        self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    def _set_state(self, state: CredentialState) -> None:
        if state is self._state:
            return
        previous, self._state = self._state, state
        logger.debug(f"Credential state {previous.value} -> {state.value}")
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Credential state listener failed: {e}")

    def mark_invalid(self) -> None:
        """
        Mark the active credential stale after the service rejected it.

        The next ``get_token`` skips validation and rotates.
        """
        if self._active is None:
            return
        self._rejected = True
        logger.warning(f"Credential {self._active.masked} rejected by account service")
        self._set_state(CredentialState.STALE)

    def _inc(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector:
            self._metrics_collector.inc_counter(name, labels=labels)

    # === Lifecycle ===

    async def start(self) -> None:
        """Prime the store and start the background refresh task."""
        if self._running:
            return

        self._running = True
        try:
            token = await self.get_token()
        except Exception as e:
            logger.error(f"Credential initialization failed: {e}")
            token = None
        if token is None:
            logger.warning("No valid credential found; requests will be sent unauthenticated")
        self._refresh_task = asyncio.create_task(self._refresh_loop(), name="credential_refresh")
        logger.debug("CredentialStore refresh task started")

    async def stop(self) -> None:
        """Stop the background refresh task."""
        if not self._running:
            return

        self._running = False
        if self._refresh_task:
            self._refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._refresh_task
            self._refresh_task = None
        logger.debug("CredentialStore refresh task stopped")

    async def __aenter__(self) -> "CredentialStore":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.stop()

    # === Retrieval ===

    async def _validate(self, secret: str) -> bool | None:
        """Probe ``secret``; None when the account service could not answer."""
        try:
            valid = await self._account.probe(secret)
        except (QuotaExceededError, UpstreamUnavailableError) as e:
            logger.warning(f"Credential validation unavailable: {e}")
            self._inc(CREDENTIAL_VALIDATIONS_TOTAL, {"result": "unavailable"})
            return None
        self._inc(CREDENTIAL_VALIDATIONS_TOTAL, {"result": "valid" if valid else "invalid"})
        return valid

    async def get_token(self) -> str | None:
        """
        Return a usable credential, rotating when the active one is not.

        While the account service cannot answer, the active credential is
        returned as is and checked again on the next call.

        Returns:
            The bearer secret, or None when every source is exhausted
        """
        active = self._active
        if active is not None and not self._rejected and not active.is_expired(self._clock()):
            valid = await self._validate(active.secret)
            if valid:
                self._set_state(CredentialState.VALID)
                return active.secret
            if valid is None:
                return active.secret
            logger.info(f"Active credential {active.masked} failed validation")

        if active is not None:
            self._set_state(CredentialState.STALE)
        return await self.rotate_token()

    async def rotate_token(self) -> str | None:
        """
        Replace the active credential from the rotation list or discovery.

        Concurrent callers share one rotation. When nothing valid is found the
        current credential stays in place and None is returned.
        """
        task = self._rotation_task
        if task is None or task.done():
            task = asyncio.create_task(self._rotate(), name="credential_rotation")
            self._rotation_task = task
        return await asyncio.shield(task)

    async def _rotate(self) -> str | None:
        try:
            stale = self._active
            previous = self._state
            # The stale secret is excluded from this rotation only.
            self._rejected = False
            self._set_state(CredentialState.ROTATING)
            tried: set[str] = set()
            if stale is not None:
                tried.add(stale.secret)

            now = self._clock()
            entries = await asyncio.to_thread(self._rotation.load)
            for candidate in entries:
                if candidate.secret in tried or candidate.is_expired(now):
                    continue
                tried.add(candidate.secret)
                if await self._validate(candidate.secret):
                    async with self._lock:
                        await self._push_rotation(candidate)
                        self._active = candidate
                    self._set_state(CredentialState.VALID)
                    self._inc(CREDENTIAL_ROTATIONS_TOTAL, {"outcome": "rotated"})
                    logger.info(f"Rotated to credential {candidate.masked} from rotation list")
                    return candidate.secret

            secret = await self._discover(tried)
            if secret is not None:
                self._inc(CREDENTIAL_ROTATIONS_TOTAL, {"outcome": "discovered"})
                return secret

            self._inc(CREDENTIAL_ROTATIONS_TOTAL, {"outcome": "exhausted"})
            logger.warning("Credential rotation exhausted all sources")
            # The current credential stays in place with its prior standing.
            self._set_state(previous if stale is not None else CredentialState.UNKNOWN)
            return None
        finally:
            self._rotation_task = None

    async def _discover(self, tried: set[str]) -> str | None:
        """Search discovery sources in order; the first valid candidate is saved."""
        candidates: list[tuple[str | None, str]] = []

        if self._secret_store is not None:
            try:
                secret = await self._secret_store.get(self.config.secret_key)
            except Exception as e:
                logger.warning(f"Secret store lookup failed: {e}")
                secret = None
            candidates.append((secret, "secret_store"))

        for path in self.config.discovery_paths:
            secret = await asyncio.to_thread(read_token_file, path)
            candidates.append((secret, str(path)))

        for name in self.config.env_vars:
            candidates.append((self._environ.get(name), f"env:{name}"))

        for secret, source in candidates:
            if not secret or secret in tried:
                continue
            tried.add(secret)
            if await self._validate(secret):
                logger.info(f"Discovered credential from {source}")
                await self.save_token(secret, source)
                return secret
            logger.debug(f"Credential from {source} failed validation")

        current = self._active.secret if self._active is not None else None
        try:
            issued = await self._account.issue_token(current)
        except ModelRouterError as e:
            logger.warning(f"Credential issuance failed: {e}")
            return None
        if issued and issued not in tried and await self._validate(issued):
            logger.info("Obtained credential from account service")
            await self.save_token(issued, "api")
            return issued
        return None

    # === Persistence ===

    async def save_token(
        self, secret: str, source: str, ttl: float | None = None
    ) -> Credential:
        """
        Make ``secret`` the active credential and persist it.

        The credential is written to the secret store (when configured) and
        prepended to the rotation file. Persistence failures are logged; the
        credential stays active in memory.

        Args:
            secret: Bearer secret
            source: Provenance tag
            ttl: Lifetime in seconds (defaults to ``config.token_lifetime``)
        """
        if not secret:
            raise ValueError("secret must be non-empty")
        lifetime = self.config.token_lifetime if ttl is None else ttl
        credential = Credential(secret=secret, expires_at=self._clock() + lifetime, source=source)

        async with self._lock:
            if self._secret_store is not None:
                try:
                    await self._secret_store.store(self.config.secret_key, secret)
                except Exception as e:
                    logger.error(f"Failed to write credential to secret store: {e}")
            await self._push_rotation(credential)
            self._active = credential
            self._rejected = False

        self._set_state(CredentialState.VALID)
        logger.info(f"Saved credential {credential.masked} from {source}")
        return credential

    async def _push_rotation(self, credential: Credential) -> None:
        """Move ``credential`` to the front of the rotation file. Caller holds the lock."""
        try:
            entries = await asyncio.to_thread(self._rotation.push, credential)
        except OSError as e:
            logger.error(f"Failed to write rotation file {self._rotation.path}: {e}")
            return
        if self._metrics_collector:
            self._metrics_collector.set_gauge(ROTATION_LIST_SIZE, float(len(entries)))

    # === Refresh ===

    async def _refresh_loop(self) -> None:
        """Background task that periodically refreshes the credential."""
        while self._running:
            try:
                await asyncio.sleep(self.config.refresh_interval)
                if self._running:
                    await self.refresh_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception("Error in credential refresh: %s", e)

    async def refresh_once(self) -> bool:
        """
        One refresh tick.

        A credential with less than ``refresh_interval`` of lifetime left is
        replaced by one issued by the account service, or failing that by a
        rotation. Failures are logged and never raised.

        Returns:
            True when a usable credential is active after the tick
        """
        active = self._active
        interval = self.config.refresh_interval
        if active is not None and active.remaining(self._clock()) >= interval:
            return True

        if active is not None:
            try:
                issued = await self._account.issue_token(active.secret)
                if issued:
                    await self.save_token(issued, "refresh")
                    return True
                logger.warning("Refresh returned no credential")
            except Exception as e:
                logger.warning(f"Credential refresh failed: {e}")

        try:
            if await self.rotate_token() is not None:
                return True
        except Exception as e:
            logger.error(f"Fallback rotation failed: {e}")

        self._inc(CREDENTIAL_REFRESH_FAILURES_TOTAL)
        logger.warning("Credential refresh failed; keeping current credential")
        return False


__all__ = ["CredentialStore", "StateListener"]
