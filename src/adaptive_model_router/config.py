# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for the Adaptive Model Router

This module provides configuration classes for the router, the user-state
cache, the credential store and the account service client.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_discovery_paths() -> tuple[Path, ...]:
    """Well-known local files that may hold an access token, in search order."""
    home = Path.home()
    paths = [
        home / ".cursor" / "config.json",
        home / "Library" / "Application Support" / "cursor" / "config.json",
        home / ".config" / "cursor" / "config.json",
    ]
    appdata = os.environ.get("APPDATA")
    if appdata:
        paths.append(Path(appdata) / "cursor" / "config.json")
    paths.extend(
        [
            home / ".cursor" / "tokens.json",
            home / ".cursor-tokens",
        ]
    )
    return tuple(paths)


def _default_rotation_path() -> Path:
    return Path.home() / ".cursor" / "tokens.json"


@dataclass
class AccountClientConfig:
    """
    Configuration for the account service client.
    """

    base_url: str = "https://api.cursor.sh/v1"
    """Base URL of the account service."""

    status_endpoint: str = "/user/status"
    """Tier and accessible models. Also used as the credential probe."""

    usage_endpoint: str = "/user/usage"
    """Fast-request quota and request totals."""

    token_endpoint: str = "/auth/token"
    """Issues a new credential."""

    timeout: float = 5.0
    """Per-call timeout in seconds."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if not self.base_url:
            raise ValueError("base_url must not be empty")


@dataclass
class UserStateCacheConfig:
    """
    Configuration for the user-state cache.
    """

    ttl: float = 300.0
    """Lifetime of the combined status+usage entry in seconds."""

    quota_backoff_seconds: float = 30.0
    """How long a 429 answer is cached as fail-open state when no Retry-After is sent."""

    privileged_tiers: tuple[str, ...] = ("pro", "business")
    """Tier names (lower-case) eligible for re-routing."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.ttl <= 0:
            raise ValueError("ttl must be positive")
        if self.quota_backoff_seconds < 0:
            raise ValueError("quota_backoff_seconds must be non-negative")
        self.privileged_tiers = tuple(t.lower() for t in self.privileged_tiers)


@dataclass
class CredentialConfig:
    """
    Configuration for credential discovery, persistence and refresh.
    """

    refresh_interval: float = 1800.0
    """Refresh tick in seconds. A credential closer than this to expiry is replaced."""

    rotation_size: int = 3
    """Maximum number of credentials kept in the rotation file."""

    token_lifetime: float = 86400.0
    """Lifetime assigned to a newly saved credential in seconds."""

    rotation_path: Path = field(default_factory=_default_rotation_path)
    """Rotation file (JSON list, newest first)."""

    discovery_paths: tuple[Path, ...] = field(default_factory=_default_discovery_paths)
    """Local configuration files searched for a token, in order."""

    env_vars: tuple[str, ...] = ("CURSOR_TOKEN", "CURSOR_API_TOKEN")
    """Environment variables searched for a token, in order."""

    secret_key: str = "cursorApiToken"
    """Key under which the credential is kept in the secret store."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive")
        if self.rotation_size < 1:
            raise ValueError("rotation_size must be at least 1")
        if self.token_lifetime <= 0:
            raise ValueError("token_lifetime must be positive")
        self.rotation_path = Path(self.rotation_path)
        self.discovery_paths = tuple(Path(p) for p in self.discovery_paths)


@dataclass
class RouterConfig:
    """
    Configuration for the model router.
    """

    passthrough_when_quota_available: bool = True
    """Keep the requested model while the user still has fast requests left."""

    metrics_enabled: bool = True
    """Enable metrics collection."""

    enable_prometheus: bool = False
    """Register metrics with prometheus_client (when installed)."""

    prometheus_host: str = "127.0.0.1"
    """Prometheus metrics host."""

    prometheus_port: int = 9090
    """Prometheus metrics port."""

    start_prometheus_server: bool = False
    """Start the Prometheus HTTP server when the service starts."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not 0 < self.prometheus_port < 65536:
            raise ValueError("prometheus_port must be a valid TCP port")


__all__ = [
    "AccountClientConfig",
    "CredentialConfig",
    "RouterConfig",
    "UserStateCacheConfig",
]
