# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Access credential held by the CredentialStore."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CredentialState(Enum):
    """Validity state of the active credential slot.

    - UNKNOWN: Nothing discovered yet
    - VALID: Active credential unexpired and accepted by the service
    - STALE: Active credential expired or rejected; rotation pending
    - ROTATING: Searching the rotation list / discovery sources
    """

    UNKNOWN = "unknown"
    VALID = "valid"
    STALE = "stale"
    ROTATING = "rotating"


@dataclass(frozen=True)
class Credential:
    """
    An opaque bearer secret with its expiry and provenance.

    Attributes:
        secret: Bearer token value
        expires_at: Unix timestamp after which the credential is stale
        source: Where the credential came from (e.g. 'env', 'api', a file path)
    """

    secret: str
    expires_at: float
    source: str

    def is_expired(self, now: float | None = None) -> bool:
        return self.expires_at <= (time.time() if now is None else now)

    def remaining(self, now: float | None = None) -> float:
        """Seconds of lifetime left (negative once expired)."""
        return self.expires_at - (time.time() if now is None else now)

    @property
    def masked(self) -> str:
        """Log-safe rendering of the secret."""
        return f"...{self.secret[-4:]}" if len(self.secret) > 4 else "***"

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the rotation-file format (``expiresAt`` in ms)."""
        return {
            "token": self.secret,
            "expiresAt": int(self.expires_at * 1000),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        """
        Parse one rotation-file entry.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        secret = data["token"]
        if not isinstance(secret, str) or not secret:
            raise ValueError("token must be a non-empty string")
        return cls(
            secret=secret,
            expires_at=float(data["expiresAt"]) / 1000.0,
            source=str(data.get("source", "unknown")),
        )


__all__ = ["Credential", "CredentialState"]
