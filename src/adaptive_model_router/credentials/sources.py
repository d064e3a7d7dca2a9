# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Local credential sources: secret storage and well-known config files."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class MemorySecretStore:
    """
    In-process SecretStoreProtocol implementation.

    Used when the host does not supply an OS keychain adapter, and in tests.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._secrets: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._secrets.get(key)

    async def store(self, key: str, value: str) -> None:
        self._secrets[key] = value


def _extract_token(data: Any) -> str | None:
    if isinstance(data, dict):
        token = data.get("token")
        if not token:
            tokens = data.get("tokens")
            if isinstance(tokens, list) and tokens:
                return _extract_token(tokens[0])
            return None
    elif isinstance(data, list) and data:
        return _extract_token(data[0])
    else:
        return None
    return token if isinstance(token, str) and token else None


def read_token_file(path: Path) -> str | None:
    """
    Read a token from a JSON config file.

    Accepts ``{"token": ...}``, ``{"tokens": [{"token": ...}, ...]}`` and a
    bare rotation-style list. Missing, unreadable or malformed files yield
    None so the search can continue with the next source.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug(f"Cannot read credential file {path}: {e}")
        return None
    except UnicodeDecodeError:
        logger.warning(f"Skipping malformed credential file {path}")
        return None

    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning(f"Skipping malformed credential file {path}")
        return None
    return _extract_token(data)


__all__ = ["MemorySecretStore", "read_token_file"]
