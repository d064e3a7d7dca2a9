# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Credential discovery, rotation and refresh."""

from .rotation import DEFAULT_ROTATION_SIZE, RotationFile
from .sources import MemorySecretStore, read_token_file
from .store import CredentialStore, StateListener

__all__ = [
    "DEFAULT_ROTATION_SIZE",
    "CredentialStore",
    "MemorySecretStore",
    "RotationFile",
    "StateListener",
    "read_token_file",
]
