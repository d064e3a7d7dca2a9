# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for router components.

Available protocols:
- AccountServiceProtocol: Interface of the external account service
- SecretStoreProtocol: Interface of secure secret storage
- ClassifierProtocol: Interface for operation classifiers
"""

from .account import AccountServiceProtocol, SecretStoreProtocol, TokenProvider
from .classifier import ClassifierProtocol

__all__ = [
    "AccountServiceProtocol",
    "ClassifierProtocol",
    "SecretStoreProtocol",
    "TokenProvider",
]
