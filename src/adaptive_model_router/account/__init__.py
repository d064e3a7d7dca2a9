# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Client for the external account service."""

from .client import AccountClient

__all__ = ["AccountClient"]
