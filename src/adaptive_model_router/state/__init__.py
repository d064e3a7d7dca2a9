# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Cached subscription state of the calling user."""

from .user_state_cache import UserStateCache

__all__ = ["UserStateCache"]
