# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Static per-model routing policy.

This module provides:
- ModelPolicy / DegradationRules: validated policy entries
- PolicyTable: priority-ordered, read-only table
- default_policy_table: the built-in three-model table
"""

from .defaults import DEFAULT_MODEL_POLICIES, default_policy_table
from .models import DegradationRules, ModelPolicy
from .table import PolicyTable

__all__ = [
    "DEFAULT_MODEL_POLICIES",
    "DegradationRules",
    "ModelPolicy",
    "PolicyTable",
    "default_policy_table",
]
