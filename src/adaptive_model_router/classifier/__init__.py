# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Operation classification: category and token estimate from request text."""

from .operation import DEFAULT_CATEGORY, OperationClassifier, estimate_tokens
from .patterns import DEFAULT_RULES, DENSE_SCRIPT_PATTERN, compile_rules

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_RULES",
    "DENSE_SCRIPT_PATTERN",
    "OperationClassifier",
    "compile_rules",
    "estimate_tokens",
]
