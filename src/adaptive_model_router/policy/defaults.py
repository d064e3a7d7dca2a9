# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Built-in model policy table."""

from typing import Any

from .table import PolicyTable

DEFAULT_MODEL_POLICIES: dict[str, dict[str, Any]] = {
    "claude-3.7-sonnet": {
        "priority": 1,
        "averageLatency": 15000,
        "costPerToken": 0.0008,
        "contextWindow": 200000,
        "suitableCategories": ["refactor", "analysis"],
        "bestFor": [
            "complex algorithm design",
            "system architecture",
            "multi-file refactoring",
            "deep code analysis",
        ],
    },
    "gemini-2.5-pro": {
        "priority": 2,
        "averageLatency": 8000,
        "costPerToken": 0.0002,
        "contextWindow": 128000,
        "suitableCategories": ["completion", "refactor", "documentation", "syntax"],
        "bestFor": [
            "code completion",
            "simple refactoring",
            "documentation generation",
            "syntax checks",
            "single-line comments",
        ],
        "degradationRules": {
            "maxLatency": 12000,
            "minTokens": 50,
            "maxTokens": 4000,
            "preferredForTypes": ["completion", "documentation", "syntax", "rename"],
        },
    },
    "claude-3.5-sonnet": {
        "priority": 3,
        "averageLatency": 5000,
        "costPerToken": 0.0001,
        "contextWindow": 100000,
        "suitableCategories": ["completion", "documentation"],
        "bestFor": [
            "code completion",
            "simple edits",
            "doc comments",
            "basic queries",
        ],
    },
}


def default_policy_table() -> PolicyTable:
    """Policy table built from DEFAULT_MODEL_POLICIES."""
    return PolicyTable.from_mapping(DEFAULT_MODEL_POLICIES)


__all__ = ["DEFAULT_MODEL_POLICIES", "default_policy_table"]
