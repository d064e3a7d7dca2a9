# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Operation categories and classifier output.

Categories are kept as a string-valued Enum so policy files can refer to them
by name ("rename", "refactor", ...).
"""

from dataclasses import dataclass
from enum import Enum


class OperationCategory(str, Enum):
    """Kind of code-assistant operation a request performs."""

    COMPLETION = "completion"
    DOCUMENTATION = "documentation"
    SYNTAX = "syntax"
    RENAME = "rename"
    REFACTOR = "refactor"
    ANALYSIS = "analysis"
    UNKNOWN = "unknown"


# Order in which the classifier tries categories. UNKNOWN is never matched.
CATEGORY_ORDER: tuple[OperationCategory, ...] = (
    OperationCategory.COMPLETION,
    OperationCategory.DOCUMENTATION,
    OperationCategory.SYNTAX,
    OperationCategory.RENAME,
    OperationCategory.REFACTOR,
    OperationCategory.ANALYSIS,
)


@dataclass(frozen=True)
class ClassificationResult:
    """
    Result of classifying one request.

    Attributes:
        category: Operation category of the request
        token_count: Estimated token cost of the request content (>= 0)
    """

    category: OperationCategory
    token_count: int = 0

    def __post_init__(self) -> None:
        if self.token_count < 0:
            raise ValueError("token_count must be non-negative")

    @classmethod
    def unknown(cls) -> "ClassificationResult":
        """Fail-open result used when classification itself breaks."""
        return cls(category=OperationCategory.UNKNOWN, token_count=0)


__all__ = ["CATEGORY_ORDER", "ClassificationResult", "OperationCategory"]
