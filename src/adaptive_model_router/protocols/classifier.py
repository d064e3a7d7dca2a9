# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for request classification."""

from typing import Protocol, runtime_checkable

from ..types.classification import ClassificationResult
from ..types.request import RouteRequest


@runtime_checkable
class ClassifierProtocol(Protocol):
    """
    Protocol for operation classification.

    Implementations must never raise: on internal failure they return
    ``ClassificationResult.unknown()``.
    """

    def classify(self, content: str) -> ClassificationResult:
        """Classify raw request text."""
        ...

    def classify_request(self, request: RouteRequest) -> ClassificationResult:
        """Classify a request, preferring its code snippet over its prompt."""
        ...
