# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Operation classifier.

Maps request text to an operation category and a token-count estimate using
the ordered pattern rules in ``patterns``. The classifier is a heuristic gate
for routing, never a correctness-critical component, so it fails open.
"""

import logging

from ..observability.constants import CLASSIFICATIONS_TOTAL
from ..observability.protocols import MetricsCollectorProtocol
from ..types.classification import ClassificationResult, OperationCategory
from ..types.request import RouteRequest
from .patterns import DEFAULT_RULES, DENSE_SCRIPT_PATTERN, RuleSet

logger = logging.getLogger(__name__)

# Category used when no rule matches. Kept as COMPLETION for compatibility
# with existing routing policies even though it is a commonly-matched
# category rather than UNKNOWN.
DEFAULT_CATEGORY = OperationCategory.COMPLETION


def estimate_tokens(content: str) -> int:
    """
    Estimate the token cost of a text.

    Whitespace-delimited words plus one per dense-script character, since
    word splitting undercounts scripts that are not whitespace-segmented.
    """
    if not content:
        return 0
    return len(content.split()) + len(DENSE_SCRIPT_PATTERN.findall(content))


class OperationClassifier:
    """
    Rule-based operation classifier.

    Categories are evaluated in rule order; the first category with any
    matching pattern wins. The result is a pure function of the content.

    Example:
        >>> classifier = OperationClassifier()
        >>> classifier.classify("// simple rename of variable x to y").category
        <OperationCategory.RENAME: 'rename'>
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        default_category: OperationCategory = DEFAULT_CATEGORY,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ):
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self._default_category = default_category
        self._metrics_collector = metrics_collector

    @property
    def categories(self) -> tuple[OperationCategory, ...]:
        """Categories in evaluation order."""
        return tuple(category for category, _ in self._rules)

    def _match_category(self, content: str) -> OperationCategory:
        for category, patterns in self._rules:
            for pattern in patterns:
                if pattern.search(content):
                    return category
        return self._default_category

    def classify(self, content: str) -> ClassificationResult:
        """
        Classify request text. Never raises.

        Returns:
            ClassificationResult; ``{unknown, 0}`` if classification fails
        """
        try:
            text = content or ""
            result = ClassificationResult(
                category=self._match_category(text),
                token_count=estimate_tokens(text),
            )
        except Exception as e:
            logger.warning(f"Operation classification failed, failing open: {e}")
            result = ClassificationResult.unknown()

        if self._metrics_collector:
            self._metrics_collector.inc_counter(
                CLASSIFICATIONS_TOTAL, labels={"category": result.category.value}
            )
        logger.debug(
            f"Classified operation as {result.category.value} "
            f"(~{result.token_count} tokens)"
        )
        return result

    def classify_request(self, request: RouteRequest) -> ClassificationResult:
        """Classify a request, preferring its code snippet over its prompt."""
        try:
            content = request.content
        except Exception as e:
            logger.warning(f"Could not read request content, failing open: {e}")
            return ClassificationResult.unknown()
        return self.classify(content)


__all__ = ["DEFAULT_CATEGORY", "OperationClassifier", "estimate_tokens"]
