"""Tests for OperationClassifier and token estimation."""

from unittest.mock import MagicMock

import pytest

from adaptive_model_router.classifier import (
    DEFAULT_CATEGORY,
    OperationClassifier,
    compile_rules,
    estimate_tokens,
)
from adaptive_model_router.observability.constants import CLASSIFICATIONS_TOTAL
from adaptive_model_router.protocols import ClassifierProtocol
from adaptive_model_router.types import (
    CATEGORY_ORDER,
    ClassificationResult,
    OperationCategory,
    RouteRequest,
)


class TestEstimateTokens:
    def test_empty(self):
        assert estimate_tokens("") == 0

    def test_whitespace_words(self):
        assert estimate_tokens("// simple rename of variable x to y") == 8

    def test_dense_script_counted_per_character(self):
        # Two words plus three ideographs.
        assert estimate_tokens("重命名 x") == 2 + 3

    def test_token_count_grows_with_content(self):
        assert estimate_tokens("a " * 5000) == 5000


class TestOperationClassifier:
    """Tests for rule-based classification."""

    @pytest.fixture
    def classifier(self):
        return OperationClassifier()

    def test_satisfies_protocol(self, classifier):
        assert isinstance(classifier, ClassifierProtocol)

    def test_category_order(self, classifier):
        assert classifier.categories == CATEGORY_ORDER

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("// simple rename of variable x to y", OperationCategory.RENAME),
            ("please autocomplete this loop", OperationCategory.COMPLETION),
            ("finish this function for me", OperationCategory.COMPLETION),
            ("add a docstring to this method", OperationCategory.DOCUMENTATION),
            ("/** @param x the input */", OperationCategory.DOCUMENTATION),
            ("fix the syntax error on line 3", OperationCategory.SYNTAX),
            ("missing bracket somewhere", OperationCategory.SYNTAX),
            ("refactor this class into smaller pieces", OperationCategory.REFACTOR),
            ("extract method from this block", OperationCategory.REFACTOR),
            ("explain how this recursion terminates", OperationCategory.ANALYSIS),
            ("把这个函数重命名", OperationCategory.RENAME),
            ("帮我重构这段代码", OperationCategory.REFACTOR),
            ("解释这段代码", OperationCategory.ANALYSIS),
        ],
    )
    def test_categories(self, classifier, content, expected):
        assert classifier.classify(content).category == expected

    def test_earlier_category_wins(self, classifier):
        """Documentation is evaluated before refactor."""
        result = classifier.classify("refactor and document this module")
        assert result.category == OperationCategory.DOCUMENTATION

    def test_case_insensitive(self, classifier):
        assert classifier.classify("RENAME foo").category == OperationCategory.RENAME

    def test_unmatched_content_uses_default(self, classifier):
        assert DEFAULT_CATEGORY == OperationCategory.COMPLETION
        result = classifier.classify("x = 1")
        assert result.category == OperationCategory.COMPLETION

    def test_empty_content(self, classifier):
        result = classifier.classify("")
        assert result == ClassificationResult(DEFAULT_CATEGORY, 0)

    def test_none_content(self, classifier):
        result = classifier.classify(None)  # type: ignore[arg-type]
        assert result.token_count == 0

    def test_deterministic(self, classifier):
        content = "rename the variable and explain why"
        assert classifier.classify(content) == classifier.classify(content)

    def test_custom_rules_and_default(self):
        classifier = OperationClassifier(
            rules=compile_rules([("analysis", [r"\bprofile\b"])]),
            default_category=OperationCategory.UNKNOWN,
        )
        assert classifier.classify("profile this").category == OperationCategory.ANALYSIS
        assert classifier.classify("rename x").category == OperationCategory.UNKNOWN

    def test_unknown_category_name_rejected(self):
        with pytest.raises(ValueError):
            compile_rules([("teleport", [r"x"])])

    def test_failure_fails_open(self):
        broken = MagicMock()
        broken.search.side_effect = RuntimeError("regex engine exploded")
        classifier = OperationClassifier(rules=[(OperationCategory.RENAME, (broken,))])
        assert classifier.classify("anything") == ClassificationResult.unknown()

    def test_classify_request_prefers_code_snippet(self, classifier):
        request = RouteRequest(
            model="m",
            code_snippet="// rename x to y",
            prompt="explain this code",
        )
        assert classifier.classify_request(request).category == OperationCategory.RENAME

    def test_classify_request_uses_prompt(self, classifier):
        request = RouteRequest(model="m", prompt="explain this code")
        assert classifier.classify_request(request).category == OperationCategory.ANALYSIS

    def test_counts_classifications(self, collector):
        classifier = OperationClassifier(metrics_collector=collector)
        classifier.classify("rename x")
        classifier.classify("rename y")
        assert collector.get_counter(CLASSIFICATIONS_TOTAL, {"category": "rename"}) == 2
