# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Static pattern rules for operation classification.

Rules are free-text keyword/regex matches, language agnostic, with English
and CJK keywords. Categories are listed in evaluation order; within a
category, patterns are tried in order and the first match wins.
"""

import re
from collections.abc import Sequence

from ..types.classification import OperationCategory

_FLAGS = re.IGNORECASE | re.MULTILINE

RuleSet = Sequence[tuple[OperationCategory, Sequence[re.Pattern[str]]]]


def compile_rules(
    rules: Sequence[tuple[OperationCategory | str, Sequence[str | re.Pattern[str]]]],
) -> tuple[tuple[OperationCategory, tuple[re.Pattern[str], ...]], ...]:
    """
    Normalize a rule list: coerce category names and compile string patterns.

    Raises:
        ValueError: On an unknown category name
        re.error: On an invalid pattern
    """
    compiled = []
    for category, patterns in rules:
        cat = OperationCategory(category)
        compiled.append(
            (
                cat,
                tuple(
                    p if isinstance(p, re.Pattern) else re.compile(p, _FLAGS)
                    for p in patterns
                ),
            )
        )
    return tuple(compiled)


DEFAULT_RULES = compile_rules(
    [
        (
            OperationCategory.COMPLETION,
            [
                r"\bauto-?complet\w*",
                r"\b(complete|finish|continue)\s+(this|the|writing)\b",
                r"\bfill\s+in\b",
                r"\bcode\s+completion\b",
                r"补全|续写",
            ],
        ),
        (
            OperationCategory.DOCUMENTATION,
            [
                r"\b(docstrings?|jsdoc|javadoc|readme)\b",
                r"\bdocument(ation|s|ing)?\b",
                r"\b(add|write|generate)\s+(a\s+|some\s+)?comments?\b",
                r"/\*\*",
                r"<summary>.*</summary>",
                r"@(param|returns?|throws)\b",
                r"注释|文档",
            ],
        ),
        (
            OperationCategory.SYNTAX,
            [
                r"\bsyntax\b",
                r"\blint(er|ing)?\b",
                r"\b(re)?format(ting)?\b",
                r"\bindent(ation)?\b",
                r"\b(typo|semicolon)s?\b",
                r"\bmissing\s+(bracket|paren(thesis)?|brace|quote)s?\b",
                r"语法|格式化",
            ],
        ),
        (
            OperationCategory.RENAME,
            [
                r"\bre-?nam(e|es|ed|ing)\b",
                r"\b(change|update)\s+the\s+name\b",
                r"重命名|改名",
            ],
        ),
        (
            OperationCategory.REFACTOR,
            [
                r"\brefactor\w*",
                r"\brestructur\w*",
                r"\b(extract|inline)\s+(a\s+)?(method|function|class|variable|constant)\b",
                r"\bsimplif(y|ies|ication)\b",
                r"\bclean\s*up\b",
                r"\bdeduplicat\w*",
                r"重构|简化",
            ],
        ),
        (
            OperationCategory.ANALYSIS,
            [
                r"\banaly[sz](e|es|is|ing)\b",
                r"\bexplain\w*",
                r"\b(review|debug|diagnos\w*)\b",
                r"\broot\s+cause\b",
                r"\b(why|what\s+does)\b",
                r"解释|分析|为什么",
            ],
        ),
    ]
)


# CJK ideographs, kana and hangul: scripts without whitespace word breaks.
DENSE_SCRIPT_PATTERN = re.compile(
    r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af\uf900-\ufaff]"
)


__all__ = ["DEFAULT_RULES", "DENSE_SCRIPT_PATTERN", "RuleSet", "compile_rules"]
