"""
Reference-integrity linter for both BMML document generations.

Public API::

    from bmml.lint import (
        # Entry points
        lint,
        lint_is_valid,
        # Result models
        LintIssue,
        LintResult,
        # Rule ids
        Rule,
        # OTel helpers
        emit_lint_result,
    )
"""

from bmml.lint.current import CurrentRuleSet
from bmml.lint.legacy import LegacyRuleSet
from bmml.lint.linter import lint, lint_is_valid
from bmml.lint.otel import emit_lint_complete, emit_lint_issue, emit_lint_result
from bmml.lint.rules import COVERAGE_RULES, Rule, rules_for
from bmml.lint.schema import LintIssue, LintResult

__all__ = [
    # Entry points
    "lint",
    "lint_is_valid",
    # Rule sets
    "LegacyRuleSet",
    "CurrentRuleSet",
    # Schema
    "LintIssue",
    "LintResult",
    # Rules
    "Rule",
    "COVERAGE_RULES",
    "rules_for",
    # OTel
    "emit_lint_complete",
    "emit_lint_issue",
    "emit_lint_result",
]
