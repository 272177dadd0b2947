"""
OTel span event emission helpers for lint results.

Log + optional OTel span event via the shared ``add_span_event()`` helper.
All functions degrade gracefully when OTel is not installed.

Usage::

    from bmml.lint.otel import emit_lint_result

    emit_lint_result(result, source="model.bmml.yaml")
"""

from __future__ import annotations

import logging

from bmml._otel_helpers import SpanAttributes, add_span_event
from bmml.lint.schema import LintIssue, LintResult

logger = logging.getLogger(__name__)


def emit_lint_complete(result: LintResult, source: str = "") -> None:
    """Emit a span event summarising one lint run.

    Event name: ``bmml.lint.complete``
    """
    attrs: SpanAttributes = {
        "bmml.version": result.version.value,
        "bmml.passed": result.passed,
        "bmml.issue_count": len(result.issues),
        "bmml.error_count": len(result.errors),
        "bmml.warning_count": len(result.warnings),
    }

    if result.passed:
        logger.debug(
            "Lint passed: version=%s warnings=%d",
            result.version.value,
            len(result.warnings),
        )
    else:
        logger.info(
            "Lint found errors: version=%s errors=%d warnings=%d",
            result.version.value,
            len(result.errors),
            len(result.warnings),
        )

    add_span_event("lint.complete", attrs, source=source)


def emit_lint_issue(issue: LintIssue, source: str = "") -> None:
    """Emit a span event for one error-severity issue.

    Event name: ``bmml.lint.issue``
    """
    attrs: SpanAttributes = {
        "bmml.rule": issue.rule,
        "bmml.severity": issue.severity.value,
        "bmml.path": issue.path,
        "bmml.message": issue.message,
    }
    add_span_event("lint.issue", attrs, source=source)


def emit_lint_result(result: LintResult, source: str = "") -> None:
    """Emit one ``bmml.lint.issue`` per error, then the summary event."""
    for issue in result.errors:
        emit_lint_issue(issue, source=source)
    emit_lint_complete(result, source=source)
