"""
Reference-integrity linter entry points.

Shape dispatch happens exactly once here: the document generation is
detected, the matching index variant is built and handed to the matching
rule set.  The linter never raises for well-typed input and never mutates
the document it is given.

Usage::

    from bmml.lint import lint

    result = lint(doc)
    for issue in result.errors:
        print(issue.rule, issue.path, issue.message)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from bmml.detect import detect_version
from bmml.index import build_index
from bmml.lint._base import RuleSet
from bmml.lint.current import CurrentRuleSet
from bmml.lint.legacy import LegacyRuleSet
from bmml.lint.schema import LintResult
from bmml.types import DocumentVersion

logger = logging.getLogger(__name__)

_RULE_SETS: dict[DocumentVersion, type[RuleSet]] = {
    DocumentVersion.V1: LegacyRuleSet,
    DocumentVersion.V2: CurrentRuleSet,
}


def lint(doc: Any, version: Optional[DocumentVersion] = None) -> LintResult:
    """Lint *doc* and return every issue in document order.

    Args:
        doc: Parsed document tree.  Non-mapping input lints as an empty
            document.
        version: Force a rule set instead of detecting one.
    """
    resolved = version if version is not None else detect_version(doc)
    tree: Mapping[str, Any] = doc if isinstance(doc, Mapping) else {}
    index = build_index(tree, resolved)
    issues = _RULE_SETS[resolved](tree, index).run()
    result = LintResult(version=resolved, issues=issues)
    logger.debug(
        "Linted %s document: errors=%d warnings=%d",
        resolved.value,
        len(result.errors),
        len(result.warnings),
    )
    return result


def lint_is_valid(doc: Any) -> bool:
    """True when linting *doc* yields no error-severity issue."""
    return lint(doc).passed
