"""
Pydantic v2 result models for the reference-integrity linter.

All models use ``extra="forbid"``; issues serialise to the flat
``{rule, severity, message, path}`` record consumed by the CLI and any
downstream tooling.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bmml.types import DocumentVersion, Severity


class LintIssue(BaseModel):
    """One finding at one location of the document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule: str = Field(..., min_length=1, description="Machine-readable rule id")
    severity: Severity
    message: str
    path: str = Field(..., description="JSON pointer to the offending field")

    def to_dict(self) -> dict[str, str]:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "path": self.path,
        }


class LintResult(BaseModel):
    """Ordered issues for one document plus the rule set that produced them."""

    model_config = ConfigDict(extra="forbid")

    version: DocumentVersion
    issues: list[LintIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def passed(self) -> bool:
        """True when no error-severity issue was found."""
        return not self.errors

    def by_rule(self, rule: str) -> list[LintIssue]:
        return [i for i in self.issues if i.rule == rule]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [i.to_dict() for i in self.issues]
