"""
Shared machinery for the per-generation rule sets.

A rule set is constructed for one document and its matching ``EntityIndex``
and produces an ordered list of ``LintIssue`` records.  Subclasses implement
the reference families; the coverage pass is shared because both document
generations declare customer profiles and value maps the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar

from bmml._access import entries, pointer
from bmml.index import EntityIndex
from bmml.lint.rules import Rule
from bmml.lint.schema import LintIssue
from bmml.types import DocumentVersion


class RuleSet:
    """Base class: collects issues in document order."""

    version: ClassVar[DocumentVersion]

    def __init__(self, doc: Mapping[str, Any], index: EntityIndex) -> None:
        self._doc = doc
        self._index = index
        self._issues: list[LintIssue] = []

    def run(self) -> list[LintIssue]:
        """Run every reference family, then the coverage pass."""
        self._issues = []
        self._check_references()
        self._check_coverage()
        return list(self._issues)

    def _check_references(self) -> None:
        raise NotImplementedError

    def _check_coverage(self) -> None:
        raise NotImplementedError

    # -- reporting ----------------------------------------------------------

    def _report(self, rule: Rule, path: str, message: str) -> None:
        self._issues.append(
            LintIssue(
                rule=rule.value,
                severity=rule.severity,
                message=message,
                path=path,
            )
        )

    def _check_ids(
        self,
        ids: Iterable[Any],
        exists: Callable[[Any], bool],
        rule: Rule,
        base_path: tuple[str | int, ...],
        label: str,
    ) -> None:
        """Report each id in *ids* that *exists* rejects, at ``base_path/j``."""
        for j, ref in enumerate(ids):
            if not exists(ref):
                self._report(rule, pointer(*base_path, j), f"{label} '{ref}' does not exist")

    # -- coverage -----------------------------------------------------------

    def _report_unfitted(
        self,
        fitted_segments: set[str],
        fitted_value_propositions: set[str],
    ) -> None:
        for i, cs in entries(self._doc, "customer_segments"):
            cs_id = cs.get("id")
            if isinstance(cs_id, str) and cs_id not in fitted_segments:
                self._report(
                    Rule.SEGMENT_NO_FITS,
                    pointer("customer_segments", i),
                    f"Customer segment '{cs_id}' has no fits defined",
                )
        for i, vp in entries(self._doc, "value_propositions"):
            vp_id = vp.get("id")
            if isinstance(vp_id, str) and vp_id not in fitted_value_propositions:
                self._report(
                    Rule.VP_NO_FITS,
                    pointer("value_propositions", i),
                    f"Value proposition '{vp_id}' has no fits defined",
                )

    def _report_unused_profile_items(
        self,
        relieved: set[str],
        created: set[str],
        addressed: set[str],
    ) -> None:
        for i, cs in entries(self._doc, "customer_segments"):
            for j, pain in entries(cs, "pains"):
                if _unused(pain, relieved):
                    self._report(
                        Rule.PAIN_NEVER_RELIEVED,
                        pointer("customer_segments", i, "pains", j),
                        f"Pain '{pain['id']}' is never relieved by any fit",
                    )
            for j, gain in entries(cs, "gains"):
                if _unused(gain, created):
                    self._report(
                        Rule.GAIN_NEVER_CREATED,
                        pointer("customer_segments", i, "gains", j),
                        f"Gain '{gain['id']}' is never created by any fit",
                    )
            for j, job in entries(cs, "jobs"):
                if _unused(job, addressed):
                    self._report(
                        Rule.JOB_NEVER_ADDRESSED,
                        pointer("customer_segments", i, "jobs", j),
                        f"Job '{job['id']}' is never addressed by any fit",
                    )


def _unused(item: Mapping[str, Any], seen: set[str]) -> bool:
    item_id = item.get("id")
    return isinstance(item_id, str) and item_id not in seen


def contains(ids: frozenset[str], ref: Any) -> bool:
    """Membership test that treats non-string references as unresolved."""
    return isinstance(ref, str) and ref in ids


def string_ids(values: Iterable[Any]) -> set[str]:
    return {v for v in values if isinstance(v, str)}
