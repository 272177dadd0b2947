"""
Rule identifiers emitted by the linter.

Values are the stable, machine-readable ids that appear in ``LintIssue.rule``
and in CLI output.  Both rule sets share ids where the rule is the same in
spirit; only the JSON pointer shape differs between document generations.
"""

from __future__ import annotations

from enum import Enum

from bmml.types import DocumentVersion, Severity


class Rule(str, Enum):
    """Lint rule ids."""

    # Fit references
    FIT_VALUE_PROPOSITION_REF = "fit-value-proposition-ref"
    FIT_CUSTOMER_SEGMENT_REF = "fit-customer-segment-ref"
    FIT_PAIN_REF = "fit-pain-ref"
    FIT_GAIN_REF = "fit-gain-ref"
    FIT_JOB_REF = "fit-job-ref"
    FIT_THROUGH_REF = "fit-through-ref"  # v1 only
    # Fit mappings (v2 only)
    FIT_MAPPING_MALFORMED = "fit-mapping-malformed"
    FIT_MAPPING_TYPE_MISMATCH = "fit-mapping-type-mismatch"
    PAIN_RELIEVER_SCOPE_REF = "pain-reliever-scope-ref"
    GAIN_CREATOR_SCOPE_REF = "gain-creator-scope-ref"
    # Direct references
    CHANNEL_SEGMENT_REF = "channel-segment-ref"
    CHANNEL_VALUE_REF = "channel-value-ref"  # v2 only
    CUSTOMER_RELATIONSHIP_SEGMENT_REF = "customer-relationship-segment-ref"
    REVENUE_STREAM_SEGMENT_REF = "revenue-stream-segment-ref"
    REVENUE_STREAM_VALUE_REF = "revenue-stream-value-ref"
    KEY_RESOURCE_VALUE_REF = "key-resource-value-ref"
    KEY_ACTIVITY_VALUE_REF = "key-activity-value-ref"
    KEY_PARTNERSHIP_PROVIDES_REF = "key-partnership-provides-ref"
    COST_LINKED_TO_REF = "cost-linked-to-ref"
    # Coverage
    SEGMENT_NO_FITS = "segment-no-fits"
    VP_NO_FITS = "vp-no-fits"
    PAIN_NEVER_RELIEVED = "pain-never-relieved"
    GAIN_NEVER_CREATED = "gain-never-created"
    JOB_NEVER_ADDRESSED = "job-never-addressed"
    PRODUCT_SERVICE_NEVER_USED = "product-service-never-used"  # v1 only

    @property
    def severity(self) -> Severity:
        return Severity.WARNING if self in COVERAGE_RULES else Severity.ERROR


COVERAGE_RULES: frozenset[Rule] = frozenset({
    Rule.SEGMENT_NO_FITS,
    Rule.VP_NO_FITS,
    Rule.PAIN_NEVER_RELIEVED,
    Rule.GAIN_NEVER_CREATED,
    Rule.JOB_NEVER_ADDRESSED,
    Rule.PRODUCT_SERVICE_NEVER_USED,
})

_V1_ONLY = frozenset({Rule.FIT_THROUGH_REF, Rule.PRODUCT_SERVICE_NEVER_USED})
_V2_ONLY = frozenset({
    Rule.FIT_MAPPING_MALFORMED,
    Rule.FIT_MAPPING_TYPE_MISMATCH,
    Rule.PAIN_RELIEVER_SCOPE_REF,
    Rule.GAIN_CREATOR_SCOPE_REF,
    Rule.CHANNEL_VALUE_REF,
})


def rules_for(version: DocumentVersion) -> list[Rule]:
    """Rules that can fire for documents of *version*, in declaration order."""
    excluded = _V2_ONLY if version is DocumentVersion.V1 else _V1_ONLY
    return [rule for rule in Rule if rule not in excluded]
