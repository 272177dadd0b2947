"""Tests for the legacy (v1) rule set."""

from __future__ import annotations

import copy

import pytest

from bmml.lint import LintResult, Rule, lint
from bmml.types import DocumentVersion, Severity


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_doc(**sections) -> dict:
    """A consistent v1 document; *sections* replace or add top-level keys."""
    doc = {
        "version": "1.0",
        "meta": {"name": "Test", "portfolio": "explore", "stage": "ideation"},
        "customer_segments": [
            {
                "id": "cs-a",
                "name": "Segment A",
                "jobs": [{"id": "job-ship", "type": "functional", "description": "Ship"}],
                "pains": [{"id": "pain-late", "description": "Late"}],
                "gains": [{"id": "gain-cheap", "description": "Cheap"}],
            },
        ],
        "value_propositions": [
            {
                "id": "vp-x",
                "name": "Fast delivery",
                "products_services": [
                    {"id": "ps-courier", "type": "service", "description": "Courier"},
                ],
            },
        ],
        "fits": [
            {
                "id": "fit-x-a",
                "value_proposition": "vp-x",
                "customer_segment": "cs-a",
                "pain_relievers": [{"pain": "pain-late", "through": ["ps-courier"]}],
                "gain_creators": [{"gain": "gain-cheap", "through": ["ps-courier"]}],
                "job_addressers": [{"job": "job-ship", "through": ["ps-courier"]}],
            },
        ],
        "key_resources": [
            {"id": "kr-fleet", "name": "Fleet", "type": "physical", "for_value": ["vp-x"]},
        ],
        "key_activities": [
            {"id": "ka-routing", "name": "Routing", "type": "platform", "for_value": ["vp-x"]},
        ],
    }
    doc.update(sections)
    return doc


def _rules(result: LintResult) -> list[str]:
    return [issue.rule for issue in result.issues]


# ---------------------------------------------------------------------------
# Baseline
# ---------------------------------------------------------------------------


class TestConsistentDocument:
    def test_no_issues(self):
        result = lint(_make_doc())
        assert result.version is DocumentVersion.V1
        assert result.issues == []
        assert result.passed

    def test_input_is_not_mutated(self):
        doc = _make_doc()
        before = copy.deepcopy(doc)
        lint(doc)
        assert doc == before


# ---------------------------------------------------------------------------
# Fits
# ---------------------------------------------------------------------------


class TestFitReferences:
    def test_missing_value_proposition(self):
        doc = _make_doc()
        doc["fits"][0]["value_proposition"] = "vp-missing"
        result = lint(doc)
        issues = result.by_rule("fit-value-proposition-ref")
        assert len(issues) == 1
        assert issues[0].path == "/fits/0/value_proposition"
        assert issues[0].message == "Value proposition 'vp-missing' does not exist"
        assert issues[0].severity is Severity.ERROR

    def test_missing_customer_segment_reports_once_and_other_rules_still_run(self):
        doc = _make_doc()
        doc["fits"][0]["customer_segment"] = "cs-missing"
        doc["fits"][0]["pain_relievers"][0]["through"] = ["ps-missing"]
        result = lint(doc)

        cs_issues = result.by_rule("fit-customer-segment-ref")
        assert len(cs_issues) == 1
        assert cs_issues[0].path == "/fits/0/customer_segment"
        assert cs_issues[0].message == "Customer segment 'cs-missing' does not exist"
        # Profile checks are skipped, the VP-scoped check still runs.
        assert result.by_rule("fit-pain-ref") == []
        through = result.by_rule("fit-through-ref")
        assert [i.path for i in through] == ["/fits/0/pain_relievers/0/through/0"]

    def test_pain_not_on_fit_segment(self):
        doc = _make_doc()
        doc["fits"][0]["pain_relievers"][0]["pain"] = "pain-other"
        issues = lint(doc).by_rule("fit-pain-ref")
        assert len(issues) == 1
        assert issues[0].path == "/fits/0/pain_relievers/0/pain"
        assert issues[0].message == "Pain 'pain-other' does not exist in customer segment 'cs-a'"

    def test_gain_and_job_not_on_fit_segment(self):
        doc = _make_doc()
        doc["fits"][0]["gain_creators"][0]["gain"] = "gain-other"
        doc["fits"][0]["job_addressers"][0]["job"] = "job-other"
        result = lint(doc)
        assert [i.path for i in result.by_rule("fit-gain-ref")] == ["/fits/0/gain_creators/0/gain"]
        assert [i.path for i in result.by_rule("fit-job-ref")] == ["/fits/0/job_addressers/0/job"]

    def test_through_not_in_fit_value_proposition(self):
        doc = _make_doc()
        doc["fits"][0]["gain_creators"][0]["through"] = ["ps-courier", "ps-missing"]
        issues = lint(doc).by_rule("fit-through-ref")
        assert len(issues) == 1
        assert issues[0].path == "/fits/0/gain_creators/0/through/1"
        assert issues[0].message == (
            "Product/service 'ps-missing' does not exist in value proposition 'vp-x'"
        )

    def test_through_checks_skipped_when_value_proposition_unresolved(self):
        doc = _make_doc()
        doc["fits"][0]["value_proposition"] = "vp-missing"
        doc["fits"][0]["pain_relievers"][0]["through"] = ["ps-missing"]
        assert lint(doc).by_rule("fit-through-ref") == []

    def test_pain_on_other_segment_is_out_of_scope(self):
        doc = _make_doc()
        doc["customer_segments"].append(
            {"id": "cs-b", "name": "B", "pains": [{"id": "pain-b", "description": "B"}]}
        )
        doc["fits"][0]["pain_relievers"].append({"pain": "pain-b", "through": []})
        issues = lint(doc).by_rule("fit-pain-ref")
        assert [i.path for i in issues] == ["/fits/0/pain_relievers/1/pain"]


# ---------------------------------------------------------------------------
# Direct references
# ---------------------------------------------------------------------------


class TestDirectReferences:
    def test_channel_segments(self):
        doc = _make_doc(
            channels=[{"id": "ch-web", "name": "Web", "type": "direct", "segments": ["cs-a", "cs-x"]}]
        )
        issues = lint(doc).by_rule("channel-segment-ref")
        assert [i.path for i in issues] == ["/channels/0/segments/1"]
        assert issues[0].message == "Customer segment 'cs-x' does not exist"

    def test_customer_relationship_segment(self):
        doc = _make_doc(
            customer_relationships=[{"id": "cr-help", "segment": "cs-x", "type": "dedicated"}]
        )
        issues = lint(doc).by_rule("customer-relationship-segment-ref")
        assert [i.path for i in issues] == ["/customer_relationships/0/segment"]

    def test_revenue_stream_references(self):
        doc = _make_doc(
            revenue_streams=[
                {
                    "id": "rs-fees",
                    "name": "Fees",
                    "type": "usage",
                    "from_segments": ["cs-x"],
                    "for_value": "vp-x-missing",
                },
                {"id": "rs-ok", "name": "Ok", "type": "usage", "from_segments": ["cs-a"]},
            ]
        )
        result = lint(doc)
        assert [i.path for i in result.by_rule("revenue-stream-segment-ref")] == [
            "/revenue_streams/0/from_segments/0"
        ]
        assert [i.path for i in result.by_rule("revenue-stream-value-ref")] == [
            "/revenue_streams/0/for_value"
        ]

    def test_resource_and_activity_value_links(self):
        doc = _make_doc()
        doc["key_resources"][0]["for_value"] = ["vp-missing"]
        doc["key_activities"][0]["for_value"] = ["vp-x", "vp-gone"]
        result = lint(doc)
        assert [i.path for i in result.by_rule("key-resource-value-ref")] == [
            "/key_resources/0/for_value/0"
        ]
        assert [i.path for i in result.by_rule("key-activity-value-ref")] == [
            "/key_activities/0/for_value/1"
        ]

    def test_partnership_provides(self):
        doc = _make_doc(
            key_partnerships=[
                {
                    "id": "kp-carrier",
                    "name": "Carrier",
                    "type": "supplier",
                    "motivation": "optimization",
                    "provides": ["kr-fleet", "ka-routing", "kr-missing"],
                }
            ]
        )
        issues = lint(doc).by_rule("key-partnership-provides-ref")
        assert [i.path for i in issues] == ["/key_partnerships/0/provides/2"]
        assert issues[0].message == "Resource or activity 'kr-missing' does not exist"

    def test_cost_linked_to(self):
        doc = _make_doc(
            cost_structure={
                "type": "cost_driven",
                "major_costs": [
                    {"name": "Fuel", "type": "variable", "linked_to": ["ka-missing"]},
                ],
            }
        )
        issues = lint(doc).by_rule("cost-linked-to-ref")
        assert [i.path for i in issues] == ["/cost_structure/major_costs/0/linked_to/0"]


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------


class TestCoverage:
    def test_segment_without_fit(self):
        doc = _make_doc()
        doc["customer_segments"].append({"id": "cs-b", "name": "B"})
        result = lint(doc)
        issues = result.by_rule("segment-no-fits")
        assert len(issues) == 1
        assert issues[0].path == "/customer_segments/1"
        assert issues[0].severity is Severity.WARNING
        assert "has no fits defined" in issues[0].message
        assert result.errors == []

    def test_value_proposition_without_fit(self):
        doc = _make_doc()
        doc["value_propositions"].append({"id": "vp-y", "name": "Y"})
        issues = lint(doc).by_rule("vp-no-fits")
        assert [i.path for i in issues] == ["/value_propositions/1"]

    def test_unrelieved_uncreated_unaddressed(self):
        doc = _make_doc()
        cs = doc["customer_segments"][0]
        cs["pains"].append({"id": "pain-2", "description": "2"})
        cs["gains"].append({"id": "gain-2", "description": "2"})
        cs["jobs"].append({"id": "job-2", "type": "social", "description": "2"})
        result = lint(doc)
        assert [i.path for i in result.by_rule("pain-never-relieved")] == [
            "/customer_segments/0/pains/1"
        ]
        assert "never relieved" in result.by_rule("pain-never-relieved")[0].message
        assert [i.path for i in result.by_rule("gain-never-created")] == [
            "/customer_segments/0/gains/1"
        ]
        assert [i.path for i in result.by_rule("job-never-addressed")] == [
            "/customer_segments/0/jobs/1"
        ]

    def test_unused_product_service(self):
        doc = _make_doc()
        doc["value_propositions"][0]["products_services"].append(
            {"id": "ps-idle", "type": "product", "description": "Idle"}
        )
        issues = lint(doc).by_rule("product-service-never-used")
        assert [i.path for i in issues] == ["/value_propositions/0/products_services/1"]
        assert "never used" in issues[0].message

    def test_relief_by_any_fit_counts(self):
        doc = _make_doc()
        doc["customer_segments"].append(
            {"id": "cs-b", "name": "B", "pains": [{"id": "pain-b", "description": "B"}]}
        )
        doc["fits"].append(
            {
                "id": "fit-x-b",
                "value_proposition": "vp-x",
                "customer_segment": "cs-b",
                "pain_relievers": [{"pain": "pain-b", "through": []}],
            }
        )
        assert lint(doc).by_rule("pain-never-relieved") == []


# ---------------------------------------------------------------------------
# Ordering and robustness
# ---------------------------------------------------------------------------


class TestOrderingAndRobustness:
    def test_rule_families_in_document_order(self):
        doc = _make_doc(
            channels=[{"id": "ch-web", "name": "Web", "type": "direct", "segments": ["cs-x"]}],
            cost_structure={
                "type": "cost_driven",
                "major_costs": [{"name": "Fuel", "type": "fixed", "linked_to": ["kr-x"]}],
            },
        )
        doc["fits"][0]["customer_segment"] = "cs-x"
        result = lint(doc)
        assert _rules(result) == [
            Rule.FIT_CUSTOMER_SEGMENT_REF.value,
            Rule.CHANNEL_SEGMENT_REF.value,
            Rule.COST_LINKED_TO_REF.value,
            Rule.SEGMENT_NO_FITS.value,
        ]

    def test_deterministic(self):
        doc = _make_doc(channels=[{"id": "ch-1", "name": "1", "type": "direct", "segments": ["cs-x"]}])
        assert lint(doc).to_dicts() == lint(doc).to_dicts()

    @pytest.mark.parametrize(
        "fits",
        [None, [], ["fit-1"], [{"id": "fit-1"}], [{"id": "fit-1", "pain_relievers": None}]],
    )
    def test_malformed_fits_do_not_raise(self, fits):
        result = lint(_make_doc(fits=fits))
        assert result.version is DocumentVersion.V1
