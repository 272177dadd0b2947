"""
Legacy (v1) rule set.

v1 documents link entities through flat fields: a fit names exactly one
``value_proposition`` and one ``customer_segment`` and carries its relief,
creation and job sections inline, each entry pointing ``through`` products
and services of the fit's value proposition.
"""

from __future__ import annotations

from bmml._access import as_list, as_mapping, entries, pointer
from bmml.lint._base import RuleSet, contains, string_ids
from bmml.lint.rules import Rule
from bmml.types import DocumentVersion

# fit section -> (target field, profile attribute, rule, label)
_FIT_SECTIONS: tuple[tuple[str, str, str, Rule, str], ...] = (
    ("pain_relievers", "pain", "pains", Rule.FIT_PAIN_REF, "Pain"),
    ("gain_creators", "gain", "gains", Rule.FIT_GAIN_REF, "Gain"),
    ("job_addressers", "job", "jobs", Rule.FIT_JOB_REF, "Job"),
)


class LegacyRuleSet(RuleSet):
    """Reference and coverage rules for v1 documents."""

    version = DocumentVersion.V1

    def _check_references(self) -> None:
        self._check_fits()
        self._check_channels()
        self._check_customer_relationships()
        self._check_revenue_streams()
        self._check_value_links("key_resources", Rule.KEY_RESOURCE_VALUE_REF)
        self._check_value_links("key_activities", Rule.KEY_ACTIVITY_VALUE_REF)
        self._check_key_partnerships()
        self._check_costs()

    # -- fits ---------------------------------------------------------------

    def _check_fits(self) -> None:
        index = self._index
        for i, fit in entries(self._doc, "fits"):
            vp_id = fit.get("value_proposition")
            cs_id = fit.get("customer_segment")

            if not index.has_value_proposition(vp_id):
                self._report(
                    Rule.FIT_VALUE_PROPOSITION_REF,
                    pointer("fits", i, "value_proposition"),
                    f"Value proposition '{vp_id}' does not exist",
                )
            if not index.has_segment(cs_id):
                self._report(
                    Rule.FIT_CUSTOMER_SEGMENT_REF,
                    pointer("fits", i, "customer_segment"),
                    f"Customer segment '{cs_id}' does not exist",
                )

            # Unresolved parents are reported above; their scoped checks are skipped.
            profile = index.segment(cs_id)
            value_map = index.value_map(vp_id)

            for section, target_key, attr, rule, label in _FIT_SECTIONS:
                for k, entry in entries(fit, section):
                    target = entry.get(target_key)
                    if profile is not None and not contains(getattr(profile, attr), target):
                        self._report(
                            rule,
                            pointer("fits", i, section, k, target_key),
                            f"{label} '{target}' does not exist in customer segment '{cs_id}'",
                        )
                    if value_map is None:
                        continue
                    for t, ps_id in enumerate(as_list(entry.get("through"))):
                        if not contains(value_map.products_services, ps_id):
                            self._report(
                                Rule.FIT_THROUGH_REF,
                                pointer("fits", i, section, k, "through", t),
                                f"Product/service '{ps_id}' does not exist "
                                f"in value proposition '{vp_id}'",
                            )

    # -- direct references --------------------------------------------------

    def _check_channels(self) -> None:
        for i, channel in entries(self._doc, "channels"):
            self._check_ids(
                as_list(channel.get("segments")),
                self._index.has_segment,
                Rule.CHANNEL_SEGMENT_REF,
                ("channels", i, "segments"),
                "Customer segment",
            )

    def _check_customer_relationships(self) -> None:
        for i, relationship in entries(self._doc, "customer_relationships"):
            cs_id = relationship.get("segment")
            if not self._index.has_segment(cs_id):
                self._report(
                    Rule.CUSTOMER_RELATIONSHIP_SEGMENT_REF,
                    pointer("customer_relationships", i, "segment"),
                    f"Customer segment '{cs_id}' does not exist",
                )

    def _check_revenue_streams(self) -> None:
        for i, stream in entries(self._doc, "revenue_streams"):
            self._check_ids(
                as_list(stream.get("from_segments")),
                self._index.has_segment,
                Rule.REVENUE_STREAM_SEGMENT_REF,
                ("revenue_streams", i, "from_segments"),
                "Customer segment",
            )
            # for_value is optional and singular in v1
            vp_id = stream.get("for_value")
            if vp_id is not None and not self._index.has_value_proposition(vp_id):
                self._report(
                    Rule.REVENUE_STREAM_VALUE_REF,
                    pointer("revenue_streams", i, "for_value"),
                    f"Value proposition '{vp_id}' does not exist",
                )

    def _check_value_links(self, section: str, rule: Rule) -> None:
        for i, entry in entries(self._doc, section):
            self._check_ids(
                as_list(entry.get("for_value")),
                self._index.has_value_proposition,
                rule,
                (section, i, "for_value"),
                "Value proposition",
            )

    def _check_key_partnerships(self) -> None:
        for i, partnership in entries(self._doc, "key_partnerships"):
            self._check_ids(
                as_list(partnership.get("provides")),
                self._index.is_resource_or_activity,
                Rule.KEY_PARTNERSHIP_PROVIDES_REF,
                ("key_partnerships", i, "provides"),
                "Resource or activity",
            )

    def _check_costs(self) -> None:
        cost_structure = as_mapping(self._doc.get("cost_structure"))
        for i, cost in entries(cost_structure, "major_costs"):
            self._check_ids(
                as_list(cost.get("linked_to")),
                self._index.is_resource_or_activity,
                Rule.COST_LINKED_TO_REF,
                ("cost_structure", "major_costs", i, "linked_to"),
                "Resource or activity",
            )

    # -- coverage -----------------------------------------------------------

    def _check_coverage(self) -> None:
        fitted_segments: set[str] = set()
        fitted_value_propositions: set[str] = set()
        relieved: set[str] = set()
        created: set[str] = set()
        addressed: set[str] = set()
        used_products: set[str] = set()

        for _, fit in entries(self._doc, "fits"):
            fitted_segments |= string_ids([fit.get("customer_segment")])
            fitted_value_propositions |= string_ids([fit.get("value_proposition")])
            seen_by_target = {"pain": relieved, "gain": created, "job": addressed}
            for section, target_key, _, _, _ in _FIT_SECTIONS:
                for _, entry in entries(fit, section):
                    seen_by_target[target_key].update(string_ids([entry.get(target_key)]))
                    used_products.update(string_ids(as_list(entry.get("through"))))

        self._report_unfitted(fitted_segments, fitted_value_propositions)
        self._report_unused_profile_items(relieved, created, addressed)
        self._report_unused_products(used_products)

    def _report_unused_products(self, used_products: set[str]) -> None:
        for i, vp in entries(self._doc, "value_propositions"):
            for j, product in entries(vp, "products_services"):
                ps_id = product.get("id")
                if isinstance(ps_id, str) and ps_id not in used_products:
                    self._report(
                        Rule.PRODUCT_SERVICE_NEVER_USED,
                        pointer("value_propositions", i, "products_services", j),
                        f"Product/service '{ps_id}' is never used in any fit",
                    )
