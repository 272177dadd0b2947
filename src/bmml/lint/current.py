"""
Current (v2) rule set.

v2 documents use typed relations: every relating entity names its targets
under ``for`` (and revenue streams under ``from``) grouped by entity type,
and a fit can link several value propositions and customer segments.  Fit
mappings are ``[value-map item, profile item]`` pairs whose kinds are read
from their id prefixes:

- ``pr-*`` must map to a ``pain-*``
- ``gc-*`` must map to a ``gain-*``
- the right element must be a ``pain-*``, ``gain-*`` or ``job-*`` declared on
  one of the fit's customer segments
- ``pr-*`` / ``gc-*`` must be declared in one of the fit's value propositions
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from bmml._access import as_list, entries, pointer, relation
from bmml.index import EntityIndex
from bmml.lint._base import RuleSet, contains, string_ids
from bmml.lint.rules import Rule
from bmml.types import DocumentVersion, EntityKind, kind_of

# value-map kind -> the only profile kind it may map to
_COMPATIBLE: dict[EntityKind, EntityKind] = {
    EntityKind.PAIN_RELIEVER: EntityKind.PAIN,
    EntityKind.GAIN_CREATOR: EntityKind.GAIN,
}

# profile kind -> (rule, label)
_PROFILE_REFS: dict[EntityKind, tuple[Rule, str]] = {
    EntityKind.PAIN: (Rule.FIT_PAIN_REF, "Pain"),
    EntityKind.GAIN: (Rule.FIT_GAIN_REF, "Gain"),
    EntityKind.JOB: (Rule.FIT_JOB_REF, "Job"),
}

# value-map kind -> (rule, label)
_VALUE_MAP_REFS: dict[EntityKind, tuple[Rule, str]] = {
    EntityKind.PAIN_RELIEVER: (Rule.PAIN_RELIEVER_SCOPE_REF, "Pain reliever"),
    EntityKind.GAIN_CREATOR: (Rule.GAIN_CREATOR_SCOPE_REF, "Gain creator"),
}


class _FitScope:
    """Items reachable from the value propositions and segments a fit links."""

    def __init__(
        self,
        value_propositions: list[str],
        segments: list[str],
        index: EntityIndex,
    ) -> None:
        self.value_propositions = value_propositions
        self.segments = segments
        self.value_map_items: dict[EntityKind, frozenset[str]] = {
            EntityKind.PAIN_RELIEVER: index.pain_relievers_in(value_propositions),
            EntityKind.GAIN_CREATOR: index.gain_creators_in(value_propositions),
        }
        self.profile_items: dict[EntityKind, frozenset[str]] = {
            EntityKind.PAIN: index.pains_in(segments),
            EntityKind.GAIN: index.gains_in(segments),
            EntityKind.JOB: index.jobs_in(segments),
        }


class CurrentRuleSet(RuleSet):
    """Reference and coverage rules for v2 documents."""

    version = DocumentVersion.V2

    def _check_references(self) -> None:
        self._check_fits()
        self._check_for(
            "channels",
            ("customer_segments", Rule.CHANNEL_SEGMENT_REF),
            ("value_propositions", Rule.CHANNEL_VALUE_REF),
        )
        self._check_for(
            "customer_relationships",
            ("customer_segments", Rule.CUSTOMER_RELATIONSHIP_SEGMENT_REF),
        )
        self._check_revenue_streams()
        self._check_for("key_resources", ("value_propositions", Rule.KEY_RESOURCE_VALUE_REF))
        self._check_for("key_activities", ("value_propositions", Rule.KEY_ACTIVITY_VALUE_REF))
        self._check_for(
            "key_partnerships",
            ("key_resources", Rule.KEY_PARTNERSHIP_PROVIDES_REF),
            ("key_activities", Rule.KEY_PARTNERSHIP_PROVIDES_REF),
        )
        self._check_for(
            "costs",
            ("key_resources", Rule.COST_LINKED_TO_REF),
            ("key_activities", Rule.COST_LINKED_TO_REF),
        )

    # -- fits ---------------------------------------------------------------

    def _check_fits(self) -> None:
        index = self._index
        for i, fit in entries(self._doc, "fits"):
            vp_ids = relation(fit, "for", "value_propositions")
            cs_ids = relation(fit, "for", "customer_segments")
            self._check_ids(
                vp_ids,
                index.has_value_proposition,
                Rule.FIT_VALUE_PROPOSITION_REF,
                ("fits", i, "for", "value_propositions"),
                "Value proposition",
            )
            self._check_ids(
                cs_ids,
                index.has_segment,
                Rule.FIT_CUSTOMER_SEGMENT_REF,
                ("fits", i, "for", "customer_segments"),
                "Customer segment",
            )

            scope = _FitScope(
                [v for v in vp_ids if index.has_value_proposition(v)],
                [c for c in cs_ids if index.has_segment(c)],
                index,
            )
            for k, mapping in enumerate(as_list(fit.get("mappings"))):
                self._check_mapping(i, k, mapping, scope)

    def _check_mapping(self, i: int, k: int, mapping: Any, scope: _FitScope) -> None:
        path = ("fits", i, "mappings", k)
        if not _is_pair(mapping):
            self._report(
                Rule.FIT_MAPPING_MALFORMED,
                pointer(*path),
                f"Mapping must be a [value map item, profile item] pair of ids, got {mapping!r}",
            )
            return

        left, right = mapping
        left_kind = kind_of(left)
        right_kind = kind_of(right)

        expected = _COMPATIBLE.get(left_kind) if left_kind is not None else None
        if expected is not None and right_kind is not expected:
            found = right_kind.label if right_kind is not None else "unknown item"
            self._report(
                Rule.FIT_MAPPING_TYPE_MISMATCH,
                pointer(*path),
                f"Type mismatch: {left_kind.label} '{left}' cannot map to {found} "
                f"'{right}'; a {left_kind.label} must map to a {expected.label}",
            )
            return

        if right_kind not in _PROFILE_REFS:
            found = right_kind.label if right_kind is not None else "unknown item"
            self._report(
                Rule.FIT_MAPPING_TYPE_MISMATCH,
                pointer(*path, 1),
                f"Type mismatch: mapping ['{left}', '{right}'] ends in {found} "
                f"'{right}'; the right element must be a pain, gain or job",
            )
            return

        if left_kind in _VALUE_MAP_REFS and scope.value_propositions:
            if not contains(scope.value_map_items[left_kind], left):
                rule, label = _VALUE_MAP_REFS[left_kind]
                self._report(
                    rule,
                    pointer(*path, 0),
                    f"{label} '{left}' does not exist in value proposition(s) "
                    f"{_quoted(scope.value_propositions)}",
                )

        if scope.segments:
            if not contains(scope.profile_items[right_kind], right):
                rule, label = _PROFILE_REFS[right_kind]
                self._report(
                    rule,
                    pointer(*path, 1),
                    f"{label} '{right}' does not exist in customer segment(s) "
                    f"{_quoted(scope.segments)}",
                )

    # -- direct references --------------------------------------------------

    def _check_revenue_streams(self) -> None:
        for i, stream in entries(self._doc, "revenue_streams"):
            self._check_ids(
                relation(stream, "from", "customer_segments"),
                self._index.has_segment,
                Rule.REVENUE_STREAM_SEGMENT_REF,
                ("revenue_streams", i, "from", "customer_segments"),
                "Customer segment",
            )
            self._check_ids(
                relation(stream, "for", "value_propositions"),
                self._index.has_value_proposition,
                Rule.REVENUE_STREAM_VALUE_REF,
                ("revenue_streams", i, "for", "value_propositions"),
                "Value proposition",
            )

    def _check_for(self, section: str, *targets: tuple[str, Rule]) -> None:
        """Check the ``for`` relation of every entry of *section*."""
        for i, entry in entries(self._doc, section):
            for target, rule in targets:
                exists, label = self._resolver(target)
                self._check_ids(
                    relation(entry, "for", target),
                    exists,
                    rule,
                    (section, i, "for", target),
                    label,
                )

    def _resolver(self, target: str) -> tuple[Callable[[Any], bool], str]:
        if target == "customer_segments":
            return self._index.has_segment, "Customer segment"
        if target == "value_propositions":
            return self._index.has_value_proposition, "Value proposition"
        return self._index.is_resource_or_activity, "Resource or activity"

    # -- coverage -----------------------------------------------------------

    def _check_coverage(self) -> None:
        fitted_segments: set[str] = set()
        fitted_value_propositions: set[str] = set()
        mapped: set[str] = set()

        for _, fit in entries(self._doc, "fits"):
            fitted_segments.update(string_ids(relation(fit, "for", "customer_segments")))
            fitted_value_propositions.update(
                string_ids(relation(fit, "for", "value_propositions"))
            )
            # Only pairs that pass the type check count.
            for mapping in as_list(fit.get("mappings")):
                if _is_pair(mapping) and _is_compatible(*mapping):
                    mapped.add(mapping[1])

        self._report_unfitted(fitted_segments, fitted_value_propositions)
        self._report_unused_profile_items(mapped, mapped, mapped)


def _is_pair(mapping: Any) -> bool:
    return (
        isinstance(mapping, Sequence)
        and not isinstance(mapping, (str, bytes))
        and len(mapping) == 2
        and all(isinstance(item, str) for item in mapping)
    )


def _is_compatible(left: str, right: str) -> bool:
    right_kind = kind_of(right)
    if right_kind not in _PROFILE_REFS:
        return False
    expected = _COMPATIBLE.get(kind_of(left))
    return expected is None or right_kind is expected


def _quoted(ids: list[str]) -> str:
    return ", ".join(f"'{i}'" for i in ids)
