"""
Entity index over a parsed BMML document.

One pass over the document collects every declared id the linter needs to
resolve references:

- customer segment -> its job / pain / gain ids
- value proposition -> its product/service ids, plus (v2) pain reliever and
  gain creator ids
- flat key resource and key activity id sets

The index is immutable and built per call; nothing is cached between
documents.

Usage::

    from bmml.index import build_index
    from bmml.detect import detect_version

    index = build_index(doc, detect_version(doc))
    index.has_segment("cs-a")
    index.pains_in(["cs-a", "cs-b"])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from bmml._access import entries
from bmml.types import DocumentVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentProfile:
    """Customer profile items declared on one customer segment."""

    jobs: frozenset[str] = frozenset()
    pains: frozenset[str] = frozenset()
    gains: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ValueMap:
    """Value map items declared on one value proposition.

    ``pain_relievers`` and ``gain_creators`` are always empty for v1
    documents, where relief and creation live inline on fits.
    """

    products_services: frozenset[str] = frozenset()
    pain_relievers: frozenset[str] = frozenset()
    gain_creators: frozenset[str] = frozenset()


@dataclass(frozen=True)
class EntityIndex:
    """Read-only lookup tables for one document snapshot."""

    version: DocumentVersion
    customer_segments: Mapping[str, SegmentProfile] = field(
        default_factory=lambda: MappingProxyType({})
    )
    value_propositions: Mapping[str, ValueMap] = field(
        default_factory=lambda: MappingProxyType({})
    )
    key_resources: frozenset[str] = frozenset()
    key_activities: frozenset[str] = frozenset()

    def has_segment(self, segment_id: Any) -> bool:
        return _is_id(segment_id) and segment_id in self.customer_segments

    def has_value_proposition(self, vp_id: Any) -> bool:
        return _is_id(vp_id) and vp_id in self.value_propositions

    def is_resource_or_activity(self, entity_id: Any) -> bool:
        """Partnerships and costs may point at either a resource or an activity."""
        if not _is_id(entity_id):
            return False
        return entity_id in self.key_resources or entity_id in self.key_activities

    def segment(self, segment_id: Any) -> SegmentProfile | None:
        if not _is_id(segment_id):
            return None
        return self.customer_segments.get(segment_id)

    def value_map(self, vp_id: Any) -> ValueMap | None:
        if not _is_id(vp_id):
            return None
        return self.value_propositions.get(vp_id)

    # -- scoped unions ------------------------------------------------------

    def pains_in(self, segment_ids: Iterable[Any]) -> frozenset[str]:
        return self._union_profiles(segment_ids, "pains")

    def gains_in(self, segment_ids: Iterable[Any]) -> frozenset[str]:
        return self._union_profiles(segment_ids, "gains")

    def jobs_in(self, segment_ids: Iterable[Any]) -> frozenset[str]:
        return self._union_profiles(segment_ids, "jobs")

    def pain_relievers_in(self, vp_ids: Iterable[Any]) -> frozenset[str]:
        return self._union_value_maps(vp_ids, "pain_relievers")

    def gain_creators_in(self, vp_ids: Iterable[Any]) -> frozenset[str]:
        return self._union_value_maps(vp_ids, "gain_creators")

    def _union_profiles(self, segment_ids: Iterable[Any], attr: str) -> frozenset[str]:
        found: set[str] = set()
        for segment_id in segment_ids:
            profile = self.segment(segment_id)
            if profile is not None:
                found.update(getattr(profile, attr))
        return frozenset(found)

    def _union_value_maps(self, vp_ids: Iterable[Any], attr: str) -> frozenset[str]:
        found: set[str] = set()
        for vp_id in vp_ids:
            value_map = self.value_map(vp_id)
            if value_map is not None:
                found.update(getattr(value_map, attr))
        return frozenset(found)


def build_index(doc: Any, version: DocumentVersion) -> EntityIndex:
    """Build the index variant matching *version*."""
    if version is DocumentVersion.V2:
        return build_current_index(doc)
    return build_legacy_index(doc)


def build_legacy_index(doc: Any) -> EntityIndex:
    """Index a v1 document (value propositions carry products/services only)."""
    return _build(doc, DocumentVersion.V1, value_map_keys=("products_services",))


def build_current_index(doc: Any) -> EntityIndex:
    """Index a v2 document (value maps also carry relievers and creators)."""
    return _build(
        doc,
        DocumentVersion.V2,
        value_map_keys=("products_services", "pain_relievers", "gain_creators"),
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build(
    doc: Any, version: DocumentVersion, value_map_keys: tuple[str, ...]
) -> EntityIndex:
    segments: dict[str, dict[str, set[str]]] = {}
    for _, cs in entries(doc, "customer_segments"):
        cs_id = cs.get("id")
        if not isinstance(cs_id, str):
            continue
        # Repeated declarations merge their nested items.
        profile = segments.setdefault(cs_id, {"jobs": set(), "pains": set(), "gains": set()})
        for key in ("jobs", "pains", "gains"):
            profile[key].update(_nested_ids(cs, key))

    value_props: dict[str, dict[str, set[str]]] = {}
    for _, vp in entries(doc, "value_propositions"):
        vp_id = vp.get("id")
        if not isinstance(vp_id, str):
            continue
        value_map = value_props.setdefault(vp_id, {key: set() for key in value_map_keys})
        for key in value_map_keys:
            value_map[key].update(_nested_ids(vp, key))

    key_resources = frozenset(_nested_ids(doc, "key_resources"))
    key_activities = frozenset(_nested_ids(doc, "key_activities"))

    index = EntityIndex(
        version=version,
        customer_segments=MappingProxyType(
            {cs_id: SegmentProfile(**_freeze(p)) for cs_id, p in segments.items()}
        ),
        value_propositions=MappingProxyType(
            {vp_id: ValueMap(**_freeze(m)) for vp_id, m in value_props.items()}
        ),
        key_resources=key_resources,
        key_activities=key_activities,
    )
    logger.debug(
        "Built %s index: segments=%d, value_propositions=%d, resources=%d, activities=%d",
        version.value,
        len(index.customer_segments),
        len(index.value_propositions),
        len(key_resources),
        len(key_activities),
    )
    return index


def _nested_ids(container: Any, key: str) -> set[str]:
    return {
        item["id"]
        for _, item in entries(container, key)
        if isinstance(item.get("id"), str)
    }


def _freeze(groups: dict[str, set[str]]) -> dict[str, frozenset[str]]:
    return {key: frozenset(ids) for key, ids in groups.items()}


def _is_id(value: Any) -> bool:
    return isinstance(value, str)


__all__ = [
    "EntityIndex",
    "SegmentProfile",
    "ValueMap",
    "build_index",
    "build_legacy_index",
    "build_current_index",
]
