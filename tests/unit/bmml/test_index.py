"""Tests for the entity index builders."""

from __future__ import annotations

import copy

import pytest

from bmml.index import EntityIndex, build_current_index, build_index, build_legacy_index
from bmml.types import DocumentVersion


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_doc(**sections) -> dict:
    doc = {"version": "2.0", "meta": {"name": "T", "portfolio": "explore", "stage": "ideation"}}
    doc.update(sections)
    return doc


SEGMENTS = [
    {
        "id": "cs-a",
        "name": "A",
        "jobs": [{"id": "job-ship", "description": "Ship"}],
        "pains": [{"id": "pain-late", "description": "Late"}],
        "gains": [{"id": "gain-cheap", "description": "Cheap"}],
    },
    {"id": "cs-b", "name": "B", "pains": [{"id": "pain-lost", "description": "Lost"}]},
]

VALUE_PROPS = [
    {
        "id": "vp-x",
        "name": "X",
        "products_services": [{"id": "ps-courier", "name": "Courier"}],
        "pain_relievers": [{"id": "pr-fast", "name": "Fast"}],
        "gain_creators": [{"id": "gc-discount", "name": "Discount"}],
    },
]


# ---------------------------------------------------------------------------
# build_current_index
# ---------------------------------------------------------------------------


class TestCurrentIndex:
    def test_segments_and_profiles(self):
        index = build_current_index(_make_doc(customer_segments=SEGMENTS))
        assert index.version is DocumentVersion.V2
        assert index.has_segment("cs-a")
        assert index.has_segment("cs-b")
        profile = index.segment("cs-a")
        assert profile.jobs == {"job-ship"}
        assert profile.pains == {"pain-late"}
        assert profile.gains == {"gain-cheap"}

    def test_value_map(self):
        index = build_current_index(_make_doc(value_propositions=VALUE_PROPS))
        value_map = index.value_map("vp-x")
        assert value_map.products_services == {"ps-courier"}
        assert value_map.pain_relievers == {"pr-fast"}
        assert value_map.gain_creators == {"gc-discount"}

    def test_resources_and_activities(self):
        doc = _make_doc(
            key_resources=[{"id": "kr-fleet", "name": "Fleet"}],
            key_activities=[{"id": "ka-routing", "name": "Routing"}],
        )
        index = build_current_index(doc)
        assert index.is_resource_or_activity("kr-fleet")
        assert index.is_resource_or_activity("ka-routing")
        assert not index.is_resource_or_activity("kr-missing")

    def test_scoped_unions(self):
        index = build_current_index(_make_doc(customer_segments=SEGMENTS))
        assert index.pains_in(["cs-a", "cs-b"]) == {"pain-late", "pain-lost"}
        assert index.pains_in(["cs-b", "cs-unknown"]) == {"pain-lost"}
        assert index.jobs_in([]) == frozenset()

    def test_repeated_declarations_merge(self):
        segments = [
            {"id": "cs-a", "name": "A", "pains": [{"id": "pain-1", "description": "1"}]},
            {"id": "cs-a", "name": "A again", "pains": [{"id": "pain-2", "description": "2"}]},
        ]
        index = build_current_index(_make_doc(customer_segments=segments))
        assert index.segment("cs-a").pains == {"pain-1", "pain-2"}
        assert len(index.customer_segments) == 1


class TestLegacyIndex:
    def test_relievers_and_creators_are_empty(self):
        doc = _make_doc(version="1.0", value_propositions=VALUE_PROPS)
        index = build_legacy_index(doc)
        assert index.version is DocumentVersion.V1
        value_map = index.value_map("vp-x")
        assert value_map.products_services == {"ps-courier"}
        assert value_map.pain_relievers == frozenset()
        assert value_map.gain_creators == frozenset()

    def test_dispatch(self):
        doc = _make_doc(value_propositions=VALUE_PROPS)
        assert build_index(doc, DocumentVersion.V1).value_map("vp-x").pain_relievers == frozenset()
        assert build_index(doc, DocumentVersion.V2).value_map("vp-x").pain_relievers == {"pr-fast"}


# ---------------------------------------------------------------------------
# Tolerance
# ---------------------------------------------------------------------------


class TestTolerance:
    @pytest.mark.parametrize("doc", [None, {}, {"customer_segments": None}, "text"])
    def test_empty_or_malformed_documents(self, doc):
        index = build_current_index(doc)
        assert isinstance(index, EntityIndex)
        assert not index.customer_segments
        assert not index.value_propositions

    def test_null_nested_arrays(self):
        doc = _make_doc(customer_segments=[{"id": "cs-a", "name": "A", "pains": None}])
        index = build_current_index(doc)
        assert index.segment("cs-a").pains == frozenset()

    def test_entries_without_string_ids_are_skipped(self):
        doc = _make_doc(customer_segments=[{"name": "no id"}, "cs-x", {"id": 7}])
        assert not build_current_index(doc).customer_segments

    def test_non_string_lookups_are_unresolved(self):
        index = build_current_index(_make_doc(customer_segments=SEGMENTS))
        assert not index.has_segment(None)
        assert not index.has_segment(["cs-a"])
        assert index.segment({"id": "cs-a"}) is None

    def test_input_is_not_mutated(self):
        doc = _make_doc(customer_segments=SEGMENTS, value_propositions=VALUE_PROPS)
        before = copy.deepcopy(doc)
        build_current_index(doc)
        assert doc == before

    def test_index_is_read_only(self):
        index = build_current_index(_make_doc(customer_segments=SEGMENTS))
        with pytest.raises(TypeError):
            index.customer_segments["cs-new"] = None  # type: ignore[index]


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_removing_an_entity_unresolves_it(self):
        doc = _make_doc(customer_segments=copy.deepcopy(SEGMENTS))
        assert build_current_index(doc).has_segment("cs-b")

        doc["customer_segments"] = [cs for cs in doc["customer_segments"] if cs["id"] != "cs-b"]
        assert not build_current_index(doc).has_segment("cs-b")

    def test_removing_a_nested_item_unresolves_it(self):
        doc = _make_doc(value_propositions=copy.deepcopy(VALUE_PROPS))
        assert "pr-fast" in build_current_index(doc).pain_relievers_in(["vp-x"])

        doc["value_propositions"][0]["pain_relievers"] = []
        assert "pr-fast" not in build_current_index(doc).pain_relievers_in(["vp-x"])
