"""
Connection graph: which customer segments each entity ultimately serves.

Built from a v2 (typed-relation) document in fixed layers, each layer
reading only the layers before it:

1. customer segment -> {itself}
2. value proposition -> union of the segments of every fit naming it
3. fit / channel / customer relationship -> ``for.customer_segments``;
   revenue stream -> ``from.customer_segments``
4. key resource / key activity -> union over ``for.value_propositions``
5. key partnership / cost -> union over ``for.key_resources`` and
   ``for.key_activities``

There is no recursion and no cycle handling; layer 4 is complete before
layer 5 reads it.  Every set in the result is a fresh object.

Usage::

    from bmml.graph import build_connection_graph, is_orphaned

    graph = build_connection_graph(doc)
    graph["kr-platform"]          # {"cs-a", "cs-b"}
    is_orphaned(graph, "cost-x")  # True when it reaches no segment
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from bmml._access import as_mapping, entries, relation
from bmml._otel_helpers import SpanAttributes, add_span_event

logger = logging.getLogger(__name__)

ConnectionGraph = dict[str, set[str]]

_SEGMENT_LINKED: tuple[tuple[str, str], ...] = (
    ("fits", "for"),
    ("channels", "for"),
    ("customer_relationships", "for"),
    ("revenue_streams", "from"),
)


def build_connection_graph(doc: Any) -> ConnectionGraph:
    """Map every entity id of *doc* to the customer segments it serves."""
    tree = as_mapping(doc)
    graph: ConnectionGraph = {}

    # 1. segments
    for _, cs in entries(tree, "customer_segments"):
        cs_id = cs.get("id")
        if isinstance(cs_id, str):
            graph[cs_id] = {cs_id}

    # 2. value propositions, through the fits that name them
    value_props: dict[str, set[str]] = {}
    for _, vp in entries(tree, "value_propositions"):
        if isinstance(vp.get("id"), str):
            value_props.setdefault(vp["id"], set())
    for _, fit in entries(tree, "fits"):
        segments = _ids(relation(fit, "for", "customer_segments"))
        for vp_id in _ids(relation(fit, "for", "value_propositions")):
            value_props.setdefault(vp_id, set()).update(segments)
    _merge(graph, value_props)

    # 3. entities naming segments directly
    for section, relation_key in _SEGMENT_LINKED:
        for _, entry in entries(tree, section):
            entity_id = entry.get("id")
            if isinstance(entity_id, str):
                segments = _ids(relation(entry, relation_key, "customer_segments"))
                graph.setdefault(entity_id, set()).update(segments)

    # 4. resources and activities, through value propositions
    resources = _through(
        tree, ("key_resources", "key_activities"), value_props, "value_propositions"
    )
    _merge(graph, resources)

    # 5. partnerships and costs, through resources and activities
    for section in ("key_partnerships", "costs"):
        for _, entry in entries(tree, section):
            entity_id = entry.get("id")
            if not isinstance(entity_id, str):
                continue
            reached = graph.setdefault(entity_id, set())
            for target in ("key_resources", "key_activities"):
                for ref in _ids(relation(entry, "for", target)):
                    reached.update(resources.get(ref, ()))

    logger.debug(
        "Built connection graph: entities=%d, orphaned=%d",
        len(graph),
        len(orphaned_entities(graph)),
    )
    return graph


def get_segment_order(doc: Any) -> list[str]:
    """Customer segment ids in declaration order, without duplicates."""
    order: list[str] = []
    for _, cs in entries(as_mapping(doc), "customer_segments"):
        cs_id = cs.get("id")
        if isinstance(cs_id, str) and cs_id not in order:
            order.append(cs_id)
    return order


def is_orphaned(graph: Mapping[str, set[str]], entity_id: str) -> bool:
    """True when *entity_id* is absent from *graph* or reaches no segment."""
    return not graph.get(entity_id)


def orphaned_entities(graph: Mapping[str, set[str]]) -> list[str]:
    return [entity_id for entity_id, segments in graph.items() if not segments]


def emit_graph_built(graph: Mapping[str, set[str]], source: str = "") -> None:
    """Emit a span event for a built connection graph.

    Event name: ``bmml.graph.built``
    """
    attrs: SpanAttributes = {
        "bmml.entity_count": len(graph),
        "bmml.orphaned_count": len(orphaned_entities(graph)),
    }
    add_span_event("graph.built", attrs, source=source)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ids(values: Iterable[Any]) -> list[str]:
    return [v for v in values if isinstance(v, str)]


def _through(
    tree: Mapping[str, Any],
    sections: tuple[str, ...],
    upstream: Mapping[str, set[str]],
    target: str,
) -> dict[str, set[str]]:
    """Union the *upstream* sets named by each entry's ``for.<target>``."""
    reached: dict[str, set[str]] = {}
    for section in sections:
        for _, entry in entries(tree, section):
            entity_id = entry.get("id")
            if not isinstance(entity_id, str):
                continue
            segments = reached.setdefault(entity_id, set())
            for ref in _ids(relation(entry, "for", target)):
                segments.update(upstream.get(ref, ()))
    return reached


def _merge(graph: ConnectionGraph, layer: Mapping[str, set[str]]) -> None:
    for entity_id, segments in layer.items():
        graph.setdefault(entity_id, set()).update(segments)
