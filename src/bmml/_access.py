"""
Tolerant accessors over parsed (untyped) BMML document trees.

Absent or null optional sections read as empty; entries of the wrong type
are skipped but never renumbered, so indices stay valid for JSON pointers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

_EMPTY: Mapping[str, Any] = {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else _EMPTY


def entries(container: Any, key: str) -> Iterator[tuple[int, Mapping[str, Any]]]:
    """Yield ``(index, entry)`` for the mapping entries of ``container[key]``."""
    for index, item in enumerate(as_list(as_mapping(container).get(key))):
        if isinstance(item, Mapping):
            yield index, item


def relation(entry: Mapping[str, Any], relation_key: str, target: str) -> list[Any]:
    """Return ``entry[relation_key][target]`` as a list (``for``/``from`` shape)."""
    return as_list(as_mapping(entry.get(relation_key)).get(target))


def pointer(*parts: str | int) -> str:
    """Build a JSON pointer; no parts yields the root pointer ``/``."""
    if not parts:
        return "/"
    escaped = (str(p).replace("~", "~0").replace("/", "~1") for p in parts)
    return "/" + "/".join(escaped)
