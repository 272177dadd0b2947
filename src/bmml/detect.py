"""
Schema-generation detection for parsed BMML documents.

``detect_version()`` is safe to call on anything a YAML parser can return
(including ``None`` and scalars).  It trusts an explicit ``version``
discriminator and otherwise sniffs the shape of the relating sections.

Usage::

    from bmml.detect import detect_version

    detect_version({"version": "2.0"})          # DocumentVersion.V2
    detect_version({"channels": [{"segments": []}]})  # DocumentVersion.V1
    detect_version(None)                         # DocumentVersion.V1
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from bmml.types import DocumentVersion

logger = logging.getLogger(__name__)

_EXPLICIT: dict[str, DocumentVersion] = {
    "1.0": DocumentVersion.V1,
    "2.0": DocumentVersion.V2,
}

# Sniff order matters: first section with a signal wins.
# section -> legacy flat fields that only exist in the v1 shape
_LEGACY_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("fits", ("value_proposition", "customer_segment")),
    ("channels", ("segments",)),
    ("customer_relationships", ("segment",)),
    ("revenue_streams", ("from_segments", "for_value")),
    ("key_resources", ("for_value",)),
    ("key_partnerships", ("provides",)),
)

_CURRENT_FIELDS = ("for", "from")


def detect_version(doc: Any) -> DocumentVersion:
    """Return the schema generation of *doc*, defaulting to ``V1``."""
    if not isinstance(doc, Mapping):
        return DocumentVersion.V1

    explicit = _explicit_version(doc.get("version"))
    if explicit is not None:
        return explicit

    sniffed = _sniff(doc)
    if sniffed is not None:
        logger.debug("Detected %s from document structure", sniffed.value)
        return sniffed
    return DocumentVersion.V1


def _explicit_version(value: Any) -> Optional[DocumentVersion]:
    # Unquoted ``version: 2.0`` parses as a float in YAML.
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        return _EXPLICIT.get(value)
    return None


def _sniff(doc: Mapping[str, Any]) -> Optional[DocumentVersion]:
    if isinstance(doc.get("costs"), list):
        return DocumentVersion.V2
    if isinstance(doc.get("cost_structure"), Mapping):
        return DocumentVersion.V1

    for section, legacy_fields in _LEGACY_FIELDS:
        items = doc.get(section)
        if not isinstance(items, list) or not items:
            continue
        first = items[0]
        if not isinstance(first, Mapping):
            continue
        if any(key in first for key in _CURRENT_FIELDS):
            return DocumentVersion.V2
        if any(key in first for key in legacy_fields):
            return DocumentVersion.V1
    return None
