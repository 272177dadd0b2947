"""
Shared enums and identifier-kind inference for BMML documents.

Every entity id carries its kind in its prefix (``cs-``, ``vp-``, ``pr-``
...).  The prefix table below is the single place where kinds are inferred
from strings; rule code matches on ``EntityKind`` instead of re-parsing
prefixes.

Usage::

    from bmml.types import EntityKind, kind_of

    kind_of("pain-late")   # EntityKind.PAIN
    kind_of("cost-hosting")  # EntityKind.COST
    kind_of("nope")        # None
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional


class DocumentVersion(str, Enum):
    """Schema generation of a BMML document."""

    V1 = "v1"  # legacy flat-reference shape ("1.0")
    V2 = "v2"  # current typed-relation shape ("2.0")

    @property
    def discriminator(self) -> str:
        """Value of the document's ``version`` field for this generation."""
        return "1.0" if self is DocumentVersion.V1 else "2.0"


class Severity(str, Enum):
    """Lint issue severity."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class EntityKind(str, Enum):
    """Kind of a BMML entity, keyed by its id prefix."""

    CUSTOMER_SEGMENT = "cs"
    VALUE_PROPOSITION = "vp"
    PRODUCT_SERVICE = "ps"
    JOB = "job"
    PAIN = "pain"
    GAIN = "gain"
    FIT = "fit"
    CHANNEL = "ch"
    CUSTOMER_RELATIONSHIP = "cr"
    REVENUE_STREAM = "rs"
    KEY_RESOURCE = "kr"
    KEY_ACTIVITY = "ka"
    KEY_PARTNERSHIP = "kp"
    COST = "cost"
    PAIN_RELIEVER = "pr"
    GAIN_CREATOR = "gc"

    @property
    def prefix(self) -> str:
        return f"{self.value}-"

    @property
    def label(self) -> str:
        """Human-readable name used in lint messages."""
        return _LABELS[self]


_LABELS: dict[EntityKind, str] = {
    EntityKind.CUSTOMER_SEGMENT: "customer segment",
    EntityKind.VALUE_PROPOSITION: "value proposition",
    EntityKind.PRODUCT_SERVICE: "product/service",
    EntityKind.JOB: "job",
    EntityKind.PAIN: "pain",
    EntityKind.GAIN: "gain",
    EntityKind.FIT: "fit",
    EntityKind.CHANNEL: "channel",
    EntityKind.CUSTOMER_RELATIONSHIP: "customer relationship",
    EntityKind.REVENUE_STREAM: "revenue stream",
    EntityKind.KEY_RESOURCE: "key resource",
    EntityKind.KEY_ACTIVITY: "key activity",
    EntityKind.KEY_PARTNERSHIP: "key partnership",
    EntityKind.COST: "cost",
    EntityKind.PAIN_RELIEVER: "pain reliever",
    EntityKind.GAIN_CREATOR: "gain creator",
}

# prefix token (without the dash) -> kind
_PREFIXES: dict[str, EntityKind] = {kind.value: kind for kind in EntityKind}

_ID_BODY = re.compile(r"^[a-z0-9-]+$")


def kind_of(entity_id: Any) -> Optional[EntityKind]:
    """Infer the kind of an entity id from its prefix.

    The prefix is everything before the first ``-``.  Returns ``None`` for
    non-strings, ids without a dash and unknown prefixes.
    """
    if not isinstance(entity_id, str):
        return None
    token, sep, _ = entity_id.partition("-")
    if not sep:
        return None
    return _PREFIXES.get(token)


def is_kind(entity_id: Any, kind: EntityKind) -> bool:
    """Return True if *entity_id* carries the prefix of *kind*."""
    return kind_of(entity_id) is kind


def is_valid_id(entity_id: Any, kind: Optional[EntityKind] = None) -> bool:
    """Check an id against the full ``<prefix>[a-z0-9-]+`` pattern.

    When *kind* is given, the id must also be of that kind.
    """
    inferred = kind_of(entity_id)
    if inferred is None or (kind is not None and inferred is not kind):
        return False
    body = entity_id[len(inferred.prefix):]
    return bool(_ID_BODY.match(body))
