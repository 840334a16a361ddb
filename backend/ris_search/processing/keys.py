"""
Hierarchy Key Resolution
════════════════════════

RIS documents are stored under composite names that spell out where the
document sits in the council hierarchy, outermost level first:

    si-4711-to-12-anl-3.pdf
    └──┬──┘ └─┬─┘ └──┬───┘
    session  agenda   attachment "3.pdf"
    4711     item 12

Each level is `<marker><marker_separator><id>` and levels are joined by the
segment separator. KeyResolver walks the name left to right and rebuilds the
full parent chain from string structure alone. No record-store lookups
happen here; those belong to HierarchyEnricher.

Terminal kinds end the walk:
  attachment           the entire remainder is the node name
  attachment_document  the first id segment is the node name, rest ignored

A name whose last level is a non-terminal kind resolves to that level's key.
A name (or remainder) that matches no marker raises UnrecognizedNameError;
a partial chain is never returned.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from enum import Enum

from ris_search.core.errors import UnrecognizedNameError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Hierarchy kinds: closed set
# ---------------------------------------------------------------------------

class HierarchyKind(str, Enum):
    SESSION             = "session"               # Sitzung
    SUBMISSION          = "submission"            # Vorlage
    AGENDA_ITEM         = "agenda_item"           # Tagesordnungspunkt
    ATTACHMENT          = "attachment"            # Anlage
    ATTACHMENT_DOCUMENT = "attachment_document"   # Basisanlage

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_KINDS

    @property
    def is_enrichable(self) -> bool:
        return self in ENRICHABLE_KINDS


TERMINAL_KINDS: frozenset[HierarchyKind] = frozenset(
    {HierarchyKind.ATTACHMENT, HierarchyKind.ATTACHMENT_DOCUMENT}
)
ENRICHABLE_KINDS: frozenset[HierarchyKind] = frozenset(
    {HierarchyKind.SESSION, HierarchyKind.SUBMISSION, HierarchyKind.AGENDA_ITEM}
)


# ---------------------------------------------------------------------------
# Key type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HierarchyKey:
    """
    Immutable, parent-chained identifier of one hierarchy node.

    kind   : which of the five node types this is
    name   : the node's own id as it appears in the composite name
    parent : enclosing node, or None for the root
    """
    kind:   HierarchyKind
    name:   str
    parent: HierarchyKey | None = None

    @property
    def path(self) -> tuple[tuple[str, str], ...]:
        """(kind, name) pairs from the root down to this key."""
        chain: list[tuple[str, str]] = []
        node: HierarchyKey | None = self
        while node is not None:
            chain.append((node.kind.value, node.name))
            node = node.parent
        return tuple(reversed(chain))

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def root(self) -> HierarchyKey:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def encode(self) -> str:
        """
        Deterministic, URL-safe encoding of the full path.
        Used as the record-store primary key and as `encodedKey` in search records.
        """
        raw = json.dumps([list(p) for p in self.path], separators=(",", ":"))
        return base64.urlsafe_b64encode(raw.encode("utf-8")).rstrip(b"=").decode("ascii")

    def __str__(self) -> str:
        return "/".join(f"{kind}:{name}" for kind, name in self.path)


# ---------------------------------------------------------------------------
# Resolver configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeyMarkers:
    """Marker strings and separators recognised in composite names."""
    session:             str
    submission:          str
    agenda_item:         str
    attachment:          str
    attachment_document: str
    marker_separator:  str = "-"
    segment_separator: str = "-"
    max_depth:         int = 4     # three hierarchy levels + one attachment leaf

    def ordered(self) -> list[tuple[HierarchyKind, str]]:
        """Markers in match order; the first hit wins."""
        return [
            (HierarchyKind.SESSION,             self.session),
            (HierarchyKind.SUBMISSION,          self.submission),
            (HierarchyKind.AGENDA_ITEM,         self.agenda_item),
            (HierarchyKind.ATTACHMENT,          self.attachment),
            (HierarchyKind.ATTACHMENT_DOCUMENT, self.attachment_document),
        ]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class KeyResolver:
    """Decomposes composite document names into HierarchyKey chains."""

    def __init__(self, markers: KeyMarkers) -> None:
        self._markers = markers
        self._prefixes = [
            (kind, marker + markers.marker_separator)
            for kind, marker in markers.ordered()
        ]

    def resolve(self, name: str, parent_key: HierarchyKey | None = None) -> HierarchyKey:
        """
        Resolve `name` into a key chain hung below `parent_key`.

        Raises:
            UnrecognizedNameError: a segment matches no marker, an id is empty,
                or the chain would exceed `max_depth`.
        """
        remaining = name
        parent = parent_key
        depth = parent_key.depth if parent_key is not None else 0

        while True:
            kind, rest = self._match(name, remaining)
            depth += 1
            if depth > self._markers.max_depth:
                raise UnrecognizedNameError(
                    name, f"hierarchy deeper than {self._markers.max_depth} levels"
                )

            if kind is HierarchyKind.ATTACHMENT:
                if not rest:
                    raise UnrecognizedNameError(name, "empty attachment name")
                key = HierarchyKey(kind, rest, parent)
                break

            own_id, _, tail = rest.partition(self._markers.segment_separator)
            if not own_id:
                raise UnrecognizedNameError(name, f"empty {kind.value} id")

            key = HierarchyKey(kind, own_id, parent)
            if kind is HierarchyKind.ATTACHMENT_DOCUMENT or not tail:
                break

            remaining, parent = tail, key

        logger.debug("Resolved | name=%s key=%s", name, key)
        return key

    def _match(self, name: str, remaining: str) -> tuple[HierarchyKind, str]:
        for kind, prefix in self._prefixes:
            if remaining.startswith(prefix):
                return kind, remaining[len(prefix):]
        raise UnrecognizedNameError(name, f"no hierarchy marker matches {remaining!r}")
