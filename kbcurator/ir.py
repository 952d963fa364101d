"""Intermediate representation: the page tree that frontends build,
passes transform and backends render.

Every block carries provenance so the reconciler can tell machine-owned
regions from editorial ones and detect drift.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar


class Zone(Enum):
    """Reconciliation behaviour of a block."""

    MACHINE = "machine"  # always regenerated
    EDITORIAL = "editorial"  # preserved if inputs unchanged


class MarkerPosition(Enum):
    """Whether a marker opens or closes a bracketed region."""

    BEGIN = "begin"
    END = "end"


@dataclass
class Provenance:
    """Per-block metadata used for drift detection and cache keys."""

    spec_section: str = ""
    sources: list[str] = field(default_factory=list)
    input_hash: str = ""


class Block:
    """Base of every IR block kind."""

    KIND: ClassVar[str] = ""
    ZONE: ClassVar[Zone] = Zone.MACHINE

    prov: Provenance

    def kind(self) -> str:
        """Stable name of the block kind."""
        return self.KIND

    def zone(self) -> Zone:
        """Reconciliation zone of the block."""
        return self.ZONE


@dataclass
class ProseBlock(Block):
    """A narrative paragraph; editorial."""

    KIND = "prose"
    ZONE = Zone.EDITORIAL

    text: str = ""
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class MachineBlock(Block):
    """Auto-generated structural content; always regenerated."""

    KIND = "machine"

    block_id: str = ""
    sub_kind: str = ""
    body: str = ""
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class KBRefBlock(Block):
    """Reference to a kb entry, resolved by a later pass."""

    KIND = "kbref"

    area: str = ""
    id: str = ""
    mode: str = ""  # "inline" | "footnote" | "link"
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class TableBlock(Block):
    """A structured table."""

    KIND = "table"

    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class IndexEntry:
    """One internal link in an index block."""

    page: str = ""
    label: str = ""
    desc: str = ""


@dataclass
class IndexBlock(Block):
    """A curated list of internal links; machine-owned navigation."""

    KIND = "index"

    entries: list[IndexEntry] = field(default_factory=list)
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class CategoryBlock(Block):
    """Page taxonomy, conventionally rendered at the page foot."""

    KIND = "category"

    names: list[str] = field(default_factory=list)
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class DiagramBlock(Block):
    """Diagram or code source, optionally rendered to an uploaded asset."""

    KIND = "diagram"

    lang: str = ""
    source: str = ""
    asset_ref: str = ""
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class Callout(Block):
    """A note/warning/info box; machine or editorial by origin."""

    KIND = "callout"

    severity: str = ""
    body: str = ""
    is_machine: bool = False
    prov: Provenance = field(default_factory=Provenance)

    def zone(self) -> Zone:
        return Zone.MACHINE if self.is_machine else Zone.EDITORIAL


@dataclass
class EscapeHatch(Block):
    """Backend-specific raw markup."""

    KIND = "escape-hatch"

    backend: str = ""
    raw: str = ""
    prov: Provenance = field(default_factory=Provenance)


@dataclass
class MarkerBlock(Block):
    """Boundary of a bracketed region; the marker itself is machine-owned.

    ``of_zone`` names the zone of the bracketed block ("machine" or
    "editorial"), not the marker's own zone.
    """

    KIND = "marker"

    position: MarkerPosition = MarkerPosition.BEGIN
    block_id: str = ""
    prov: Provenance = field(default_factory=Provenance)
    of_zone: str = ""


@dataclass
class Section:
    """One labelled subdivision of a document."""

    heading: str = ""
    blocks: list[Block] = field(default_factory=list)


@dataclass
class Frontmatter:
    """Identity and provenance of a document."""

    title: str = ""
    spec_hash: str = ""
    kb_commit: str = ""
    generated_at: datetime | None = None


@dataclass
class Footer:
    """Trailer rendered at the end of every page."""

    last_curated: datetime | None = None
    run_id: str = ""
    kb_commit: str = ""


@dataclass
class Document:
    """Top-level IR for a single wiki page."""

    frontmatter: Frontmatter = field(default_factory=Frontmatter)
    sections: list[Section] = field(default_factory=list)
    footer: Footer = field(default_factory=Footer)