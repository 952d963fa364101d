"""The kb-reference pass: replaces kb reference blocks with entry text.

A reference that cannot be found becomes a visible UNRESOLVED
placeholder, so a broken reference is obvious on the page and in the
run report.
"""

from __future__ import annotations

from dataclasses import replace

from kbcurator.ir import Block, Document, KBRefBlock, ProseBlock, Provenance, Section
from kbcurator.model import Entry, Snapshot


class ResolveKBRefs:
    """Resolves kb reference blocks against one snapshot."""

    name = "resolve-kb-refs"

    def __init__(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot

    def apply(self, doc: Document) -> Document:
        """Return the document with every reference block resolved."""
        sections = [
            Section(
                heading=sec.heading,
                blocks=[self._resolve(b) if isinstance(b, KBRefBlock) else b for b in sec.blocks],
            )
            for sec in doc.sections
        ]
        return replace(doc, sections=sections)

    def _resolve(self, ref: KBRefBlock) -> Block:
        area = self._snapshot.area(ref.area)
        if area is None:
            return _placeholder(ref, "area not in snapshot")
        entry = next((e for e in area.entries if e.id == ref.id), None)
        if entry is None:
            return _placeholder(ref, "entry id not in area")
        return ProseBlock(
            text=_format_entry(entry),
            prov=Provenance(
                spec_section="resolved-kbref",
                sources=[f"area/{ref.area}/{entry.type}/{entry.id}"],
                input_hash=entry.updated,
            ),
        )


def _placeholder(ref: KBRefBlock, why: str) -> ProseBlock:
    return ProseBlock(
        text=f"[UNRESOLVED kb-ref: area={ref.area} id={ref.id} — {why}]",
        prov=Provenance(
            spec_section="unresolved-kbref",
            sources=[f"area/{ref.area}/?/{ref.id}"],
        ),
    )


def _format_entry(entry: Entry) -> str:
    text = entry.text
    if entry.type == "decision":
        if entry.why:
            text += "\nWhy: " + entry.why
        if entry.rejected:
            text += "\nRejected: " + entry.rejected
    elif entry.type == "link" and entry.url:
        text += "\n→ " + entry.url
    return text