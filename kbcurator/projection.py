"""The projection frontend: one page per set of kb areas, without a model.

Each area gives a header section, then one section per entry type that
has entries, in a fixed order. The same inputs always give the same
document.
"""

from __future__ import annotations

from kbcurator.ir import Document, Frontmatter, ProseBlock, Provenance, Section
from kbcurator.model import Area, Entry, Snapshot, Spec

_ENTRY_TYPES = (
    ("fact", "Facts"),
    ("decision", "Decisions"),
    ("gotcha", "Gotchas"),
    ("pattern", "Patterns"),
    ("link", "Links"),
)


class ProjectionFrontend:
    """Deterministic frontend projecting kb areas onto a page."""

    name = "projection-frontend"
    kind = "projection"

    def build(self, spec: Spec, snapshot: Snapshot) -> Document:
        """Build the document; a missing included area is an error."""
        doc = Document(
            frontmatter=Frontmatter(title=spec.page, spec_hash=spec.hash, kb_commit=snapshot.commit)
        )
        for area_id in spec.include.areas:
            area = snapshot.area(area_id)
            if area is None:
                raise LookupError(
                    f"projection: area {area_id!r} from spec include list not present in kb snapshot"
                )
            doc.sections.extend(_area_sections(area, spec))
        return doc


def _area_sections(area: Area, spec: Spec) -> list[Section]:
    out = [
        Section(
            heading=area.name or area.id,
            blocks=[
                ProseBlock(
                    text=area.summary,
                    prov=Provenance(spec_section="area-header", sources=["area/" + area.id]),
                )
            ],
        )
    ]
    for tag, heading in _ENTRY_TYPES:
        entries = area.entries_by_type(tag)
        if entries:
            out.append(Section(heading=heading, blocks=[_entry_block(e, spec) for e in entries]))
    return out


def _entry_block(entry: Entry, spec: Spec) -> ProseBlock:
    text = entry.text
    if entry.type == "decision":
        if entry.why:
            text += "\nWhy: " + entry.why
        if entry.rejected:
            text += "\nRejected: " + entry.rejected
        if entry.context:
            text += "\nContext: " + entry.context
    elif entry.type == "link" and entry.url:
        text += "\n→ " + entry.url
    return ProseBlock(
        text=text,
        prov=Provenance(
            spec_section="entry/" + entry.type,
            sources=[f"area/{entry.area}/{entry.type}/{entry.id}"],
            input_hash=f"{spec.hash}:{entry.id}:{entry.updated}",
        ),
    )