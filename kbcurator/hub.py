"""The hub frontend: index pages that link down into detail.

No model is involved; the result is a pure function of spec and
snapshot. The spec gives the structure. A link with an area and no
description takes that area's summary as its description.
"""

from __future__ import annotations

import hashlib

from kbcurator.ir import Block, Document, Frontmatter, IndexBlock, IndexEntry, ProseBlock, Provenance, Section
from kbcurator.model import Snapshot, Spec


class HubFrontend:
    """Builds hub / index pages."""

    name = "hub-frontend"
    kind = "hub"

    def build(self, spec: Spec, snapshot: Snapshot) -> Document:
        """Turn a hub spec into an index document."""
        if spec.hub is None:
            raise ValueError(f"hub: spec {spec.id!r} has kind=hub but no hub structure")

        doc = Document(
            frontmatter=Frontmatter(title=spec.page, spec_hash=spec.hash, kb_commit=snapshot.commit)
        )

        body = spec.body.strip()
        if body:
            doc.sections.append(
                Section(
                    blocks=[
                        ProseBlock(
                            text=body,
                            prov=Provenance(spec_section="hub.intro", input_hash=_hash_str(body)),
                        )
                    ]
                )
            )

        for i, sec in enumerate(spec.hub.sections):
            entries: list[IndexEntry] = []
            sources: list[str] = []
            for link in sec.links:
                desc = link.desc
                if not desc and link.area:
                    area = snapshot.area(link.area)
                    if area is not None:
                        desc = area.summary
                        sources.append("area/" + area.id)
                entries.append(IndexEntry(page=link.page, label=link.label, desc=desc))

            blocks: list[Block] = []
            blurb = sec.desc.strip()
            if blurb:
                blocks.append(
                    ProseBlock(
                        text=blurb,
                        prov=Provenance(
                            spec_section=f"hub.section[{i}].desc",
                            input_hash=_hash_str(blurb),
                        ),
                    )
                )
            blocks.append(
                IndexBlock(
                    entries=entries,
                    prov=Provenance(
                        spec_section=f"hub.section[{i}]",
                        sources=sources,
                        input_hash=_hash_entries(entries),
                    ),
                )
            )
            doc.sections.append(Section(heading=sec.title, blocks=blocks))

        return doc


def _hash_str(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:16]


def _hash_entries(entries: list[IndexEntry]) -> str:
    """Order-sensitive digest of the rendered link list."""
    return _hash_str("".join(f"{e.page}\x00{e.label}\x00{e.desc}\n" for e in entries))