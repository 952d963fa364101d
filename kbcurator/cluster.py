"""Renders a doc spec (a parent page and its children) into a set of
cross-linked pages.

The page renderer owns each single page. The cluster owns the
relationships between pages: it fills the parent's child-index
placeholders and adds "Part of", "Related pages" and category
sections. Everything it adds comes from the spec.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol

from kbcurator.architecture import CHILD_INDEX_PROV
from kbcurator.ir import CategoryBlock, Document, IndexBlock, IndexEntry, Provenance, Section
from kbcurator.model import DocPage, DocSpec, Snapshot


class PageRenderer(Protocol):
    """Renders a single doc page."""

    def render(self, page: DocPage, snapshot: Snapshot) -> Document:
        """Return the page's IR document; raise on failure."""
        ...


@dataclass
class RenderedPage:
    """One wiki page ready for the pass pipeline and a backend."""

    page: str
    kind: str
    doc: Document


class Cluster:
    """Expands a doc spec into rendered, cross-linked pages."""

    def __init__(self, renderer: PageRenderer) -> None:
        self._renderer = renderer

    def render(self, spec: DocSpec, snapshot: Snapshot) -> list[RenderedPage]:
        """Render the parent first, then the children in declared order."""
        out: list[RenderedPage] = []
        for idx, page in enumerate([spec.parent, *spec.children]):
            doc = self._renderer.render(page, snapshot)
            if idx == 0:
                doc = _fill_child_index(doc, spec)
            else:
                doc = _prepend_part_of(doc, spec.topic, spec.parent.page)
            doc = _append_related(doc, page.related)
            doc = _append_categories(doc, page.categories)
            out.append(RenderedPage(page=page.page, kind=page.kind, doc=doc))
        return out


def _fill_child_index(doc: Document, spec: DocSpec) -> Document:
    entries = [IndexEntry(page=ch.page, label=page_label(ch.page), desc=ch.intent) for ch in spec.children]

    def fill(block):
        if isinstance(block, IndexBlock) and block.prov.spec_section == CHILD_INDEX_PROV:
            return replace(block, entries=list(entries))
        return block

    sections = [Section(heading=s.heading, blocks=[fill(b) for b in s.blocks]) for s in doc.sections]
    return replace(doc, sections=sections)


def _prepend_part_of(doc: Document, topic: str, parent_page: str) -> Document:
    sec = Section(
        heading="Part of",
        blocks=[
            IndexBlock(
                entries=[IndexEntry(page=parent_page, label=topic)],
                prov=Provenance(spec_section="cluster-part-of"),
            )
        ],
    )
    return replace(doc, sections=[sec, *doc.sections])


def _append_related(doc: Document, related: list[str]) -> Document:
    pages = [r.strip() for r in related if r.strip()]
    if not pages:
        return doc
    sec = Section(
        heading="Related pages",
        blocks=[
            IndexBlock(
                entries=[IndexEntry(page=p, label=page_label(p)) for p in pages],
                prov=Provenance(spec_section="cluster-related"),
            )
        ],
    )
    return replace(doc, sections=[*doc.sections, sec])


def _append_categories(doc: Document, categories: list[str]) -> Document:
    names = [c.strip() for c in categories if c.strip()]
    if not names:
        return doc
    sec = Section(
        blocks=[CategoryBlock(names=names, prov=Provenance(spec_section="cluster-categories"))]
    )
    return replace(doc, sections=[*doc.sections, sec])


def page_label(page: str) -> str:
    """Human link text for a wiki page path: last segment, underscores as spaces."""
    return page.rsplit("/", 1)[-1].replace("_", " ")