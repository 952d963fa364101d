"""The doc-spec frontend for narrative architecture, runbook and
integration pages.

Prose sections are written by a model from the section's declared
sources: kb sources, plus any non-kb source that a configured resolver
can ground. ``render: table`` sections are built without the model,
from kb rows and resolver rows. A source whose scheme has no resolver
gets a "pending" row instead of made-up content. ``render:
child-index`` sections become empty placeholders, which the cluster
later fills with the topic's children.
"""

from __future__ import annotations

import hashlib
import json

from kbcurator import mdir
from kbcurator.ir import (
    Block,
    Document,
    Frontmatter,
    IndexBlock,
    ProseBlock,
    Provenance,
    Section,
    TableBlock,
)
from kbcurator.model import (
    Area,
    DocPage,
    DocSection,
    Entry,
    LLMClient,
    LLMRequest,
    Resolved,
    Resolver,
    Snapshot,
    Source,
)

CHILD_INDEX_PROV = "architecture-child-index"
"""Provenance label of the empty index block the cluster fills with children."""

_GAP_TEXT = "_No content was available for this section from the declared sources._"


class ArchitectureError(Exception):
    """Rendering one section of a page failed."""

    def __init__(self, section: str, message: str) -> None:
        super().__init__(f"architecture: section {section!r}: {message}")
        self.section = section


class ArchitectureFrontend:
    """Renders one doc page to an IR document."""

    name = "architecture-frontend"

    def __init__(self, client: LLMClient, model: str, *resolvers: Resolver | None) -> None:
        self._client = client
        self._model = model
        self._resolvers: dict[str, Resolver] = {r.scheme: r for r in resolvers if r is not None}

    def render(self, page: DocPage, snapshot: Snapshot) -> Document:
        """Produce the IR document for page; deterministic given the model."""
        doc = Document(
            frontmatter=Frontmatter(
                title=page.page,
                spec_hash=_hash_str(page.page + "\x00" + page.intent),
                kb_commit=snapshot.commit,
            )
        )
        system = persona(page.audience)

        for sec in page.sections:
            sec_hash = _hash_str(
                "\x00".join([page.page, sec.title, sec.intent, _raw_sources(sec.sources)])
            )
            if sec.render == "child-index":
                doc.sections.append(
                    Section(
                        heading=sec.title,
                        blocks=[
                            IndexBlock(
                                prov=Provenance(spec_section=CHILD_INDEX_PROV, input_hash=sec_hash)
                            )
                        ],
                    )
                )
                continue
            if sec.render == "table":
                try:
                    table = self._table_from_sources(sec, snapshot, sec_hash)
                except Exception as exc:
                    raise ArchitectureError(sec.title, str(exc)) from exc
                doc.sections.append(Section(heading=sec.title, blocks=[table]))
                continue

            try:
                kb_digest, non_kb = self._resolve_sources(sec.sources, snapshot)
            except Exception as exc:
                raise ArchitectureError(sec.title, str(exc)) from exc
            prompt = _compose_section_prompt(page, sec, kb_digest, non_kb)
            try:
                resp = self._client.complete(
                    LLMRequest(model=self._model, system=system, prompt=prompt, max_tokens=3072)
                )
            except Exception as exc:
                raise ArchitectureError(sec.title, f"llm: {exc}") from exc

            body = mdir.parse(resp.text.strip(), "architecture", sec_hash)
            doc.sections.extend(_fold_section(sec.title, body, sec_hash))
        return doc

    def _resolve_non_kb(self, source: Source) -> Resolved | None:
        resolver = self._resolvers.get(source.scheme)
        if resolver is None:
            return None
        return resolver.resolve(source)

    def _table_from_sources(self, sec: DocSection, snapshot: Snapshot, input_hash: str) -> TableBlock:
        table = TableBlock(
            columns=["Type", "Ref", "Summary"],
            prov=Provenance(spec_section="architecture-table", input_hash=input_hash),
        )
        for source in sec.sources:
            if source.scheme != "kb":
                resolved = self._resolve_non_kb(source)
                if resolved is not None:
                    table.rows.extend(list(row) for row in resolved.rows)
                else:
                    table.rows.append(
                        [source.scheme, source.spec, "pending — no resolver configured for this scheme"]
                    )
                continue
            found = resolve_kb(snapshot, source)
            if found is None:
                continue
            area, entries = found
            table.rows.extend(
                [e.type, f"{area.id}/{e.id}", _first_line(e.text)] for e in entries
            )
        return table

    def _resolve_sources(self, sources: list[Source], snapshot: Snapshot) -> tuple[str, list[str]]:
        """Grounding digest and the raw text of still-unresolved non-kb sources."""
        parts: list[str] = []
        non_kb: list[str] = []
        for source in sources:
            if source.scheme != "kb":
                resolved = self._resolve_non_kb(source)
                if resolved is None:
                    non_kb.append(source.raw)
                    continue
                digest = resolved.digest
                if not digest.endswith("\n"):
                    digest += "\n"
                parts.append(digest + "\n")
                continue
            found = resolve_kb(snapshot, source)
            if found is None:
                continue
            area, entries = found
            parts.append(f"### Area: {area.id} — {area.name}\n")
            if area.summary:
                parts.append(f"Summary: {area.summary}\n")
            for e in entries:
                parts.append(f"- [{e.type}/{e.id}] {e.text}\n")
                if e.why:
                    parts.append(f"    Why: {e.why}\n")
            parts.append("\n")
        return "".join(parts), non_kb


def resolve_kb(snapshot: Snapshot, source: Source) -> tuple[Area, list[Entry]] | None:
    """Resolve a ``kb:area=<id> [tag=a,b] [zone=x,y]`` source.

    Returns the area and its filtered entries, or None when the source
    is not a kb source, names no area, or the area is missing.
    """
    if source.scheme != "kb":
        return None
    area_id = ""
    tags: set[str] = set()
    zones: set[str] = set()
    for token in source.spec.split():
        key, found, value = token.partition("=")
        if not found:
            continue
        if key == "area":
            area_id = value
        elif key == "tag":
            tags.update(t.strip() for t in value.split(",") if t.strip())
        elif key == "zone":
            zones.update(z.strip() for z in value.split(",") if z.strip())
    if not area_id:
        return None
    area = snapshot.area(area_id)
    if area is None:
        return None
    if not tags and not zones:
        return area, area.entries
    entries = [
        e
        for e in area.entries
        if (not zones or e.zone in zones) and (not tags or any(t in tags for t in e.tags))
    ]
    return area, entries


def _first_line(s: str) -> str:
    return s.split("\n", 1)[0].strip()


def _fold_section(title: str, parsed: list[Section], input_hash: str) -> list[Section]:
    """Put the model's output under the declared title; flatten extra headings."""
    out = [Section(heading=title)]
    for i, part in enumerate(parsed):
        if i == 0 and not part.heading:
            out[0].blocks = part.blocks
            continue
        out.append(part)
    if not out[0].blocks and len(out) == 1:
        gap: list[Block] = [
            ProseBlock(
                text=_GAP_TEXT,
                prov=Provenance(spec_section="architecture-gap", input_hash=input_hash),
            )
        ]
        out[0].blocks = gap
    return out


def _compose_section_prompt(page: DocPage, sec: DocSection, kb_digest: str, non_kb: list[str]) -> str:
    parts = [
        f"Page: {page.page}\nPage intent: {page.intent}\n\n",
        f"Write ONLY the prose body for the section titled {json.dumps(sec.title, ensure_ascii=False)}.\n",
    ]
    if sec.intent:
        parts.append(f"This section must convey: {sec.intent}\n")
    parts.append("Do NOT output the section heading. Do NOT use # or ## headings. ")
    parts.append(
        "Use ### sparingly only for genuine sub-points. You MAY include one mermaid "
        "fenced block if it aids understanding.\n\n"
    )
    if kb_digest.strip():
        parts.append(
            "Ground every organisation-specific claim in the following knowledge base "
            "content. Do not invent organisation specifics.\n\n"
        )
        parts.append(kb_digest)
    else:
        parts.append("(No kb content resolved for this section's sources.)\n")
    if non_kb:
        parts.append(
            "\nDeclared sources not yet machine-resolvable (mention only if essential, "
            f"do not fabricate their contents): {', '.join(non_kb)}\n"
        )
    return "".join(parts)


_PERSONA_BASE = """You are an infrastructure documentation writer. You produce accurate, well-structured prose for an engineering wiki.

Rules:
- Markdown only. No preamble, no postscript, no wrapping code fence.
- No # or ## headings (the page/section headings are set for you).
- Ground every organisation-specific claim (versions, hosts, topology, decisions) ONLY in the supplied kb content. Do not invent organisation specifics.
- Mermaid (if used): one statement per line; diagram type on its own first line; no parentheses/slashes/colons/backticks inside node labels; quote subgraph titles; keep it small."""


def persona(audience: str) -> str:
    """System prompt for the page audience; human operator by default."""
    if audience == "newcomer":
        return (
            _PERSONA_BASE
            + "\n- Audience: a reader with ZERO prior knowledge. Briefly explain the "
            "concepts needed before the specifics."
        )
    if audience == "llm-reference":
        return (
            _PERSONA_BASE
            + "\n- Audience: a machine/reference reader. Be terse, dense, and exhaustive "
            "over the supplied facts; minimal narrative."
        )
    return (
        _PERSONA_BASE
        + "\n- Audience: an engineer operating this system. Be precise and operational: "
        "where it runs, how it is built, how to reach it."
    )


def _raw_sources(sources: list[Source]) -> str:
    return "|".join(s.raw for s in sources)


def _hash_str(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:16]