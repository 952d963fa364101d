"""Conversion of model-authored markdown into IR sections.

ATX headings of level 2 to 6 start a section (flattened), and fenced
code blocks become diagram blocks so fences never leak into prose.
"""

from __future__ import annotations

from kbcurator.ir import DiagramBlock, ProseBlock, Provenance, Section


def parse(md: str, prov_prefix: str, input_hash: str) -> list[Section]:
    """Split markdown into sections.

    Content before the first heading becomes a no-heading section so
    nothing is dropped. Prose blocks are labelled ``<prefix>-section``
    and diagram blocks ``<prefix>-diagram``.
    """
    sections: list[Section] = []
    current = Section()
    prose: list[str] = []
    fence_lines: list[str] = []
    fence_lang: str | None = None

    def flush() -> None:
        text = "\n".join(prose).strip()
        if text:
            current.blocks.append(
                ProseBlock(
                    text=text,
                    prov=Provenance(spec_section=f"{prov_prefix}-section", input_hash=input_hash),
                )
            )
        prose.clear()

    def close_section() -> None:
        flush()
        if current.heading or current.blocks:
            sections.append(current)

    def add_diagram(lang: str) -> None:
        current.blocks.append(
            DiagramBlock(
                lang=lang,
                source="\n".join(fence_lines).rstrip("\n"),
                prov=Provenance(spec_section=f"{prov_prefix}-diagram", input_hash=input_hash),
            )
        )
        fence_lines.clear()

    for line in md.split("\n"):
        if line.startswith("```"):
            if fence_lang is not None:
                add_diagram(fence_lang)
                fence_lang = None
            else:
                flush()
                fence_lang = line[3:].strip() or "text"
            continue
        if fence_lang is not None:
            fence_lines.append(line)
            continue
        heading = _atx_heading(line)
        if heading is not None:
            close_section()
            current = Section(heading=heading)
            continue
        prose.append(line)

    if fence_lang is not None:  # unclosed fence: keep its content
        add_diagram(fence_lang)
    close_section()
    return sections


def _atx_heading(line: str) -> str | None:
    """Heading text of a level 2-6 ATX heading, else None.

    Level 1 is not a boundary: the page title is set separately.
    """
    s = line.rstrip(" \t")
    level = len(s) - len(s.lstrip("#"))
    if level < 2 or level > 6 or level >= len(s) or s[level] != " ":
        return None
    return s[level + 1 :].strip()