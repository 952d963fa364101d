"""The link-validation pass: every wiki-internal link must resolve.

Links of the form ``[[Page]]`` or ``[[Target|alias]]`` in prose-like
blocks, and every entry of an index block, are checked against a set
of known pages. External URLs are not checked here. With no known set,
every link counts as broken.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from kbcurator.ir import Block, Callout, Document, EscapeHatch, IndexBlock, MachineBlock, ProseBlock

_LINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]+)?\]\]")


class BrokenLinksError(Exception):
    """One or more internal links point at unknown pages."""

    def __init__(self, broken: list[str]) -> None:
        self.broken = sorted(broken)
        super().__init__(f"validate-links: broken internal links: {', '.join(self.broken)}")


class ValidateLinks:
    """Fails when any internal link target is not a known page."""

    name = "validate-links"

    def __init__(self, known: Mapping[str, bool] | Iterable[str] | None) -> None:
        if known is None:
            self._known: frozenset[str] = frozenset()
        elif isinstance(known, Mapping):
            self._known = frozenset(k for k, ok in known.items() if ok)
        else:
            self._known = frozenset(known)

    def apply(self, doc: Document) -> Document:
        """Return the document unchanged, or raise BrokenLinksError."""
        broken: set[str] = set()
        for sec in doc.sections:
            for block in sec.blocks:
                broken.update(t for t in _targets(block) if t and t not in self._known)
        if broken:
            raise BrokenLinksError(sorted(broken))
        return doc


def _targets(block: Block) -> list[str]:
    if isinstance(block, IndexBlock):
        return [e.page.strip() for e in block.entries]
    text = _text_of(block)
    if not text:
        return []
    return [m.group(1).strip() for m in _LINK_RE.finditer(text)]


def _text_of(block: Block) -> str:
    if isinstance(block, ProseBlock):
        return block.text
    if isinstance(block, (Callout, MachineBlock)):
        return block.body
    if isinstance(block, EscapeHatch):
        return block.raw
    return ""