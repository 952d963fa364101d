"""The house-style pass: a composition of independent style rules.

Rules touch only the words people read: prose text, callout bodies and
section headings. Structural content (machine blocks, kb refs, tables,
markers) is left alone.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Protocol

from kbcurator.ir import Callout, Document, ProseBlock, Section


class Rule(Protocol):
    """A deterministic, pure house-style transformation."""

    name: str

    def apply(self, doc: Document) -> Document:
        """Return the restyled document."""
        ...


class ApplyStyleRules:
    """Threads a document through its rules in the order given."""

    name = "apply-style-rules"

    def __init__(self, *rules: Rule) -> None:
        self._rules = tuple(rules)

    def apply(self, doc: Document) -> Document:
        """Apply each rule in sequence; no rules is the identity."""
        for rule in self._rules:
            doc = rule.apply(doc)
        return doc


def _map_prose(doc: Document, fn: Callable[[str], str]) -> Document:
    """Rewrite every heading, prose text and callout body with fn."""

    def restyle(block):
        if isinstance(block, ProseBlock):
            return replace(block, text=fn(block.text))
        if isinstance(block, Callout):
            return replace(block, body=fn(block.body))
        return block

    sections = [
        Section(heading=fn(sec.heading), blocks=[restyle(b) for b in sec.blocks])
        for sec in doc.sections
    ]
    return replace(doc, sections=sections)


class TerminologyRule:
    """Whole-word, case-sensitive replacement of terms with canonical forms.

    Replacements run in sorted-key order so the result never depends
    on mapping order.
    """

    name = "terminology"

    def __init__(self, replacements: Mapping[str, str]) -> None:
        self._patterns = [
            (re.compile(r"\b" + re.escape(key) + r"\b", re.ASCII), replacements[key])
            for key in sorted(replacements)
            if key
        ]

    def apply(self, doc: Document) -> Document:
        """Rewrite terms in prose, callouts and headings."""

        def rewrite(text: str) -> str:
            for pattern, canonical in self._patterns:
                text = pattern.sub(lambda _m, c=canonical: c, text)
            return text

        return _map_prose(doc, rewrite)


class HeadingCaseRule:
    """Normalises section heading casing to sentence or title case."""

    name = "heading-case"

    _MODES = ("sentence", "title")

    def __init__(self, mode: str) -> None:
        if mode not in self._MODES:
            raise ValueError(
                f'applystylerules: unknown heading-case mode {mode!r} (want "sentence" or "title")'
            )
        self.mode = mode

    def apply(self, doc: Document) -> Document:
        """Recase section headings only."""
        recase = _to_sentence_case if self.mode == "sentence" else _to_title_case
        sections = [replace(sec, heading=recase(sec.heading)) for sec in doc.sections]
        return replace(doc, sections=sections)


def _upper_first(s: str) -> str:
    return s[0].upper()[0] + s[1:]


def _to_sentence_case(s: str) -> str:
    if not s:
        return s
    return _upper_first(s.lower())


def _to_title_case(s: str) -> str:
    return " ".join(_upper_first(w) if w else w for w in s.split(" "))