"""Data the rendering pipeline consumes: kb snapshots, page specs,
doc specs, model requests and source resolutions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class Entry:
    """One kb entry."""

    id: str = ""
    type: str = ""
    text: str = ""
    area: str = ""
    why: str = ""
    rejected: str = ""
    context: str = ""
    url: str = ""
    updated: str = ""
    tags: list[str] = field(default_factory=list)
    zone: str = ""


@dataclass
class Area:
    """A kb area and its entries."""

    id: str = ""
    name: str = ""
    summary: str = ""
    entries: list[Entry] = field(default_factory=list)

    def entries_by_type(self, entry_type: str) -> list[Entry]:
        """Entries of the given type, in stored order."""
        return [e for e in self.entries if e.type == entry_type]


@dataclass
class Snapshot:
    """The kb as seen at one commit."""

    commit: str = ""
    areas: list[Area] = field(default_factory=list)

    def area(self, area_id: str) -> Area | None:
        """The area with the given id, or None."""
        return next((a for a in self.areas if a.id == area_id), None)


@dataclass
class IncludeFilter:
    """Which kb areas a spec draws on."""

    areas: list[str] = field(default_factory=list)


@dataclass
class HubLink:
    """One link on a hub page."""

    page: str = ""
    label: str = ""
    desc: str = ""
    area: str = ""


@dataclass
class HubSection:
    """A titled group of hub links."""

    title: str = ""
    desc: str = ""
    links: list[HubLink] = field(default_factory=list)


@dataclass
class HubSpec:
    """Structure of a hub page."""

    sections: list[HubSection] = field(default_factory=list)


@dataclass
class Spec:
    """A page spec."""

    id: str = ""
    wiki: str = ""
    page: str = ""
    kind: str = ""
    hash: str = ""
    body: str = ""
    include: IncludeFilter = field(default_factory=IncludeFilter)
    hub: HubSpec | None = None


@dataclass
class Source:
    """A declared section source such as ``kb:area=vault``."""

    raw: str = ""
    scheme: str = ""
    spec: str = ""


@dataclass
class DocSection:
    """One section of a doc page."""

    title: str = ""
    intent: str = ""
    render: str = ""
    sources: list[Source] = field(default_factory=list)


@dataclass
class DocPage:
    """One page of a doc spec."""

    page: str = ""
    kind: str = ""
    audience: str = ""
    intent: str = ""
    sections: list[DocSection] = field(default_factory=list)
    related: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)


@dataclass
class DocSpec:
    """A topic: a parent page and its children."""

    topic: str = ""
    parent: DocPage = field(default_factory=DocPage)
    children: list[DocPage] = field(default_factory=list)


@dataclass
class LLMRequest:
    """A completion request."""

    model: str = ""
    system: str = ""
    prompt: str = ""
    max_tokens: int = 0


@dataclass
class LLMResponse:
    """A completion response."""

    text: str = ""
    tokens_in: int = 0
    tokens_out: int = 0


class LLMClient(Protocol):
    """Anything that can complete a request."""

    def complete(self, request: LLMRequest) -> LLMResponse:
        """Return the model's response; raise on failure."""
        ...


@dataclass
class Resolved:
    """What a resolver produced for a non-kb source."""

    digest: str = ""
    rows: list[list[str]] = field(default_factory=list)
    refs: list[str] = field(default_factory=list)


class Resolver(Protocol):
    """Grounds non-kb sources of one scheme."""

    scheme: str

    def resolve(self, source: Source) -> Resolved | None:
        """Resolution, or None if declined; raise on hard failure."""
        ...