"""The editorial frontend: a model writes the page from the spec's
intent and the kb content of the included areas.

The prompt asks for markdown with ``##`` section headings. The reply
is parsed back into IR by the shared markdown parser. Caching of model
replies is the client's concern, not this frontend's.
"""

from __future__ import annotations

from kbcurator import mdir
from kbcurator.ir import Document, Frontmatter
from kbcurator.model import LLMClient, LLMRequest, Snapshot, Spec


class EditorialError(Exception):
    """Building an editorial page failed."""


_SYSTEM_PROMPT = """You are a wiki editor for an engineering organisation. You write clear wiki pages that capture institutional knowledge and are understandable by a reader with ZERO prior knowledge of the subject.

Style:
- Markdown output only. No preamble, no postscript. Do not wrap the whole response in a code fence.
- Use ## (and ### for sub-topics) for headings. Do not use # — the page title is set separately.
- Lead a newcomer in: briefly explain what the technology is and the concepts needed to understand it, THEN the organisation's specifics.
- Prefer clear prose paragraphs. Include diagrams where they aid understanding using fenced ```mermaid blocks (flowchart/sequence/etc.) — diagrams are rendered to images automatically.
- Mermaid rules (diagrams that break do not render — follow exactly):
  * One statement per line. Put the diagram type (e.g. graph TD) on its own first line; never put node/edge statements on the same line as it or as a subgraph.
  * Node/edge label text must contain NO parentheses, slashes, colons or backticks. Rephrase instead (write "Leader" not "(Leader)", "vault dot acme dot internal" or just "Vault endpoint" not a URL).
  * Quote every subgraph title: subgraph "My Title". Keep titles short and plain.
  * Keep diagrams small (a dozen nodes max); prefer several simple diagrams over one dense one.
- Ground every organisation-specific claim (versions, topology, decisions) in the supplied kb content; do not invent organisation specifics. General, well-known background about the technology itself may be explained to orient the reader."""


class EditorialFrontend:
    """Model-driven frontend for editorial pages."""

    name = "editorial-frontend"
    kind = "editorial"

    def __init__(self, client: LLMClient, model: str) -> None:
        self._client = client
        self._model = model

    def build(self, spec: Spec, snapshot: Snapshot) -> Document:
        """Ask the model for the page and parse its markdown into IR.

        An empty reply is an error: a failed render is better than an
        empty page on the wiki.
        """
        prompt = _compose_prompt(spec, snapshot)
        try:
            resp = self._client.complete(
                LLMRequest(model=self._model, system=_SYSTEM_PROMPT, prompt=prompt, max_tokens=4096)
            )
        except Exception as exc:
            raise EditorialError(f"editorial: llm: {exc}") from exc
        if not resp.text.strip():
            raise EditorialError("editorial: llm returned empty response — refusing to push empty page")

        return Document(
            frontmatter=Frontmatter(title=spec.page, spec_hash=spec.hash, kb_commit=snapshot.commit),
            sections=mdir.parse(resp.text, "editorial", spec.hash),
        )


def _compose_prompt(spec: Spec, snapshot: Snapshot) -> str:
    parts = [f"# Page: {spec.page}\n\n"]
    body = spec.body.strip()
    if body:
        parts.append(f"## Intent\n\n{body}\n\n")

    parts.append("## Available kb content\n\n")
    parts.append(
        "Use only the following knowledge to write the page. Do not invent facts beyond this.\n\n"
    )
    for area_id in spec.include.areas:
        area = snapshot.area(area_id)
        if area is None:
            continue
        parts.append(f"### Area: {area.id} — {area.name}\n\n")
        if area.summary:
            parts.append(f"Summary: {area.summary}\n\n")
        for e in area.entries:
            parts.append(f"- [{e.type}/{e.id}] {e.text}\n")
            if e.why:
                parts.append(f"    Why: {e.why}\n")
            if e.rejected:
                parts.append(f"    Rejected: {e.rejected}\n")
        parts.append("\n")

    parts.append("Now write the page body, starting with the first ## section heading.\n")
    return "".join(parts)