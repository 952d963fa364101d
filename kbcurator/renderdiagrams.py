"""The diagram pass: renders diagram blocks to images and uploads them.

Rendering and uploading are injected, so the pass itself stays
deterministic. The upload filename comes from a hash of the language
and the original source, so identical diagrams always land at the same
wiki filename. A block that already has an asset reference is left
alone. Unsupported languages and failed renders keep their source
rather than failing the page.
"""

from __future__ import annotations

import hashlib
from dataclasses import replace
from typing import Protocol

from kbcurator.ir import DiagramBlock, Document, Section
from kbcurator.mermaid import UnsupportedLanguageError
from kbcurator.model import LLMClient, LLMRequest

_MAX_REPAIR_ATTEMPTS = 4


class Renderer(Protocol):
    """Turns diagram source into image bytes and a content type."""

    def render(self, lang: str, source: str) -> tuple[bytes, str]:
        """Render; raise UnsupportedLanguageError for unhandled languages."""
        ...


class Uploader(Protocol):
    """Uploads an image asset and returns the reference to embed."""

    def upload_file(self, filename: str, content: bytes, content_type: str, summary: str) -> str:
        """Upload content; return its asset reference."""
        ...


class Repairer(Protocol):
    """Attempts to fix diagram source that failed to render."""

    def repair(self, lang: str, source: str, render_error: str) -> str:
        """Return corrected source."""
        ...


class UploadError(Exception):
    """Uploading a rendered diagram failed."""

    def __init__(self, filename: str, cause: BaseException) -> None:
        super().__init__(f"renderdiagrams: upload {filename!r}: {cause}")
        self.filename = filename
        self.cause = cause


class RenderDiagrams:
    """Renders, uploads and stamps the asset reference of every diagram block."""

    name = "render-diagrams"

    def __init__(
        self,
        renderer: Renderer,
        uploader: Uploader,
        repairer: Repairer | None = None,
    ) -> None:
        self._renderer = renderer
        self._uploader = uploader
        self._repairer = repairer

    def apply(self, doc: Document) -> Document:
        """Return the document with renderable diagrams uploaded."""
        sections = [
            Section(
                heading=sec.heading,
                blocks=[
                    self._render_one(b) if isinstance(b, DiagramBlock) else b
                    for b in sec.blocks
                ],
            )
            for sec in doc.sections
        ]
        return replace(doc, sections=sections)

    def _render_one(self, block: DiagramBlock) -> DiagramBlock:
        if not block.source or block.asset_ref:
            return block

        try:
            img, ctype = self._renderer.render(block.lang, block.source)
        except UnsupportedLanguageError:
            return block
        except Exception as exc:  # a bad diagram must not abort the page
            if self._repairer is None:
                return block
            rendered = self._repair(block, str(exc))
            if rendered is None:
                return block
            img, ctype = rendered

        # Keyed on the original source so re-runs stay idempotent even
        # though repaired output is not deterministic.
        filename = _asset_filename(block.lang, block.source)
        summary = "curator: render diagram"
        if block.prov.spec_section:
            summary += " for " + block.prov.spec_section
        try:
            ref = self._uploader.upload_file(filename, img, ctype, summary)
        except Exception as exc:
            raise UploadError(filename, exc) from exc
        return replace(block, asset_ref=ref)

    def _repair(self, block: DiagramBlock, first_error: str) -> tuple[bytes, str] | None:
        """Bounded repair loop; the rendered image, or None to degrade."""
        assert self._repairer is not None
        current, last_error = block.source, first_error
        for _ in range(_MAX_REPAIR_ATTEMPTS):
            try:
                fixed = self._repairer.repair(block.lang, current, last_error)
            except Exception:
                return None
            if not fixed.strip() or fixed == current:
                return None
            current = fixed
            try:
                return self._renderer.render(block.lang, current)
            except Exception as exc:
                last_error = str(exc)
        return None


def _asset_filename(lang: str, source: str) -> str:
    digest = hashlib.sha256((lang + "\x00" + source).encode("utf-8")).hexdigest()
    return f"diagram-{digest[:16]}.png"


_REPAIR_SYSTEM_PROMPT = (
    "You fix invalid diagram source for a renderer. "
    "Output ONLY the corrected diagram source — no explanation, no prose, "
    "no markdown code fences. Preserve the author's intent and content; "
    "change only what is needed to make it parse. For mermaid: never put "
    "backticks, unescaped parentheses or slashes inside node labels; quote "
    "multi-word subgraph titles."
)


class LLMRepairer:
    """Asks a model to correct diagram source that failed to render."""

    def __init__(self, client: LLMClient, model: str) -> None:
        self._client = client
        self._model = model

    def repair(self, lang: str, source: str, render_error: str) -> str:
        """Return the model's corrected source."""
        prompt = (
            f"The following {lang} diagram failed to render.\n\n"
            f"Renderer error:\n{render_error}\n\n"
            f"Diagram source:\n{source}\n\n"
            f"Return the corrected {lang} diagram source only."
        )
        try:
            resp = self._client.complete(
                LLMRequest(
                    model=self._model,
                    system=_REPAIR_SYSTEM_PROMPT,
                    prompt=prompt,
                    max_tokens=2048,
                )
            )
        except Exception as exc:
            raise RuntimeError(f"renderdiagrams: llm repair: {exc}") from exc
        return _strip_fence(resp.text)


def _strip_fence(s: str) -> str:
    """Contents of the first fenced block in s, else s trimmed."""
    i = s.find("```")
    if i >= 0:
        rest = s[i + 3 :]
        nl = rest.find("\n")
        if nl >= 0:
            rest = rest[nl + 1 :]
        j = rest.find("```")
        if j >= 0:
            return rest[:j].strip()
    return s.strip()