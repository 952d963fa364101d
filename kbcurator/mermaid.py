"""Mermaid diagram rendering through the mermaid CLI (``mmdc``).

Only mermaid is handled here. Any other language raises
UnsupportedLanguageError, and the diagram pass then keeps the raw
source instead of an image.
"""

from __future__ import annotations

import os
import re
import subprocess
import tempfile
from pathlib import Path

_SUBGRAPH_RE = re.compile(r"^(\s*subgraph\s+)(\S.*?)\s*$")
# A single [square-bracket] node label; [[ ]] and [/ /] shapes are
# excluded because the inner class rules out brackets and slashes.
_LABEL_RE = re.compile(r"\[([^\[\]/]+)\]")


class UnsupportedLanguageError(Exception):
    """The renderer cannot handle the diagram's language."""

    def __init__(self, lang: str) -> None:
        super().__init__(f"renderdiagrams: unsupported diagram language: {lang!r}")
        self.lang = lang


def sanitize_mermaid(src: str) -> str:
    """Repair the mermaid syntax mistakes that model output makes most often.

    Subgraph titles with parentheses are quoted, square-bracket labels
    holding parentheses or colons are quoted, and backticks are
    removed. Valid or already repaired source passes through
    unchanged.
    """
    lines = []
    for line in src.split("\n"):
        m = _SUBGRAPH_RE.match(line)
        if m:
            prefix, title = m.group(1), m.group(2)
            already_ok = title.startswith('"') or "[" in title
            if not already_ok and ("(" in title or ")" in title):
                line = f'{prefix}"{title}"'
        lines.append(line)

    def quote_label(m: re.Match[str]) -> str:
        inner = m.group(1)
        if inner.startswith('"') and inner.endswith('"'):
            return m.group(0)
        if any(ch in inner for ch in "():"):
            return f'["{inner}"]'
        return m.group(0)

    text = _LABEL_RE.sub(quote_label, "\n".join(lines))
    return text.replace("`", "")


class MermaidRenderer:
    """Renders mermaid source to PNG by running ``mmdc``."""

    def __init__(self, binary: str = "", puppeteer_config: str = "") -> None:
        self.binary = binary or "mmdc"
        self.puppeteer_config = puppeteer_config

    @classmethod
    def from_env(cls, binary: str = "") -> MermaidRenderer:
        """Renderer whose puppeteer config comes from MMDC_PUPPETEER_CONFIG."""
        return cls(binary, os.environ.get("MMDC_PUPPETEER_CONFIG", ""))

    def mmdc_args(self, in_path: str, out_path: str) -> list[str]:
        """Argument vector passed to mmdc."""
        args = ["-i", in_path, "-o", out_path, "-e", "png"]
        if self.puppeteer_config:
            args += ["-p", self.puppeteer_config]
        return args

    def render(self, lang: str, source: str) -> tuple[bytes, str]:
        """Render source to PNG bytes; return them with their content type."""
        if lang not in ("", "mermaid"):
            raise UnsupportedLanguageError(lang)

        with tempfile.TemporaryDirectory(prefix="mykb-curator-mmdc-") as tmp:
            in_path = Path(tmp) / "diagram.mmd"
            out_path = Path(tmp) / "diagram.png"
            in_path.write_text(sanitize_mermaid(source), encoding="utf-8")
            in_path.chmod(0o600)

            try:
                proc = subprocess.run(
                    [self.binary, *self.mmdc_args(str(in_path), str(out_path))],
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
            except OSError as exc:
                raise RuntimeError(f"mmdc: run: {exc}") from exc
            if proc.returncode != 0:
                output = (proc.stdout or b"").decode("utf-8", errors="replace")
                raise RuntimeError(
                    f"mmdc: run: exit status {proc.returncode}; output={output}"
                )

            try:
                png = out_path.read_bytes()
            except OSError as exc:
                raise RuntimeError(f"mmdc: read output: {exc}") from exc
        return png, "image/png"