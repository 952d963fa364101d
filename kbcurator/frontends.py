"""Frontends turn a spec and a kb snapshot into an IR document; the
registry dispatches a spec kind to its frontend."""

from __future__ import annotations

from typing import Protocol

from kbcurator.ir import Document
from kbcurator.model import Snapshot, Spec


class Frontend(Protocol):
    """Builds an IR document for one spec kind."""

    name: str
    kind: str

    def build(self, spec: Spec, snapshot: Snapshot) -> Document:
        """Produce the IR document; raise on failure."""
        ...


class Registry:
    """Maps spec kinds to frontends."""

    def __init__(self) -> None:
        self._by_kind: dict[str, Frontend] = {}

    def register(self, frontend: Frontend) -> None:
        """Add a frontend under its kind; a duplicate kind is a programming error."""
        if frontend.kind in self._by_kind:
            raise ValueError(f"frontends: duplicate registration for kind {frontend.kind!r}")
        self._by_kind[frontend.kind] = frontend

    def for_kind(self, kind: str) -> Frontend:
        """The frontend registered for kind."""
        try:
            return self._by_kind[kind]
        except KeyError:
            raise LookupError(f"frontends: no frontend registered for kind {kind!r}") from None

    def kinds(self) -> list[str]:
        """Registered kinds, for diagnostics."""
        return list(self._by_kind)