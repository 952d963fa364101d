"""IR-to-IR transformation passes and the pipeline that runs them in order."""

from __future__ import annotations

from typing import Protocol

from kbcurator.ir import Document


class Pass(Protocol):
    """One IR-to-IR transformation."""

    name: str

    def apply(self, doc: Document) -> Document:
        """Return the transformed document."""
        ...


class PassError(Exception):
    """A pass failed; carries the failing pass's name."""

    def __init__(self, pass_name: str, cause: BaseException) -> None:
        super().__init__(f"pass {pass_name!r}: {cause}")
        self.pass_name = pass_name
        self.cause = cause


class Pipeline:
    """Runs passes in declared order, threading the document through."""

    def __init__(self, *passes: Pass) -> None:
        self._passes = tuple(passes)

    def apply(self, doc: Document) -> Document:
        """Apply every pass; stop at the first failure."""
        for step in self._passes:
            try:
                doc = step.apply(doc)
            except Exception as exc:
                raise PassError(step.name, exc) from exc
        return doc

    def names(self) -> list[str]:
        """Pass names in execution order."""
        return [step.name for step in self._passes]