from dataclasses import replace

import pytest

from kbcurator.ir import Document, ProseBlock, Section
from kbcurator.passes import PassError, Pipeline


class FakePass:
    def __init__(self, name, error=None):
        self.name = name
        self.error = error

    def apply(self, doc):
        if self.error is not None:
            raise self.error
        sections = [
            Section(
                heading=s.heading,
                blocks=[
                    replace(b, text=f"{self.name}:{b.text}") if isinstance(b, ProseBlock) else b
                    for b in s.blocks
                ],
            )
            for s in doc.sections
        ]
        return replace(doc, sections=sections)


def prose_doc(text):
    return Document(sections=[Section(heading="S", blocks=[ProseBlock(text=text)])])


def test_empty_pipeline_is_noop():
    out = Pipeline().apply(prose_doc("hello"))
    assert out.sections[0].blocks[0].text == "hello"


def test_runs_passes_in_order():
    p = Pipeline(FakePass("first"), FakePass("second"), FakePass("third"))
    out = p.apply(prose_doc("x"))
    assert out.sections[0].blocks[0].text == "third:second:first:x"


def test_stops_on_first_error():
    want = RuntimeError("simulated")
    after = FakePass("should-not-run")
    p = Pipeline(FakePass("ok1"), FakePass("boom", error=want), after)
    with pytest.raises(PassError) as info:
        p.apply(prose_doc("x"))
    assert info.value.__cause__ is want
    assert info.value.cause is want
    assert info.value.pass_name == "boom"
    assert "boom" in str(info.value)


def test_names_in_order():
    p = Pipeline(FakePass("a"), FakePass("b"), FakePass("c"))
    assert p.names() == ["a", "b", "c"]