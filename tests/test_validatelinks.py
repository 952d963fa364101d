import pytest

from kbcurator.ir import (
    Callout,
    Document,
    EscapeHatch,
    IndexBlock,
    IndexEntry,
    MachineBlock,
    ProseBlock,
    Section,
    TableBlock,
)
from kbcurator.passes import PassError, Pipeline
from kbcurator.validatelinks import BrokenLinksError, ValidateLinks


def prose_doc(text):
    return Document(sections=[Section(blocks=[ProseBlock(text=text)])])


def test_no_links_ok():
    doc = prose_doc("plain prose")
    out = ValidateLinks(None).apply(doc)
    assert len(out.sections) == 1
    assert out.sections[0].blocks[0].text == "plain prose"


def test_known_internal_link_ok():
    doc = prose_doc("See [[Existing_Page]].")
    assert ValidateLinks({"Existing_Page": True}).apply(doc) is doc


def test_unknown_internal_link_errors():
    with pytest.raises(BrokenLinksError) as exc:
        ValidateLinks({"Existing_Page": True}).apply(prose_doc("See [[Ghost_Page]]."))
    assert "Ghost_Page" in str(exc.value)
    assert exc.value.broken == ["Ghost_Page"]


def test_index_block_links_validated():
    doc = Document(
        sections=[
            Section(
                heading="Core",
                blocks=[
                    IndexBlock(
                        entries=[
                            IndexEntry(page="OptiscanGroup/Networking", label="Networking"),
                            IndexEntry(page="OptiscanGroup/Ghost", label="Ghost"),
                        ]
                    )
                ],
            )
        ]
    )
    with pytest.raises(BrokenLinksError) as exc:
        ValidateLinks({"OptiscanGroup/Networking": True}).apply(doc)
    assert "OptiscanGroup/Ghost" in str(exc.value)
    assert "OptiscanGroup/Networking" not in str(exc.value)


def test_index_block_all_known_ok():
    doc = Document(sections=[Section(blocks=[IndexBlock(entries=[IndexEntry(page="A"), IndexEntry(page="B")])])])
    assert ValidateLinks({"A": True, "B": True}).apply(doc) is doc


def test_piped_link_checks_target():
    known = {"Real_Target": True}
    ok = prose_doc("See [[Real_Target|the docs]].")
    assert ValidateLinks(known).apply(ok) is ok
    with pytest.raises(BrokenLinksError) as exc:
        ValidateLinks(known).apply(prose_doc("See [[Ghost|the docs]]."))
    assert exc.value.broken == ["Ghost"]


def test_multiple_broken_links_all_named_sorted():
    with pytest.raises(BrokenLinksError) as exc:
        ValidateLinks({}).apply(prose_doc("See [[C]] and [[A]] and [[B]]."))
    assert exc.value.broken == ["A", "B", "C"]
    assert str(exc.value) == "validate-links: broken internal links: A, B, C"


def test_nil_known_map_all_links_broken():
    with pytest.raises(BrokenLinksError):
        ValidateLinks(None).apply(prose_doc("See [[Page]]."))


def test_false_entries_in_known_map_count_as_unknown():
    with pytest.raises(BrokenLinksError):
        ValidateLinks({"Page": False}).apply(prose_doc("See [[Page]]."))


def test_known_as_set_is_accepted():
    doc = prose_doc("See [[Page]].")
    assert ValidateLinks({"Page"}).apply(doc) is doc


def test_external_url_not_checked():
    doc = prose_doc("See https://example.com and [[Known]].")
    assert ValidateLinks({"Known": True}).apply(doc) is doc


def test_callout_machine_and_escape_hatch_text_are_scanned():
    doc = Document(
        sections=[
            Section(
                blocks=[
                    Callout(body="[[X]]"),
                    MachineBlock(body="[[Y]]"),
                    EscapeHatch(raw="[[Z]]"),
                    TableBlock(rows=[["[[Ignored]]"]]),
                ]
            )
        ]
    )
    with pytest.raises(BrokenLinksError) as exc:
        ValidateLinks({}).apply(doc)
    assert exc.value.broken == ["X", "Y", "Z"]


def test_pipeline_wraps_with_pass_name():
    with pytest.raises(PassError) as exc:
        Pipeline(ValidateLinks({})).apply(prose_doc("[[Ghost]]"))
    assert exc.value.pass_name == "validate-links"
    assert isinstance(exc.value.cause, BrokenLinksError)