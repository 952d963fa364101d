from kbcurator.ir import Callout, Document, KBRefBlock, ProseBlock, Section
from kbcurator.model import Area, Entry, Snapshot
from kbcurator.passes import Pipeline
from kbcurator.resolvekbrefs import ResolveKBRefs


def test_pipeline_reports_pass_name():
    assert Pipeline(ResolveKBRefs(Snapshot())).names() == ["resolve-kb-refs"]


def test_empty_document_no_op():
    assert ResolveKBRefs(Snapshot()).apply(Document()).sections == []


def test_no_kbref_blocks_preserves_content():
    blocks = [ProseBlock(text="prose"), Callout(severity="note", body="callout")]
    doc = Document(sections=[Section(heading="S", blocks=list(blocks))])
    out = ResolveKBRefs(Snapshot()).apply(doc)
    assert out.sections[0].heading == "S"
    assert out.sections[0].blocks == blocks


def test_kbref_block_replaced_with_entry_text():
    snap = Snapshot(
        areas=[Area(id="vault", entries=[Entry(id="f1", type="fact", text="Vault HA on Raft", updated="2024-01-01")])]
    )
    doc = Document(sections=[Section(heading="Refs", blocks=[KBRefBlock(area="vault", id="f1", mode="inline")])])
    blocks = ResolveKBRefs(snap).apply(doc).sections[0].blocks
    assert len(blocks) == 1
    block = blocks[0]
    assert isinstance(block, ProseBlock)
    assert block.text == "Vault HA on Raft"
    assert block.prov.spec_section == "resolved-kbref"
    assert block.prov.sources == ["area/vault/fact/f1"]
    assert block.prov.input_hash == "2024-01-01"


def test_decision_and_link_formatting():
    snap = Snapshot(
        areas=[
            Area(
                id="v",
                entries=[
                    Entry(id="d", type="decision", text="DEC", why="because", rejected="alt"),
                    Entry(id="l", type="link", text="Docs", url="https://example.com/docs"),
                ],
            )
        ]
    )
    doc = Document(sections=[Section(blocks=[KBRefBlock(area="v", id="d"), KBRefBlock(area="v", id="l")])])
    blocks = ResolveKBRefs(snap).apply(doc).sections[0].blocks
    assert blocks[0].text == "DEC\nWhy: because\nRejected: alt"
    assert blocks[1].text == "Docs\n→ https://example.com/docs"


def test_unresolved_kbref_leaves_placeholder():
    doc = Document(sections=[Section(blocks=[KBRefBlock(area="vault", id="does-not-exist")])])
    blocks = ResolveKBRefs(Snapshot(areas=[Area(id="vault")])).apply(doc).sections[0].blocks
    assert len(blocks) == 1
    block = blocks[0]
    assert isinstance(block, ProseBlock)
    assert block.text == "[UNRESOLVED kb-ref: area=vault id=does-not-exist — entry id not in area]"
    assert block.prov.spec_section == "unresolved-kbref"
    assert block.prov.sources == ["area/vault/?/does-not-exist"]


def test_missing_area_also_produces_placeholder():
    doc = Document(sections=[Section(blocks=[KBRefBlock(area="nonexistent", id="x")])])
    block = ResolveKBRefs(Snapshot()).apply(doc).sections[0].blocks[0]
    assert "UNRESOLVED" in block.text
    assert "area not in snapshot" in block.text


def test_preserves_non_ref_blocks_around():
    snap = Snapshot(areas=[Area(id="v", entries=[Entry(id="f", type="fact", text="FACT")])])
    doc = Document(
        sections=[
            Section(
                blocks=[
                    ProseBlock(text="before"),
                    KBRefBlock(area="v", id="f"),
                    ProseBlock(text="after"),
                ]
            )
        ]
    )
    blocks = ResolveKBRefs(snap).apply(doc).sections[0].blocks
    assert [b.text for b in blocks] == ["before", "FACT", "after"]