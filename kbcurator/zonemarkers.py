"""The zone-marker pass: brackets every block with begin/end markers.

Editorial blocks are wrapped as well as machine ones. The reconciler
uses the markers on the existing wiki page to find the block written
last time. It then keeps human edits to an editorial block whose
provenance is unchanged, and overwrites everything else.

Block ids come from position ("s{section}-b{block}"), except machine
blocks that carry their own id. The pass is idempotent: a block that
already sits between matching markers is not wrapped again.
"""

from __future__ import annotations

from dataclasses import replace

from kbcurator.ir import (
    Block,
    Document,
    MachineBlock,
    MarkerBlock,
    MarkerPosition,
    Section,
    Zone,
)


class ApplyZoneMarkers:
    """Wraps each block in begin/end marker blocks."""

    name = "apply-zone-markers"

    def apply(self, doc: Document) -> Document:
        """Return the document with every unmarked block bracketed."""
        sections = [
            Section(heading=sec.heading, blocks=_wrap_blocks(sec.blocks, idx))
            for idx, sec in enumerate(doc.sections)
        ]
        return replace(doc, sections=sections)


def _wrap_blocks(blocks: list[Block], section_idx: int) -> list[Block]:
    out: list[Block] = []
    block_idx = 0
    for i, block in enumerate(blocks):
        if isinstance(block, MarkerBlock):
            out.append(block)
            continue
        if _already_wrapped(blocks, i):
            out.append(block)
            block_idx += 1
            continue
        block_id = _block_id_for(block, section_idx, block_idx)
        block_idx += 1
        zone = _zone_label(block)
        out.extend(
            [
                MarkerBlock(
                    position=MarkerPosition.BEGIN,
                    block_id=block_id,
                    prov=replace(block.prov),
                    of_zone=zone,
                ),
                block,
                MarkerBlock(
                    position=MarkerPosition.END,
                    block_id=block_id,
                    prov=replace(block.prov),
                    of_zone=zone,
                ),
            ]
        )
    return out


def _zone_label(block: Block) -> str:
    return "editorial" if block.zone() is Zone.EDITORIAL else "machine"


def _block_id_for(block: Block, section_idx: int, block_idx: int) -> str:
    if isinstance(block, MachineBlock) and block.block_id:
        return block.block_id
    return f"s{section_idx}-b{block_idx}"


def _already_wrapped(blocks: list[Block], i: int) -> bool:
    if i == 0 or i == len(blocks) - 1:
        return False
    prev, nxt = blocks[i - 1], blocks[i + 1]
    if not isinstance(prev, MarkerBlock) or not isinstance(nxt, MarkerBlock):
        return False
    return (
        prev.position is MarkerPosition.BEGIN
        and nxt.position is MarkerPosition.END
        and prev.block_id == nxt.block_id
    )