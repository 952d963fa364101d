# kbcurator

kbcurator turns the contents of a knowledge base into wiki pages. Each
page is built as an intermediate representation (`kbcurator.ir.Document`):
a tree of sections and blocks, and every block records where it came from.
Frontends produce documents, passes transform them, and a backend renders
the result.

## Installation

```
pip install .
```

Install with `pip install .[test]` to get the test dependencies as well.

## Building blocks

- **IR** (`kbcurator.ir`): the `Document`, `Section` and block types
  (`ProseBlock`, `MachineBlock`, `KBRefBlock`, `TableBlock`, `IndexBlock`,
  `CategoryBlock`, `DiagramBlock`, `Callout`, `EscapeHatch`, `MarkerBlock`).
  Each block belongs to a `Zone`. Machine-zone blocks are regenerated on
  every run. Editorial-zone blocks are kept when their inputs have not
  changed.
- **Markdown to IR** (`kbcurator.mdir.parse`): splits markdown written by an
  LLM into sections. Every ATX heading from `##` to `######` starts a new
  section. Fenced code becomes a `DiagramBlock`.
- **Frontends**:
  - `ProjectionFrontend`: a deterministic dump of one or more kb areas.
  - `HubFrontend`: deterministic index and navigation pages.
  - `EditorialFrontend`: a whole page written by an LLM.
  - `ArchitectureFrontend`: an LLM writes each section, grounded in that
    section's declared sources.

  The `Registry` in `kbcurator.frontends` chooses a frontend by the spec's
  kind.
- **Cluster** (`kbcurator.cluster.Cluster`): renders a parent page and its
  children as one topic. It fills the parent's child index and adds the
  "Part of", "Related pages" and category cross-links.
- **Passes**: these are chained with `kbcurator.passes.Pipeline`.
  - `ApplyZoneMarkers`
  - `ValidateLinks`
  - `ResolveKBRefs`
  - `ApplyStyleRules`, configured with `TerminologyRule` and `HeadingCaseRule`
  - `RenderDiagrams`, which uses `MermaidRenderer` and can take an
    `LLMRepairer`

## Example

```python
from kbcurator.model import Area, Entry, IncludeFilter, Snapshot, Spec
from kbcurator.projection import ProjectionFrontend
from kbcurator.passes import Pipeline
from kbcurator.zonemarkers import ApplyZoneMarkers
from kbcurator.validatelinks import ValidateLinks

snapshot = Snapshot(
    commit="abc123",
    areas=[Area(id="vault", name="Vault", summary="Secrets manager",
                entries=[Entry(id="f1", type="fact", text="Runs on Raft")])],
)
spec = Spec(page="Vault", kind="projection",
            include=IncludeFilter(areas=["vault"]))

doc = ProjectionFrontend().build(spec, snapshot)
doc = Pipeline(ValidateLinks({"Vault": True}), ApplyZoneMarkers()).apply(doc)
```

To render mermaid diagrams, the `mmdc` command-line tool must be on `PATH`.
Set `MMDC_PUPPETEER_CONFIG` when headless Chrome needs extra flags, such as
inside a container. `MermaidRenderer.from_env` reads this variable.

## Running the tests

```
pytest
```