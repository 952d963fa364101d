import pytest

from kbcurator.ir import Callout, Document, MachineBlock, ProseBlock, Section
from kbcurator.passes import Pipeline
from kbcurator.stylerules import ApplyStyleRules, HeadingCaseRule, TerminologyRule


def doc(*sections):
    return Document(sections=list(sections))


def test_pipeline_reports_pass_name():
    assert Pipeline(ApplyStyleRules()).names() == ["apply-style-rules"]


def test_no_rules_identity():
    out = ApplyStyleRules().apply(doc(Section(heading="Intro", blocks=[ProseBlock(text="we use k8s")])))
    assert out.sections[0].heading == "Intro"
    assert out.sections[0].blocks[0].text == "we use k8s"


def test_terminology_prose_heading_callout():
    rule = TerminologyRule({"k8s": "Kubernetes", "github": "GitHub"})
    out = ApplyStyleRules(rule).apply(
        doc(
            Section(
                heading="k8s on github",
                blocks=[
                    ProseBlock(text="Deploy to k8s from github."),
                    Callout(severity="note", body="k8s only"),
                    MachineBlock(block_id="b1", body="k8s-raw-id"),
                ],
            )
        )
    )
    sec = out.sections[0]
    assert sec.heading == "Kubernetes on GitHub"
    assert sec.blocks[0].text == "Deploy to Kubernetes from GitHub."
    assert sec.blocks[1].body == "Kubernetes only"
    assert sec.blocks[2].body == "k8s-raw-id"


def test_terminology_whole_word_only():
    rule = TerminologyRule({"go": "Go"})
    out = ApplyStyleRules(rule).apply(doc(Section(blocks=[ProseBlock(text="go is good but goroutine and ego stay")])))
    assert out.sections[0].blocks[0].text == "Go is good but goroutine and ego stay"


def test_terminology_deterministic():
    rule = ApplyStyleRules(TerminologyRule({"a": "X", "b": "Y", "c": "Z", "d": "W"}))

    def run():
        return rule.apply(doc(Section(blocks=[ProseBlock(text="a b c d a b c d")]))).sections[0].blocks[0].text

    first, second = run(), run()
    assert first == second == "X Y Z W X Y Z W"


def test_terminology_replacement_is_literal():
    rule = TerminologyRule({"x": r"\1 $1"})
    out = rule.apply(doc(Section(blocks=[ProseBlock(text="a x b")])))
    assert out.sections[0].blocks[0].text == r"a \1 $1 b"


def test_terminology_skips_empty_key():
    rule = TerminologyRule({"": "NOPE", "a": "A"})
    out = rule.apply(doc(Section(heading="a b")))
    assert out.sections[0].heading == "A b"


def test_heading_case_sentence():
    out = ApplyStyleRules(HeadingCaseRule("sentence")).apply(doc(Section(heading="Core Infrastructure Setup")))
    assert out.sections[0].heading == "Core infrastructure setup"


def test_heading_case_title():
    out = ApplyStyleRules(HeadingCaseRule("title")).apply(doc(Section(heading="core infrastructure setup")))
    assert out.sections[0].heading == "Core Infrastructure Setup"


def test_heading_case_title_keeps_rest_of_word_and_spacing():
    out = HeadingCaseRule("title").apply(doc(Section(heading="use  gitHub")))
    assert out.sections[0].heading == "Use  GitHub"


def test_heading_case_leaves_body_prose():
    out = HeadingCaseRule("sentence").apply(doc(Section(heading="", blocks=[ProseBlock(text="Keep Me")])))
    assert out.sections[0].heading == ""
    assert out.sections[0].blocks[0].text == "Keep Me"


def test_heading_case_rejects_unknown_mode():
    with pytest.raises(ValueError, match="SHOUTING"):
        HeadingCaseRule("SHOUTING")


def test_rules_applied_in_order():
    term = TerminologyRule({"K8S": "Kubernetes"})
    hcase = HeadingCaseRule("sentence")
    out = ApplyStyleRules(term, hcase).apply(doc(Section(heading="K8S Cluster Notes")))
    assert out.sections[0].heading == "Kubernetes cluster notes"