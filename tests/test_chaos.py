#!/usr/bin/env python3
"""
JSXCURO CHAOS & EDGE CASE SUITE
-------------------------------
Garbage in, no exceptions out:
1. Binary-ish and random punctuation soup
2. Unbalanced closers of every kind
3. A fixer that blows up mid-chain
4. Deeply nested markup
5. Lone surrogates from decoded JSON

Author: JsxCuro Team
Date: 2026-01-16
"""

import json
import random

import pytest

from jsxcuro.core.models import DiagnosticKind
from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.pipeline import HealingPipeline

from conftest import NAV, artifact_events

GARBAGE = [
    "",
    "\n\n\n",
    "}}}))]]",
    "</div></span></>",
    "<<<<>>>>",
    "<div <span <p",
    "{{{{",
    "'\"`",
    "return (((",
    "=> && || ?? ? :",
    "/* never closed",
    "<div>{'}'}</div>",
    "\x00\x01\x02<div>\x7f",
    "function () { <",
    "const A = () => <",
    "<img src=\"a\" / >",
    "<Card.",
    "<a-b:c",
]


@pytest.mark.parametrize("junk", GARBAGE)
def test_garbage_never_raises(junk):
    pipeline = HealingPipeline()
    context = pipeline.run(junk)

    assert isinstance(context.repaired_text, str)
    assert context.repair_incomplete is False
    CompletenessClassifier(pipeline.lexer).classify_final(context.repaired_text)


def test_random_soup_never_raises():
    """FUZZ TEST: seeded so failures are reproducible."""
    rng = random.Random(1337)
    alphabet = "<>/{}()[]\"'`=:?&|;,.\n abcXYZ"
    pipeline = HealingPipeline()
    for _ in range(200):
        soup = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 60)))
        context = pipeline.run(soup)
        assert isinstance(context.repaired_text, str)


def test_deep_nesting_is_closed():
    depth = 300
    text = "".join("<div>" for _ in range(depth))
    repaired = HealingPipeline().repair(text)

    assert repaired == text + "</div>" * depth


def test_failing_fixer_keeps_last_good_text():
    """
    RECOVERY TEST: a fixer that raises stops the chain; the text produced by
    the fixers before it is kept and the run is flagged.
    """
    pipeline = HealingPipeline()

    def explode(text):
        raise RuntimeError("boom")

    names = [name for name, _ in pipeline.structurer.fixers]
    idx = names.index("brace_balance")
    pipeline.structurer.fixers[idx] = ("brace_balance", explode)

    context = pipeline.run('<div className="p-4', "Box")

    assert context.repair_incomplete is True
    assert context.failed_fixer == "brace_balance"
    assert context.repaired_text == '<div className="p-4">'
    assert [d.kind for d in context.diagnostics] == [DiagnosticKind.REPAIR_FAILURE]
    assert "boom" in context.diagnostics[0].message


def test_failing_fixer_inside_a_session(session):
    def explode(text):
        raise ValueError("bad state")

    session.pipeline.structurer.fixers[-1] = ("function_brace", explode)
    session.feed(artifact_events("comp_box", "Box", "<div>Hi"))

    artifact = session.registry.get("comp_box")
    assert artifact.repair_incomplete is True
    assert artifact.repaired_text == "<div>Hi</div>"
    assert DiagnosticKind.REPAIR_FAILURE in [d.kind for d in artifact.diagnostics]
    # The stream keeps going
    assert session.process({"type": "start", "artifactId": "comp_next", "name": "Next"}) == []


def test_lone_surrogate_does_not_poison_the_session(session):
    """Decoded JSON can carry a lone surrogate; the session must still answer."""
    hero = json.loads('"function Hero() {\\n  return (<p>\\ud800</p>);\\n}\\n"')
    session.feed(artifact_events("comp_nav", "Nav", NAV))
    session.feed(artifact_events("comp_hero", "Hero", hero))

    assert "Hero" in [r.name for r in session.get_hierarchy().roots]
    assert "Hero" in session.get_bundle().order
    record = session.finalize_artifact("comp_hero")
    assert len(record.content_hash) == 64
