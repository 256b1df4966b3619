#!/usr/bin/env python3
"""
JSXCURO END-TO-END SUITE
------------------------
Whole sessions: a marked transcript replayed as events, at several chunk
sizes, through to bundle, hierarchy, finalized records and teardown.

Author: JsxCuro Team
Date: 2026-01-16
"""

import hashlib

import pytest

from jsxcuro.core.engine import GenerationSession
from jsxcuro.core.errors import ArtifactStateError, StreamAbortedError, UnknownArtifactError
from jsxcuro.core.models import ArtifactStatus
from jsxcuro.streaming.transcript import artifact_id_for, segment_transcript

from conftest import HERO, NAV, TRANSCRIPT, artifact_events


def test_transcript_segmentation():
    events = segment_transcript(TRANSCRIPT)

    assert [e["type"] for e in events] == ["start", "delta", "stop"] * 3
    assert events[0] == {"type": "start", "artifactId": "comp_nav", "name": "Nav", "position": "header"}
    assert events[1]["text"] == NAV
    assert events[6]["position"] == "main"


def test_transcript_chunking():
    events = segment_transcript("/// START Hero\n" + HERO + "/// END Hero\n", chunk_size=10)
    deltas = [e["text"] for e in events if e["type"] == "delta"]

    assert "".join(deltas) == HERO
    assert all(len(d) <= 10 for d in deltas)


def test_transcript_without_end_leaves_artifact_streaming():
    events = segment_transcript("/// START Hero\nfunction Hero() {")
    assert [e["type"] for e in events] == ["start", "delta"]
    assert artifact_id_for("Hero") == "comp_hero"


@pytest.mark.parametrize("chunk_size", [1, 7, 64, None])
def test_chunk_size_does_not_change_the_result(chunk_size):
    """
    STABILITY TEST: however the generator splits its output, the repaired
    artifacts and the bundle come out the same.
    """
    reference = GenerationSession(session_id="ref")
    reference.feed(segment_transcript(TRANSCRIPT))

    session = GenerationSession(session_id="chunked")
    session.feed(segment_transcript(TRANSCRIPT, chunk_size=chunk_size))

    for artifact_id, expected in reference.registry.artifacts.items():
        actual = session.registry.get(artifact_id)
        assert actual.raw_text == expected.raw_text
        assert actual.repaired_text == expected.repaired_text
        assert actual.complete == expected.complete
    assert session.get_bundle().bundle_text == reference.get_bundle().bundle_text


def test_truncated_stream_is_repaired_at_stop(session):
    cut = HERO.index("<img")
    session.feed(artifact_events("comp_hero", "Hero", HERO[:cut], chunk_size=5))
    hero = session.registry.get("comp_hero")

    assert hero.status == ArtifactStatus.COMPLETE
    assert hero.raw_text == HERO[:cut]
    assert hero.repaired_text.endswith("</section>);\n}")
    assert hero.complete is True


def test_finalize_artifact_record(session):
    session.feed(artifact_events("comp_nav", "Nav", NAV))
    record = session.finalize_artifact("comp_nav")

    assert record.name == "Nav"
    assert record.repaired_text == NAV
    assert record.content_hash == hashlib.sha256(NAV.encode("utf-8")).hexdigest()
    assert record.profile["component_type"] == "navigation"
    assert record.profile["accessibility"]["has_aria_labels"] is True
    assert record.profile["accessibility"]["has_semantic_elements"] is True


def test_finalize_artifact_profile_children(session):
    session.feed(segment_transcript(TRANSCRIPT))
    record = session.finalize_artifact("comp_header")
    assert record.profile["child_components"] == ["Nav"]


def test_finalize_artifact_rejects_unknown_and_open(session):
    with pytest.raises(UnknownArtifactError):
        session.finalize_artifact("ghost")
    with pytest.raises(KeyError):
        session.finalize_artifact("ghost")

    session.feed(artifact_events("comp_hero", "Hero", "function Hero() {", stop=False))
    with pytest.raises(ArtifactStateError):
        session.finalize_artifact("comp_hero")


def test_summary_and_close(session):
    session.feed(segment_transcript(TRANSCRIPT))
    summary = session.close()

    assert summary["session_id"] == "test"
    assert summary["total_artifacts"] == 3
    assert summary["complete"] == 3
    assert summary["by_status"]["complete"] == 3
    assert summary["aborted"] is False
    assert session.close()["total_artifacts"] == 3


def test_closed_session_rejects_events(session):
    session.close()
    with pytest.raises(ArtifactStateError):
        session.process({"type": "start", "artifactId": "a", "name": "A"})


def test_close_after_abort_raises(session):
    session.feed(artifact_events("comp_nav", "Nav", NAV))
    session.feed(artifact_events("comp_hero", "Hero", "function Hero() {", stop=False))
    session.abort()

    with pytest.raises(StreamAbortedError) as exc_info:
        session.close()
    assert exc_info.value.artifact_names == ["Hero"]

    # Completed work is still available after the abort
    assert session.get_bundle().order == ["Nav"]
    assert session.generate_summary()["aborted"] is True


def test_sessions_are_isolated():
    first = GenerationSession()
    second = GenerationSession()
    first.feed(artifact_events("comp_nav", "Nav", NAV))

    assert len(first.registry) == 1
    assert len(second.registry) == 0
    assert first.session_id != second.session_id
