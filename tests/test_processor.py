import pytest

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.engine import GenerationSession
from jsxcuro.core.errors import MalformedEventError
from jsxcuro.core.models import ArtifactStatus, DiagnosticKind
from jsxcuro.streaming.events import parse_event

from conftest import HERO, artifact_events


def kinds(diagnostics):
    return [d.kind for d in diagnostics]


# --- Event normalisation ---

def test_parse_flat_event():
    event = parse_event({"type": "start", "artifactId": "comp_hero", "name": "Hero",
                         "position": "header", "isRootLayout": True})

    assert event.type == "start"
    assert event.artifact_id == "comp_hero"
    assert event.name == "Hero"
    assert event.position == "header"
    assert event.is_root_layout is True


def test_parse_sse_event():
    event = parse_event({
        "type": "content_block_delta",
        "metadata": {"componentId": "comp_hero", "componentName": "Hero"},
        "delta": {"text": "<div>"},
    })

    assert event.type == "delta"
    assert event.artifact_id == "comp_hero"
    assert event.name == "Hero"
    assert event.text == "<div>"


def test_parse_snake_case_event():
    event = parse_event({"type": "stop", "artifact_id": "comp_hero",
                         "sections": {"main": ["comp_hero"]}})
    assert event.artifact_id == "comp_hero"
    assert event.sections == {"main": ["comp_hero"]}


@pytest.mark.parametrize("raw", [
    "delta",
    None,
    {"type": "explode"},
    {"artifactId": "comp_hero"},
    {"type": "stop", "artifactId": "comp_hero", "sections": ["main"]},
    {"type": ["start"]},
    {"type": "stop", "artifactId": "comp_nav", "sections": {"main": 5}},
    {"type": "stop", "artifactId": "comp_nav", "sections": {"main": "comp_nav"}},
    {"type": "delta", "artifactId": {"x": 1}, "text": "hi"},
    {"type": "start", "artifactId": "comp_hero", "name": ["Hero"]},
])
def test_parse_rejects_unusable_events(raw):
    with pytest.raises(MalformedEventError):
        parse_event(raw)


# --- Lifecycle ---

def test_full_lifecycle(session):
    session.process({"type": "start", "artifactId": "comp_hero", "name": "Hero"})
    artifact = session.registry.get("comp_hero")
    assert artifact.status == ArtifactStatus.STREAMING
    assert artifact.position == "main"

    session.feed(artifact_events("comp_hero", "Hero", HERO, chunk_size=16)[1:])

    assert artifact.status == ArtifactStatus.COMPLETE
    assert artifact.raw_text == HERO
    assert artifact.repaired_text == HERO
    assert artifact.complete is True
    assert artifact.completion_order == 0
    assert artifact.completed_at is not None
    assert "Hero" in artifact.definitions
    assert session.registry.sections["main"] == ["comp_hero"]


def test_deltas_are_appended_untouched(session):
    session.feed(artifact_events("comp_box", "Box", '<header className="p-4', stop=False))
    artifact = session.registry.get("comp_box")

    assert artifact.raw_text == '<header className="p-4'
    assert artifact.repaired_text is None
    assert artifact.status == ArtifactStatus.STREAMING


def test_progress_is_lenient_while_streaming(session):
    session.feed(artifact_events("comp_hero", "Hero", "function Hero() {\n  return (\n    <div>", stop=False))
    session.feed(artifact_events("comp_box", "Box", '<header className="p-4', stop=False))

    progress = session.progress()
    assert progress["comp_hero"]["renderable"] is True
    assert progress["comp_box"]["renderable"] is False
    assert progress["comp_box"]["status"] == "streaming"
    assert progress["comp_box"]["size"] == len('<header className="p-4')


def test_malformed_events_become_diagnostics(session):
    diagnostics = []
    diagnostics += session.process("not an event")
    diagnostics += session.process({"type": "explode"})
    diagnostics += session.process({"type": "start", "artifactId": "comp_x"})
    diagnostics += session.process({"type": "delta", "artifactId": "comp_x"})
    diagnostics += session.process({"type": "stop"})

    assert kinds(diagnostics) == [DiagnosticKind.MALFORMED_EVENT] * 5
    assert len(session.registry) == 0
    assert session.diagnostics == diagnostics


def test_unusable_field_types_never_escape_process(session):
    session.feed(artifact_events("comp_nav", "Nav", "function Nav() {\n  return (<nav />);\n}\n"))
    diagnostics = []
    diagnostics += session.process({"type": ["start"]})
    diagnostics += session.process({"type": "stop", "artifactId": "comp_nav", "sections": {"main": 5}})
    diagnostics += session.process({"type": "delta", "artifactId": {"x": 1}, "text": "hi"})

    assert kinds(diagnostics) == [DiagnosticKind.MALFORMED_EVENT] * 3
    assert session.registry.get("comp_nav").status == ArtifactStatus.COMPLETE


def test_duplicate_start_is_rejected(session):
    session.process({"type": "start", "artifactId": "comp_hero", "name": "Hero"})
    diagnostics = session.process({"type": "start", "artifactId": "comp_hero", "name": "Hero"})

    assert kinds(diagnostics) == [DiagnosticKind.MALFORMED_EVENT]
    assert len(session.registry) == 1


def test_events_for_unknown_or_finished_artifacts(session):
    assert kinds(session.process({"type": "delta", "artifactId": "ghost", "text": "x"})) == \
        [DiagnosticKind.UNKNOWN_ARTIFACT]
    assert kinds(session.process({"type": "stop", "artifactId": "ghost"})) == \
        [DiagnosticKind.UNKNOWN_ARTIFACT]

    session.feed(artifact_events("comp_hero", "Hero", HERO))
    late = session.process({"type": "delta", "artifactId": "comp_hero", "text": "<p>late</p>"})

    assert kinds(late) == [DiagnosticKind.UNKNOWN_ARTIFACT]
    assert session.registry.get("comp_hero").raw_text == HERO


def test_oversized_chunk_is_dropped():
    session = GenerationSession(EngineConfig(max_artifact_size=10))
    session.process({"type": "start", "artifactId": "comp_box", "name": "Box"})
    assert session.process({"type": "delta", "artifactId": "comp_box", "text": "<div>"}) == []

    diagnostics = session.process({"type": "delta", "artifactId": "comp_box", "text": "<span>x</span>"})

    artifact = session.registry.get("comp_box")
    assert kinds(diagnostics) == [DiagnosticKind.SIZE_LIMIT]
    assert artifact.raw_text == "<div>"
    assert DiagnosticKind.SIZE_LIMIT in kinds(artifact.diagnostics)


def test_artifact_count_limit():
    session = GenerationSession(EngineConfig(max_artifacts=1))
    session.process({"type": "start", "artifactId": "a", "name": "A"})
    diagnostics = session.process({"type": "start", "artifactId": "b", "name": "B"})

    assert kinds(diagnostics) == [DiagnosticKind.SIZE_LIMIT]
    assert "b" not in session.registry


def test_root_layout_flag(session):
    session.process({"type": "start", "artifactId": "a", "name": "RootLayout"})
    session.process({"type": "start", "artifactId": "b", "name": "Shell", "isRootLayout": True})
    session.process({"type": "start", "artifactId": "c", "name": "Card"})

    assert session.registry.get("a").is_root_layout is True
    assert session.registry.get("b").is_root_layout is True
    assert session.registry.get("c").is_root_layout is False


def test_stop_updates_sections(session):
    session.process({"type": "start", "artifactId": "comp_nav", "name": "Nav", "position": "header"})
    session.process({"type": "start", "artifactId": "comp_hero", "name": "Hero"})
    session.process({"type": "delta", "artifactId": "comp_hero", "text": HERO})
    diagnostics = session.process({
        "type": "stop", "artifactId": "comp_hero",
        "sections": {"header": ["comp_hero", "comp_nav", "ghost", "comp_hero"]},
    })

    assert session.registry.sections["header"] == ["comp_hero", "comp_nav"]
    assert kinds(diagnostics)[0] == DiagnosticKind.UNKNOWN_SECTION_ID
    assert "ghost" in diagnostics[0].message


# --- Finalization diagnostics ---

def test_incomplete_critical_component_is_an_error(session):
    session.feed(artifact_events("comp_header", "Header", "const Header = 1;"))
    artifact = session.registry.get("comp_header")

    incomplete = [d for d in artifact.diagnostics if d.kind == DiagnosticKind.INCOMPLETE_ARTIFACT]
    assert artifact.complete is False
    assert incomplete and incomplete[0].severity == "error"


def test_incomplete_ordinary_component_is_a_warning(session):
    session.feed(artifact_events("comp_card", "Promo", "const Promo = 1;"))
    artifact = session.registry.get("comp_card")

    incomplete = [d for d in artifact.diagnostics if d.kind == DiagnosticKind.INCOMPLETE_ARTIFACT]
    assert incomplete and incomplete[0].severity == "warning"


def test_compound_component_missing_parts(session):
    text = (
        "function Card() {\n"
        "  return (\n"
        "    <Card.Header>\n"
        "      <Card.Title>Hi</Card.Title>\n"
        "    </Card.Header>\n"
        "  );\n"
        "}\n"
    )
    session.feed(artifact_events("comp_card", "Card", text))
    artifact = session.registry.get("comp_card")

    compound = [d for d in artifact.diagnostics if d.kind == DiagnosticKind.INCOMPLETE_COMPOUND]
    assert len(compound) == 1
    assert "Card.Footer" in compound[0].message
    assert "Card.Title" not in compound[0].message


def test_invalid_marker_inside_artifact(session):
    session.feed(artifact_events("comp_hero", "Hero", "/// END Other\n" + HERO))
    artifact = session.registry.get("comp_hero")

    assert DiagnosticKind.INVALID_MARKER in kinds(artifact.diagnostics)
    assert artifact.repaired_text == HERO


# --- Abort ---

def test_abort_moves_open_artifacts_to_error(session):
    session.feed(artifact_events("comp_done", "Done", HERO))
    session.feed(artifact_events("comp_hero", "Hero", "function Hero() {", stop=False))

    diagnostics = session.process({"type": "abort"})

    hero = session.registry.get("comp_hero")
    assert kinds(diagnostics) == [DiagnosticKind.STREAM_ABORTED]
    assert hero.status == ArtifactStatus.ERROR
    assert hero.size == 0
    assert session.registry.get("comp_done").status == ArtifactStatus.COMPLETE
    assert session.aborted is True

    after = session.process({"type": "delta", "artifactId": "comp_hero", "text": "x"})
    assert kinds(after) == [DiagnosticKind.STREAM_ABORTED]
