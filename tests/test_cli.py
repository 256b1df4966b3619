import io
import json

import pytest
from rich.console import Console
from ruamel.yaml import YAML

from jsxcuro.assembly.exporter import ReportExporter, write_atomic
from jsxcuro.cli.formatter import JsxFormatter
from jsxcuro.cli.main import JsxCuroCLI

from conftest import HERO, TRANSCRIPT, artifact_events


@pytest.fixture
def cli():
    out = Console(file=io.StringIO(), width=400)
    return JsxCuroCLI(formatter=JsxFormatter(out))


def output(cli):
    return cli.console.file.getvalue()


def test_replay_transcript_writes_bundle_and_report(cli, tmp_path):
    transcript = tmp_path / "session.md"
    transcript.write_text(TRANSCRIPT)
    bundle = tmp_path / "app.jsx"
    report = tmp_path / "report.yaml"

    code = cli.run(["replay", str(transcript), "--chunk-size", "20",
                    "--bundle-out", str(bundle), "--report", str(report)])

    assert code == 0
    assert bundle.read_text().endswith("render(<RootLayout />);\n")
    data = YAML(typ="safe").load(report.read_text())
    assert data["summary"]["total_artifacts"] == 3
    assert data["bundle"]["order"] == ["Nav", "Header", "RootLayout"]
    assert data["hierarchy"][0]["name"] == "RootLayout"
    assert not list(tmp_path.glob("*.jsxcuro.tmp"))


def test_replay_jsonl_event_log(cli, tmp_path):
    log = tmp_path / "events.jsonl"
    events = artifact_events("comp_hero", "Hero", HERO, chunk_size=40)
    log.write_text("\n".join(json.dumps(e) for e in events) + "\n")

    assert cli.run(["replay", str(log)]) == 0
    assert "Hero" in output(cli)


def test_replay_yaml_event_log(cli, tmp_path):
    log = tmp_path / "events.yaml"
    YAML(typ="safe").dump({"events": artifact_events("comp_hero", "Hero", HERO)}, log)

    assert cli.run(["replay", str(log), "--no-hierarchy"]) == 0


def test_replay_cycle_exit_code(cli, tmp_path):
    log = tmp_path / "events.jsonl"
    events = (
        artifact_events("a", "A", "function A() {\n  return (<div><B /></div>);\n}\n")
        + artifact_events("b", "B", "function B() {\n  return (<div><A /></div>);\n}\n")
    )
    log.write_text("\n".join(json.dumps(e) for e in events))

    assert cli.run(["replay", str(log)]) == 2
    assert "Circular dependency detected" in output(cli)


def test_replay_aborted_stream_exit_code(cli, tmp_path):
    log = tmp_path / "events.jsonl"
    events = artifact_events("a", "A", "function A() {", stop=False) + [{"type": "abort"}]
    log.write_text("\n".join(json.dumps(e) for e in events))

    assert cli.run(["replay", str(log)]) == 3


def test_replay_rejects_broken_input(cli, tmp_path):
    log = tmp_path / "events.jsonl"
    log.write_text('{"type": "start"\n')

    assert cli.run(["replay", str(log)]) == 1
    assert "invalid JSON" in output(cli)


def test_missing_file_is_reported(cli, tmp_path):
    assert cli.run(["heal", str(tmp_path / "Nope.jsx")]) == 1
    assert "Cannot read" in output(cli)


def test_heal_and_write(cli, tmp_path):
    source = tmp_path / "Card.jsx"
    source.write_text("function Card() {\n  return (\n    <div>Hi")

    assert cli.run(["heal", str(source), "--diff", "--write"]) == 0
    assert source.read_text() == "function Card() {\n  return (\n    <div>Hi</div>);\n}"


def test_heal_reports_incomplete(cli, tmp_path):
    source = tmp_path / "Box.jsx"
    source.write_text('<div className="p-4')

    assert cli.run(["heal", str(source)]) == 1
    assert source.read_text() == '<div className="p-4'
    assert "incomplete" in output(cli)


def test_no_command_prints_help(cli, capsys):
    assert cli.run([]) == 0


# --- Report export ---

def test_report_key_order():
    text = ReportExporter().export({
        "diagnostics": [{"message": "m", "kind": "size_limit", "artifact": "A", "severity": "warning"}],
        "extra": 1,
        "summary": {"total_artifacts": 1},
    })

    assert text.index("summary:") < text.index("diagnostics:") < text.index("extra:")
    assert text.index("kind:") < text.index("severity:") < text.index("message:")


def test_write_atomic_replaces_file(tmp_path):
    target = tmp_path / "out.jsx"
    target.write_text("old")
    write_atomic(target, "new")

    assert target.read_text() == "new"
    assert not (tmp_path / "out.jsx.jsxcuro.tmp").exists()
