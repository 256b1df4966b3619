#!/usr/bin/env python3
"""
JSXCURO CLI - Replay & Heal
---------------------------
Command-line front end.

    jsxcuro replay events.jsonl [--bundle-out app.jsx] [--report report.yaml]
    jsxcuro replay transcript.md --chunk-size 40
    jsxcuro heal Hero.jsx [--diff] [--write]

Author: JsxCuro Team
Date: 2026-01-16
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from jsxcuro.assembly.exporter import ReportExporter, write_atomic
from jsxcuro.cli.formatter import JsxFormatter, console
from jsxcuro.core.config import load_config
from jsxcuro.core.engine import GenerationSession
from jsxcuro.core.errors import CircularDependencyError, ConfigError, StreamAbortedError
from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.pipeline import HealingPipeline
from jsxcuro.streaming.transcript import segment_transcript

VERSION = "0.1.0"
TRANSCRIPT_SUFFIXES = (".txt", ".md")

logger = logging.getLogger("jsxcuro.cli")


class InputError(Exception):
    """Unreadable or unusable CLI input file."""


class JsxCuroCLI:
    """Translates user commands into session and pipeline actions."""

    def __init__(self, formatter: Optional[JsxFormatter] = None):
        self.formatter = formatter or JsxFormatter()
        self.console = self.formatter.console
        self.parser = argparse.ArgumentParser(
            prog="jsxcuro",
            description="JsxCuro - Streaming JSX assembly & repair engine",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=f"jsxcuro v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
        self.parser.add_argument("--config", help="YAML config file (default: $JSXCURO_CONFIG)")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        replay = subparsers.add_parser("replay", help="Replay an event log or marked transcript")
        replay.add_argument("path", help=".jsonl/.json/.yaml event log, or .txt/.md transcript")
        replay.add_argument("--chunk-size", type=int, default=None,
                            help="Split transcript deltas into chunks of this many characters")
        replay.add_argument("--scope", default=None, help="Only assemble one section (e.g. main)")
        replay.add_argument("--bundle-out", help="Write the assembled bundle to this file")
        replay.add_argument("--report", help="Write a YAML session report to this file")
        replay.add_argument("--no-hierarchy", action="store_true", help="Skip the hierarchy build")

        heal = subparsers.add_parser("heal", help="Repair one component source file")
        heal.add_argument("path", help="Component source file")
        heal.add_argument("--diff", action="store_true", help="Show a diff instead of the repaired text")
        heal.add_argument("--write", action="store_true", help="Overwrite the file with the repaired text")

    def print_header(self, subtitle: str):
        self.console.print(Panel.fit(
            f"[bold cyan]JsxCuro v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan",
        ))

    # --- INPUT ---

    def load_events(self, path: Path, chunk_size: Optional[int] = None) -> List[Any]:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise InputError(f"Cannot read {path}: {e}")

        suffix = path.suffix.lower()
        if suffix in TRANSCRIPT_SUFFIXES:
            return segment_transcript(text, chunk_size=chunk_size)

        if suffix == ".jsonl":
            events = []
            for lineno, line in enumerate(text.splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise InputError(f"{path}:{lineno}: invalid JSON ({e.msg})")
            return events

        try:
            data = YAML(typ="safe").load(text)
        except YAMLError as e:
            raise InputError(f"{path} is not valid JSON/YAML: {e}")
        if isinstance(data, dict):
            data = data.get("events")
        if not isinstance(data, list):
            raise InputError(f"{path} must contain a list of events (or an 'events' key)")
        return data

    # --- COMMANDS ---

    def replay(self, args: argparse.Namespace) -> int:
        events = self.load_events(Path(args.path), args.chunk_size)
        session = GenerationSession(load_config(args.config))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Replaying events...", total=len(events))
            for event in events:
                session.process(event)
                progress.update(task_id, advance=1)

        artifacts = list(session.registry.artifacts.values())
        self.formatter.print_artifact_table(artifacts)
        self.formatter.show_diagnostics(session.diagnostics)

        exit_code = 0
        hierarchy = None
        hierarchy_error = None
        if not args.no_hierarchy:
            try:
                hierarchy = session.get_hierarchy(args.scope)
                self.formatter.print_hierarchy(hierarchy)
            except CircularDependencyError as e:
                hierarchy_error = str(e)
                self.console.print(f"[bold red]Hierarchy rejected:[/bold red] {e}")
                exit_code = 2

        bundle = session.get_bundle(args.scope)
        if args.bundle_out:
            write_atomic(Path(args.bundle_out), bundle.bundle_text)
            self.console.print(f"[green]Bundle written to {args.bundle_out}[/green]")
        else:
            self.formatter.show_code(bundle.bundle_text, "Bundle")

        if args.report:
            report = self.build_report(session, bundle, hierarchy, hierarchy_error)
            write_atomic(Path(args.report), ReportExporter().export(report))
            self.console.print(f"[green]Report written to {args.report}[/green]")

        try:
            summary = session.close()
        except StreamAbortedError as e:
            self.console.print(f"[bold red]{e}[/bold red]")
            self.formatter.print_summary(session.generate_summary())
            return 3
        self.formatter.print_summary(summary)
        return exit_code

    def heal(self, args: argparse.Namespace) -> int:
        path = Path(args.path)
        try:
            raw = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise InputError(f"Cannot read {path}: {e}")

        config = load_config(args.config)
        pipeline = HealingPipeline(config)
        context = pipeline.run(raw, path.stem)
        verdict = CompletenessClassifier(pipeline.lexer).classify_final(context.repaired_text)

        state = "[green]complete[/green]" if verdict.complete else "[yellow]incomplete[/yellow]"
        self.console.print(f"{path.name}: {state} after {context.passes} pass(es)")
        if context.applied_fixers:
            self.console.print(f"[cyan]Fixers applied:[/cyan] {', '.join(context.applied_fixers)}")
        for reason in verdict.reasons:
            self.console.print(f"  [yellow]•[/yellow] {reason}")
        if verdict.parse_error:
            self.console.print(f"  [yellow]•[/yellow] parser: {verdict.parse_error}")
        self.formatter.show_diagnostics(context.diagnostics)

        if args.diff:
            self.formatter.display_diff(raw, context.repaired_text, path.name)
        else:
            self.formatter.show_code(context.repaired_text, f"Repaired: {path.name}")

        if args.write and context.repaired_text != raw:
            write_atomic(path, context.repaired_text)
            self.console.print(f"[green]Wrote {path}[/green]")
        return 0 if verdict.complete else 1

    def build_report(self, session: GenerationSession, bundle, hierarchy, hierarchy_error) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "summary": session.generate_summary(),
            "artifacts": [
                {
                    "name": a.name,
                    "id": a.id,
                    "position": a.position,
                    "status": a.status.value,
                    "complete": a.complete,
                    "repair_incomplete": a.repair_incomplete,
                    "diagnostics": [d.to_dict() for d in a.diagnostics],
                }
                for a in session.registry.artifacts.values()
            ],
            "diagnostics": [d.to_dict() for d in session.diagnostics],
            "bundle": {"order": bundle.order, "completeness": bundle.per_artifact_completeness},
        }
        if hierarchy is not None:
            report["hierarchy"] = [root.to_dict() for root in hierarchy.roots]
        elif hierarchy_error:
            report["hierarchy"] = {"error": hierarchy_error}
        return report

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        if not args.command:
            self.print_header("Streaming JSX Repair")
            self.parser.print_help()
            return 0

        try:
            if args.command == "replay":
                self.print_header("Stream Replay")
                return self.replay(args)
            self.print_header("Component Repair")
            return self.heal(args)
        except (ConfigError, InputError, OSError) as e:
            self.console.print(f"[bold red]Error:[/bold red] {e}")
            return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(JsxCuroCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
