#!/usr/bin/env python3
"""
JSXCURO FORMATTER - The Display
-------------------------------
Rich rendering for the CLI: artifact tables, diagnostics, the component
hierarchy as a tree, the bundle with syntax highlighting, and diffs between
raw and repaired text.

Author: JsxCuro Team
Date: 2026-01-16
"""

import difflib
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from jsxcuro.core.models import Artifact, Diagnostic, Hierarchy, HierarchyNode

console = Console()

STATUS_STYLE = {"pending": "dim", "streaming": "yellow", "complete": "green", "error": "red"}


class JsxFormatter:
    """The visual heart of the CLI."""

    def __init__(self, out: Optional[Console] = None):
        self.console = out or console

    def display_diff(self, original_text: str, healed_text: str, file_name: str):
        """Renders a colorized unified diff between raw and repaired text."""
        # 1. Line-based unified diff
        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            healed_text.splitlines(),
            fromfile=f"Original: {file_name}",
            tofile="Repaired",
            lineterm="",
        ))

        # 2. Nothing to show
        if not diff_list:
            self.console.print(f"[dim]ℹ No repair needed for {file_name}.[/dim]")
            return

        # 3. Colorized panel
        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"Proposed Repair: {file_name}", border_style="green"))

    def show_code(self, text: str, title: str):
        syntax = Syntax(text.rstrip(), "jsx", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=title, border_style="cyan"))

    def print_artifact_table(self, artifacts: List[Artifact]):
        # 1. Table Layout
        table = Table(title="JsxCuro Artifact Report", show_header=True, header_style="bold magenta")
        table.add_column("Artifact", style="cyan")
        table.add_column("Position")
        table.add_column("Status")
        table.add_column("Size", justify="right")
        table.add_column("Complete", justify="center")

        # 2. One row per artifact, in registration order
        for artifact in artifacts:
            status = artifact.status.value
            style = STATUS_STYLE.get(status, "white")
            name = f"{artifact.name} [dim](root)[/dim]" if artifact.is_root_layout else artifact.name
            icon = "✅" if artifact.complete else ("⚠️" if artifact.repair_incomplete else "❌")
            table.add_row(
                name, artifact.position, f"[{style}]{status}[/{style}]",
                str(len(artifact.repaired_text or artifact.raw_text)), icon
            )
        self.console.print(table)

    def show_diagnostics(self, diagnostics: List[Diagnostic]):
        if not diagnostics:
            self.console.print("[green]No diagnostics.[/green]")
            return
        for diag in diagnostics:
            color = "red" if diag.severity == "error" else "yellow"
            owner = diag.artifact_name or "stream"
            self.console.print(f"[bold {color}]{diag.kind.value}[/bold {color}] [cyan]{owner}[/cyan]: {diag.message}")

    def print_hierarchy(self, hierarchy: Hierarchy):
        tree = Tree("[bold]Component hierarchy[/bold]")

        def attach(branch: Tree, node: HierarchyNode):
            child_branch = branch.add(f"[cyan]{node.name}[/cyan] [dim]{node.artifact_id}[/dim]")
            for child in node.children:
                attach(child_branch, child)

        for root in hierarchy.roots:
            attach(tree, root)
        self.console.print(tree)

    def print_summary(self, summary: Dict[str, Any]):
        by_status = summary.get("by_status", {})
        self.console.print(Panel(
            f"[bold white]Session {summary.get('session_id')}[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Artifacts:         {summary.get('total_artifacts', 0)}\n"
            f"Complete:          [green]{summary.get('complete', 0)}[/green]\n"
            f"Errored:           [red]{by_status.get('error', 0)}[/red]\n"
            f"Repair incomplete: [yellow]{summary.get('repair_incomplete', 0)}[/yellow]\n"
            f"Diagnostics:       {summary.get('diagnostics', 0)}",
            border_style="dim",
        ))
