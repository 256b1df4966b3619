#!/usr/bin/env python3
"""
JSXCURO ASSEMBLER - The Compositor
----------------------------------
Composes the completed artifacts of a scope into one renderable bundle:

  1. Order: producers before consumers (Kahn's algorithm over the reference
     graph, ties broken by registration order), the root layout last.
  2. Strip module wrapping from every artifact (imports, export prefixes,
     re-exports, stray render calls) down to bare declarations.
  3. Join with blank lines and finish with a single render(<Entry />); call.

A cyclic scope still assembles here, in registration order with a
diagnostic. Only the hierarchy build treats a cycle as fatal.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
import heapq
import logging
from typing import Dict, List, Optional, Tuple

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.models import Artifact, Bundle, Diagnostic, DiagnosticKind
from jsxcuro.graph.hierarchy import HierarchyBuilder
from jsxcuro.healing.extractor import FunctionExtractor, synthesize_declaration

logger = logging.getLogger("jsxcuro.assembler")

IMPORT_FROM = re.compile(
    r"^[ \t]*import\s+[\w$\s{},*]+?\s*from\s*(['\"])[^'\"\n]*\1[ \t]*;?[ \t]*(?:\n|$)", re.M
)
IMPORT_SIDE_EFFECT = re.compile(r"^[ \t]*import\s*(['\"])[^'\"\n]*\1[ \t]*;?[ \t]*(?:\n|$)", re.M)
ANONYMOUS_DEFAULT_FUNCTION = re.compile(r"^([ \t]*)export\s+default\s+(async\s+)?function\s*\(", re.M)
ANONYMOUS_DEFAULT_ARROW = re.compile(r"^([ \t]*)export\s+default\s+((?:async\s*)?\([^()]*\)\s*=>)", re.M)
EXPORT_PREFIX = re.compile(
    r"^([ \t]*)export\s+(?:default\s+)?(?=(?:async\s+)?function\b|class\b|const\b|let\b|var\b)", re.M
)
DEFAULT_EXPORT_LINE = re.compile(r"^[ \t]*export\s+default\s+[A-Za-z_$][\w$]*[ \t]*;?[ \t]*(?:\n|$)", re.M)
NAMED_EXPORT_LINE = re.compile(
    r"^[ \t]*export\s*\{[^}]*\}(?:\s*from\s*(['\"])[^'\"\n]*\1)?[ \t]*;?[ \t]*(?:\n|$)", re.M
)
RENDER_CALL_LINE = re.compile(r"^[ \t]*(?:ReactDOM\.|root\.)?render\s*\(.*\)[ \t]*;?[ \t]*(?:\n|$)", re.M)

FALLBACK_RENDER = "render(<div />);"


class Assembler:

    def __init__(self, builder: HierarchyBuilder, extractor: FunctionExtractor,
                 config: Optional[EngineConfig] = None):
        self.builder = builder
        self.extractor = extractor
        self.pipeline = extractor.pipeline
        self.config = config or EngineConfig()

    def order(self, artifacts: List[Artifact]) -> Tuple[List[Artifact], List[Diagnostic]]:
        """Producers first, root layouts last; duplicates by name are dropped."""
        graph, diagnostics, by_name = self.builder.build_graph(artifacts)
        roots = [a for a in by_name.values() if a.is_root_layout]
        others = {name: a for name, a in by_name.items() if not a.is_root_layout}

        # edges point consumer -> producer, so a node is ready once its producers are out
        waiting = {name: {p for p in graph.edges[name] if p in others} for name in others}
        dependents: Dict[str, List[str]] = {name: [] for name in others}
        for name, producers in waiting.items():
            for producer in producers:
                dependents[producer].append(name)

        ready = [(others[n].registration_index, n) for n, deps in waiting.items() if not deps]
        heapq.heapify(ready)
        ordered: List[Artifact] = []
        while ready:
            _, name = heapq.heappop(ready)
            ordered.append(others[name])
            for consumer in dependents[name]:
                waiting[consumer].discard(name)
                if not waiting[consumer]:
                    heapq.heappush(ready, (others[consumer].registration_index, consumer))

        placed = {a.name for a in ordered}
        stuck = sorted((a for n, a in others.items() if n not in placed), key=lambda a: a.registration_index)
        if stuck:
            names = ", ".join(a.name for a in stuck)
            diagnostics.append(Diagnostic(
                stuck[0].name, DiagnosticKind.CIRCULAR_DEPENDENCY,
                f"Cyclic references among {names}; kept in registration order"
            ))
            logger.warning(f"Assembling {names} in registration order due to a cycle")
            ordered.extend(stuck)

        ordered.extend(sorted(roots, key=lambda a: a.registration_index))
        return ordered, diagnostics

    def strip_module_syntax(self, text: str, name: str) -> str:
        """Reduces one artifact's module text to bare declarations."""
        text = IMPORT_FROM.sub("", text)
        text = IMPORT_SIDE_EFFECT.sub("", text)
        text = ANONYMOUS_DEFAULT_FUNCTION.sub(lambda m: f"{m.group(1)}{m.group(2) or ''}function {name}(", text)
        text = ANONYMOUS_DEFAULT_ARROW.sub(lambda m: f"{m.group(1)}const {name} = {m.group(2)}", text)
        text = EXPORT_PREFIX.sub(r"\1", text)
        text = DEFAULT_EXPORT_LINE.sub("", text)
        text = NAMED_EXPORT_LINE.sub("", text)
        text = RENDER_CALL_LINE.sub("", text)
        return text.strip()

    def declaration_text(self, artifact: Artifact) -> Tuple[str, str]:
        """Bare declaration text of an artifact and the name to mount it by."""
        source = artifact.repaired_text
        if source is None:
            source = self.pipeline.repair(artifact.raw_text)
        text = self.strip_module_syntax(source, artifact.name)

        names = [found[0] for found in self.extractor.locate(text)]
        if not names and "<" in text:
            logger.debug(f"Wrapping bare markup of {artifact.name} in a declaration")
            text = self.pipeline.repair(synthesize_declaration(artifact.name, text))
            names = [artifact.name]
        entry = artifact.name if artifact.name in names or not names else names[0]
        return text, entry

    def assemble(self, artifacts: List[Artifact]) -> Bundle:
        ordered, diagnostics = self.order(artifacts)

        parts = []
        entries: Dict[str, str] = {}
        for artifact in ordered:
            text, entries[artifact.name] = self.declaration_text(artifact)
            if text:
                parts.append(text)
            diagnostics.extend(artifact.diagnostics)

        render_line = FALLBACK_RENDER
        roots = [a for a in ordered if a.is_root_layout]
        if roots:
            render_line = f"render(<{entries[roots[0].name]} />);"
        elif ordered:
            latest = max(ordered, key=lambda a: (
                a.completion_order if a.completion_order is not None else -1, a.registration_index
            ))
            render_line = f"render(<{entries[latest.name]} />);"

        parts.append(render_line)
        logger.info(f"Assembled {len(ordered)} artifacts; entry: {render_line}")
        return Bundle(
            bundle_text="\n\n".join(parts) + "\n",
            per_artifact_completeness={a.name: a.complete for a in ordered},
            diagnostics=diagnostics,
            order=[a.name for a in ordered],
        )
