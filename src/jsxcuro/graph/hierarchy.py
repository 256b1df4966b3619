#!/usr/bin/env python3
"""
JSXCURO HIERARCHY - The Judge
-----------------------------
Derives the reference graph of a scope's completed artifacts and turns it
into a rooted forest.

  * Nodes are artifact names; A -> B when A's repaired code uses B as an
    identifier or element name (read from the syntax tree, so strings,
    comments and JSX text never count).
  * Roots are the nodes nobody references.
  * A cycle fails the whole build. There is no partial tree for a cyclic
    scope.
  * Element names that resolve to nothing are reported, never fatal.

Author: JsxCuro Team
Date: 2026-01-16
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.errors import CircularDependencyError
from jsxcuro.core.models import (
    Artifact, Diagnostic, DiagnosticKind, Hierarchy, HierarchyNode
)
from jsxcuro.healing.parser import JsxParser

logger = logging.getLogger("jsxcuro.hierarchy")


@dataclass
class DependencyGraph:
    nodes: List[str] = field(default_factory=list)
    edges: Dict[str, List[str]] = field(default_factory=dict)

    def incoming(self) -> Dict[str, int]:
        counts = {name: 0 for name in self.nodes}
        for targets in self.edges.values():
            for target in targets:
                counts[target] += 1
        return counts

    def roots(self) -> List[str]:
        return [name for name, count in self.incoming().items() if count == 0]


class HierarchyBuilder:

    def __init__(self, parser: Optional[JsxParser] = None, config: Optional[EngineConfig] = None):
        self.parser = parser or JsxParser()
        self.config = config or EngineConfig()

    def build_graph(self, artifacts: List[Artifact]) -> Tuple[DependencyGraph, List[Diagnostic], Dict[str, Artifact]]:
        """Nodes, edges and non-fatal diagnostics. Never raises."""
        diagnostics = []
        by_name: Dict[str, Artifact] = {}

        # --- PHASE 1: NODES (first registration wins) ---
        for artifact in sorted(artifacts, key=lambda a: a.registration_index):
            if artifact.name in by_name:
                diagnostics.append(Diagnostic(
                    artifact.name, DiagnosticKind.DUPLICATE_NAME,
                    f"Artifact '{artifact.id}' reuses the name {artifact.name}; "
                    f"'{by_name[artifact.name].id}' is kept"
                ))
                continue
            by_name[artifact.name] = artifact

        # --- PHASE 2: EDGES ---
        graph = DependencyGraph(nodes=list(by_name))
        for name, artifact in by_name.items():
            text = artifact.repaired_text if artifact.repaired_text is not None else artifact.raw_text
            elements = self.parser.element_names(text)
            used = self.parser.references(text) | set(elements)
            # A local declaration shadows the sibling artifact of the same name
            local = self.parser.declared_names(text)
            graph.edges[name] = [
                other for other in by_name
                if other != name and other in used and other not in local
            ]

            # --- PHASE 3: UNRESOLVED ELEMENTS ---
            bound = local | self.parser.imported_names(text)
            for element in elements:
                if element in by_name or element in bound or element in self.config.external_components:
                    continue
                diagnostics.append(Diagnostic(
                    name, DiagnosticKind.MISSING_CHILD,
                    f"{name} renders <{element}> but no artifact or local declaration provides it"
                ))

        for diag in diagnostics:
            logger.warning(f"[{diag.kind.value}] {diag.message}")
        return graph, diagnostics, by_name

    def find_cycle(self, graph: DependencyGraph) -> Optional[List[str]]:
        """Depth-first search with path tracking; returns the cyclic path, closed."""
        on_path: Dict[str, bool] = {}
        path: List[str] = []

        def visit(node: str) -> Optional[List[str]]:
            on_path[node] = True
            path.append(node)
            for child in graph.edges.get(node, []):
                if on_path.get(child):
                    return path[path.index(child):] + [child]
                if child not in on_path:
                    cycle = visit(child)
                    if cycle:
                        return cycle
            path.pop()
            on_path[node] = False
            return None

        for node in graph.nodes:
            if node not in on_path:
                cycle = visit(node)
                if cycle:
                    return cycle
        return None

    def build(self, artifacts: List[Artifact]) -> Hierarchy:
        """
        Returns the forest of the given artifacts, or raises
        CircularDependencyError naming the cyclic path.
        """
        graph, diagnostics, by_name = self.build_graph(artifacts)

        cycle = self.find_cycle(graph)
        if cycle:
            diag = Diagnostic(
                cycle[0], DiagnosticKind.CIRCULAR_DEPENDENCY,
                f"Circular dependency: {' -> '.join(cycle)}", severity="error"
            )
            logger.error(diag.message)
            raise CircularDependencyError(cycle, diagnostics + [diag])

        built: Dict[str, HierarchyNode] = {}

        def materialize(name: str) -> HierarchyNode:
            if name not in built:
                node = HierarchyNode(name, by_name[name].id)
                node.children = [materialize(child) for child in graph.edges[name]]
                built[name] = node
            return built[name]

        roots = [materialize(name) for name in graph.roots()]
        logger.info(f"Hierarchy built: {len(graph.nodes)} nodes, {len(roots)} roots")
        return Hierarchy(roots=roots, diagnostics=diagnostics)
