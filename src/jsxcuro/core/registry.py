#!/usr/bin/env python3
"""
JSXCURO REGISTRY - The Ledger
-----------------------------
Owns every Artifact of one generation session, in registration order, and
the layout sections (position -> ordered artifact ids). No other object
holds artifacts; everything else reads them through here.

Invariant: every id listed in a section exists in `artifacts`.

Author: JsxCuro Team
Date: 2026-01-16
"""

import logging
from typing import Dict, List, Optional, Iterable

from jsxcuro.core.models import (
    Artifact, ArtifactStatus, Diagnostic, DiagnosticKind, KNOWN_POSITIONS
)

logger = logging.getLogger("jsxcuro.registry")


class Registry:

    def __init__(self, positions: Iterable[str] = KNOWN_POSITIONS):
        self.artifacts: Dict[str, Artifact] = {}
        self.sections: Dict[str, List[str]] = {p: [] for p in positions}
        self._completed = 0

    def __len__(self) -> int:
        return len(self.artifacts)

    def __contains__(self, artifact_id: str) -> bool:
        return artifact_id in self.artifacts

    def register(self, artifact: Artifact) -> Artifact:
        artifact.registration_index = len(self.artifacts)
        self.artifacts[artifact.id] = artifact
        self.sections.setdefault(artifact.position, []).append(artifact.id)
        logger.debug(f"Registered {artifact.name} ({artifact.id}) under '{artifact.position}'")
        return artifact

    def get(self, artifact_id: str) -> Optional[Artifact]:
        return self.artifacts.get(artifact_id)

    def by_name(self, name: str) -> List[Artifact]:
        return [a for a in self.artifacts.values() if a.name == name]

    def next_completion(self) -> int:
        order = self._completed
        self._completed += 1
        return order

    def update_sections(self, sections: Dict[str, List[str]], owner: Optional[str] = None) -> List[Diagnostic]:
        """
        Replaces the listed sections' id lists. Ids that are not registered
        are dropped with a diagnostic so the section invariant holds.
        """
        diagnostics = []
        for position, ids in sections.items():
            kept = []
            for artifact_id in ids:
                if artifact_id in self.artifacts:
                    if artifact_id not in kept:
                        kept.append(artifact_id)
                else:
                    diagnostics.append(Diagnostic(
                        owner, DiagnosticKind.UNKNOWN_SECTION_ID,
                        f"Section '{position}' lists unknown artifact id '{artifact_id}'"
                    ))
            self.sections[position] = kept
        return diagnostics

    def in_scope(self, scope: Optional[str] = None) -> List[Artifact]:
        """Artifacts of the whole session, or of one section, in registration order."""
        if scope is None:
            return list(self.artifacts.values())
        ids = set(self.sections.get(scope, []))
        return [a for a in self.artifacts.values() if a.id in ids]

    def complete_artifacts(self, scope: Optional[str] = None) -> List[Artifact]:
        return [a for a in self.in_scope(scope) if a.status == ArtifactStatus.COMPLETE]

    def open_artifacts(self) -> List[Artifact]:
        return [a for a in self.artifacts.values() if not a.status.is_terminal]
