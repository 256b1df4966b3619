#!/usr/bin/env python3
"""
JSXCURO STREAM PROCESSOR - The Dispatcher
-----------------------------------------
The artifact lifecycle state machine:

    PENDING -> STREAMING -> { COMPLETE | ERROR }

driven by start / delta / stop / abort events, one at a time, dispatched by
artifact id. The delta path is a plain append: no scanning, repair or
classification ever happens there. Heavy work runs at stop, through the
ArtifactFinalizer.

Bad events never raise. They are dropped and reported as diagnostics, and
the stream carries on.

Author: JsxCuro Team
Date: 2026-01-16
"""

import time
import logging
from typing import Any, List, Optional

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.errors import MalformedEventError, ArtifactStateError
from jsxcuro.core.models import Artifact, ArtifactStatus, Diagnostic, DiagnosticKind
from jsxcuro.core.registry import Registry
from jsxcuro.streaming.events import StreamEvent, parse_event
from jsxcuro.streaming.finalizer import ArtifactFinalizer

logger = logging.getLogger("jsxcuro.processor")

TRANSITIONS = {
    ArtifactStatus.PENDING: (ArtifactStatus.STREAMING, ArtifactStatus.ERROR),
    ArtifactStatus.STREAMING: (ArtifactStatus.COMPLETE, ArtifactStatus.ERROR),
    ArtifactStatus.COMPLETE: (),
    ArtifactStatus.ERROR: (),
}


class StreamEventProcessor:

    def __init__(self, registry: Registry, finalizer: ArtifactFinalizer,
                 config: Optional[EngineConfig] = None):
        self.registry = registry
        self.finalizer = finalizer
        self.config = config or EngineConfig()
        self.aborted = False
        self.diagnostics: List[Diagnostic] = []

    def process(self, raw_event: Any) -> List[Diagnostic]:
        """Normalises one event and dispatches it. Returns the diagnostics it raised."""
        if self.aborted:
            return self._emit(None, DiagnosticKind.STREAM_ABORTED, "Stream was aborted; event ignored")
        try:
            event = parse_event(raw_event)
        except MalformedEventError as e:
            return self._emit(None, DiagnosticKind.MALFORMED_EVENT, str(e))

        if event.type == "start":
            return self.start(event)
        if event.type == "delta":
            return self.delta(event)
        if event.type == "stop":
            return self.stop(event)
        return self.abort()

    # --- LIFECYCLE HANDLERS ---

    def start(self, event: StreamEvent) -> List[Diagnostic]:
        if not event.artifact_id or not event.name:
            return self._emit(event.name, DiagnosticKind.MALFORMED_EVENT,
                              "start event requires 'artifactId' and 'name'")
        if event.artifact_id in self.registry:
            return self._emit(event.name, DiagnosticKind.MALFORMED_EVENT,
                              f"Artifact id '{event.artifact_id}' was already started")
        if len(self.registry) >= self.config.max_artifacts:
            return self._emit(event.name, DiagnosticKind.SIZE_LIMIT,
                              f"Artifact limit of {self.config.max_artifacts} reached; {event.name} dropped")

        is_root = event.is_root_layout
        if is_root is None:
            is_root = event.name in self.config.root_layout_names

        artifact = Artifact(
            id=event.artifact_id,
            name=event.name,
            position=event.position or self.config.default_position,
            is_root_layout=is_root,
        )
        self._transition(artifact, ArtifactStatus.STREAMING)
        self.registry.register(artifact)
        logger.info(f"Started {artifact.name} ({artifact.id}) in '{artifact.position}'")
        return []

    def delta(self, event: StreamEvent) -> List[Diagnostic]:
        if not event.artifact_id or not event.text:
            return self._emit(None, DiagnosticKind.MALFORMED_EVENT,
                              "delta event requires 'artifactId' and non-empty 'text'")
        artifact = self._live_artifact(event.artifact_id, "delta")
        if artifact is None:
            return self._emit(None, DiagnosticKind.UNKNOWN_ARTIFACT,
                              f"delta for unknown or finished artifact '{event.artifact_id}'")

        if artifact.size + len(event.text) > self.config.max_artifact_size:
            return self._emit(artifact.name, DiagnosticKind.SIZE_LIMIT,
                              f"{artifact.name} would exceed {self.config.max_artifact_size} "
                              f"characters; chunk dropped", artifact=artifact)

        artifact.append(event.text)
        return []

    def stop(self, event: StreamEvent) -> List[Diagnostic]:
        if not event.artifact_id:
            return self._emit(None, DiagnosticKind.MALFORMED_EVENT, "stop event requires 'artifactId'")
        artifact = self._live_artifact(event.artifact_id, "stop")
        if artifact is None:
            return self._emit(None, DiagnosticKind.UNKNOWN_ARTIFACT,
                              f"stop for unknown or finished artifact '{event.artifact_id}'")

        diagnostics = []
        if event.sections:
            section_diags = self.registry.update_sections(event.sections, owner=artifact.name)
            self.finalizer.record(artifact, section_diags)
            diagnostics.extend(section_diags)

        self._transition(artifact, ArtifactStatus.COMPLETE)
        artifact.completed_at = time.time()
        artifact.completion_order = self.registry.next_completion()

        diagnostics.extend(self.finalizer.finalize(artifact))
        self.diagnostics.extend(diagnostics)
        logger.info(f"Completed {artifact.name}: {'complete' if artifact.complete else 'incomplete'}")
        return diagnostics

    def abort(self) -> List[Diagnostic]:
        """Forces every open artifact to ERROR and stops accepting events."""
        diagnostics = []
        for artifact in self.registry.open_artifacts():
            self._transition(artifact, ArtifactStatus.ERROR)
            artifact.discard_buffer()
            diag = Diagnostic(artifact.name, DiagnosticKind.STREAM_ABORTED,
                              f"Stream aborted while {artifact.name} was streaming")
            self.finalizer.record(artifact, [diag])
            diagnostics.append(diag)

        self.aborted = True
        self.diagnostics.extend(diagnostics)
        logger.warning(f"Stream aborted; {len(diagnostics)} open artifacts moved to error")
        return diagnostics

    # --- HELPERS ---

    def _live_artifact(self, artifact_id: str, action: str) -> Optional[Artifact]:
        artifact = self.registry.get(artifact_id)
        if artifact is None or artifact.status.is_terminal:
            logger.debug(f"Ignoring {action} for '{artifact_id}'")
            return None
        return artifact

    def _transition(self, artifact: Artifact, status: ArtifactStatus):
        if status not in TRANSITIONS[artifact.status]:
            raise ArtifactStateError(
                f"{artifact.name}: illegal transition {artifact.status.value} -> {status.value}"
            )
        artifact.status = status

    def _emit(self, name: Optional[str], kind: DiagnosticKind, message: str,
              artifact: Optional[Artifact] = None) -> List[Diagnostic]:
        diag = Diagnostic(name, kind, message)
        logger.warning(f"[{kind.value}] {message}")
        if artifact is not None:
            artifact.diagnostics.append(diag)
        self.diagnostics.append(diag)
        return [diag]
