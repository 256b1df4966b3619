#!/usr/bin/env python3
"""
JSXCURO ENGINE - The High Orchestrator
--------------------------------------
A GenerationSession owns everything one generation run needs: the
Registry, the healing suite, the stream processor, the hierarchy builder
and the assembler. Nothing is shared between sessions.

Lifecycle:
    session = GenerationSession(config)
    session.feed(events)              # or session.process(event) one by one
    bundle = session.get_bundle()     # any time; only completed artifacts
    tree = session.get_hierarchy()    # raises CircularDependencyError
    session.close()                   # raises StreamAbortedError after abort

Author: JsxCuro Team
Date: 2026-01-16
"""

import time
import uuid
import hashlib
import logging
from typing import Any, Dict, Iterable, List, Optional

from jsxcuro.assembly.assembler import Assembler
from jsxcuro.core.config import EngineConfig
from jsxcuro.core.errors import (
    ArtifactStateError, StreamAbortedError, UnknownArtifactError
)
from jsxcuro.core.models import (
    ArtifactStatus, Bundle, Diagnostic, DiagnosticKind, FinalizedArtifact, Hierarchy
)
from jsxcuro.core.registry import Registry
from jsxcuro.graph.hierarchy import HierarchyBuilder
from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.extractor import FunctionExtractor
from jsxcuro.healing.parser import JsxParser
from jsxcuro.healing.pipeline import HealingPipeline
from jsxcuro.streaming.finalizer import ArtifactFinalizer
from jsxcuro.streaming.processor import StreamEventProcessor

logger = logging.getLogger("jsxcuro.engine")


class GenerationSession:
    """
    Principal orchestrator of one generation stream. Every collaborator is
    created here and wired to the same Registry and configuration.
    """

    def __init__(self, config: Optional[EngineConfig] = None, session_id: Optional[str] = None):
        self.config = config or EngineConfig()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.started_at = time.time()
        self.closed = False

        # Healing suite
        self.registry = Registry(self.config.positions)
        self.pipeline = HealingPipeline(self.config)
        self.parser = JsxParser()
        self.classifier = CompletenessClassifier(self.pipeline.lexer, self.parser)
        self.extractor = FunctionExtractor(self.pipeline, self.classifier, self.pipeline.scanner)

        # Stream handling and composition
        self.finalizer = ArtifactFinalizer(
            self.pipeline, self.classifier, self.extractor, self.parser, self.config
        )
        self.processor = StreamEventProcessor(self.registry, self.finalizer, self.config)
        self.builder = HierarchyBuilder(self.parser, self.config)
        self.assembler = Assembler(self.builder, self.extractor, self.config)

    @property
    def aborted(self) -> bool:
        return self.processor.aborted

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.processor.diagnostics

    # --- STREAM INTAKE ---

    def process(self, event: Any) -> List[Diagnostic]:
        if self.closed:
            raise ArtifactStateError(f"Session {self.session_id} is closed")
        return self.processor.process(event)

    def feed(self, events: Iterable[Any]) -> List[Diagnostic]:
        diagnostics = []
        for event in events:
            diagnostics.extend(self.process(event))
        return diagnostics

    def abort(self) -> List[Diagnostic]:
        return self.processor.abort()

    def progress(self) -> Dict[str, Dict[str, Any]]:
        """
        Per-artifact progress for UI polling. In-flight buffers are only
        classified leniently; they are never repaired here.
        """
        report = {}
        for artifact in self.registry.artifacts.values():
            entry = {"name": artifact.name, "status": artifact.status.value, "size": artifact.size}
            if artifact.status == ArtifactStatus.STREAMING:
                entry["renderable"] = self.classifier.is_streaming_complete(artifact.raw_text)
            else:
                entry["renderable"] = artifact.complete
            report[artifact.id] = entry
        return report

    # --- COLLABORATOR BOUNDARIES ---

    def finalize_artifact(self, artifact_id: str) -> FinalizedArtifact:
        """Record for the persistence collaborator, keyed by content hash."""
        artifact = self.registry.get(artifact_id)
        if artifact is None:
            raise UnknownArtifactError(artifact_id)
        if artifact.status != ArtifactStatus.COMPLETE:
            raise ArtifactStateError(
                f"{artifact.name} is {artifact.status.value}; only completed artifacts can be finalized"
            )

        text = artifact.repaired_text or ""
        return FinalizedArtifact(
            name=artifact.name,
            repaired_text=text,
            content_hash=hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest(),
            profile=self.finalizer.profile(artifact.name, text),
        )

    def get_bundle(self, scope: Optional[str] = None) -> Bundle:
        return self.assembler.assemble(self.registry.complete_artifacts(scope))

    def get_hierarchy(self, scope: Optional[str] = None) -> Hierarchy:
        return self.builder.build(self.registry.complete_artifacts(scope))

    # --- REPORTING & TEARDOWN ---

    def generate_summary(self) -> Dict[str, Any]:
        artifacts = list(self.registry.artifacts.values())
        by_status = {status.value: 0 for status in ArtifactStatus}
        for artifact in artifacts:
            by_status[artifact.status.value] += 1

        errors = sum(1 for d in self.diagnostics if d.severity == "error")
        return {
            "session_id": self.session_id,
            "total_artifacts": len(artifacts),
            "by_status": by_status,
            "complete": sum(1 for a in artifacts if a.complete),
            "repair_incomplete": sum(1 for a in artifacts if a.repair_incomplete),
            "diagnostics": len(self.diagnostics),
            "errors": errors,
            "aborted": self.aborted,
            "duration_seconds": round(time.time() - self.started_at, 3),
        }

    def close(self) -> Dict[str, Any]:
        """Ends the session. A session that was aborted fails its teardown."""
        if self.closed:
            return self.generate_summary()
        self.closed = True

        if self.aborted:
            names = [
                d.artifact_name for d in self.diagnostics
                if d.kind == DiagnosticKind.STREAM_ABORTED and d.artifact_name
            ]
            logger.error(f"Session {self.session_id} torn down after abort")
            raise StreamAbortedError(names)

        still_open = [a.name for a in self.registry.open_artifacts()]
        if still_open:
            logger.warning(f"Session {self.session_id} closed with open artifacts: {', '.join(still_open)}")
        summary = self.generate_summary()
        logger.info(f"Session {self.session_id} closed: {summary['complete']}/{summary['total_artifacts']} complete")
        return summary
