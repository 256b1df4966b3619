#!/usr/bin/env python3
"""
JSXCURO FINALIZER - The Discharge Desk
--------------------------------------
Runs once per artifact, when its stream stops: marker validation, repair,
final classification, declaration extraction and the compound / critical
component checks. Everything it learns is recorded on the Artifact as
diagnostics; nothing here raises.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
import logging
from typing import Any, Dict, List, Optional

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.models import Artifact, Diagnostic, DiagnosticKind
from jsxcuro.healing.classifier import CompletenessClassifier
from jsxcuro.healing.extractor import FunctionExtractor
from jsxcuro.healing.parser import JsxParser
from jsxcuro.healing.pipeline import HealingPipeline

logger = logging.getLogger("jsxcuro.finalizer")

ARIA_LABEL = re.compile(r"aria-label=[\"'][^\"']+[\"']")
SEMANTIC_ELEMENT = re.compile(r"<(header|main|footer|nav|article|section|aside)[^>]*>")
IMG_TAG = re.compile(r"<img[^>]+>")
IMG_WITH_ALT = re.compile(r"<img[^>]+alt=[\"'][^\"']+[\"']")

# Failures that are fatal for a critical component
ESCALATED_KINDS = (
    DiagnosticKind.INCOMPLETE_ARTIFACT,
    DiagnosticKind.REPAIR_FAILURE,
    DiagnosticKind.STREAM_ABORTED,
)


class ArtifactFinalizer:

    def __init__(self, pipeline: HealingPipeline, classifier: CompletenessClassifier,
                 extractor: FunctionExtractor, parser: JsxParser,
                 config: Optional[EngineConfig] = None):
        self.pipeline = pipeline
        self.classifier = classifier
        self.extractor = extractor
        self.parser = parser
        self.config = config or EngineConfig()

    def finalize(self, artifact: Artifact) -> List[Diagnostic]:
        """Repairs and classifies a stopped artifact in place."""
        raw = artifact.raw_text
        diagnostics: List[Diagnostic] = []

        # --- PHASE 1: MARKERS ---
        scanner = self.pipeline.scanner
        for diag in scanner.validate(scanner.scan(raw, final=True), raw, final=True):
            diag.artifact_name = diag.artifact_name or artifact.name
            diagnostics.append(diag)

        # --- PHASE 2: REPAIR ---
        context = self.pipeline.run(raw, artifact.name)
        artifact.repaired_text = context.repaired_text
        artifact.repair_incomplete = context.repair_incomplete
        diagnostics.extend(context.diagnostics)

        # --- PHASE 3: FINAL CLASSIFICATION ---
        verdict = self.classifier.classify_final(artifact.repaired_text)
        artifact.complete = verdict.complete
        if not verdict.complete:
            diagnostics.append(Diagnostic(
                artifact.name, DiagnosticKind.INCOMPLETE_ARTIFACT,
                f"{artifact.name} is incomplete: {'; '.join(verdict.reasons)}"
            ))
        if verdict.parse_ok is False:
            diagnostics.append(Diagnostic(
                artifact.name, DiagnosticKind.PARSE_FAILURE,
                f"Parse of {artifact.name} failed ({verdict.parse_error}); structural verdict kept"
            ))

        # --- PHASE 4: EXTRACTION & COMPONENT RULES ---
        artifact.definitions = self.extractor.extract(artifact.repaired_text)
        diagnostics.extend(self.check_compound(artifact.name, artifact.repaired_text))

        self.record(artifact, diagnostics)
        return diagnostics

    def check_compound(self, name: str, text: str) -> List[Diagnostic]:
        patterns = self.config.compound_components.get(name)
        if not patterns:
            return []
        missing = [p.replace("\\", "") for p in patterns if not re.search(p, text)]
        if not missing:
            return []
        return [Diagnostic(
            name, DiagnosticKind.INCOMPLETE_COMPOUND,
            f"{name} is missing subcomponents: {', '.join(missing)}"
        )]

    def record(self, artifact: Artifact, diagnostics: List[Diagnostic]):
        """Attaches diagnostics to the artifact, escalating for critical components."""
        critical = artifact.name in self.config.critical_components
        for diag in diagnostics:
            if critical and diag.kind in ESCALATED_KINDS:
                diag.severity = "error"
            logger.warning(f"[{diag.kind.value}] {diag.message}")
        artifact.diagnostics.extend(diagnostics)

    def profile(self, name: str, text: str) -> Dict[str, Any]:
        """Component type and accessibility flags kept alongside a cached artifact."""
        lowered = text.lower()
        if "nav" in lowered:
            component_type = "navigation"
        elif "hero" in lowered:
            component_type = "hero"
        elif "footer" in lowered:
            component_type = "footer"
        else:
            component_type = "section"

        children = [n for n in self.parser.element_names(text) if n != name]
        return {
            "component_type": component_type,
            "accessibility": {
                "has_aria_labels": bool(ARIA_LABEL.search(text)),
                "has_semantic_elements": bool(SEMANTIC_ELEMENT.search(text)),
                "has_img_alts": not IMG_TAG.search(text) or bool(IMG_WITH_ALT.search(text)),
            },
            "child_components": children,
        }
