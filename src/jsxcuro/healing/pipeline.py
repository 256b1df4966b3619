#!/usr/bin/env python3
"""
JSXCURO HEALING PIPELINE - The Chief Surgeon
--------------------------------------------
Central coordinator for the repair phase. Raw component text is cleaned of
transport debris (BOM, CRLF, Markdown fences, boundary markers) and then
run through the Structurer's fixer chain until it stops changing.

The pipeline never raises on bad input. A fixer that blows up ends the run;
the last successfully repaired text is kept and the context is flagged
`repair_incomplete` with a REPAIR_FAILURE diagnostic.

Author: JsxCuro Team
Date: 2026-01-16
"""

import logging
from typing import Optional

from jsxcuro.core.config import EngineConfig
from jsxcuro.core.models import Diagnostic, DiagnosticKind
from jsxcuro.healing.context import HealContext
from jsxcuro.healing.lexer import JsxLexer
from jsxcuro.healing.scanner import MarkerScanner
from jsxcuro.healing.structurer import JsxStructurer

logger = logging.getLogger("jsxcuro.pipeline")


class HealingPipeline:
    """
    The Orchestrator: ensures that cleanup and structural repair happen in a
    strictly defined order.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.lexer = JsxLexer(self.config.void_elements)
        self.scanner = MarkerScanner(self.config.positions, self.config.default_position)
        self.structurer = JsxStructurer(self.lexer)
        self.max_passes = self.config.max_repair_passes

    def run(self, input_text: str, name: Optional[str] = None) -> HealContext:
        """
        Executes the repair sequence and returns the full record of the run.
        """
        context = HealContext(raw_text=input_text, artifact_name=name)

        # --- PHASE 1: TRANSPORT CLEANUP ---
        context.cleaned_text = self._clean_artifacts(input_text)
        text = context.cleaned_text

        # --- PHASE 2: FIXER CHAIN UNTIL STABLE ---
        context.converged = False
        for _ in range(self.max_passes):
            context.passes += 1
            before = text
            for fixer_name, fixer in self.structurer.fixers:
                try:
                    repaired = fixer(text)
                except Exception as e:
                    logger.warning(f"Fixer '{fixer_name}' failed on {name or 'text'}: {e}")
                    context.failed_fixer = fixer_name
                    context.repair_incomplete = True
                    context.diagnostics.append(Diagnostic(
                        name, DiagnosticKind.REPAIR_FAILURE,
                        f"Fixer '{fixer_name}' raised {type(e).__name__}: {e}"
                    ))
                    context.repaired_text = text
                    return context

                if repaired != text and fixer_name not in context.applied_fixers:
                    context.applied_fixers.append(fixer_name)
                text = repaired

            # Dropping a stray closer can leave a marker at the start of a line
            text = self.scanner.strip(text)

            if text == before:
                context.converged = True
                break

        if not context.converged:
            logger.debug(f"Repair of {name or 'text'} still changing after {self.max_passes} passes")
        context.repaired_text = text
        return context

    def repair(self, text: str) -> str:
        """Shortcut returning only the repaired text."""
        return self.run(text).repaired_text

    def _clean_artifacts(self, text: str) -> str:
        text = text.lstrip("\ufeff")
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return self.scanner.strip(text)
