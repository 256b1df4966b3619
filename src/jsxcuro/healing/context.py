#!/usr/bin/env python3
"""
JSXCURO HEALING CONTEXT
-----------------------
A state-management object that acts as the 'Medical Record' for one piece
of component text undergoing repair. It stores both the raw trauma and the
healed result.

Author: JsxCuro Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from typing import List, Optional

from jsxcuro.core.models import Diagnostic


@dataclass
class HealContext:
    """
    Maintains the state of a single repair run.

    Initialized by the HealingPipeline and enriched as each fixer of the
    Structurer is applied.
    """
    raw_text: str                           # The input exactly as received
    artifact_name: Optional[str] = None     # Owning artifact, for diagnostics
    cleaned_text: str = ""                  # After BOM/fence/marker cleanup
    repaired_text: str = ""                 # Last successfully repaired text
    applied_fixers: List[str] = field(default_factory=list)
    failed_fixer: Optional[str] = None
    repair_incomplete: bool = False         # A fixer raised; repaired_text is last-good
    passes: int = 0
    converged: bool = True
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.repaired_text != self.cleaned_text
