#!/usr/bin/env python3
"""
JSXCURO CORE MODELS
-------------------
Defines the fundamental data structures used across the JsxCuro engine.
These models describe artifacts as they stream in, the diagnostics raised
while healing them, and the shapes handed to external collaborators.

Author: JsxCuro Team
Date: 2026-01-16
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any

KNOWN_POSITIONS = ("header", "main", "footer")
DEFAULT_POSITION = "main"


class ArtifactStatus(Enum):
    """Lifecycle of an artifact. COMPLETE and ERROR are terminal."""
    PENDING = "pending"
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ArtifactStatus.COMPLETE, ArtifactStatus.ERROR)


class DiagnosticKind(Enum):
    MALFORMED_EVENT = "malformed_event"
    UNKNOWN_ARTIFACT = "unknown_artifact"
    REPAIR_FAILURE = "repair_failure"
    PARSE_FAILURE = "parse_failure"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    MISSING_CHILD = "missing_child"
    STREAM_ABORTED = "stream_aborted"
    INVALID_MARKER = "invalid_marker"
    SIZE_LIMIT = "size_limit"
    INCOMPLETE_COMPOUND = "incomplete_compound"
    INCOMPLETE_ARTIFACT = "incomplete_artifact"
    DUPLICATE_NAME = "duplicate_name"
    UNKNOWN_SECTION_ID = "unknown_section_id"


@dataclass
class Diagnostic:
    """
    A single observation about an artifact. Diagnostics are accumulated and
    surfaced in batches; they are never raised on their own.
    """
    artifact_name: Optional[str]
    kind: DiagnosticKind
    message: str
    severity: str = "warning"   # 'warning' or 'error'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": self.artifact_name,
            "kind": self.kind.value,
            "severity": self.severity,
            "message": self.message,
        }


@dataclass
class Marker:
    """An in-text START/END annotation found by the MarkerScanner."""
    artifact_name: str
    position_hint: str
    span: tuple                 # (start, end) offsets of the marker line
    kind: str = "START"         # 'START' or 'END'


@dataclass
class Artifact:
    """
    One named component unit produced incrementally by the generator.

    Raw text is stored as a list of chunks so that a delta is a plain append;
    the joined text is cached until the next append.
    """
    id: str
    name: str
    position: str = DEFAULT_POSITION
    status: ArtifactStatus = ArtifactStatus.PENDING
    is_root_layout: bool = False
    registration_index: int = 0
    last_update_time: float = field(default_factory=time.time)
    completed_at: Optional[float] = None
    completion_order: Optional[int] = None  # 0 for the first artifact to complete

    # Finalization results (populated at stop)
    repaired_text: Optional[str] = None
    complete: bool = False
    repair_incomplete: bool = False
    definitions: Dict[str, "FunctionDefinition"] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    _chunks: List[str] = field(default_factory=list, repr=False)
    _size: int = field(default=0, repr=False)
    _joined: Optional[str] = field(default=None, repr=False)

    def append(self, text: str):
        self._chunks.append(text)
        self._size += len(text)
        self._joined = None
        self.last_update_time = time.time()

    def discard_buffer(self):
        self._chunks = []
        self._size = 0
        self._joined = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def raw_text(self) -> str:
        if self._joined is None:
            self._joined = "".join(self._chunks)
            # Collapse so repeated reads stay cheap
            self._chunks = [self._joined] if self._joined else []
        return self._joined


@dataclass
class FunctionDefinition:
    """A named declaration pulled out of artifact text by the extractor."""
    name: str
    content: str
    complete: bool
    is_streaming: bool = False
    synthesized: bool = False


@dataclass
class FinalizedArtifact:
    """The record handed to the persistence collaborator."""
    name: str
    repaired_text: str
    content_hash: str
    profile: Dict[str, Any] = field(default_factory=dict)


@dataclass
class HierarchyNode:
    name: str
    artifact_id: str
    children: List["HierarchyNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "children": [c.to_dict() for c in self.children]}


@dataclass
class Hierarchy:
    roots: List[HierarchyNode] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class Bundle:
    """The boundary handed to the external renderer."""
    bundle_text: str
    per_artifact_completeness: Dict[str, bool] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    order: List[str] = field(default_factory=list)
