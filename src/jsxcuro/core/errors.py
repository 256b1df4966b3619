#!/usr/bin/env python3
"""
JSXCURO ERRORS
--------------
Scope-wide and lifecycle failures. Local repair and parse trouble is never
raised; it is recorded as a Diagnostic on the artifact instead.

Author: JsxCuro Team
Date: 2026-01-16
"""

from typing import List, Optional

from jsxcuro.core.models import Diagnostic


class JsxCuroError(Exception):
    """Base class for every error raised by the engine."""


class ConfigError(JsxCuroError):
    pass


class CircularDependencyError(JsxCuroError):
    """Raised by the hierarchy build when the reference graph has a cycle."""

    def __init__(self, path: List[str], diagnostics: Optional[List[Diagnostic]] = None):
        self.path = list(path)
        self.diagnostics = list(diagnostics or [])
        super().__init__(f"Circular dependency detected: {' -> '.join(self.path)}")


class StreamAbortedError(JsxCuroError):
    """Raised on session teardown when the stream was aborted."""

    def __init__(self, artifact_names: List[str]):
        self.artifact_names = list(artifact_names)
        names = ", ".join(self.artifact_names) or "no open artifacts"
        super().__init__(f"Stream aborted ({names})")


class UnknownArtifactError(JsxCuroError, KeyError):
    def __init__(self, artifact_id: str):
        self.artifact_id = artifact_id
        super().__init__(f"Unknown artifact id '{artifact_id}'")

    def __str__(self):
        return self.args[0]


class ArtifactStateError(JsxCuroError):
    pass


class MalformedEventError(JsxCuroError):
    """An event object that cannot be normalised (wrong shape, missing type)."""
