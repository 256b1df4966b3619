#!/usr/bin/env python3
"""
JSXCURO SCANNER - The Archeologist (Phase 1.2)
----------------------------------------------
Mines artifact boundary markers out of the cumulative raw text of a stream:

    /// START HeroSection position=main
    ...
    /// END HeroSection

Scanning always runs over the whole buffer, never per chunk, so a marker
split across two deltas is found as soon as its line is complete. A
marker-shaped line sitting inside a string literal is never reported.

Author: JsxCuro Team
Date: 2026-01-16
"""

import re
from typing import List, Optional, Tuple

from jsxcuro.core.models import (
    Marker, Diagnostic, DiagnosticKind, KNOWN_POSITIONS, DEFAULT_POSITION
)


class MarkerScanner:
    """
    Literal-aware marker detector. Tracks whether the cursor sits inside a
    quoted literal (honouring escapes) and skips ordinary comments, so only
    a line whose first text is '///' can produce a Marker.
    """

    # Group 1: START/END, Group 2: component name, Group 3: position hint
    MARKER_PATTERN = re.compile(
        r"^[ \t]*///[ \t]+(START|END)[ \t]+([A-Z][A-Za-z0-9]*)(?:[ \t]+position=([A-Za-z]+))?[ \t]*$"
    )
    FENCE_PATTERN = re.compile(r"^[ \t]*```[\w+-]*[ \t]*$")

    def __init__(self, positions: Tuple[str, ...] = KNOWN_POSITIONS,
                 default_position: str = DEFAULT_POSITION):
        self.positions = tuple(positions)
        self.default_position = default_position

    def scan(self, raw_text: str, final: bool = False) -> List[Marker]:
        """
        Returns markers in text order. Unless `final` is set, a marker on the
        last, still unterminated line is held back until its newline arrives.
        """
        markers = []
        n = len(raw_text)
        in_literal: Optional[str] = None
        escaped = False
        at_line_start = True
        i = 0

        while i < n:
            char = raw_text[i]

            # 1. Inside a literal: only its terminator matters
            if in_literal:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == in_literal:
                    in_literal = None
                elif char == "\n" and in_literal != "`":
                    in_literal = None
                    at_line_start = True
                i += 1
                continue

            if char == "\n":
                at_line_start = True
                i += 1
                continue
            if char in " \t":
                i += 1
                continue

            # 2. Line comments, which is where markers live
            if raw_text.startswith("//", i):
                line_end = raw_text.find("\n", i)
                terminated = line_end != -1
                if not terminated:
                    line_end = n
                if at_line_start and raw_text.startswith("///", i) and (terminated or final):
                    marker = self._read_marker(raw_text, i, line_end)
                    if marker:
                        markers.append(marker)
                i = line_end
                continue

            # 3. Block comments
            if raw_text.startswith("/*", i):
                end = raw_text.find("*/", i + 2)
                i = n if end == -1 else end + 2
                at_line_start = False
                continue

            # 4. Markdown fences are transport debris, not template literals
            if at_line_start and raw_text.startswith("```", i):
                line_end = raw_text.find("\n", i)
                line_end = n if line_end == -1 else line_end
                line_start = raw_text.rfind("\n", 0, i) + 1
                if self.FENCE_PATTERN.match(raw_text[line_start:line_end]):
                    i = line_end
                    continue

            if char in "\"'`":
                in_literal = char
            at_line_start = False
            i += 1

        return markers

    def _read_marker(self, raw_text: str, i: int, line_end: int) -> Optional[Marker]:
        line_start = raw_text.rfind("\n", 0, i) + 1
        match = self.MARKER_PATTERN.match(raw_text[line_start:line_end])
        if not match:
            return None
        kind, name, position = match.groups()
        return Marker(
            artifact_name=name,
            position_hint=position or self.default_position,
            span=(line_start, line_end),
            kind=kind,
        )

    def validate(self, markers: List[Marker], raw_text: str = "",
                 final: bool = False) -> List[Diagnostic]:
        """
        Checks START/END pairing and position hints. With `final`, a START
        that never got its END is reported too.
        """
        diagnostics = []
        current: Optional[str] = None

        for marker in markers:
            if marker.kind == "START":
                if current:
                    diagnostics.append(self._diag(
                        marker.artifact_name, f"START {marker.artifact_name} opened before END {current}"
                    ))
                if marker.position_hint not in self.positions:
                    diagnostics.append(self._diag(
                        marker.artifact_name, f"Unknown position '{marker.position_hint}'"
                    ))
                current = marker.artifact_name
            else:
                if current is None:
                    diagnostics.append(self._diag(
                        marker.artifact_name, f"END {marker.artifact_name} without a matching START"
                    ))
                elif marker.artifact_name != current:
                    diagnostics.append(self._diag(
                        marker.artifact_name, f"END {marker.artifact_name} does not match START {current}"
                    ))
                current = None

        if final and current:
            diagnostics.append(self._diag(current, f"START {current} was never closed"))

        # A trailing '/// STA' style fragment that never became a full marker
        last_line = raw_text.rsplit("\n", 1)[-1]
        if last_line.lstrip().startswith("///") and not self.MARKER_PATTERN.match(last_line):
            diagnostics.append(self._diag(None, f"Incomplete marker '{last_line.strip()}'"))

        return diagnostics

    def strip(self, raw_text: str) -> str:
        """Removes marker lines and Markdown code fences, keeping everything else."""
        spans = [m.span for m in self.scan(raw_text, final=True)]
        pieces = []
        cursor = 0
        for start, end in spans:
            pieces.append(raw_text[cursor:start])
            cursor = end + 1 if raw_text[end:end + 1] == "\n" else end
        pieces.append(raw_text[cursor:])
        text = "".join(pieces)

        lines = [line for line in text.split("\n") if not self.FENCE_PATTERN.match(line)]
        return "\n".join(lines)

    def _diag(self, name: Optional[str], message: str) -> Diagnostic:
        return Diagnostic(name, DiagnosticKind.INVALID_MARKER, message)
