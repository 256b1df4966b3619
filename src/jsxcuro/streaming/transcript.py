#!/usr/bin/env python3
"""
JSXCURO TRANSCRIPT - The Splitter
---------------------------------
Turns one marked generator transcript into the event stream the processor
consumes:

    /// START Header position=header        ->  start  comp_header
    export default function Header() {...} ->  delta  (one or more)
    /// END Header                          ->  stop   comp_header

A START without its END leaves that artifact streaming. Text outside any
marker pair is ignored.

Author: JsxCuro Team
Date: 2026-01-16
"""

from typing import Any, Dict, List, Optional

from jsxcuro.healing.scanner import MarkerScanner


def artifact_id_for(name: str) -> str:
    return f"comp_{name.lower()}"


def _chunks(text: str, size: Optional[int]) -> List[str]:
    if not text:
        return []
    if not size:
        return [text]
    return [text[i:i + size] for i in range(0, len(text), size)]


def segment_transcript(text: str, chunk_size: Optional[int] = None,
                       scanner: Optional[MarkerScanner] = None) -> List[Dict[str, Any]]:
    scanner = scanner or MarkerScanner()
    text = text.replace("\r\n", "\n")
    events: List[Dict[str, Any]] = []
    current: Optional[str] = None
    cursor = 0

    for marker in scanner.scan(text, final=True):
        start, end = marker.span
        if current:
            for chunk in _chunks(text[cursor:start], chunk_size):
                events.append({"type": "delta", "artifactId": artifact_id_for(current), "text": chunk})

        if marker.kind == "START":
            current = marker.artifact_name
            events.append({
                "type": "start",
                "artifactId": artifact_id_for(current),
                "name": current,
                "position": marker.position_hint,
            })
        elif current == marker.artifact_name:
            events.append({"type": "stop", "artifactId": artifact_id_for(current)})
            current = None

        cursor = end + 1 if text[end:end + 1] == "\n" else end

    if current:
        for chunk in _chunks(text[cursor:], chunk_size):
            events.append({"type": "delta", "artifactId": artifact_id_for(current), "text": chunk})
    return events
