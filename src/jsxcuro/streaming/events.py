#!/usr/bin/env python3
"""
JSXCURO EVENTS - The Interpreter
--------------------------------
Normalises raw event mappings from the transport into StreamEvent objects.

Accepted shapes:
  * flat:  {"type": "delta", "artifactId": "comp_hero", "text": "..."}
           (snake_case keys work too: artifact_id, is_root_layout)
  * SSE:   {"type": "content_block_delta",
            "metadata": {"componentId": ..., "componentName": ..., "position": ...},
            "delta": {"text": "..."}}

Only the shape is checked here. Missing required fields are the
processor's business and surface as diagnostics, not exceptions.

Author: JsxCuro Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsxcuro.core.errors import MalformedEventError

EVENT_TYPES = ("start", "delta", "stop", "abort")

TYPE_ALIASES = {
    "content_block_start": "start",
    "content_block_delta": "delta",
    "content_block_stop": "stop",
}


@dataclass
class StreamEvent:
    type: str
    artifact_id: Optional[str] = None
    name: Optional[str] = None
    position: Optional[str] = None
    text: Optional[str] = None
    sections: Dict[str, List[str]] = field(default_factory=dict)
    is_root_layout: Optional[bool] = None


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def parse_event(raw: Any) -> StreamEvent:
    """Builds a StreamEvent or raises MalformedEventError for unusable input."""
    if isinstance(raw, StreamEvent):
        return raw
    if not isinstance(raw, dict):
        raise MalformedEventError(f"Event must be a mapping, got {type(raw).__name__}")

    raw_type = raw.get("type")
    if not isinstance(raw_type, str):
        raise MalformedEventError(f"Event type must be a string, got {raw_type!r}")
    event_type = TYPE_ALIASES.get(raw_type, raw_type)
    if event_type not in EVENT_TYPES:
        raise MalformedEventError(f"Unknown event type {raw_type!r}")

    metadata = raw.get("metadata")
    data = dict(metadata) if isinstance(metadata, dict) else {}
    data.update({k: v for k, v in raw.items() if k != "metadata"})

    text = _pick(data, "text")
    delta = data.get("delta")
    if text is None and isinstance(delta, dict):
        text = delta.get("text")

    sections = _pick(data, "sections") or {}
    if not isinstance(sections, dict):
        raise MalformedEventError("'sections' must map a position to a list of artifact ids")
    for key, ids in sections.items():
        if not isinstance(ids, list):
            raise MalformedEventError(f"Section {key!r} must be a list of artifact ids")
    sections = {str(k): [str(i) for i in v] for k, v in sections.items()}

    # Identifiers end up as registry keys and display names
    artifact_id = _pick(data, "artifactId", "artifact_id", "componentId", "component_id")
    name = _pick(data, "name", "componentName", "component_name")
    position = _pick(data, "position")
    for field_name, value in (("artifactId", artifact_id), ("name", name), ("position", position)):
        if value is not None and not isinstance(value, str):
            raise MalformedEventError(f"'{field_name}' must be a string, got {type(value).__name__}")

    root = _pick(data, "isRootLayout", "is_root_layout")
    return StreamEvent(
        type=event_type,
        artifact_id=artifact_id,
        name=name,
        position=position,
        text=text if isinstance(text, str) else None,
        sections=sections,
        is_root_layout=None if root is None else bool(root),
    )
