#!/usr/bin/env python3
"""
JSXCURO EXPORTER - The Scribe
-----------------------------
Serialises a session report (summary, artifacts, diagnostics, hierarchy,
bundle order) to YAML with a stable key order, and writes output files
atomically.

Author: JsxCuro Team
Date: 2026-01-16
"""

import io
import os
from pathlib import Path
from typing import Any, Dict

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap


class ReportExporter:
    """Converts plain report dictionaries into ordered YAML documents."""

    def __init__(self):
        self.yaml = YAML(typ="rt")
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = [
            "session", "summary", "artifacts", "diagnostics", "hierarchy", "bundle",
            "name", "id", "position", "status", "complete", "repair_incomplete",
            "kind", "severity", "artifact", "message", "children",
        ]

    def _get_sorted_map(self, data: Any) -> Any:
        """Recursively orders keys; unknown keys keep their relative position."""
        if isinstance(data, list):
            return [self._get_sorted_map(item) for item in data]
        if not isinstance(data, dict):
            return data

        keys = list(data.keys())

        def sort_logic(key):
            if key in self.preferred_order:
                return self.preferred_order.index(key)
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            sorted_map[key] = self._get_sorted_map(data[key])
        return sorted_map

    def export(self, report: Dict[str, Any]) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._get_sorted_map(report), stream)
        return stream.getvalue()


def write_atomic(target_path: Path, content: str):
    """Writes through a temporary sibling file so readers never see a partial file."""
    target_path = Path(target_path)
    temp_file = target_path.with_name(target_path.name + ".jsxcuro.tmp")
    try:
        temp_file.write_text(content, encoding="utf-8")
        os.replace(temp_file, target_path)
    except OSError as e:
        if temp_file.exists():
            temp_file.unlink()
        raise IOError(f"Atomic write failed: {e}")
