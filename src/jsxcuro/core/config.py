#!/usr/bin/env python3
"""
JSXCURO CONFIGURATION
---------------------
Engine tunables with sensible defaults. A YAML file (ruamel.yaml, safe
loader) can override any known key; unknown keys are rejected so typos
surface immediately.

Author: JsxCuro Team
Date: 2026-01-16
"""

import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional, Tuple, FrozenSet, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from jsxcuro.core.errors import ConfigError
from jsxcuro.core.models import KNOWN_POSITIONS, DEFAULT_POSITION

logger = logging.getLogger("jsxcuro.config")

CONFIG_ENV_VAR = "JSXCURO_CONFIG"

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})

# Subcomponent usage expected from compound component artifacts
COMPOUND_COMPONENTS = {
    "NavigationMenu": [
        r"NavigationMenuList", r"NavigationMenuItem", r"NavigationMenuLink",
        r"NavigationMenuContent", r"NavigationMenuTrigger", r"NavigationMenuViewport",
    ],
    "Card": [
        r"Card\.Header", r"Card\.Title", r"Card\.Description",
        r"Card\.Content", r"Card\.Footer",
    ],
    "Dialog": [
        r"Dialog\.Trigger", r"Dialog\.Content", r"Dialog\.Header", r"Dialog\.Footer",
        r"Dialog\.Title", r"Dialog\.Description", r"Dialog\.Close",
    ],
    "DropdownMenu": [
        r"DropdownMenu\.Trigger", r"DropdownMenu\.Content", r"DropdownMenu\.Item",
        r"DropdownMenu\.Label", r"DropdownMenu\.Separator",
    ],
}


@dataclass
class EngineConfig:
    """Runtime settings shared by every component of one session."""
    positions: Tuple[str, ...] = KNOWN_POSITIONS
    default_position: str = DEFAULT_POSITION
    void_elements: FrozenSet[str] = VOID_ELEMENTS
    root_layout_names: Tuple[str, ...] = ("RootLayout",)
    external_components: FrozenSet[str] = frozenset()
    critical_components: FrozenSet[str] = frozenset({"Header", "NavigationMenu", "RootLayout"})
    compound_components: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in COMPOUND_COMPONENTS.items()}
    )
    max_artifact_size: int = 1024 * 1024
    max_artifacts: int = 100
    max_repair_passes: int = 6

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        kwargs = {}
        for key, value in data.items():
            kwargs[key] = _coerce(key, value)
        return cls(**kwargs)


def _coerce(key: str, value: Any) -> Any:
    """Maps YAML scalars/sequences onto the dataclass field types."""
    try:
        if key in ("void_elements", "external_components", "critical_components"):
            return frozenset(str(v) for v in (value or []))
        if key in ("positions", "root_layout_names"):
            return tuple(str(v) for v in (value or []))
        if key == "compound_components":
            return {str(k): [str(p) for p in (v or [])] for k, v in (value or {}).items()}
        if key in ("max_artifact_size", "max_artifacts", "max_repair_passes"):
            number = int(value)
            if number <= 0:
                raise ValueError("must be positive")
            return number
        return str(value)
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid value for '{key}': {e}")


def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Loads an EngineConfig from a YAML file. Without an explicit path the
    JSXCURO_CONFIG environment variable is consulted; with neither, the
    defaults are returned.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return EngineConfig()

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8-sig")
    except OSError as e:
        logger.error(f"Unable to read config from {config_path}")
        raise ConfigError(f"Failed to read config: {e}")

    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as e:
        raise ConfigError(f"Config {config_path} is not valid YAML: {e}")

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping at the top level")

    logger.info(f"Loaded configuration from {config_path}")
    return EngineConfig.from_dict(data)
