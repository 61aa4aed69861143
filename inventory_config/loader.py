"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads an analytics YAML file and parses it into the frozen
``AnalyticsConfig``.  The single public entry point for runtime config is
``inventory_config.get_active_config()``; services never call the loader
directly.

Invariants enforced
-------------------
* Unknown keys in the ``analytics`` section are rejected, not ignored.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``analytics`` section  -> ``KeyError``.
* Invalid values  -> ``ValueError`` from ``AnalyticsConfig``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import AnalyticsConfig

_KNOWN_KEYS = frozenset({"method", "cost_scale", "display_scale", "overdraw_policy"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_analytics(data: dict[str, Any], checksum: str = "") -> AnalyticsConfig:
    """Parse the ``analytics`` mapping into an AnalyticsConfig."""
    if not isinstance(data, dict):
        raise ValueError(f"analytics section must be a mapping, got {type(data).__name__}")
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown analytics settings: {sorted(unknown)}")

    return AnalyticsConfig(
        method=str(data.get("method", "WAC")).upper(),
        cost_scale=data.get("cost_scale", 4),
        display_scale=data.get("display_scale", 2),
        overdraw_policy=str(data.get("overdraw_policy", "clamp")).lower(),
        checksum=checksum,
    )


def load_analytics_config(path: Path) -> AnalyticsConfig:
    """
    Load and validate an analytics configuration file.

    Raises:
        FileNotFoundError, yaml.YAMLError, KeyError, ValueError
    """
    raw = load_yaml_file(Path(path))
    if "analytics" not in raw:
        raise KeyError(f"{path}: missing top-level 'analytics' section")
    section = raw["analytics"] or {}
    return parse_analytics(section, checksum=compute_checksum(section))
