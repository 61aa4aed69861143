"""
inventory_config -- single public entrypoint for analytics configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive an ``AnalyticsConfig`` and
    never read configuration files themselves.

Architecture position:
    Configuration -- sits above ``inventory_kernel`` and below
    ``inventory_services``.  The kernel and the engines MUST NEVER import
    from ``inventory_config``; services translate the config into engine
    constructor arguments.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic checksum: the same YAML content always produces the
      same ``AnalyticsConfig.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``KeyError`` -- the file has no ``analytics`` section.
    - ``ValueError`` -- a setting is missing, unknown or out of range.

Audit relevance:
    Every ``get_active_config()`` call emits an ``INVENTORY_CONFIG_TRACE``
    log entry with the source path, method, scales, overdraw policy and
    checksum, tying every financial summary to the settings that shaped it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inventory_config.loader import compute_checksum, load_analytics_config
from inventory_config.schema import AnalyticsConfig

_logger = logging.getLogger("inventory_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "analytics.yaml"


def get_active_config(config_path: Path | None = None) -> AnalyticsConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to an analytics YAML file.
            Defaults to inventory_config/defaults/analytics.yaml.

    Returns:
        A validated, frozen AnalyticsConfig.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_analytics_config(path)

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "config_path": str(path),
            "method": config.method,
            "cost_scale": config.cost_scale,
            "display_scale": config.display_scale,
            "overdraw_policy": config.overdraw_policy,
            "checksum": config.checksum,
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AnalyticsConfig",
    "compute_checksum",
    "get_active_config",
    "load_analytics_config",
]
