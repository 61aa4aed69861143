"""
AnalyticsConfig schema.

The typed, validated form of the ``analytics`` section of a configuration
file.  YAML is parsed into this type by the loader; services receive it
from ``inventory_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_METHODS = frozenset({"WAC"})
OVERDRAW_POLICIES = frozenset({"clamp", "reject"})

# Decimal places beyond which Numeric(18, 4) storage cannot round-trip
MAX_SCALE = 9


@dataclass(frozen=True)
class AnalyticsConfig:
    """Valuation settings for financial summaries."""

    method: str = "WAC"
    cost_scale: int = 4
    display_scale: int = 2
    overdraw_policy: str = "clamp"
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unsupported valuation method {self.method!r}; "
                f"expected one of {sorted(SUPPORTED_METHODS)}"
            )
        for name in ("cost_scale", "display_scale"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not 0 <= value <= MAX_SCALE:
                raise ValueError(f"{name} must be between 0 and {MAX_SCALE}, got {value}")
        if self.display_scale > self.cost_scale:
            raise ValueError(
                f"display_scale ({self.display_scale}) cannot exceed "
                f"cost_scale ({self.cost_scale})"
            )
        if self.overdraw_policy not in OVERDRAW_POLICIES:
            raise ValueError(
                f"Unknown overdraw_policy {self.overdraw_policy!r}; "
                f"expected one of {sorted(OVERDRAW_POLICIES)}"
            )
