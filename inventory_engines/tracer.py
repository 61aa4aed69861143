"""
inventory_engines.tracer -- INVENTORY_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine entry point and, after it
    returns, logs one INVENTORY_ENGINE_TRACE record naming the engine, its
    version, how long the call took and a fingerprint of the selected
    keyword arguments.  Two replays of the same reporting window share a
    fingerprint, which is how a summary is matched to its trace.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log record
    and nothing else; inputs are read, never changed.

Invariants enforced:
    - Fingerprints are stable across processes: values are rendered
      canonically (ISO timestamps, normalised Decimals, enum values,
      dataclasses field by field, mapping keys sorted) before hashing.
    - A failed call logs no trace; the exception propagates unchanged.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("inventory_kernel.engines.tracer")

TRACE_TYPE = "INVENTORY_ENGINE_TRACE"


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value.normalize())
    if isinstance(value, (str, int)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return f"{type(value).__name__}{_canonical(fields)}"
    if isinstance(value, Mapping):
        return "{" + ",".join(
            f"{k}:{_canonical(v)}" for k, v in sorted(value.items())
        ) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """First 16 hex chars of SHA-256 over the named keyword arguments.

    An absent argument hashes as "null".
    """
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine method so each successful call is traced."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if fingerprint_fields else ""
            )
            started = time.monotonic()
            result = func(*args, **kwargs)
            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
