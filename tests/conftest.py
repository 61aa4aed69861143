"""
Pytest fixtures for the inventory analytics test suite.

Provides:
- Structured logging configured for the whole session, with per-test
  LogContext isolation and a ``captured_logs`` fixture
- An in-memory SQLite database session (rolled back after each test)
- A deterministic clock and small stock event builders
"""

import json
import logging
from collections.abc import Generator
from datetime import datetime
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from inventory_kernel.db.base import Base
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.domain.stock_event import StockChangeReason, StockEvent
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

import inventory_kernel.models  # noqa: F401  (registers tables on Base.metadata)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            engine.replay(events=events, window=window)
            logs = captured_logs()
            assert any(r["message"] == "wac_replay_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """One in-memory SQLite database shared by the whole session."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session whose changes are rolled back at teardown."""
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Clock and event fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


def make_event(
    item_id: str,
    quantity_change: int,
    reason: StockChangeReason | str,
    occurred_at: datetime,
    unit_price: str | Decimal | None = None,
    supplier_id: str | None = None,
) -> StockEvent:
    """Shorthand for building a StockEvent in tests."""
    return StockEvent(
        item_id=item_id,
        quantity_change=quantity_change,
        reason=reason,
        occurred_at=occurred_at,
        unit_price=Decimal(unit_price) if isinstance(unit_price, str) else unit_price,
        supplier_id=supplier_id,
    )


@pytest.fixture
def event_factory():
    """Factory fixture wrapping make_event."""
    return make_event
