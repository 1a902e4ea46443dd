"""
Pytest fixtures for the counterparty ledger test suite.

Provides:
- Structured logging configuration and log capture
- A SQLite-backed engine per test (file database, so several sessions and
  threads see the same committed rows)
- Deterministic clock and record services
- In-memory record sources and record factories for engine/service tests

Environment Variables:
- None.  Tests never touch a real PostgreSQL server.
"""

import itertools
import json
import logging
import threading
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from ledger_kernel.db.engine import (
    create_tables,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.records import (
    InvoiceDirection,
    InvoiceRecord,
    InvoiceStatus,
    PaymentDirection,
    PaymentRecord,
)
from ledger_kernel.exceptions import RecordSourceError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.selectors.invoice_selector import InvoiceTotals
from ledger_kernel.selectors.payment_selector import PaymentTotals
from ledger_kernel.services.invoice_service import InvoiceRecordService
from ledger_kernel.services.payment_service import PaymentRecordService


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
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, balance_service):
            balance_service.compute_totals(ById("cp-1"))
            logs = captured_logs()
            assert any(r["message"] == "counterparty_totals_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    """Fresh SQLite database with all ledger tables, disposed after the test."""
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'ledger.db'}")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session on the per-test database.

    Tests that read through SQL record sources must ``session.commit()``
    first, since each source fetch opens its own session.
    """
    sess = get_session()
    yield sess
    sess.close()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


# Service fixtures


@pytest.fixture
def invoice_service(session: Session, deterministic_clock) -> InvoiceRecordService:
    return InvoiceRecordService(session, deterministic_clock)


@pytest.fixture
def payment_service(session: Session, deterministic_clock) -> PaymentRecordService:
    return PaymentRecordService(session, deterministic_clock)


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_invoice():
    """Factory fixture for InvoiceRecord values (defaults: sales, issued, Acme)."""
    counter = itertools.count(1)

    def _make(
        date: str = "2024-01-10",
        total_amount: int = 1_000_000,
        direction: InvoiceDirection = InvoiceDirection.SALES,
        status: InvoiceStatus = InvoiceStatus.ISSUED,
        counterparty_id: str | None = "cp-1",
        counterparty_name: str = "Acme Construction",
        **extra,
    ) -> InvoiceRecord:
        return InvoiceRecord(
            record_id=extra.pop("record_id", f"inv-{next(counter)}"),
            date=date,
            direction=direction,
            status=status,
            total_amount=total_amount,
            counterparty_id=counterparty_id,
            counterparty_name=counterparty_name,
            **extra,
        )

    return _make


@pytest.fixture
def make_payment():
    """Factory fixture for PaymentRecord values (defaults: deposit, Acme)."""
    counter = itertools.count(1)

    def _make(
        date: str = "2024-01-15",
        amount: int = 400_000,
        direction: PaymentDirection = PaymentDirection.IN,
        counterparty_id: str | None = "cp-1",
        counterparty_name: str = "Acme Construction",
        **extra,
    ) -> PaymentRecord:
        return PaymentRecord(
            record_id=extra.pop("record_id", f"pay-{next(counter)}"),
            date=date,
            direction=direction,
            amount=amount,
            counterparty_id=counterparty_id,
            counterparty_name=counterparty_name,
            **extra,
        )

    return _make


# =============================================================================
# In-memory record sources
# =============================================================================


class InMemoryInvoiceSource:
    """InvoiceRecordSource over a list; records every call it receives."""

    def __init__(self, records=(), barrier: threading.Barrier | None = None):
        self.records = list(records)
        self.calls: list[tuple[str, str]] = []
        self._barrier = barrier

    def _wait(self):
        if self._barrier is not None:
            self._barrier.wait()

    def list_by_counterparty_id(self, counterparty_id):
        self.calls.append(("id", counterparty_id))
        self._wait()
        return [r for r in self.records if r.counterparty_id == counterparty_id]

    def list_by_counterparty_name(self, counterparty_name):
        self.calls.append(("name", counterparty_name))
        self._wait()
        return [r for r in self.records if r.counterparty_name == counterparty_name]

    def totals_by_counterparty_id(self, counterparty_id):
        live = [
            r for r in self.records
            if r.counterparty_id == counterparty_id and not r.is_cancelled
        ]
        return InvoiceTotals(
            sales_total=sum(r.total_amount for r in live if r.is_sales),
            purchase_total=sum(r.total_amount for r in live if not r.is_sales),
        )


class InMemoryPaymentSource:
    """PaymentRecordSource over a list; records every call it receives."""

    def __init__(self, records=(), barrier: threading.Barrier | None = None):
        self.records = list(records)
        self.calls: list[tuple[str, str]] = []
        self._barrier = barrier

    def _wait(self):
        if self._barrier is not None:
            self._barrier.wait()

    def list_by_counterparty_id(self, counterparty_id):
        self.calls.append(("id", counterparty_id))
        self._wait()
        return [r for r in self.records if r.counterparty_id == counterparty_id]

    def list_by_counterparty_name(self, counterparty_name):
        self.calls.append(("name", counterparty_name))
        self._wait()
        return [r for r in self.records if r.counterparty_name == counterparty_name]

    def totals_by_counterparty_id(self, counterparty_id):
        matching = [r for r in self.records if r.counterparty_id == counterparty_id]
        return PaymentTotals(
            total_in=sum(r.amount for r in matching if r.is_deposit),
            total_out=sum(r.amount for r in matching if not r.is_deposit),
        )


class FailingSource:
    """Source whose list calls always raise the given error."""

    def __init__(self, error: Exception | None = None):
        self.error = error or RecordSourceError("fake", "list", "connection refused")
        self.calls: list[tuple[str, str]] = []

    def list_by_counterparty_id(self, counterparty_id):
        self.calls.append(("id", counterparty_id))
        raise self.error

    def list_by_counterparty_name(self, counterparty_name):
        self.calls.append(("name", counterparty_name))
        raise self.error

    def totals_by_counterparty_id(self, counterparty_id):
        raise self.error


@pytest.fixture
def in_memory_sources():
    """Factory fixture: ``in_memory_sources(invoices, payments)`` -> (inv_src, pay_src)."""

    def _make(invoices=(), payments=(), barrier=None):
        return (
            InMemoryInvoiceSource(invoices, barrier=barrier),
            InMemoryPaymentSource(payments, barrier=barrier),
        )

    return _make


@pytest.fixture
def failing_source():
    """Factory fixture for a source that raises on every fetch."""
    return FailingSource
