"""
Module: ledger_services.sources
Responsibility:
    Record-source protocols consumed by the balance service, and their
    SQL-backed implementations over the kernel selectors.

Architecture position:
    Services -- imperative shell.  Adapts ``ledger_kernel.selectors`` to
    the narrow interface the balance service needs.

Invariants enforced:
    - Each fetch opens its own session and closes it before returning, so
      two fetches may run on different threads at the same time.
    - An empty list means zero matching records, never a failure.
    - Storage failures surface as ``RecordSourceError``; nothing is retried.

Failure modes:
    - RecordSourceError: the underlying query raised ``SQLAlchemyError``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.db.engine import get_session_factory
from ledger_kernel.domain.records import InvoiceRecord, PaymentRecord
from ledger_kernel.exceptions import RecordSourceError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.invoice_selector import InvoiceSelector, InvoiceTotals
from ledger_kernel.selectors.payment_selector import PaymentSelector, PaymentTotals

logger = get_logger("services.sources")

SessionFactory = Callable[[], Session]


@runtime_checkable
class InvoiceRecordSource(Protocol):
    """Read access to tax invoices, keyed by counterparty."""

    def list_by_counterparty_id(self, counterparty_id: str) -> list[InvoiceRecord]: ...

    def list_by_counterparty_name(self, counterparty_name: str) -> list[InvoiceRecord]: ...

    def totals_by_counterparty_id(self, counterparty_id: str) -> InvoiceTotals: ...


@runtime_checkable
class PaymentRecordSource(Protocol):
    """Read access to deposits and disbursements, keyed by counterparty."""

    def list_by_counterparty_id(self, counterparty_id: str) -> list[PaymentRecord]: ...

    def list_by_counterparty_name(self, counterparty_name: str) -> list[PaymentRecord]: ...

    def totals_by_counterparty_id(self, counterparty_id: str) -> PaymentTotals: ...


class _SqlSource:
    """Session-per-call plumbing shared by the SQL sources."""

    _source_name = "sql"

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_session_factory()

    def _run(self, operation: str, query: Callable[[Session], object]):
        session = self._session_factory()
        try:
            return query(session)
        except SQLAlchemyError as exc:
            logger.error("record_source_failed", extra={
                "source": self._source_name,
                "operation": operation,
                "error": str(exc),
            })
            raise RecordSourceError(self._source_name, operation, str(exc)) from exc
        finally:
            session.close()


class SqlInvoiceRecordSource(_SqlSource):
    """``InvoiceRecordSource`` backed by the ``tax_invoices`` table."""

    _source_name = "tax_invoices"

    def list_by_counterparty_id(self, counterparty_id: str) -> list[InvoiceRecord]:
        return self._run(
            "list_by_counterparty_id",
            lambda s: InvoiceSelector(s).list_by_counterparty_id(counterparty_id),
        )

    def list_by_counterparty_name(self, counterparty_name: str) -> list[InvoiceRecord]:
        return self._run(
            "list_by_counterparty_name",
            lambda s: InvoiceSelector(s).list_by_counterparty_name(counterparty_name),
        )

    def totals_by_counterparty_id(self, counterparty_id: str) -> InvoiceTotals:
        return self._run(
            "totals_by_counterparty_id",
            lambda s: InvoiceSelector(s).totals_by_counterparty_id(counterparty_id),
        )


class SqlPaymentRecordSource(_SqlSource):
    """``PaymentRecordSource`` backed by the ``payments`` table."""

    _source_name = "payments"

    def list_by_counterparty_id(self, counterparty_id: str) -> list[PaymentRecord]:
        return self._run(
            "list_by_counterparty_id",
            lambda s: PaymentSelector(s).list_by_counterparty_id(counterparty_id),
        )

    def list_by_counterparty_name(self, counterparty_name: str) -> list[PaymentRecord]:
        return self._run(
            "list_by_counterparty_name",
            lambda s: PaymentSelector(s).list_by_counterparty_name(counterparty_name),
        )

    def totals_by_counterparty_id(self, counterparty_id: str) -> PaymentTotals:
        return self._run(
            "totals_by_counterparty_id",
            lambda s: PaymentSelector(s).totals_by_counterparty_id(counterparty_id),
        )
