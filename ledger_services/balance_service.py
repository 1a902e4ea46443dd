"""
Module: ledger_services.balance_service
Responsibility:
    Answer "what does this counterparty owe us / what do we owe them" and
    "show me their ledger", for a counterparty addressed by id or by name.

Architecture position:
    Services -- imperative shell.  Fetches records through the source
    protocols, then delegates all arithmetic to the pure
    ``ledger_engines.balance.BalanceCalculator``.

Invariants enforced:
    - ById and ByName are routed to separate fetch paths; results from the
      two modes are never merged.
    - Invoice and payment fetches run concurrently and BOTH are joined
      before any computation.  If either fails, the whole call fails with
      the source's exception, unchanged.
    - No caching: every call re-reads both sources.
    - ``compute_statement`` derives history and totals from ONE fetch, so
      ``closing_balance == totals.receivable_balance`` always holds for it.

Failure modes:
    - Whatever the sources raise (``RecordSourceError`` for SQL sources).
    - TypeError: reference is neither ``ById`` nor ``ByName``.

Usage:
    from ledger_kernel.domain.counterparty import ById
    from ledger_services import CounterpartyBalanceService

    service = CounterpartyBalanceService(invoice_source, payment_source)
    totals = service.compute_totals(ById("vendor-123"))
    lines = service.compute_history(ById("vendor-123"))
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ledger_engines.balance import BalanceCalculator, BalanceTotals, LedgerLine
from ledger_kernel.domain.counterparty import ById, ByName, CounterpartyRef
from ledger_kernel.domain.records import InvoiceRecord, PaymentRecord
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_services.sources import InvoiceRecordSource, PaymentRecordSource

logger = get_logger("services.balance")

_Snapshot = tuple[list[InvoiceRecord], list[PaymentRecord]]


@dataclass(frozen=True)
class CounterpartyStatement:
    """History and totals computed from the same fetch of both sources."""

    reference: CounterpartyRef
    lines: tuple[LedgerLine, ...]
    totals: BalanceTotals

    @property
    def closing_balance(self) -> int:
        return self.lines[-1].running_balance if self.lines else 0


class CounterpartyBalanceService:
    """
    Balance and ledger queries for one counterparty at a time.

    Contract:
        Stateless between calls.  Safe to share across threads as long as
        the injected sources are.
    Non-goals:
        - Date or site filtering, pagination, payable-side history.
    """

    def __init__(
        self,
        invoice_source: InvoiceRecordSource,
        payment_source: PaymentRecordSource,
        calculator: BalanceCalculator | None = None,
        fetch_workers: int = 2,
    ):
        if fetch_workers < 1:
            raise ValueError(f"fetch_workers must be >= 1, got {fetch_workers}")
        self._invoice_source = invoice_source
        self._payment_source = payment_source
        self._calculator = calculator or BalanceCalculator()
        self._fetch_workers = fetch_workers

    # ------------------------------------------------------------------
    # Dual-mode entry points
    # ------------------------------------------------------------------

    def compute_totals(self, ref: CounterpartyRef) -> BalanceTotals:
        """Aggregate sales, purchase, received and paid totals for ``ref``."""
        with LogContext.bind(counterparty_ref=str(ref)):
            invoices, payments = self._fetch(ref)
            totals = self._calculator.compute_totals(
                invoices=invoices, payments=payments,
            )
            logger.info("counterparty_totals_computed", extra={
                "receivable_balance": totals.receivable_balance,
                "payable_balance": totals.payable_balance,
            })
            return totals

    def compute_history(self, ref: CounterpartyRef) -> tuple[LedgerLine, ...]:
        """Chronological receivable ledger for ``ref`` with running balance."""
        with LogContext.bind(counterparty_ref=str(ref)):
            invoices, payments = self._fetch(ref)
            lines = self._calculator.build_history(
                invoices=invoices, payments=payments,
            )
            logger.info("counterparty_history_computed", extra={
                "line_count": len(lines),
            })
            return lines

    def compute_statement(self, ref: CounterpartyRef) -> CounterpartyStatement:
        """History and totals from a single consistent fetch."""
        with LogContext.bind(counterparty_ref=str(ref)):
            invoices, payments = self._fetch(ref)
            statement = CounterpartyStatement(
                reference=ref,
                lines=self._calculator.build_history(
                    invoices=invoices, payments=payments,
                ),
                totals=self._calculator.compute_totals(
                    invoices=invoices, payments=payments,
                ),
            )
            logger.info("counterparty_statement_computed", extra={
                "line_count": len(statement.lines),
                "closing_balance": statement.closing_balance,
            })
            return statement

    # Convenience wrappers, one per addressing mode

    def totals_by_id(self, counterparty_id: str) -> BalanceTotals:
        return self.compute_totals(ById(counterparty_id))

    def totals_by_name(self, counterparty_name: str) -> BalanceTotals:
        return self.compute_totals(ByName(counterparty_name))

    def history_by_id(self, counterparty_id: str) -> tuple[LedgerLine, ...]:
        return self.compute_history(ById(counterparty_id))

    def history_by_name(self, counterparty_name: str) -> tuple[LedgerLine, ...]:
        return self.compute_history(ByName(counterparty_name))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _fetch(self, ref: CounterpartyRef) -> _Snapshot:
        match ref:
            case ById(counterparty_id=counterparty_id):
                return self._fetch_by_id(counterparty_id)
            case ByName(counterparty_name=counterparty_name):
                return self._fetch_by_name(counterparty_name)
        raise TypeError(f"Unsupported counterparty reference: {ref!r}")

    def _fetch_by_id(self, counterparty_id: str) -> _Snapshot:
        with ThreadPoolExecutor(
            max_workers=self._fetch_workers, thread_name_prefix="ledger-fetch",
        ) as executor:
            invoices_future = executor.submit(
                self._invoice_source.list_by_counterparty_id, counterparty_id,
            )
            payments_future = executor.submit(
                self._payment_source.list_by_counterparty_id, counterparty_id,
            )
            # Executor exit joins the other fetch before an error propagates
            return invoices_future.result(), payments_future.result()

    def _fetch_by_name(self, counterparty_name: str) -> _Snapshot:
        with ThreadPoolExecutor(
            max_workers=self._fetch_workers, thread_name_prefix="ledger-fetch",
        ) as executor:
            invoices_future = executor.submit(
                self._invoice_source.list_by_counterparty_name, counterparty_name,
            )
            payments_future = executor.submit(
                self._payment_source.list_by_counterparty_name, counterparty_name,
            )
            return invoices_future.result(), payments_future.result()
