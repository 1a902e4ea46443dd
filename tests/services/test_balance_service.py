"""
Tests for CounterpartyBalanceService.

Covers:
- ById / ByName routed to independent source calls, never merged
- Concurrent fan-out of the two fetches, joined before computing
- Failure atomicity: a source error aborts the whole call unchanged
- Statement consistency between history and totals
- No caching between calls
- End-to-end through the SQL-backed sources
"""

import threading

import pytest

from ledger_engines.balance import BalanceCalculator, LedgerLabels
from ledger_kernel.domain.counterparty import ById, ByName
from ledger_kernel.domain.records import InvoiceDirection, PaymentDirection
from ledger_kernel.exceptions import RecordSourceError
from ledger_services.balance_service import (
    CounterpartyBalanceService,
    CounterpartyStatement,
)
from ledger_services.sources import SqlInvoiceRecordSource, SqlPaymentRecordSource


class TestAddressingModes:
    """ById and ByName follow separate fetch paths."""

    def test_by_id_calls_id_lookups_only(self, in_memory_sources, make_invoice, make_payment):
        inv_src, pay_src = in_memory_sources([make_invoice()], [make_payment()])
        service = CounterpartyBalanceService(inv_src, pay_src)

        service.compute_totals(ById("cp-1"))

        assert inv_src.calls == [("id", "cp-1")]
        assert pay_src.calls == [("id", "cp-1")]

    def test_by_name_calls_name_lookups_only(self, in_memory_sources, make_invoice):
        inv_src, pay_src = in_memory_sources([make_invoice()], [])
        service = CounterpartyBalanceService(inv_src, pay_src)

        service.compute_history(ByName("Acme Construction"))

        assert inv_src.calls == [("name", "Acme Construction")]
        assert pay_src.calls == [("name", "Acme Construction")]

    def test_modes_are_not_merged(self, in_memory_sources, make_invoice):
        """A name-only record is invisible by id, and the reverse."""
        invoices = [
            make_invoice(counterparty_id=None, counterparty_name="Acme", total_amount=100),
            make_invoice(counterparty_id="cp-1", counterparty_name="ACME Corp", total_amount=7),
        ]
        service = CounterpartyBalanceService(*in_memory_sources(invoices, []))

        assert service.totals_by_id("cp-1").sales_total == 7
        assert service.totals_by_name("Acme").sales_total == 100

    def test_unknown_counterparty_is_empty_not_error(self, in_memory_sources):
        service = CounterpartyBalanceService(*in_memory_sources())

        assert service.history_by_id("nobody") == ()
        totals = service.totals_by_name("nobody")
        assert totals.receivable_balance == 0
        assert totals.payable_balance == 0

    def test_unsupported_reference_rejected(self, in_memory_sources):
        service = CounterpartyBalanceService(*in_memory_sources())

        with pytest.raises(TypeError):
            service.compute_totals("cp-1")

    def test_convenience_wrappers_match_refs(self, in_memory_sources, make_invoice, make_payment):
        service = CounterpartyBalanceService(
            *in_memory_sources([make_invoice()], [make_payment()])
        )

        assert service.history_by_id("cp-1") == service.compute_history(ById("cp-1"))
        assert service.history_by_name("Acme Construction") == service.compute_history(
            ByName("Acme Construction")
        )


class TestConcurrentFetch:
    """Both fetches run at the same time and are joined."""

    def test_fetches_overlap(self, in_memory_sources, make_invoice, make_payment):
        """Each fetch blocks until the other starts; sequential fetching would time out."""
        barrier = threading.Barrier(2, timeout=5)
        inv_src, pay_src = in_memory_sources([make_invoice()], [make_payment()], barrier=barrier)
        service = CounterpartyBalanceService(inv_src, pay_src)

        totals = service.compute_totals(ById("cp-1"))

        assert totals.receivable_balance == 600_000

    def test_rejects_zero_workers(self, in_memory_sources):
        with pytest.raises(ValueError):
            CounterpartyBalanceService(*in_memory_sources(), fetch_workers=0)

    def test_single_worker_still_correct(self, in_memory_sources, make_invoice, make_payment):
        service = CounterpartyBalanceService(
            *in_memory_sources([make_invoice()], [make_payment()]), fetch_workers=1,
        )
        assert service.totals_by_id("cp-1").receivable_balance == 600_000


class TestFailureAtomicity:
    """A failing source aborts the call with its own exception."""

    def test_invoice_failure_propagates_unchanged(
        self, in_memory_sources, failing_source, make_payment,
    ):
        failing = failing_source()
        _, pay_src = in_memory_sources([], [make_payment()])
        service = CounterpartyBalanceService(failing, pay_src)

        with pytest.raises(RecordSourceError) as exc_info:
            service.compute_history(ById("cp-1"))

        assert exc_info.value is failing.error
        # The other fetch was still issued and joined
        assert pay_src.calls == [("id", "cp-1")]

    def test_payment_failure_propagates_unchanged(
        self, in_memory_sources, failing_source, make_invoice,
    ):
        error = RuntimeError("ledger offline")
        inv_src, _ = in_memory_sources([make_invoice()], [])
        service = CounterpartyBalanceService(inv_src, failing_source(error))

        with pytest.raises(RuntimeError) as exc_info:
            service.compute_totals(ByName("Acme Construction"))

        assert exc_info.value is error

    def test_statement_fails_atomically(self, in_memory_sources, failing_source):
        inv_src, _ = in_memory_sources()
        service = CounterpartyBalanceService(inv_src, failing_source())

        with pytest.raises(RecordSourceError):
            service.compute_statement(ById("cp-1"))


class TestStatement:
    """compute_statement derives both views from one fetch."""

    def test_closing_balance_matches_totals(self, in_memory_sources, make_invoice, make_payment):
        invoices = [
            make_invoice(date="2024-01-10", total_amount=1_000_000),
            make_invoice(date="2024-02-10", total_amount=250_000),
            make_invoice(direction=InvoiceDirection.PURCHASE, total_amount=80_000),
        ]
        payments = [
            make_payment(date="2024-01-15", amount=400_000),
            make_payment(date="2024-02-01", direction=PaymentDirection.OUT, amount=80_000),
        ]
        inv_src, pay_src = in_memory_sources(invoices, payments)
        service = CounterpartyBalanceService(inv_src, pay_src)

        statement = service.compute_statement(ById("cp-1"))

        assert isinstance(statement, CounterpartyStatement)
        assert statement.reference == ById("cp-1")
        assert statement.closing_balance == statement.totals.receivable_balance == 850_000
        assert statement.totals.payable_balance == 0
        assert len(inv_src.calls) == 1
        assert len(pay_src.calls) == 1

    def test_empty_statement(self, in_memory_sources):
        service = CounterpartyBalanceService(*in_memory_sources())

        statement = service.compute_statement(ByName("nobody"))

        assert statement.lines == ()
        assert statement.closing_balance == 0

    def test_uses_injected_calculator_labels(self, in_memory_sources, make_payment):
        calculator = BalanceCalculator(labels=LedgerLabels(deposit="Deposit"))
        service = CounterpartyBalanceService(
            *in_memory_sources([], [make_payment()]), calculator=calculator,
        )

        lines = service.history_by_id("cp-1")

        assert lines[0].description == "Deposit"


class TestNoCaching:
    def test_new_records_visible_on_next_call(self, in_memory_sources, make_invoice):
        inv_src, pay_src = in_memory_sources([make_invoice(total_amount=10)], [])
        service = CounterpartyBalanceService(inv_src, pay_src)

        assert service.totals_by_id("cp-1").sales_total == 10
        inv_src.records.append(make_invoice(total_amount=5))
        assert service.totals_by_id("cp-1").sales_total == 15


class TestLogging:
    def test_counterparty_ref_in_log_context(self, in_memory_sources, captured_logs):
        service = CounterpartyBalanceService(*in_memory_sources())

        service.compute_totals(ByName("Acme"))

        records = [
            r for r in captured_logs()
            if r["message"] == "counterparty_totals_computed"
        ]
        assert len(records) == 1
        assert records[0]["counterparty_ref"] == "name:Acme"


class TestSqlSourcesEndToEnd:
    """Full path: record services -> database -> SQL sources -> balance service."""

    def test_statement_from_database(
        self, session, session_factory, invoice_service, payment_service,
    ):
        invoice_service.add_invoice(
            date="2024-01-10",
            direction=InvoiceDirection.SALES,
            counterparty_id="cp-9",
            counterparty_name="Hanbit Steel",
            total_amount=1_000_000,
        )
        cancelled = invoice_service.add_invoice(
            date="2024-01-11",
            direction=InvoiceDirection.SALES,
            counterparty_id="cp-9",
            counterparty_name="Hanbit Steel",
            total_amount=999,
        )
        invoice_service.cancel_invoice(cancelled.record_id)
        payment_service.add_payment(
            date="2024-01-15",
            direction=PaymentDirection.IN,
            counterparty_id="cp-9",
            counterparty_name="Hanbit Steel",
            amount=400_000,
        )
        session.commit()

        service = CounterpartyBalanceService(
            SqlInvoiceRecordSource(session_factory),
            SqlPaymentRecordSource(session_factory),
        )
        statement = service.compute_statement(ById("cp-9"))

        assert [l.running_balance for l in statement.lines] == [1_000_000, 600_000]
        assert statement.totals.sales_total == 1_000_000
        assert statement.totals.received_total == 400_000
        assert statement.closing_balance == 600_000

    def test_by_name_from_database(self, session, session_factory, payment_service):
        payment_service.add_payment(
            date="2024-02-01",
            direction=PaymentDirection.OUT,
            counterparty_name="Walk-in Supplier",
            amount=30_000,
        )
        session.commit()

        service = CounterpartyBalanceService(
            SqlInvoiceRecordSource(session_factory),
            SqlPaymentRecordSource(session_factory),
        )

        assert service.totals_by_name("Walk-in Supplier").paid_total == 30_000
        assert service.totals_by_id("Walk-in Supplier").paid_total == 0
