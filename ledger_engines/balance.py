"""
Module: ledger_engines.balance
Responsibility:
    Merge a counterparty's tax invoices and cash movements into one
    chronological ledger with a running balance, and compute the
    counterparty's aggregate receivable / payable totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain and sibling engine modules.

Invariants enforced:
    - Cancelled invoices produce no ledger line and contribute to no total.
    - Every ledger line has sale_amount == 0 or payment_amount == 0.
    - Lines are ordered by ISO date text, ascending; the sort is stable, so
      same-day lines keep their input order (invoices before payments).
    - running_balance is an inclusive prefix sum of
      (sale_amount - payment_amount).
    - Integer arithmetic only; no rounding.
    - Given the same invoices and payments, the last line's running_balance
      equals ``sales_total - received_total``.

Receivable-side asymmetry:
    Only SALES invoices put an amount on a ledger line and only IN payments
    take one off.  Purchase invoices and OUT payments appear as zero-amount
    lines in the history but are counted in ``purchase_total`` /
    ``paid_total``.  The history is therefore a receivable ledger; there
    is no payable running balance.  This matches how the ledger has always
    been rendered and is kept as-is.

Failure modes:
    - None raised by the engine.  Malformed records (e.g. negative amounts)
      produce arithmetically odd but non-crashing output; validation is the
      record services' job.

Usage:
    from ledger_engines.balance import BalanceCalculator

    calculator = BalanceCalculator()
    lines = calculator.build_history(invoices=invoices, payments=payments)
    totals = calculator.compute_totals(invoices=invoices, payments=payments)
    assert lines[-1].running_balance == totals.receivable_balance
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ledger_kernel.domain.records import (
    InvoiceDirection,
    InvoiceRecord,
    PaymentDirection,
    PaymentRecord,
)
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.balance")


class LedgerLineKind(str, Enum):
    INVOICE = "invoice"
    PAYMENT = "payment"


@dataclass(frozen=True)
class LedgerLabels:
    """
    Descriptions written onto ledger lines.

    ``invoice_placeholder`` is used only when an invoice has no item label.
    """

    invoice_placeholder: str = "세금계산서"
    deposit: str = "입금"
    disbursement: str = "지급"


DEFAULT_LABELS = LedgerLabels()


@dataclass(frozen=True)
class LedgerLine:
    """
    One row of a counterparty ledger.

    Contract:
        At most one of ``sale_amount`` / ``payment_amount`` is non-zero.
        ``running_balance`` is meaningful only on lines returned by
        ``BalanceCalculator.build_history``.
    """

    date: str
    description: str
    sale_amount: int
    payment_amount: int
    kind: LedgerLineKind
    source_id: str
    running_balance: int = 0
    site_name: str | None = None
    team_name: str | None = None
    memo: str | None = None

    @property
    def signed_amount(self) -> int:
        """Effect of this line on the receivable balance."""
        return self.sale_amount - self.payment_amount


@dataclass(frozen=True)
class BalanceTotals:
    """
    Aggregate snapshot for one counterparty.

    Guarantees:
        - All four sums are over non-cancelled invoices / all payments.
        - The two balances are derived, never stored.
    """

    sales_total: int = 0
    purchase_total: int = 0
    received_total: int = 0
    paid_total: int = 0

    @property
    def receivable_balance(self) -> int:
        """Owed to us: sales invoices minus deposits received."""
        return self.sales_total - self.received_total

    @property
    def payable_balance(self) -> int:
        """Owed by us: purchase invoices minus disbursements made."""
        return self.purchase_total - self.paid_total


class BalanceCalculator:
    """
    Build counterparty ledgers and totals from invoice and payment records.

    Contract:
        Pure functions -- no I/O, no caching, no clock.  Every call works
        only on the records passed in.
    Guarantees:
        - ``build_history`` and ``compute_totals`` agree on the receivable
          balance for the same inputs.
        - Identical inputs give identical outputs.
    Non-goals:
        - Does not fetch records, filter by date or site, or validate.
    """

    def __init__(self, labels: LedgerLabels | None = None):
        self._labels = labels or DEFAULT_LABELS

    @property
    def labels(self) -> LedgerLabels:
        return self._labels

    def invoice_line(self, invoice: InvoiceRecord) -> LedgerLine:
        """Map an invoice to an unbalanced ledger line (sales side only)."""
        sale_amount = (
            invoice.total_amount
            if invoice.direction == InvoiceDirection.SALES
            else 0
        )
        return LedgerLine(
            date=invoice.date,
            description=invoice.item_label or self._labels.invoice_placeholder,
            sale_amount=sale_amount,
            payment_amount=0,
            kind=LedgerLineKind.INVOICE,
            source_id=invoice.record_id or "",
            site_name=invoice.site_name,
            team_name=invoice.team_name,
            memo=invoice.memo,
        )

    def payment_line(self, payment: PaymentRecord) -> LedgerLine:
        """Map a payment to an unbalanced ledger line (deposits only reduce)."""
        is_deposit = payment.direction == PaymentDirection.IN
        return LedgerLine(
            date=payment.date,
            description=self._labels.deposit if is_deposit else self._labels.disbursement,
            sale_amount=0,
            payment_amount=payment.amount if is_deposit else 0,
            kind=LedgerLineKind.PAYMENT,
            source_id=payment.record_id or "",
            site_name=payment.site_name,
            team_name=payment.team_name,
            memo=payment.memo,
        )

    @traced_engine("balance_history", "1.0", fingerprint_fields=("invoices", "payments"))
    def build_history(
        self,
        *,
        invoices: Sequence[InvoiceRecord],
        payments: Sequence[PaymentRecord],
    ) -> tuple[LedgerLine, ...]:
        """
        Merge invoices and payments into a dated ledger with running balance.

        Preconditions:
            - Dates are ISO ``YYYY-MM-DD`` text.
        Postconditions:
            - Non-decreasing by date.
            - ``result[i].running_balance ==
              sum(l.signed_amount for l in result[:i + 1])``.
            - Empty input gives an empty tuple.
        """
        lines: list[LedgerLine] = [
            self.invoice_line(inv) for inv in invoices if not inv.is_cancelled
        ]
        lines.extend(self.payment_line(pay) for pay in payments)

        # Stable: same-day lines keep invoice-then-payment input order
        lines.sort(key=lambda line: line.date)

        running_balance = 0
        ledger: list[LedgerLine] = []
        for line in lines:
            running_balance += line.sale_amount - line.payment_amount
            ledger.append(dataclasses.replace(line, running_balance=running_balance))

        logger.debug("ledger_history_built", extra={
            "invoice_count": len(invoices),
            "payment_count": len(payments),
            "line_count": len(ledger),
            "closing_balance": running_balance,
        })
        return tuple(ledger)

    @traced_engine("balance_totals", "1.0", fingerprint_fields=("invoices", "payments"))
    def compute_totals(
        self,
        *,
        invoices: Sequence[InvoiceRecord],
        payments: Sequence[PaymentRecord],
    ) -> BalanceTotals:
        """
        Sum invoices by direction and payments by direction.

        Postconditions:
            - Cancelled invoices are excluded.
            - ``receivable_balance == sales_total - received_total``.
            - ``payable_balance == purchase_total - paid_total``.
        """
        sales_total = 0
        purchase_total = 0
        for inv in invoices:
            if inv.is_cancelled:
                continue
            if inv.direction == InvoiceDirection.SALES:
                sales_total += inv.total_amount
            else:
                purchase_total += inv.total_amount

        received_total = 0
        paid_total = 0
        for pay in payments:
            if pay.direction == PaymentDirection.IN:
                received_total += pay.amount
            else:
                paid_total += pay.amount

        totals = BalanceTotals(
            sales_total=sales_total,
            purchase_total=purchase_total,
            received_total=received_total,
            paid_total=paid_total,
        )
        logger.debug("ledger_totals_computed", extra={
            "sales_total": sales_total,
            "purchase_total": purchase_total,
            "received_total": received_total,
            "paid_total": paid_total,
        })
        return totals
