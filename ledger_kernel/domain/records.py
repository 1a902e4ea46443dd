"""
Module: ledger_kernel.domain.records
Responsibility:
    Immutable value objects for the two counterparty event streams: tax
    invoices and cash movements (deposits / disbursements).  These are the
    DTOs that record sources hand to the balance engine.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.
    MUST NOT import from models/, selectors/, services/, or outer layers.

Invariants enforced:
    - Amounts are integer currency units, stored as non-negative magnitudes.
      The effect of a payment is derived from ``direction``, never from a sign.
    - Dates are ISO ``YYYY-MM-DD`` text; lexicographic order is date order.
    - A ``cancelled`` invoice is retained (cancellation is the retraction
      mechanism) but never contributes to a ledger line or total.

Failure modes:
    - ValueError from the enum constructors when a stored value is unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InvoiceDirection(str, Enum):
    """Sales invoices are issued by us; purchase invoices are received."""

    SALES = "sales"
    PURCHASE = "purchase"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status.

    Contract: CANCELLED is terminal.  Any other status counts toward totals.
    """

    DRAFT = "draft"
    ISSUED = "issued"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class InvoiceOrigin(str, Enum):
    """Where the invoice record was entered."""

    BAROBILL = "barobill"  # electronic invoicing integration
    MANUAL = "manual"
    EXCEL = "excel"


class PaymentDirection(str, Enum):
    """IN is a deposit received; OUT is a disbursement made."""

    IN = "in"
    OUT = "out"


@dataclass(frozen=True)
class InvoiceRecord:
    """
    One tax invoice as read from the invoice record source.

    Contract:
        ``total_amount`` is the only amount the balance engine reads.
        ``supply_amount`` and ``tax_amount`` are informational.
    Guarantees:
        - Frozen; callers receive a fresh instance per read.
    Non-goals:
        - Does not validate itself.  Validation happens at the write
          boundary (``InvoiceRecordService``).
    """

    date: str
    direction: InvoiceDirection
    status: InvoiceStatus
    total_amount: int
    counterparty_name: str
    counterparty_id: str | None = None
    record_id: str | None = None
    item_label: str | None = None
    site_name: str | None = None
    team_name: str | None = None
    memo: str | None = None
    invoice_number: str | None = None
    supply_amount: int = 0
    tax_amount: int = 0
    origin: InvoiceOrigin = InvoiceOrigin.MANUAL
    site_id: str | None = None
    team_id: str | None = None
    created_by: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == InvoiceStatus.CANCELLED

    @property
    def is_sales(self) -> bool:
        return self.direction == InvoiceDirection.SALES


@dataclass(frozen=True)
class PaymentRecord:
    """
    One cash movement as read from the payment record source.

    Contract:
        ``amount`` is a positive magnitude; ``direction`` decides whether it
        reduces the receivable (IN) or the payable (OUT).
    """

    date: str
    direction: PaymentDirection
    amount: int
    counterparty_name: str
    counterparty_id: str | None = None
    record_id: str | None = None
    site_name: str | None = None
    team_name: str | None = None
    memo: str | None = None
    site_id: str | None = None
    tax_invoice_id: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    category: str | None = None
    created_by: str | None = None

    @property
    def is_deposit(self) -> bool:
        return self.direction == PaymentDirection.IN
