"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.invoice_selector import (
    InvoiceSelector,
    InvoiceTotals,
    invoice_to_record,
)
from ledger_kernel.selectors.payment_selector import (
    PaymentSelector,
    PaymentTotals,
    payment_to_record,
)

__all__ = [
    "InvoiceSelector",
    "InvoiceTotals",
    "PaymentSelector",
    "PaymentTotals",
    "invoice_to_record",
    "payment_to_record",
]
