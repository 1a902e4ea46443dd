"""ORM models for the ledger kernel."""

from ledger_kernel.models.invoice import TaxInvoice
from ledger_kernel.models.payment import Payment

__all__ = [
    "Payment",
    "TaxInvoice",
]
