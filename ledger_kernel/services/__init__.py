"""Write-side services for the ledger kernel."""

from ledger_kernel.services.invoice_service import InvoiceRecordService
from ledger_kernel.services.payment_service import PaymentRecordService

__all__ = [
    "InvoiceRecordService",
    "PaymentRecordService",
]
