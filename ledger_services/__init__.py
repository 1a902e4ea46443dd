"""
ledger_services -- imperative shell around the pure balance engine.

Fetches counterparty records through pluggable sources, runs the
``ledger_engines`` calculators, and logs the outcome.  Sits above
``ledger_kernel`` and ``ledger_engines``; nothing below imports from here.
"""

from ledger_services.balance_service import (
    CounterpartyBalanceService,
    CounterpartyStatement,
)
from ledger_services.sources import (
    InvoiceRecordSource,
    PaymentRecordSource,
    SqlInvoiceRecordSource,
    SqlPaymentRecordSource,
)

__all__ = [
    "CounterpartyBalanceService",
    "CounterpartyStatement",
    "InvoiceRecordSource",
    "PaymentRecordSource",
    "SqlInvoiceRecordSource",
    "SqlPaymentRecordSource",
]
