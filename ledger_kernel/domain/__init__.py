"""Pure domain value objects for the ledger kernel."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.counterparty import ById, ByName, CounterpartyRef
from ledger_kernel.domain.records import (
    InvoiceDirection,
    InvoiceOrigin,
    InvoiceRecord,
    InvoiceStatus,
    PaymentDirection,
    PaymentRecord,
)

__all__ = [
    "ById",
    "ByName",
    "Clock",
    "CounterpartyRef",
    "DeterministicClock",
    "InvoiceDirection",
    "InvoiceOrigin",
    "InvoiceRecord",
    "InvoiceStatus",
    "PaymentDirection",
    "PaymentRecord",
    "SystemClock",
]
