"""
Ledger Kernel

Counterparty records for the subcontracting operations console:
- Tax invoices (sales / purchase) with cancellation as retraction
- Deposits and disbursements
- Read-only selectors and validated write services
- Structured logging and typed errors
"""

__version__ = "0.1.0"
