"""
Config -> Kernel / Engine / Service bridges.

Functions that turn ``LedgerSettings`` into the inputs the kernel, the
engines and the balance service expect.  They live here because none of
those layers may import ``ledger_config``.

Usage:
    from ledger_config import get_active_settings
    from ledger_config.bridges import build_balance_service, init_engine_from_settings
    from ledger_services import SqlInvoiceRecordSource, SqlPaymentRecordSource

    settings = get_active_settings()
    init_engine_from_settings(settings)
    service = build_balance_service(
        settings, SqlInvoiceRecordSource(), SqlPaymentRecordSource(),
    )
"""

from __future__ import annotations

from sqlalchemy import Engine

from ledger_config.loader import log_level_number
from ledger_config.schema import LedgerSettings
from ledger_engines.balance import BalanceCalculator
from ledger_kernel.db.engine import init_engine_from_url
from ledger_kernel.logging_config import configure_logging
from ledger_services.balance_service import CounterpartyBalanceService
from ledger_services.sources import InvoiceRecordSource, PaymentRecordSource


def build_balance_calculator(settings: LedgerSettings) -> BalanceCalculator:
    """Calculator writing the configured descriptions onto ledger lines."""
    return BalanceCalculator(labels=settings.labels)


def build_balance_service(
    settings: LedgerSettings,
    invoice_source: InvoiceRecordSource,
    payment_source: PaymentRecordSource,
) -> CounterpartyBalanceService:
    """Balance service using the configured labels and fetch fan-out."""
    return CounterpartyBalanceService(
        invoice_source,
        payment_source,
        calculator=build_balance_calculator(settings),
        fetch_workers=settings.fetch_workers,
    )


def configure_logging_from_settings(settings: LedgerSettings) -> None:
    configure_logging(level=log_level_number(settings))


def init_engine_from_settings(settings: LedgerSettings) -> Engine:
    """Initialize the module-level engine from ``settings``.

    Logging is configured first so the engine's own startup record uses the
    configured level.
    """
    configure_logging_from_settings(settings)
    return init_engine_from_url(settings.database_url, echo=settings.echo_sql)
