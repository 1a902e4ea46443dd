"""
Tax invoice query selector.

Read-only access to tax invoices as ``InvoiceRecord`` DTOs.

Key design decisions:
- Every list query returns newest first (invoice_date descending); the
  balance engine re-sorts, so callers must not rely on this order for
  balances.
- Lookups by counterparty id and by counterparty name are independent
  queries.  Neither falls back to the other.
- ``totals_by_counterparty_id`` aggregates in SQL and must agree with a
  manual summation of ``list_by_counterparty_id``.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.records import (
    InvoiceDirection,
    InvoiceOrigin,
    InvoiceRecord,
    InvoiceStatus,
)
from ledger_kernel.models.invoice import TaxInvoice
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class InvoiceTotals:
    """Non-cancelled invoice sums for one counterparty."""

    sales_total: int
    purchase_total: int

    @property
    def balance(self) -> int:
        return self.sales_total - self.purchase_total


def invoice_to_record(row: TaxInvoice) -> InvoiceRecord:
    """Convert ORM TaxInvoice to InvoiceRecord DTO."""
    return InvoiceRecord(
        record_id=str(row.id),
        date=row.invoice_date,
        direction=InvoiceDirection(row.direction),
        status=InvoiceStatus(row.status),
        total_amount=row.total_amount,
        counterparty_id=row.counterparty_id,
        counterparty_name=row.counterparty_name,
        item_label=row.item_label,
        site_name=row.site_name,
        team_name=row.team_name,
        memo=row.memo,
        invoice_number=row.invoice_number,
        supply_amount=row.supply_amount,
        tax_amount=row.tax_amount,
        origin=InvoiceOrigin(row.origin),
        site_id=row.site_id,
        team_id=row.team_id,
        created_by=row.created_by,
    )


class InvoiceSelector(BaseSelector[TaxInvoice]):
    """Selector for tax invoice queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def _list(self, *criteria) -> list[InvoiceRecord]:
        stmt = (
            select(TaxInvoice)
            .where(*criteria)
            .order_by(TaxInvoice.invoice_date.desc())
        )
        rows = self.session.execute(stmt).scalars().all()
        return [invoice_to_record(r) for r in rows]

    def get(self, record_id: str) -> InvoiceRecord | None:
        """
        Get an invoice by ID.

        Returns:
            InvoiceRecord if found, None otherwise.
        """
        try:
            key = UUID(record_id)
        except ValueError:
            return None
        row = self.session.get(TaxInvoice, key)
        return invoice_to_record(row) if row is not None else None

    def list_all(self, limit: int | None = None) -> list[InvoiceRecord]:
        """All invoices, newest first, optionally capped at ``limit``."""
        stmt = select(TaxInvoice).order_by(TaxInvoice.invoice_date.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = self.session.execute(stmt).scalars().all()
        return [invoice_to_record(r) for r in rows]

    def list_by_direction(self, direction: InvoiceDirection) -> list[InvoiceRecord]:
        """All sales or all purchase invoices."""
        return self._list(TaxInvoice.direction == direction.value)

    def list_by_counterparty_id(self, counterparty_id: str) -> list[InvoiceRecord]:
        """Invoices linked to a registered counterparty, any status."""
        return self._list(TaxInvoice.counterparty_id == counterparty_id)

    def list_by_counterparty_name(self, counterparty_name: str) -> list[InvoiceRecord]:
        """Invoices recorded under an exact counterparty name, any status."""
        return self._list(TaxInvoice.counterparty_name == counterparty_name)

    def list_by_site(self, site_id: str) -> list[InvoiceRecord]:
        return self._list(TaxInvoice.site_id == site_id)

    def list_by_date_range(
        self,
        start_date: str,
        end_date: str,
        direction: InvoiceDirection | None = None,
    ) -> list[InvoiceRecord]:
        """
        Invoices dated within [start_date, end_date] (inclusive ISO text).

        Args:
            start_date: Lower bound, ``YYYY-MM-DD``.
            end_date: Upper bound, ``YYYY-MM-DD``.
            direction: Optional sales/purchase filter.
        """
        criteria = [
            TaxInvoice.invoice_date >= start_date,
            TaxInvoice.invoice_date <= end_date,
        ]
        if direction is not None:
            criteria.append(TaxInvoice.direction == direction.value)
        return self._list(*criteria)

    def totals_by_counterparty_id(self, counterparty_id: str) -> InvoiceTotals:
        """
        Sum non-cancelled invoices for a counterparty, split by direction.

        Returns:
            InvoiceTotals (zeros when the counterparty has no invoices).
        """
        sales = func.coalesce(
            func.sum(
                case(
                    (TaxInvoice.direction == InvoiceDirection.SALES.value,
                     TaxInvoice.total_amount),
                    else_=0,
                )
            ),
            0,
        )
        purchase = func.coalesce(
            func.sum(
                case(
                    (TaxInvoice.direction == InvoiceDirection.PURCHASE.value,
                     TaxInvoice.total_amount),
                    else_=0,
                )
            ),
            0,
        )
        stmt = select(sales, purchase).where(
            TaxInvoice.counterparty_id == counterparty_id,
            TaxInvoice.status != InvoiceStatus.CANCELLED.value,
        )
        sales_total, purchase_total = self.session.execute(stmt).one()
        return InvoiceTotals(
            sales_total=int(sales_total),
            purchase_total=int(purchase_total),
        )
