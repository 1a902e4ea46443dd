"""
Payment query selector.

Read-only access to deposits and disbursements as ``PaymentRecord`` DTOs.
Same conventions as the invoice selector: newest first, independent id and
name lookups, SQL aggregates consistent with manual summation.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.records import PaymentDirection, PaymentRecord
from ledger_kernel.models.payment import Payment
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class PaymentTotals:
    """Deposit and disbursement sums for one counterparty."""

    total_in: int
    total_out: int

    @property
    def net(self) -> int:
        return self.total_in - self.total_out


def payment_to_record(row: Payment) -> PaymentRecord:
    """Convert ORM Payment to PaymentRecord DTO."""
    return PaymentRecord(
        record_id=str(row.id),
        date=row.payment_date,
        direction=PaymentDirection(row.direction),
        amount=row.amount,
        counterparty_id=row.counterparty_id,
        counterparty_name=row.counterparty_name,
        site_name=row.site_name,
        team_name=row.team_name,
        memo=row.memo,
        site_id=row.site_id,
        tax_invoice_id=row.tax_invoice_id,
        bank_name=row.bank_name,
        account_number=row.account_number,
        category=row.category,
        created_by=row.created_by,
    )


class PaymentSelector(BaseSelector[Payment]):
    """Selector for payment queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def _list(self, *criteria) -> list[PaymentRecord]:
        stmt = (
            select(Payment)
            .where(*criteria)
            .order_by(Payment.payment_date.desc())
        )
        rows = self.session.execute(stmt).scalars().all()
        return [payment_to_record(r) for r in rows]

    def get(self, record_id: str) -> PaymentRecord | None:
        try:
            key = UUID(record_id)
        except ValueError:
            return None
        row = self.session.get(Payment, key)
        return payment_to_record(row) if row is not None else None

    def list_all(self, limit: int | None = None) -> list[PaymentRecord]:
        """All payments, newest first, optionally capped at ``limit``."""
        stmt = select(Payment).order_by(Payment.payment_date.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = self.session.execute(stmt).scalars().all()
        return [payment_to_record(r) for r in rows]

    def list_by_counterparty_id(self, counterparty_id: str) -> list[PaymentRecord]:
        return self._list(Payment.counterparty_id == counterparty_id)

    def list_by_counterparty_name(self, counterparty_name: str) -> list[PaymentRecord]:
        return self._list(Payment.counterparty_name == counterparty_name)

    def list_by_site(self, site_id: str) -> list[PaymentRecord]:
        return self._list(Payment.site_id == site_id)

    def list_by_date_range(self, start_date: str, end_date: str) -> list[PaymentRecord]:
        """Payments dated within [start_date, end_date] (inclusive ISO text)."""
        return self._list(
            Payment.payment_date >= start_date,
            Payment.payment_date <= end_date,
        )

    def totals_by_counterparty_id(self, counterparty_id: str) -> PaymentTotals:
        """Sum deposits and disbursements for a counterparty."""
        total_in = func.coalesce(
            func.sum(
                case(
                    (Payment.direction == PaymentDirection.IN.value, Payment.amount),
                    else_=0,
                )
            ),
            0,
        )
        total_out = func.coalesce(
            func.sum(
                case(
                    (Payment.direction == PaymentDirection.OUT.value, Payment.amount),
                    else_=0,
                )
            ),
            0,
        )
        stmt = select(total_in, total_out).where(
            Payment.counterparty_id == counterparty_id,
        )
        received, paid = self.session.execute(stmt).one()
        return PaymentTotals(total_in=int(received), total_out=int(paid))
