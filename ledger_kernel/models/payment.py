"""
Module: ledger_kernel.models.payment
Responsibility: ORM persistence for cash movements against a counterparty:
    deposits received (``in``) and disbursements made (``out``).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount is a non-negative magnitude; direction carries the effect.
    - payment_date is ISO ``YYYY-MM-DD`` text.
"""

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Payment(TrackedBase):
    """Deposit or disbursement row."""

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_counterparty_id", "counterparty_id"),
        Index("idx_payment_counterparty_name", "counterparty_name"),
        Index("idx_payment_site_id", "site_id"),
        Index("idx_payment_date", "payment_date"),
    )

    payment_date: Mapped[str] = mapped_column(String(10), nullable=False)
    direction: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    counterparty_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    counterparty_name: Mapped[str] = mapped_column(String(200), nullable=False)

    site_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    site_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    team_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tax_invoice_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    memo: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Payment {self.payment_date} {self.direction} "
            f"{self.counterparty_name} {self.amount}>"
        )
