"""
Module: ledger_kernel.models.invoice
Responsibility: ORM persistence for tax invoices, both issued (sales) and
    received (purchase), whether entered manually, imported from a
    spreadsheet, or synced from the electronic invoicing integration.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - direction / status / origin are persisted as their enum ``.value``.
    - invoice_date is ISO ``YYYY-MM-DD`` text so that range filters and
      ordering are plain string comparisons.
    - Rows are never required to be deleted for the ledger to stay correct;
      status ``cancelled`` retracts an invoice.

Failure modes:
    - IntegrityError on NULL counterparty_name or total_amount.
"""

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class TaxInvoice(TrackedBase):
    """
    Tax invoice row.

    Contract:
        counterparty_name is always set; counterparty_id is set only when the
        invoice was linked to a registered company.  Lookups by id and by
        name are independent.
    """

    __tablename__ = "tax_invoices"

    __table_args__ = (
        Index("idx_invoice_counterparty_id", "counterparty_id"),
        Index("idx_invoice_counterparty_name", "counterparty_name"),
        Index("idx_invoice_site_id", "site_id"),
        Index("idx_invoice_date", "invoice_date"),
        Index("idx_invoice_direction", "direction"),
    )

    invoice_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    invoice_date: Mapped[str] = mapped_column(String(10), nullable=False)
    direction: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    counterparty_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    counterparty_name: Mapped[str] = mapped_column(String(200), nullable=False)

    supply_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tax_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    origin: Mapped[str] = mapped_column(String(20), nullable=False, default="manual")

    item_label: Mapped[str | None] = mapped_column(String(200), nullable=True)
    site_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    site_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    team_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    memo: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TaxInvoice {self.invoice_date} {self.direction} "
            f"{self.counterparty_name} {self.total_amount} [{self.status}]>"
        )
