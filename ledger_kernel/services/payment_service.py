"""
PaymentRecordService -- write side of the payment record source.

Deposits and disbursements are appended against a ledger view.  Amounts
are stored as magnitudes; ``direction`` carries the effect.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from ledger_kernel.domain.records import PaymentDirection, PaymentRecord
from ledger_kernel.exceptions import InvalidRecordError, RecordNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.payment import Payment
from ledger_kernel.selectors.payment_selector import payment_to_record
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.validation import (
    coerce_enum,
    require_amount,
    require_iso_date,
    require_name,
)

logger = get_logger("services.payment")

_RECORD_TYPE = "payment"

_EDITABLE_FIELDS = frozenset({
    "date",
    "direction",
    "amount",
    "counterparty_id",
    "counterparty_name",
    "site_id",
    "site_name",
    "team_name",
    "tax_invoice_id",
    "bank_name",
    "account_number",
    "category",
    "memo",
})


class PaymentRecordService(BaseService[Payment]):
    """Service for managing deposit/disbursement records."""

    def _get_by_id(self, record_id: str) -> Payment:
        try:
            key = UUID(record_id)
        except ValueError:
            raise RecordNotFoundError(_RECORD_TYPE, record_id) from None
        row = self.session.get(Payment, key)
        if row is None:
            raise RecordNotFoundError(_RECORD_TYPE, record_id)
        return row

    def add_payment(
        self,
        *,
        date: str,
        direction: PaymentDirection | str,
        amount: int,
        counterparty_name: str,
        counterparty_id: str | None = None,
        site_id: str | None = None,
        site_name: str | None = None,
        team_name: str | None = None,
        tax_invoice_id: str | None = None,
        bank_name: str | None = None,
        account_number: str | None = None,
        category: str | None = None,
        memo: str | None = None,
        created_by: str | None = None,
    ) -> PaymentRecord:
        """
        Record a deposit (``in``) or disbursement (``out``).

        Returns:
            The created PaymentRecord.

        Raises:
            InvalidRecordError: On a negative amount, blank name, bad date,
                or unknown direction.
        """
        direction = coerce_enum(_RECORD_TYPE, "direction", PaymentDirection, direction)

        now = self._clock.now()
        row = Payment(
            payment_date=require_iso_date(_RECORD_TYPE, "date", date),
            direction=direction.value,
            amount=require_amount(_RECORD_TYPE, "amount", amount),
            counterparty_id=counterparty_id,
            counterparty_name=require_name(_RECORD_TYPE, "counterparty_name", counterparty_name),
            site_id=site_id,
            site_name=site_name,
            team_name=team_name,
            tax_invoice_id=tax_invoice_id,
            bank_name=bank_name,
            account_number=account_number,
            category=category,
            memo=memo,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        self.session.flush()

        logger.info("payment_added", extra={
            "record_id": str(row.id),
            "direction": row.direction,
            "amount": row.amount,
            "counterparty_id": row.counterparty_id,
            "counterparty_name": row.counterparty_name,
        })
        return payment_to_record(row)

    def update_payment(self, record_id: str, **changes: Any) -> PaymentRecord:
        """
        Edit an existing payment.

        All values are validated before any is applied, so a rejected
        edit leaves the row untouched.

        Raises:
            RecordNotFoundError: If the payment doesn't exist.
            InvalidRecordError: On an unknown field or invalid value.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise InvalidRecordError(
                _RECORD_TYPE, ",".join(sorted(unknown)), "not an editable field"
            )

        row = self._get_by_id(record_id)

        updates: dict[str, Any] = {}
        if "date" in changes:
            updates["payment_date"] = require_iso_date(_RECORD_TYPE, "date", changes.pop("date"))
        if "direction" in changes:
            updates["direction"] = coerce_enum(
                _RECORD_TYPE, "direction", PaymentDirection, changes.pop("direction")
            ).value
        if "amount" in changes:
            updates["amount"] = require_amount(_RECORD_TYPE, "amount", changes.pop("amount"))
        if "counterparty_name" in changes:
            updates["counterparty_name"] = require_name(
                _RECORD_TYPE, "counterparty_name", changes.pop("counterparty_name")
            )
        updates.update(changes)

        for field, value in updates.items():
            setattr(row, field, value)
        row.updated_at = self._clock.now()
        self.session.flush()

        logger.info("payment_updated", extra={
            "record_id": record_id,
            "direction": row.direction,
            "amount": row.amount,
        })
        return payment_to_record(row)

    def delete_payment(self, record_id: str) -> None:
        """Remove a payment record."""
        row = self._get_by_id(record_id)
        self.session.delete(row)
        self.session.flush()
        logger.warning("payment_deleted", extra={
            "record_id": record_id,
            "amount": row.amount,
        })
