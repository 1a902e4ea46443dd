"""
InvoiceRecordService -- write side of the invoice record source.

Responsibility:
    Add, edit, cancel and delete tax invoices.  Every write is validated so
    that the balance engine, which does not validate, only ever sees
    well-formed records.

Architecture position:
    Kernel > Services.  Flushes within the caller's transaction.

Invariants enforced:
    - counterparty_name is required; amounts are non-negative integers;
      invoice_date is ISO text.
    - CANCELLED is terminal: a cancelled invoice cannot be cancelled again
      or moved back to another status.

Failure modes:
    - InvalidRecordError on any validation failure (nothing is written).
    - RecordNotFoundError when the record ID does not exist.
    - InvoiceAlreadyCancelledError on a transition out of CANCELLED.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from ledger_kernel.domain.records import (
    InvoiceDirection,
    InvoiceOrigin,
    InvoiceRecord,
    InvoiceStatus,
)
from ledger_kernel.exceptions import (
    InvalidRecordError,
    InvoiceAlreadyCancelledError,
    RecordNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.invoice import TaxInvoice
from ledger_kernel.selectors.invoice_selector import invoice_to_record
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.validation import (
    coerce_enum,
    require_amount,
    require_iso_date,
    require_name,
)

logger = get_logger("services.invoice")

_RECORD_TYPE = "invoice"

# Fields an edit may touch; status changes go through _check_transition.
_EDITABLE_FIELDS = frozenset({
    "date",
    "direction",
    "status",
    "total_amount",
    "supply_amount",
    "tax_amount",
    "counterparty_id",
    "counterparty_name",
    "invoice_number",
    "item_label",
    "site_id",
    "site_name",
    "team_id",
    "team_name",
    "memo",
})


def _default_status(direction: InvoiceDirection) -> InvoiceStatus:
    if direction == InvoiceDirection.SALES:
        return InvoiceStatus.ISSUED
    return InvoiceStatus.RECEIVED


class InvoiceRecordService(BaseService[TaxInvoice]):
    """
    Service for managing tax invoice records.

    All public methods return InvoiceRecord DTOs, not ORM rows.
    """

    def _get_by_id(self, record_id: str) -> TaxInvoice:
        try:
            key = UUID(record_id)
        except ValueError:
            raise RecordNotFoundError(_RECORD_TYPE, record_id) from None
        row = self.session.get(TaxInvoice, key)
        if row is None:
            raise RecordNotFoundError(_RECORD_TYPE, record_id)
        return row

    def add_invoice(
        self,
        *,
        date: str,
        direction: InvoiceDirection | str,
        counterparty_name: str,
        total_amount: int,
        status: InvoiceStatus | str | None = None,
        counterparty_id: str | None = None,
        supply_amount: int = 0,
        tax_amount: int = 0,
        origin: InvoiceOrigin | str = InvoiceOrigin.MANUAL,
        invoice_number: str | None = None,
        item_label: str | None = None,
        site_id: str | None = None,
        site_name: str | None = None,
        team_id: str | None = None,
        team_name: str | None = None,
        memo: str | None = None,
        created_by: str | None = None,
    ) -> InvoiceRecord:
        """
        Record a new tax invoice.

        Args:
            date: Invoice date, ``YYYY-MM-DD``.
            direction: sales (issued by us) or purchase (received).
            counterparty_name: Display name; required even when
                counterparty_id is given.
            total_amount: Supply amount plus tax, integer currency units.
            status: Defaults to ISSUED for sales, RECEIVED for purchases.
            counterparty_id: Registered counterparty, if linked.
            origin: manual, excel, or barobill.

        Returns:
            The created InvoiceRecord.
        """
        direction = coerce_enum(_RECORD_TYPE, "direction", InvoiceDirection, direction)
        if status is None:
            status = _default_status(direction)
        status = coerce_enum(_RECORD_TYPE, "status", InvoiceStatus, status)
        origin = coerce_enum(_RECORD_TYPE, "origin", InvoiceOrigin, origin)

        now = self._clock.now()
        row = TaxInvoice(
            invoice_date=require_iso_date(_RECORD_TYPE, "date", date),
            direction=direction.value,
            status=status.value,
            counterparty_id=counterparty_id,
            counterparty_name=require_name(_RECORD_TYPE, "counterparty_name", counterparty_name),
            total_amount=require_amount(_RECORD_TYPE, "total_amount", total_amount),
            supply_amount=require_amount(_RECORD_TYPE, "supply_amount", supply_amount),
            tax_amount=require_amount(_RECORD_TYPE, "tax_amount", tax_amount),
            origin=origin.value,
            invoice_number=invoice_number,
            item_label=item_label,
            site_id=site_id,
            site_name=site_name,
            team_id=team_id,
            team_name=team_name,
            memo=memo,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        self.session.flush()

        logger.info("invoice_added", extra={
            "record_id": str(row.id),
            "direction": row.direction,
            "status": row.status,
            "counterparty_id": row.counterparty_id,
            "counterparty_name": row.counterparty_name,
            "total_amount": row.total_amount,
            "origin": row.origin,
        })
        return invoice_to_record(row)

    def update_invoice(self, record_id: str, **changes: Any) -> InvoiceRecord:
        """
        Edit an existing invoice.

        Only keys in the editable field set are accepted; a value of None
        clears an optional field.  Required fields are re-validated.

        Raises:
            RecordNotFoundError: If the invoice doesn't exist.
            InvalidRecordError: On an unknown field or invalid value.
            InvoiceAlreadyCancelledError: On a status change out of CANCELLED.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise InvalidRecordError(
                _RECORD_TYPE, ",".join(sorted(unknown)), "not an editable field"
            )

        row = self._get_by_id(record_id)

        # Validate everything before touching the row so a failure leaves it clean.
        updates: dict[str, Any] = {}
        if "status" in changes:
            status = coerce_enum(_RECORD_TYPE, "status", InvoiceStatus, changes.pop("status"))
            self._check_transition(row, status)
            updates["status"] = status.value
        if "date" in changes:
            updates["invoice_date"] = require_iso_date(_RECORD_TYPE, "date", changes.pop("date"))
        if "direction" in changes:
            updates["direction"] = coerce_enum(
                _RECORD_TYPE, "direction", InvoiceDirection, changes.pop("direction")
            ).value
        if "counterparty_name" in changes:
            updates["counterparty_name"] = require_name(
                _RECORD_TYPE, "counterparty_name", changes.pop("counterparty_name")
            )
        for amount_field in ("total_amount", "supply_amount", "tax_amount"):
            if amount_field in changes:
                updates[amount_field] = require_amount(
                    _RECORD_TYPE, amount_field, changes.pop(amount_field)
                )
        updates.update(changes)

        for field, value in updates.items():
            setattr(row, field, value)
        row.updated_at = self._clock.now()
        self.session.flush()

        logger.info("invoice_updated", extra={
            "record_id": record_id,
            "status": row.status,
            "total_amount": row.total_amount,
        })
        return invoice_to_record(row)

    def cancel_invoice(self, record_id: str) -> InvoiceRecord:
        """
        Retract an invoice by moving it to CANCELLED.

        The row is kept; cancelled invoices never contribute to totals or
        ledger lines.

        Raises:
            RecordNotFoundError: If the invoice doesn't exist.
            InvoiceAlreadyCancelledError: If it is already cancelled.
        """
        row = self._get_by_id(record_id)
        if row.status == InvoiceStatus.CANCELLED.value:
            raise InvoiceAlreadyCancelledError(record_id)
        row.status = InvoiceStatus.CANCELLED.value
        row.updated_at = self._clock.now()
        self.session.flush()

        logger.info("invoice_cancelled", extra={
            "record_id": record_id,
            "total_amount": row.total_amount,
            "direction": row.direction,
        })
        return invoice_to_record(row)

    def delete_invoice(self, record_id: str) -> None:
        """
        Physically remove an invoice.

        Prefer ``cancel_invoice``; deletion exists for entry mistakes.
        """
        row = self._get_by_id(record_id)
        self.session.delete(row)
        self.session.flush()
        logger.warning("invoice_deleted", extra={
            "record_id": record_id,
            "total_amount": row.total_amount,
        })

    def _check_transition(self, row: TaxInvoice, status: InvoiceStatus) -> None:
        if row.status == InvoiceStatus.CANCELLED.value and status != InvoiceStatus.CANCELLED:
            raise InvoiceAlreadyCancelledError(str(row.id))
