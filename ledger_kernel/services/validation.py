"""
Write-boundary validation shared by the invoice and payment services.

The balance engine trusts its inputs.  These checks are where a record
source earns that trust: a record that fails here never reaches storage.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TypeVar

from ledger_kernel.exceptions import InvalidRecordError

E = TypeVar("E", bound=Enum)


def require_iso_date(record_type: str, field: str, value: str) -> str:
    """Return ``value`` if it is a ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or len(value) != 10:
        raise InvalidRecordError(record_type, field, f"expected YYYY-MM-DD, got {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidRecordError(
            record_type, field, f"not a calendar date: {value!r}"
        ) from None
    return value


def require_amount(record_type: str, field: str, value: int) -> int:
    """Return ``value`` if it is a non-negative integer amount."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRecordError(record_type, field, f"expected integer, got {value!r}")
    if value < 0:
        raise InvalidRecordError(record_type, field, "amount cannot be negative")
    return value


def require_name(record_type: str, field: str, value: str | None) -> str:
    """Return the stripped name; blank names are rejected."""
    if value is None or not str(value).strip():
        raise InvalidRecordError(record_type, field, "is required")
    return str(value).strip()


def coerce_enum(record_type: str, field: str, enum_cls: type[E], value: E | str) -> E:
    """Accept an enum member or its value string."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRecordError(
            record_type, field, f"{value!r} is not one of: {allowed}"
        ) from None
