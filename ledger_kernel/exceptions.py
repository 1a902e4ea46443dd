"""
Typed exception hierarchy for the ledger kernel.

Every error has a typed class (catch by type, not by message), a ``code``
class attribute (machine-readable, API-safe), and carries its context as
structured attributes rather than only inside the message string.

    LedgerError (base)
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   +-- InvalidRecordError
    |   +-- InvoiceAlreadyCancelledError
    |
    +-- SourceError
    |   +-- RecordSourceError
    |
    +-- ConfigError
        +-- InvalidSettingsError

Category  | Code                       | When Raised
----------|----------------------------|------------------------------------------
Record    | RECORD_NOT_FOUND           | Invoice/payment ID doesn't exist
          | INVALID_RECORD             | Record rejected at the write boundary
          | INVOICE_ALREADY_CANCELLED  | Cancelling an already-cancelled invoice
----------|----------------------------|------------------------------------------
Source    | RECORD_SOURCE_UNAVAILABLE  | A record source could not be read
----------|----------------------------|------------------------------------------
Config    | INVALID_SETTINGS           | Settings file fails validation

Handling pattern -- a source failure is never an empty result:

    try:
        history = balance_service.compute_history(ById("C1"))
    except RecordSourceError as e:
        notify_user("failed to load")   # e.source, e.operation are available
"""


class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "LEDGER_ERROR"


# Record-related exceptions


class RecordError(LedgerError):
    """Base exception for invoice/payment record errors."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Record with given ID was not found."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_type: str, record_id: str):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type} not found: {record_id}")


class InvalidRecordError(RecordError):
    """
    Record failed validation at the write boundary.

    The balance engine does not validate its inputs; well-formedness is
    guaranteed here, before a record reaches storage.
    """

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, field: str, reason: str):
        self.record_type = record_type
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {record_type}.{field}: {reason}")


class InvoiceAlreadyCancelledError(RecordError):
    """Invoice is already cancelled; cancellation is one-way."""

    code: str = "INVOICE_ALREADY_CANCELLED"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Invoice already cancelled: {record_id}")


# Source-related exceptions


class SourceError(LedgerError):
    """Base exception for record source errors."""

    code: str = "SOURCE_ERROR"


class RecordSourceError(SourceError):
    """
    A record source failed to answer a read.

    Raised instead of returning an empty list so that "zero records" and
    "fetch failed" can never be confused.
    """

    code: str = "RECORD_SOURCE_UNAVAILABLE"

    def __init__(self, source: str, operation: str, detail: str):
        self.source = source
        self.operation = operation
        self.detail = detail
        super().__init__(f"{source} source failed during {operation}: {detail}")


# Configuration exceptions


class ConfigError(LedgerError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidSettingsError(ConfigError):
    """Settings file parsed but failed validation."""

    code: str = "INVALID_SETTINGS"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid setting {key!r}: {reason}")
