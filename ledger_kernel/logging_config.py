"""
Structured JSON logging for the ledger.

Every record is one JSON object: timestamp, level, logger, message, the
counterparty currently being computed (if any), the ``extra`` payload and,
for records logged with ``exc_info``, the exception's type, message,
``code`` and structured attributes.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, Iterator


class LogContext:
    """Counterparty reference attached to every record logged while bound."""

    _counterparty_ref: ContextVar[str | None] = ContextVar(
        "log_counterparty_ref", default=None
    )

    @classmethod
    def get_all(cls) -> dict[str, str]:
        ref = cls._counterparty_ref.get()
        return {} if ref is None else {"counterparty_ref": ref}

    @classmethod
    def clear(cls) -> None:
        cls._counterparty_ref.set(None)

    @classmethod
    @contextmanager
    def bind(cls, *, counterparty_ref: str) -> Iterator[None]:
        """Bind ``counterparty_ref`` for the block; the previous value is restored."""
        token = cls._counterparty_ref.set(counterparty_ref)
        try:
            yield
        finally:
            cls._counterparty_ref.reset(token)


# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, val) for key, val in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            if hasattr(exc, "code"):
                payload["exc_code"] = exc.code
            # LedgerError subclasses keep their context as public attributes
            for key, val in vars(exc).items():
                if not key.startswith("_"):
                    payload[f"exc_{key}"] = val
            payload["traceback"] = self.formatException(record.exc_info)

        # UUIDs, datetimes and enums fall back to str()
        return json.dumps(payload, default=str, ensure_ascii=False)


_LOGGER_PREFIX = "ledger_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ledger_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``ledger_kernel`` logger.

    Only the first call has any effect; later calls return immediately.
    Without ``handler`` records go to stderr.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False

    handler = handler or logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
