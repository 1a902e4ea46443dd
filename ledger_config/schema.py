"""
Ledger settings schema.

Frozen dataclasses the loader parses YAML into.  Nothing here reads files
or the environment; see ``ledger_config.loader`` for that.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ledger_engines.balance import LedgerLabels

# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerSettings:
    """Everything the ledger needs to start: storage, fan-out, logging, labels."""

    database_url: str
    echo_sql: bool = False
    fetch_workers: int = 2
    log_level: str = "INFO"
    labels: LedgerLabels = field(default_factory=LedgerLabels)


__all__ = ["LedgerLabels", "LedgerSettings"]
