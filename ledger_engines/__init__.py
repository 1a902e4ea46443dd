"""
Module: ledger_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain and ledger_kernel.logging_config.
    MUST NOT import ledger_services or ledger_config.

Invariants enforced:
    - Purity: engines never read the clock or touch storage.
    - Integer-only arithmetic for currency amounts.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine``
    (see ``ledger_engines.tracer``).
"""

from ledger_engines.balance import (
    DEFAULT_LABELS,
    BalanceCalculator,
    BalanceTotals,
    LedgerLabels,
    LedgerLine,
    LedgerLineKind,
)
from ledger_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "DEFAULT_LABELS",
    "BalanceCalculator",
    "BalanceTotals",
    "LedgerLabels",
    "LedgerLine",
    "LedgerLineKind",
    "compute_input_fingerprint",
    "traced_engine",
]
