"""
Counterparty references -- the two addressing modes of the ledger.

A counterparty is addressed either by its stable record identifier or by
the free-typed name that manual entries were recorded under.  The two
modes are deliberately NOT unified: records entered under a name before
an identifier existed are invisible to ``ById`` and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ById:
    """Address a counterparty by its stable identifier."""

    counterparty_id: str

    def __str__(self) -> str:
        return f"id:{self.counterparty_id}"


@dataclass(frozen=True)
class ByName:
    """Address a counterparty by the name used on manual entries."""

    counterparty_name: str

    def __str__(self) -> str:
        return f"name:{self.counterparty_name}"


CounterpartyRef = ById | ByName
