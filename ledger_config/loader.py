"""
Settings loader (``ledger_config.loader``).

Responsibility
--------------
Read a YAML settings file and parse it into a validated, frozen
``LedgerSettings``.  Runtime callers go through
``ledger_config.get_active_settings()``; this module is its machinery.

Invariants enforced
-------------------
* Unknown keys are rejected, never ignored.
* ``fetch_workers`` is a positive integer; labels are non-empty strings.
* The environment may override ``database_url`` only.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid settings  -> ``InvalidSettingsError``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import LedgerLabels, LedgerSettings
from ledger_kernel.exceptions import InvalidSettingsError

DATABASE_URL_ENV = "LEDGER_DATABASE_URL"

_TOP_LEVEL_KEYS = frozenset(
    {"database_url", "echo_sql", "fetch_workers", "log_level", "labels"}
)
_LABEL_KEYS = ("invoice_placeholder", "deposit", "disbursement")
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> Any:
    """
    Load a single YAML file and return its contents (a dict when well-formed).

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _require_text(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidSettingsError(key, "must be a non-empty string")
    return value


def parse_labels(data: Any) -> LedgerLabels:
    """Parse the ``labels`` block; omitted labels keep their defaults."""
    if data is None:
        return LedgerLabels()
    if not isinstance(data, Mapping):
        raise InvalidSettingsError("labels", "must be a mapping")

    unknown = set(data) - set(_LABEL_KEYS)
    if unknown:
        raise InvalidSettingsError(
            "labels", f"unknown keys: {', '.join(sorted(unknown))}"
        )

    values = {
        key: _require_text(f"labels.{key}", data[key])
        for key in _LABEL_KEYS
        if key in data
    }
    return LedgerLabels(**values)


def parse_settings(data: Any) -> LedgerSettings:
    """
    Parse and validate a settings mapping.

    Preconditions:
        - ``data`` is the mapping loaded from YAML.
    Postconditions:
        - Returns a frozen ``LedgerSettings``.
    Raises:
        InvalidSettingsError: on any missing, unknown or ill-typed key.
    """
    if not isinstance(data, Mapping):
        raise InvalidSettingsError("<root>", "settings must be a mapping")

    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise InvalidSettingsError(
            "<root>", f"unknown keys: {', '.join(sorted(unknown))}"
        )

    if "database_url" not in data:
        raise InvalidSettingsError("database_url", "is required")
    database_url = _require_text("database_url", data["database_url"])

    echo_sql = data.get("echo_sql", False)
    if not isinstance(echo_sql, bool):
        raise InvalidSettingsError("echo_sql", "must be a boolean")

    fetch_workers = data.get("fetch_workers", 2)
    # bool is an int subclass; reject it explicitly
    if isinstance(fetch_workers, bool) or not isinstance(fetch_workers, int):
        raise InvalidSettingsError("fetch_workers", "must be an integer")
    if fetch_workers < 1:
        raise InvalidSettingsError("fetch_workers", "must be >= 1")

    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise InvalidSettingsError(
            "log_level", f"must be one of {', '.join(sorted(_LOG_LEVELS))}"
        )

    return LedgerSettings(
        database_url=database_url,
        echo_sql=echo_sql,
        fetch_workers=fetch_workers,
        log_level=log_level,
        labels=parse_labels(data.get("labels")),
    )


def apply_environment(
    data: Any,
    environ: Mapping[str, str],
) -> Any:
    """Return a copy of ``data`` with environment overrides applied."""
    if not isinstance(data, Mapping):
        # parse_settings reports the malformed root
        return data
    merged = dict(data)
    override = environ.get(DATABASE_URL_ENV)
    if override:
        merged["database_url"] = override
    return merged


def log_level_number(settings: LedgerSettings) -> int:
    """Translate the configured level name into a ``logging`` constant."""
    return logging.getLevelName(settings.log_level)
