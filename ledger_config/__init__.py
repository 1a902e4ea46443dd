"""
ledger_config -- single public entrypoint for ledger settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files or
    environment variables directly.

Architecture position:
    Configuration.  Sits above ``ledger_kernel``, ``ledger_engines`` and
    ``ledger_services``, none of which may import from ``ledger_config``;
    ``ledger_config.bridges`` translates settings into their inputs.

Invariants enforced:
    - Single entrypoint: all runtime settings flow through
      ``get_active_settings()``.
    - Validation happens once, at load; the returned settings are frozen.
    - ``LEDGER_DATABASE_URL`` overrides ``database_url`` and nothing else.

Failure modes:
    - ``FileNotFoundError`` -- ``config_path`` does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``InvalidSettingsError`` -- structural validation failed.

Audit relevance:
    Every successful call emits a ``LEDGER_CONFIG_TRACE`` log entry naming
    the source file and whether the database URL came from the environment.
    The URL itself is never logged.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from ledger_config.loader import (
    DATABASE_URL_ENV,
    apply_environment,
    load_yaml_file,
    parse_settings,
)
from ledger_config.schema import LedgerLabels, LedgerSettings
from ledger_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> LedgerSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the packaged
            ``defaults.yaml``.
        environ: Environment mapping for overrides.  Defaults to
            ``os.environ``.

    Returns:
        LedgerSettings -- validated and frozen.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        InvalidSettingsError: If validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    env = os.environ if environ is None else environ

    raw = load_yaml_file(path)
    settings = parse_settings(apply_environment(raw, env))

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_path": str(path),
            "database_url_from_env": bool(env.get(DATABASE_URL_ENV)),
            "fetch_workers": settings.fetch_workers,
            "log_level": settings.log_level,
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "LedgerLabels",
    "LedgerSettings",
    "get_active_settings",
]
