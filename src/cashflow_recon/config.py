# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Cashflow Recon.

This module is responsible for:
- loading the application configuration from a TOML file,
- resolving input file paths relative to the configuration file,
- exposing typed dataclasses used by the CLI.

The engine itself takes no configuration: everything here only drives the
CLI around it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")
INVALID_DATE_POLICIES: tuple[str, ...] = ("raise", "skip")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class InputsConfig:
    """Paths of the CSV exports feeding the engine (None when not set)."""

    bank_accounts: Optional[Path]
    receivables: Optional[Path]
    payables: Optional[Path]


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Cashflow Recon.

    This aggregates:
    - the input file paths,
    - the default bank account selection (empty = all accounts),
    - the policy for rows with unparseable dates,
    - display options for tables and CSV output,
    - the logging level.
    """

    inputs: InputsConfig
    selected_accounts: tuple[str, ...]
    on_invalid_date: str
    display_mode: str
    decimals: int
    output_dir: Path
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config entry [{name}] must be a table.")
    return value


def _choice(value: Any, allowed: tuple[str, ...], key: str) -> str:
    text = str(value)
    if text not in allowed:
        raise ValueError(
            f"Invalid value {text!r} for '{key}'. "
            f"Expected one of: {', '.join(allowed)}."
        )
    return text


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file is available."""
    return AppConfig(
        inputs=InputsConfig(bank_accounts=None, receivables=None, payables=None),
        selected_accounts=(),
        on_invalid_date="raise",
        display_mode="table",
        decimals=2,
        output_dir=Path("data/output").resolve(),
        log_level="WARNING",
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Cashflow Recon configuration from a TOML file.

    Expected sections (all optional)
    --------------------------------
    [inputs]
        bank_accounts, receivables, payables: CSV paths.

    [accounts]
        selected: list of bank account ids; empty or absent = all accounts.

    [movements]
        on_invalid_date: "raise" (default) or "skip".

    [display]
        mode: "table" (default), "csv" or "both".
        decimals: number of decimals in rendered amounts (default 2).
        output_dir: directory for CSV output (default "data/output").

    [logging]
        level: logging level name (default "WARNING").

    All paths are resolved relative to the directory of the TOML file.

    Parameters
    ----------
    config_path :
        Path to the TOML file. Defaults to ``cashflow_recon_config.toml``
        in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.
    """
    if config_path is None:
        config_file = Path("cashflow_recon_config.toml").resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / rel).resolve()

    # 1) Inputs
    inputs_section = _section(raw, "inputs")
    inputs = InputsConfig(
        bank_accounts=_resolve_optional(inputs_section.get("bank_accounts")),
        receivables=_resolve_optional(inputs_section.get("receivables")),
        payables=_resolve_optional(inputs_section.get("payables")),
    )

    # 2) Account selection
    accounts_section = _section(raw, "accounts")
    selected_raw = accounts_section.get("selected", [])
    if not isinstance(selected_raw, list):
        raise ValueError("'accounts.selected' must be a list of account ids.")
    selected_accounts = tuple(str(s) for s in selected_raw)

    # 3) Movements
    movements_section = _section(raw, "movements")
    on_invalid_date = _choice(
        movements_section.get("on_invalid_date", "raise"),
        INVALID_DATE_POLICIES,
        "movements.on_invalid_date",
    )

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = _choice(
        display_section.get("mode", "table"), DISPLAY_MODES, "display.mode"
    )
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError) as exc:
        raise ValueError("'display.decimals' must be an integer.") from exc
    output_dir_raw = display_section.get("output_dir", "data/output")
    output_dir = (base_dir / str(output_dir_raw)).resolve()

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = _choice(
        str(logging_section.get("level", "WARNING")).upper(),
        LOG_LEVELS,
        "logging.level",
    )

    return AppConfig(
        inputs=inputs,
        selected_accounts=selected_accounts,
        on_invalid_date=on_invalid_date,
        display_mode=display_mode,
        decimals=decimals,
        output_dir=output_dir,
        log_level=log_level,
    )
