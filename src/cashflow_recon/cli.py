# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Cashflow Recon.

The CLI is intentionally thin: it does not implement any cash-flow logic
itself. It wires together:

- the TOML configuration (input paths, account selection, display options),
- the CSV readers for bank accounts, receivables and payables,
- the movement classifier,
- the cash-flow engine and the optional balance audit,
- the view helpers (DataFrames rendered as tables and/or CSV files).


High-level pipeline
-------------------

1) Load ``cashflow_recon_config.toml`` (or ``--config PATH``). When no
   configuration file exists and ``--config`` was not given, defaults are
   used and input files must be passed on the command line.

2) Resolve input paths; ``--bank-accounts``, ``--receivables`` and
   ``--payables`` override the [inputs] section.

3) Determine the ledger period:

   - ``--period current-month|mtd|last-month|next-30-days``, or
   - ``--from-date YYYY-MM-DD`` / ``--to-date YYYY-MM-DD`` (a missing bound
     is taken from the current month), or
   - the current month by default.

4) Read and classify receivables (inflows) and payables (outflows).

5) Compute the daily ledger for the selected accounts (``--account ID``,
   repeatable; falls back to [accounts].selected; empty = all accounts).
   ``--today`` overrides the observation date that decides which pending
   movements are overdue.

6) Render the summary and the daily ledger (and the balance audit with
   ``--audit``) as console tables and/or timestamped CSV files, depending
   on ``--display-mode`` (or [display].mode).


Examples
--------

    python -m cashflow_recon.cli --period next-30-days

    python -m cashflow_recon.cli \\
        --from-date 2024-01-01 --to-date 2024-01-31 \\
        --account acc-1 --account acc-2 --audit --display-mode both
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from . import __version__
from .audit import audit_balances
from .classifier import prepare_movements
from .config import AppConfig, default_app_config, load_app_config
from .engine import compute_cash_flow
from .errors import CashFlowError
from .io import read_bank_accounts, read_payables, read_receivables
from .periods import determine_period_from_args
from .views import breakdown_to_dataframe, ledger_to_dataframe, totals_to_dataframe

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m cashflow_recon.cli",
        description=(
            "Cashflow Recon - daily cash-flow reconciliation. Reads bank "
            "accounts, receivables and payables, and renders a day-by-day "
            "ledger of realized and projected balances."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of cashflow_recon and exit.",
    )

    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'cashflow_recon_config.toml' in the current directory is used "
            "when it exists."
        ),
    )

    # Input overrides
    ap.add_argument("--bank-accounts", dest="bank_accounts", metavar="CSV_PATH")
    ap.add_argument("--receivables", dest="receivables", metavar="CSV_PATH")
    ap.add_argument("--payables", dest="payables", metavar="CSV_PATH")

    # Period selection
    ap.add_argument(
        "--period",
        choices=["current-month", "mtd", "last-month", "next-30-days"],
        help="Predefined ledger period (takes precedence over custom dates).",
    )
    ap.add_argument("--from-date", dest="from_date", metavar="YYYY-MM-DD")
    ap.add_argument("--to-date", dest="to_date", metavar="YYYY-MM-DD")
    ap.add_argument(
        "--today",
        metavar="YYYY-MM-DD",
        help="Observation date used to decide which pending movements are overdue.",
    )

    ap.add_argument(
        "--account",
        dest="accounts",
        action="append",
        default=[],
        metavar="ID",
        help="Restrict to this bank account (repeatable). Default: all accounts.",
    )

    ap.add_argument(
        "--audit",
        action="store_true",
        help="Also render the balance audit (overall and per account).",
    )

    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help="Override [display].mode from the configuration.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        metavar="DIR",
        help="Directory for CSV output (overrides [display].output_dir).",
    )

    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config_path:
        return load_app_config(args.config_path)
    try:
        return load_app_config()
    except FileNotFoundError:
        return default_app_config()


def _pick_path(override: Optional[str], configured: Optional[Path]) -> Optional[Path]:
    if override:
        return Path(override)
    return configured


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Cashflow Recon CLI.

    Parses arguments, loads configuration and inputs, computes the cash-flow
    ledger for the selected period and accounts, and renders it as console
    tables and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"cashflow_recon version {__version__}")
        return

    # 1) Configuration and logging
    config = _load_config(args)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 2) Input paths
    accounts_path = _pick_path(args.bank_accounts, config.inputs.bank_accounts)
    receivables_path = _pick_path(args.receivables, config.inputs.receivables)
    payables_path = _pick_path(args.payables, config.inputs.payables)

    if accounts_path is None:
        parser.error(
            "No bank accounts file configured. Either set [inputs].bank_accounts "
            "in the configuration or provide --bank-accounts."
        )
    for label, path in (
        ("bank accounts", accounts_path),
        ("receivables", receivables_path),
        ("payables", payables_path),
    ):
        if path is not None and not path.is_file():
            parser.error(f"CSV file for {label} not found: {path}")

    # 3) Period and observation date
    try:
        period = determine_period_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))
    today = _parse_optional_date(args.today)

    # 4) Inputs
    try:
        snapshots = read_bank_accounts(accounts_path)
        receivables = read_receivables(receivables_path) if receivables_path else []
        payables = read_payables(payables_path) if payables_path else []
        movements = prepare_movements(
            receivables, payables, on_invalid_date=config.on_invalid_date
        )
    except ValueError as exc:
        parser.error(str(exc))

    logger.info(
        "Loaded %d bank accounts, %d receivables, %d payables",
        len(snapshots),
        len(receivables),
        len(payables),
    )

    # 5) Compute
    selected = args.accounts or list(config.selected_accounts)
    try:
        result = compute_cash_flow(
            period.start,
            period.end,
            snapshots,
            movements,
            selected_ids=selected,
            today=today,
        )
        audit = (
            audit_balances(
                period.start,
                period.end,
                snapshots,
                movements,
                selected_ids=selected,
                today=today,
            )
            if args.audit
            else None
        )
    except CashFlowError as exc:
        parser.error(str(exc))

    decimals = config.decimals
    summary_df = totals_to_dataframe(result, decimals=decimals)
    ledger_df = ledger_to_dataframe(result, decimals=decimals)
    audit_df = breakdown_to_dataframe(audit, decimals=decimals) if audit else None

    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )
    print(f"Bank accounts: {', '.join(selected) if selected else 'all'}")

    # 6) Resolve display mode: config value overridden by CLI if provided.
    display_mode = args.display_mode or config.display_mode

    if display_mode in {"table", "both"}:
        print()
        print("=== Summary ===")
        print(summary_df.to_string(index=False))
        print()
        print("=== Daily cash flow ===")
        print(ledger_df.to_string(index=False))
        if audit_df is not None:
            print()
            print("=== Balance audit ===")
            print(audit_df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

        outputs = [("cash_flow_summary", summary_df), ("cash_flow_daily", ledger_df)]
        if audit_df is not None:
            outputs.append(("balance_audit", audit_df))

        for name, df in outputs:
            path = output_dir / f"{name}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


if __name__ == "__main__":
    main()
