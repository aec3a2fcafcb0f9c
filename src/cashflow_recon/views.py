# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Cashflow Recon.

This module turns engine results into pandas DataFrames ready for console
display or CSV export:

- ledger_to_dataframe    : one row per ledger day,
- totals_to_dataframe    : opening balance, period totals, final balances,
- breakdown_to_dataframe : balance audit, overall then per account.

The engine computes with exact Decimal amounts. Rounding to a fixed number
of decimals happens here, for display only.
"""

from dataclasses import asdict, fields
from datetime import date
from decimal import Decimal

import pandas as pd

from .audit import BalanceAudit, BalanceBreakdown
from .models import CashFlowResult, DailyLedgerEntry

LEDGER_COLUMNS: list[str] = [
    "date",
    "day",
    "opening_balance",
    "realized_inflow",
    "realized_outflow",
    "projected_inflow",
    "projected_outflow",
    "closing_realized_balance",
    "closing_projected_balance",
]


def format_day_label(d: date) -> str:
    """Short day label used in tables and charts (DD/MM)."""
    return d.strftime("%d/%m")


def _amount(value: Decimal, decimals: int) -> float:
    return round(float(value), decimals)


def ledger_to_dataframe(result: CashFlowResult, decimals: int = 2) -> pd.DataFrame:
    """Return the daily ledger as a DataFrame (columns: LEDGER_COLUMNS)."""
    amount_fields = [f.name for f in fields(DailyLedgerEntry) if f.name != "date"]

    rows = []
    for entry in result.daily_ledger:
        row = {"date": entry.date.isoformat(), "day": format_day_label(entry.date)}
        for name in amount_fields:
            row[name] = _amount(getattr(entry, name), decimals)
        rows.append(row)

    return pd.DataFrame(rows, columns=LEDGER_COLUMNS)


def totals_to_dataframe(result: CashFlowResult, decimals: int = 2) -> pd.DataFrame:
    """Return a two-column (item, amount) summary of the period."""
    t = result.totals
    items = [
        ("opening_balance", result.opening_balance_period),
        ("realized_inflow", t.realized_inflow),
        ("realized_outflow", t.realized_outflow),
        ("projected_inflow", t.projected_inflow),
        ("projected_outflow", t.projected_outflow),
        ("closing_realized_balance", result.closing_realized_balance),
        ("closing_projected_balance", result.closing_projected_balance),
    ]
    return pd.DataFrame(
        [{"item": k, "amount": _amount(v, decimals)} for k, v in items],
        columns=["item", "amount"],
    )


def breakdown_to_dataframe(audit: BalanceAudit, decimals: int = 2) -> pd.DataFrame:
    """Return the balance audit with the overall row first."""
    columns = [f.name for f in fields(BalanceBreakdown)]

    def _row(b: BalanceBreakdown) -> dict:
        data = asdict(b)
        return {
            k: (v if k == "label" else _amount(v, decimals)) for k, v in data.items()
        }

    rows = [_row(audit.overall)] + [_row(b) for b in audit.by_account]
    return pd.DataFrame(rows, columns=columns)
