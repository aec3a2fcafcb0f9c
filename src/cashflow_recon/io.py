# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Cashflow Recon.

This module reads the engine inputs from CSV files exported by the
back-office data layer:

- bank accounts  → BankAccountSnapshot
- receivables    → SourceRow (classified later as inflows)
- payables       → SourceRow (classified later as outflows)

Expected input formats
----------------------
Column names are case-insensitive. The legacy column names of the data
layer are accepted as aliases.

1) Bank accounts
       id, initial_balance, effective_from[, name]
   aliases: saldo_inicial, data_inicio, descricao / nome

2) Receivables / payables
       amount, due_date, settlement_date, status[, bank_account_id]
   aliases: valor, data_vencimento, data_recebimento / data_pagamento,
            conta_bancaria_id

Every value is read as text. Dates are left raw on SourceRow so that the
date normalizer decides what is parseable; balances are converted to
Decimal here. Empty cells become None.

If a required column is missing, a clear ValueError is raised.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import pandas as pd

from .dates import normalize_date
from .models import BankAccountSnapshot, SourceRow

PathLike = Union[str, "os.PathLike[str]"]

_ACCOUNT_COLUMNS: dict[str, tuple[str, ...]] = {
    "id": ("id", "bank_account_id", "conta_bancaria_id"),
    "initial_balance": ("initial_balance", "saldo_inicial"),
    "effective_from": ("effective_from", "data_inicio"),
    "name": ("name", "descricao", "nome"),
}

_ROW_COLUMNS: dict[str, tuple[str, ...]] = {
    "amount": ("amount", "valor"),
    "due_date": ("due_date", "data_vencimento"),
    "settlement_date": (
        "settlement_date",
        "data_recebimento",
        "data_pagamento",
    ),
    "status": ("status",),
    "bank_account_id": ("bank_account_id", "conta_bancaria_id"),
}

_OPTIONAL = {"name", "bank_account_id", "settlement_date"}


def _read_csv(path: PathLike) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def _resolve_columns(
    df: pd.DataFrame,
    candidates: dict[str, tuple[str, ...]],
    source: str,
) -> dict[str, Optional[str]]:
    """Map each logical field to the first matching CSV column."""
    resolved: dict[str, Optional[str]] = {}
    for key, names in candidates.items():
        found = next((n for n in names if n in df.columns), None)
        if found is None and key not in _OPTIONAL:
            raise ValueError(
                f"Missing column for '{key}' in {source} file. "
                f"Expected one of: {', '.join(repr(n) for n in names)}."
            )
        resolved[key] = found
    return resolved


def _cell(record: dict, column: Optional[str]) -> Optional[str]:
    if column is None:
        return None
    value = str(record.get(column, "")).strip()
    return value or None


def read_bank_accounts(path: PathLike) -> list[BankAccountSnapshot]:
    """
    Read bank account snapshots from a CSV file.

    Returns
    -------
    list[BankAccountSnapshot]
        One snapshot per CSV row, in file order.

    Raises
    ------
    ValueError
        If a required column is missing, a balance is not numeric, or an
        effective date cannot be normalized.
    """
    df = _read_csv(path)
    cols = _resolve_columns(df, _ACCOUNT_COLUMNS, "bank accounts")

    snapshots: list[BankAccountSnapshot] = []
    for record in df.to_dict(orient="records"):
        account_id = _cell(record, cols["id"])
        if account_id is None:
            raise ValueError("Bank account row without id.")

        raw_balance = _cell(record, cols["initial_balance"]) or "0"
        try:
            balance = Decimal(raw_balance)
        except InvalidOperation as exc:
            raise ValueError(
                f"Invalid initial balance {raw_balance!r} for account {account_id}."
            ) from exc
        if not balance.is_finite():
            raise ValueError(
                f"Invalid initial balance {raw_balance!r} for account {account_id}."
            )

        snapshots.append(
            BankAccountSnapshot(
                id=account_id,
                initial_balance=balance,
                effective_from=normalize_date(_cell(record, cols["effective_from"])),
                name=_cell(record, cols["name"]) or "",
            )
        )
    return snapshots


def _read_rows(path: PathLike, source: str) -> list[SourceRow]:
    df = _read_csv(path)
    cols = _resolve_columns(df, _ROW_COLUMNS, source)

    return [
        SourceRow(
            amount=_cell(record, cols["amount"]),
            due_date=_cell(record, cols["due_date"]),
            settlement_date=_cell(record, cols["settlement_date"]),
            status=_cell(record, cols["status"]) or "",
            bank_account_id=_cell(record, cols["bank_account_id"]),
        )
        for record in df.to_dict(orient="records")
    ]


def read_receivables(path: PathLike) -> list[SourceRow]:
    """Read accounts-receivable rows from a CSV file."""
    return _read_rows(path, "receivables")


def read_payables(path: PathLike) -> list[SourceRow]:
    """Read accounts-payable rows from a CSV file."""
    return _read_rows(path, "payables")
