# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Movement classification.

This module turns raw receivable and payable rows (SourceRow) into movement
records (RealizedMovement, PendingMovement or OverdueMovement).

Rules
-----
- The direction is fixed by where the row comes from: receivables are
  inflows, payables are outflows. It is never inferred from the row.
- A realized row with a settlement date is dated by its settlement date.
  Every other row is dated by its due date.
- The status is passed through, mapped onto the matching movement variant.
  The legacy status vocabulary of the data layer ('pago', 'pendente',
  'vencido') is accepted alongside the canonical one.

Classification is a pure mapping. Invalid rows raise InvalidMovementError;
unparseable dates raise DateNormalizationError unless the caller explicitly
asks ``prepare_movements`` to skip them.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

import pandas as pd

from .dates import normalize_date
from .errors import DateNormalizationError, InvalidMovementError
from .models import (
    Direction,
    MovementRecord,
    MovementStatus,
    OverdueMovement,
    PendingMovement,
    RealizedMovement,
    SourceRow,
)

logger = logging.getLogger(__name__)

STATUS_ALIASES: dict[str, MovementStatus] = {
    "realized": "realized",
    "paid": "realized",
    "pago": "realized",
    "pending": "pending",
    "pendente": "pending",
    "overdue": "overdue",
    "vencido": "overdue",
}

DIRECTIONS: tuple[str, ...] = ("inflow", "outflow")

_VARIANTS = {
    "realized": RealizedMovement,
    "pending": PendingMovement,
    "overdue": OverdueMovement,
}

OnInvalidDate = Literal["raise", "skip"]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def resolve_status(raw_status: Any) -> MovementStatus:
    """Map a data-layer status string onto the canonical status."""
    key = str(raw_status).strip().lower()
    try:
        return STATUS_ALIASES[key]
    except KeyError as exc:
        raise InvalidMovementError(f"Unknown movement status: {raw_status!r}") from exc


def _to_amount(raw_amount: Any) -> Decimal:
    if isinstance(raw_amount, bool) or _is_missing(raw_amount):
        raise InvalidMovementError(f"Invalid movement amount: {raw_amount!r}")
    try:
        amount = Decimal(str(raw_amount).strip())
    except InvalidOperation as exc:
        raise InvalidMovementError(
            f"Invalid movement amount: {raw_amount!r}"
        ) from exc

    if not amount.is_finite() or amount <= 0:
        raise InvalidMovementError(
            f"Movement amount must be a positive number, got {raw_amount!r}"
        )
    return amount


def classify_row(row: SourceRow, direction: Direction) -> MovementRecord:
    """Classify one receivable/payable row into a movement record.

    Args:
        row: Raw row from the data layer.
        direction: 'inflow' for receivables, 'outflow' for payables.

    Returns:
        RealizedMovement, PendingMovement or OverdueMovement.

    Raises:
        InvalidMovementError: unknown status or direction, invalid amount.
        DateNormalizationError: the date used for the movement is unparseable.
    """
    if direction not in DIRECTIONS:
        raise InvalidMovementError(f"Unknown movement direction: {direction!r}")

    status = resolve_status(row.status)
    amount = _to_amount(row.amount)

    if status == "realized" and not _is_missing(row.settlement_date):
        effective_date = normalize_date(row.settlement_date)
    else:
        effective_date = normalize_date(row.due_date)

    bank_account_id = (
        None if _is_missing(row.bank_account_id) else str(row.bank_account_id)
    )

    return _VARIANTS[status](
        amount=amount,
        direction=direction,
        effective_date=effective_date,
        bank_account_id=bank_account_id,
    )


def _classify_all(
    rows: Iterable[SourceRow],
    direction: Direction,
    on_invalid_date: OnInvalidDate,
) -> list[MovementRecord]:
    out: list[MovementRecord] = []
    for row in rows:
        try:
            out.append(classify_row(row, direction))
        except DateNormalizationError as exc:
            if on_invalid_date != "skip":
                raise
            logger.warning("Skipping %s row with invalid date: %s", direction, exc)
    return out


def prepare_movements(
    receivables: Iterable[SourceRow],
    payables: Iterable[SourceRow],
    on_invalid_date: OnInvalidDate = "raise",
) -> list[MovementRecord]:
    """Classify receivables (as inflows) and payables (as outflows).

    Args:
        receivables: Rows from the accounts-receivable repository.
        payables: Rows from the accounts-payable repository.
        on_invalid_date:
            'raise' (default) propagates DateNormalizationError.
            'skip' drops rows whose date cannot be normalized and logs a
            warning for each of them; meant for legacy data only.

    Returns:
        Receivable movements followed by payable movements, in input order.
    """
    if on_invalid_date not in ("raise", "skip"):
        raise ValueError(
            f"on_invalid_date must be 'raise' or 'skip', got {on_invalid_date!r}"
        )

    movements = _classify_all(receivables, "inflow", on_invalid_date)
    movements.extend(_classify_all(payables, "outflow", on_invalid_date))
    return movements
