# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Balance audit for Cashflow Recon.

The audit explains how the opening and closing balances of a period are
built, overall and for each bank account:

    initial balance
  + realized inflows before the period
  - realized outflows before the period
  = opening balance
  + realized inflows in the period
  - realized outflows in the period
  = closing realized balance
  + projected inflows in the period
  - projected outflows in the period
  = projected balance of the period

Overdue amounts falling inside the period (overdue status, or pending with a
due date before ``today``) are reported separately so that a user can see
what was left out. They never enter any balance.

Note that the projected balance here sums every projected flow of the
period, while the ledger's closing projected balance only adds the
projected flows of the last day. Both share the same realized figures; the
overall breakdown's realized balances always equal those of
``engine.compute_cash_flow`` for the same inputs.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from .accounts import filter_by_accounts
from .engine import counts_as_projected, counts_as_realized
from .models import ZERO, BankAccountSnapshot, MovementRecord
from .periods import _today, validate_period


@dataclass(frozen=True)
class BalanceBreakdown:
    """Audit figures for one bank account, or for the whole selection."""

    label: str
    initial_balance: Decimal = ZERO
    realized_inflow_before: Decimal = ZERO
    realized_outflow_before: Decimal = ZERO
    opening_balance: Decimal = ZERO
    realized_inflow: Decimal = ZERO
    realized_outflow: Decimal = ZERO
    projected_inflow: Decimal = ZERO
    projected_outflow: Decimal = ZERO
    overdue_inflow: Decimal = ZERO
    overdue_outflow: Decimal = ZERO
    closing_realized_balance: Decimal = ZERO
    closing_projected_balance: Decimal = ZERO


@dataclass(frozen=True)
class BalanceAudit:
    overall: BalanceBreakdown
    by_account: list[BalanceBreakdown] = field(default_factory=list)


def _breakdown(
    label: str,
    snapshots: Iterable[BankAccountSnapshot],
    movements: Iterable[MovementRecord],
    period_start: date,
    period_end: date,
    today: date,
) -> BalanceBreakdown:
    sums = {
        "realized_inflow_before": ZERO,
        "realized_outflow_before": ZERO,
        "realized_inflow": ZERO,
        "realized_outflow": ZERO,
        "projected_inflow": ZERO,
        "projected_outflow": ZERO,
        "overdue_inflow": ZERO,
        "overdue_outflow": ZERO,
    }

    for m in movements:
        side = m.direction
        if m.effective_date < period_start:
            if counts_as_realized(m):
                sums[f"realized_{side}_before"] += m.amount
            continue
        if m.effective_date > period_end:
            continue

        if counts_as_realized(m):
            sums[f"realized_{side}"] += m.amount
        elif counts_as_projected(m, today):
            sums[f"projected_{side}"] += m.amount
        else:
            sums[f"overdue_{side}"] += m.amount

    initial = sum((s.initial_balance for s in snapshots), ZERO)
    opening = (
        initial + sums["realized_inflow_before"] - sums["realized_outflow_before"]
    )
    closing_realized = opening + sums["realized_inflow"] - sums["realized_outflow"]
    closing_projected = (
        closing_realized + sums["projected_inflow"] - sums["projected_outflow"]
    )

    return BalanceBreakdown(
        label=label,
        initial_balance=initial,
        opening_balance=opening,
        closing_realized_balance=closing_realized,
        closing_projected_balance=closing_projected,
        **sums,
    )


def audit_balances(
    period_start: date,
    period_end: date,
    snapshots: Sequence[BankAccountSnapshot],
    movements: Sequence[MovementRecord],
    selected_ids: Iterable[str] = (),
    today: Optional[date] = None,
) -> BalanceAudit:
    """Build the balance audit for a period.

    Args:
        period_start: First day of the period.
        period_end: Last day of the period (inclusive).
        snapshots: Bank account snapshots (all accounts).
        movements: Classified movements.
        selected_ids: Bank accounts to restrict to; empty means all.
        today: Observation date; defaults to the current local date.

    Returns:
        A BalanceAudit with the overall breakdown and one breakdown per
        retained account, in snapshot order.
    """
    validate_period(period_start, period_end)
    if today is None:
        today = _today()

    kept_snapshots, kept_movements = filter_by_accounts(
        snapshots, movements, selected_ids
    )

    overall = _breakdown(
        "All selected accounts",
        kept_snapshots,
        kept_movements,
        period_start,
        period_end,
        today,
    )

    by_account = [
        _breakdown(
            s.name or s.id,
            [s],
            [m for m in kept_movements if m.bank_account_id == s.id],
            period_start,
            period_end,
            today,
        )
        for s in kept_snapshots
    ]

    return BalanceAudit(overall=overall, by_account=by_account)
