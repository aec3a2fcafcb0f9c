# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Core cash-flow reconciliation engine for Cashflow Recon.

This module turns bank account snapshots and classified movements into a
day-by-day cash-flow ledger that separates money which actually settled
("realized") from money that is still expected ("projected").

The engine orchestrates three main responsibilities:

1. Opening balance
   ---------------
   ``compute_opening_balance()`` folds the initial balances of the selected
   accounts and every realized movement dated before the period start into
   a single opening balance. Pending and overdue movements never count.

2. Daily ledger
   ------------
   ``build_daily_ledger()`` walks every calendar day of the period:
   - realized movements feed the realized inflow/outflow of their day,
   - pending movements due today or later feed the projected
     inflow/outflow of their day,
   - overdue movements, and pending movements whose due date is before
     ``today``, are excluded entirely: a lapsed obligation is not money
     the business can still count on.

   The realized balance is carried from one day to the next. The projected
   balance of a day is its realized closing balance plus that day's
   projected flows only: projections never compound into the following
   day, because they have not settled.

3. Aggregation
   -----------
   ``aggregate_ledger()`` sums the four flow fields over the ledger and
   reads the final balances off the last day.

``compute_cash_flow()`` chains account filtering, the three steps above,
and returns a CashFlowResult.

Invariants
----------
- ledger[i].opening_balance == ledger[i-1].closing_realized_balance,
  ledger[0].opening_balance == opening_balance_period;
- overdue movements contribute zero everywhere;
- totals equal the per-day sums;
- one ledger entry per calendar day, bounds included.

Notes
-----
The engine is pure: no I/O, no state kept between calls. Data loading
lives in io.py, rendering in views.py.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .accounts import filter_by_accounts
from .models import (
    ZERO,
    BankAccountSnapshot,
    CashFlowResult,
    DailyLedgerEntry,
    LedgerTotals,
    MovementRecord,
    PendingMovement,
)
from .periods import _today, iter_days, validate_period

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Movement helpers
# ---------------------------------------------------------------------------


def counts_as_realized(movement: MovementRecord) -> bool:
    return movement.status == "realized"


def counts_as_projected(movement: MovementRecord, today: date) -> bool:
    """Pending and not yet lapsed at ``today``."""
    return isinstance(movement, PendingMovement) and not movement.is_lapsed(today)


def is_excluded(movement: MovementRecord, today: date) -> bool:
    """Overdue, or pending with a due date before ``today``."""
    return not counts_as_realized(movement) and not counts_as_projected(
        movement, today
    )


def _signed(movement: MovementRecord) -> Decimal:
    return movement.amount if movement.direction == "inflow" else -movement.amount


# ---------------------------------------------------------------------------
# Opening balance
# ---------------------------------------------------------------------------


def compute_opening_balance(
    snapshots: Iterable[BankAccountSnapshot],
    movements: Iterable[MovementRecord],
    period_start: date,
) -> Decimal:
    """Realized balance at the start of ``period_start``.

    opening = sum(initial balances)
              + realized inflows before period_start
              - realized outflows before period_start

    Movements dated on or after ``period_start`` belong to the daily ledger
    and are ignored here.
    """
    base = sum((s.initial_balance for s in snapshots), ZERO)
    prior = sum(
        (
            _signed(m)
            for m in movements
            if counts_as_realized(m) and m.effective_date < period_start
        ),
        ZERO,
    )
    return base + prior


# ---------------------------------------------------------------------------
# Daily ledger
# ---------------------------------------------------------------------------


@dataclass
class _DayFlows:
    realized_inflow: Decimal = ZERO
    realized_outflow: Decimal = ZERO
    projected_inflow: Decimal = ZERO
    projected_outflow: Decimal = ZERO

    def add(self, movement: MovementRecord, today: date) -> None:
        if counts_as_realized(movement):
            if movement.direction == "inflow":
                self.realized_inflow += movement.amount
            else:
                self.realized_outflow += movement.amount
        elif counts_as_projected(movement, today):
            if movement.direction == "inflow":
                self.projected_inflow += movement.amount
            else:
                self.projected_outflow += movement.amount
        # Overdue and lapsed pending movements are dropped.


def build_daily_ledger(
    movements: Iterable[MovementRecord],
    period_start: date,
    period_end: date,
    opening_balance: Decimal,
    today: date,
) -> list[DailyLedgerEntry]:
    """Build one DailyLedgerEntry per calendar day of the period.

    Args:
        movements: Movements already filtered to the selected accounts.
        period_start: First day of the ledger.
        period_end: Last day of the ledger (inclusive).
        opening_balance: Realized balance at the start of ``period_start``.
        today: Observation date deciding which pending movements are lapsed.

    Returns:
        Ledger entries in ascending date order.

    Raises:
        InvalidPeriodError: if ``period_end`` is before ``period_start``.
    """
    days = iter_days(period_start, period_end)

    # 1) Bucket in-range movements by effective date.
    flows: dict[date, _DayFlows] = defaultdict(_DayFlows)
    for m in movements:
        if period_start <= m.effective_date <= period_end:
            flows[m.effective_date].add(m, today)

    # 2) Walk the days, carrying only the realized balance forward.
    ledger: list[DailyLedgerEntry] = []
    running = opening_balance
    for day in days:
        f = flows.get(day) or _DayFlows()
        closing_realized = running + f.realized_inflow - f.realized_outflow
        closing_projected = (
            closing_realized + f.projected_inflow - f.projected_outflow
        )
        ledger.append(
            DailyLedgerEntry(
                date=day,
                opening_balance=running,
                realized_inflow=f.realized_inflow,
                realized_outflow=f.realized_outflow,
                projected_inflow=f.projected_inflow,
                projected_outflow=f.projected_outflow,
                closing_realized_balance=closing_realized,
                closing_projected_balance=closing_projected,
            )
        )
        running = closing_realized

    return ledger


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerAggregate:
    """Period totals and final balances of a daily ledger."""

    totals: LedgerTotals
    closing_realized_balance: Decimal
    closing_projected_balance: Decimal


def aggregate_ledger(
    daily_ledger: Sequence[DailyLedgerEntry],
    opening_balance: Decimal,
) -> LedgerAggregate:
    """Sum the four flow fields and read final balances off the last day.

    For an empty ledger both closing balances equal ``opening_balance``.
    """
    totals = LedgerTotals(
        realized_inflow=sum((e.realized_inflow for e in daily_ledger), ZERO),
        realized_outflow=sum((e.realized_outflow for e in daily_ledger), ZERO),
        projected_inflow=sum((e.projected_inflow for e in daily_ledger), ZERO),
        projected_outflow=sum((e.projected_outflow for e in daily_ledger), ZERO),
    )

    if not daily_ledger:
        return LedgerAggregate(
            totals=totals,
            closing_realized_balance=opening_balance,
            closing_projected_balance=opening_balance,
        )

    last = daily_ledger[-1]
    return LedgerAggregate(
        totals=totals,
        closing_realized_balance=last.closing_realized_balance,
        closing_projected_balance=last.closing_projected_balance,
    )


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def compute_cash_flow(
    period_start: date,
    period_end: date,
    snapshots: Sequence[BankAccountSnapshot],
    movements: Sequence[MovementRecord],
    selected_ids: Iterable[str] = (),
    today: Optional[date] = None,
) -> CashFlowResult:
    """Compute the daily cash-flow ledger for a period.

    Args:
        period_start: First day of the period.
        period_end: Last day of the period (inclusive).
        snapshots: Bank account snapshots (all accounts).
        movements: Classified movements (see classifier.prepare_movements).
        selected_ids: Bank accounts to restrict to; empty means all.
        today: Observation date; defaults to the current local date.

    Returns:
        A CashFlowResult.

    Raises:
        InvalidPeriodError: if ``period_end`` is before ``period_start``.
    """
    validate_period(period_start, period_end)
    if today is None:
        today = _today()

    kept_snapshots, kept_movements = filter_by_accounts(
        snapshots, movements, selected_ids
    )

    opening = compute_opening_balance(kept_snapshots, kept_movements, period_start)
    ledger = build_daily_ledger(
        kept_movements, period_start, period_end, opening, today
    )
    agg = aggregate_ledger(ledger, opening)

    logger.debug(
        "Cash flow %s..%s: %d accounts, %d movements, opening %s, "
        "closing realized %s, closing projected %s",
        period_start,
        period_end,
        len(kept_snapshots),
        len(kept_movements),
        opening,
        agg.closing_realized_balance,
        agg.closing_projected_balance,
    )

    return CashFlowResult(
        opening_balance_period=opening,
        closing_realized_balance=agg.closing_realized_balance,
        closing_projected_balance=agg.closing_projected_balance,
        daily_ledger=ledger,
        totals=agg.totals,
    )
