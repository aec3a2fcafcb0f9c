# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for Cashflow Recon.

Inputs
------
- BankAccountSnapshot : starting balance of a bank account, as supplied by
  the account registry.
- SourceRow           : one raw receivable or payable row, as supplied by
  the data layer (dates still un-normalized).

Movements
---------
A movement is one of three variants, discriminated by the class-level
``status`` tag:

- RealizedMovement : money that actually settled (dated by settlement),
- PendingMovement  : money still expected (dated by due date),
- OverdueMovement  : an obligation flagged as overdue by the data layer.

Each variant only carries the fields that are meaningful for it, so there is
no "which date is valid for this status" question downstream.

Outputs
-------
- DailyLedgerEntry : one row of the daily ledger,
- LedgerTotals     : period totals of the four flow fields,
- CashFlowResult   : what the engine hands to the reporting layer.

All amounts are ``decimal.Decimal``; all dates are ``datetime.date``.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Literal, Optional, Union

Direction = Literal["inflow", "outflow"]
MovementStatus = Literal["realized", "pending", "overdue"]

ZERO = Decimal("0")


@dataclass(frozen=True)
class BankAccountSnapshot:
    """Starting balance of a bank account as of ``effective_from``."""

    id: str
    initial_balance: Decimal
    effective_from: date
    name: str = ""


@dataclass(frozen=True)
class SourceRow:
    """
    Raw receivable or payable row.

    Attributes
    ----------
    amount :
        Row value, any type convertible to Decimal.
    due_date :
        Due date as delivered by the data layer (string, date or timestamp).
    settlement_date :
        Payment/receipt date, or None when the row has not settled.
    status :
        Status string from the data layer (see classifier.STATUS_ALIASES).
    bank_account_id :
        Bank account the row is attached to, or None.
    """

    amount: Any
    due_date: Any
    settlement_date: Any
    status: str
    bank_account_id: Optional[str] = None


@dataclass(frozen=True)
class RealizedMovement:
    amount: Decimal
    direction: Direction
    effective_date: date
    bank_account_id: Optional[str] = None

    status: ClassVar[MovementStatus] = "realized"


@dataclass(frozen=True)
class PendingMovement:
    amount: Decimal
    direction: Direction
    effective_date: date
    bank_account_id: Optional[str] = None

    status: ClassVar[MovementStatus] = "pending"

    def is_lapsed(self, today: date) -> bool:
        """True when the due date has passed without settlement."""
        return self.effective_date < today


@dataclass(frozen=True)
class OverdueMovement:
    amount: Decimal
    direction: Direction
    effective_date: date
    bank_account_id: Optional[str] = None

    status: ClassVar[MovementStatus] = "overdue"


MovementRecord = Union[RealizedMovement, PendingMovement, OverdueMovement]


@dataclass(frozen=True)
class DailyLedgerEntry:
    """One calendar day of the cash-flow ledger."""

    date: date
    opening_balance: Decimal
    realized_inflow: Decimal
    realized_outflow: Decimal
    projected_inflow: Decimal
    projected_outflow: Decimal
    closing_realized_balance: Decimal
    closing_projected_balance: Decimal


@dataclass(frozen=True)
class LedgerTotals:
    realized_inflow: Decimal = ZERO
    realized_outflow: Decimal = ZERO
    projected_inflow: Decimal = ZERO
    projected_outflow: Decimal = ZERO


@dataclass(frozen=True)
class CashFlowResult:
    """
    Result of a cash-flow computation.

    Attributes
    ----------
    opening_balance_period :
        Realized balance at the start of the first day of the period.
    closing_realized_balance :
        Realized balance at the end of the last day.
    closing_projected_balance :
        Projected balance of the last day (realized balance plus that day's
        projected flows).
    daily_ledger :
        One DailyLedgerEntry per calendar day, in date order.
    totals :
        Sums of the four flow fields over the whole ledger.
    """

    opening_balance_period: Decimal
    closing_realized_balance: Decimal
    closing_projected_balance: Decimal
    daily_ledger: list[DailyLedgerEntry] = field(default_factory=list)
    totals: LedgerTotals = field(default_factory=LedgerTotals)
