# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Cashflow Recon.

This module defines a Period value object, range validation, calendar-day
enumeration, and helpers to derive ledger periods (current month,
month-to-date, last month, next N days) from the current date and CLI
arguments.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd

from .errors import InvalidPeriodError


@dataclass
class Period:
    """Represents a ledger period with a human-readable label."""

    start: date
    end: date
    label: str

    @property
    def days(self) -> int:
        """Number of calendar days in the period, bounds included."""
        return (self.end - self.start).days + 1


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def validate_period(start: date, end: date) -> None:
    """Raise InvalidPeriodError if ``end`` is before ``start``."""
    if end < start:
        raise InvalidPeriodError(
            f"Period end date {end.isoformat()} cannot be before start date "
            f"{start.isoformat()}."
        )


def iter_days(start: date, end: date) -> list[date]:
    """Every calendar day from ``start`` to ``end`` inclusive, ascending."""
    validate_period(start, end)
    return [ts.date() for ts in pd.date_range(start=start, end=end, freq="D")]


def period_current_month() -> Period:
    """Full current calendar month."""
    today = _today()
    last_day = monthrange(today.year, today.month)[1]
    return Period(
        start=today.replace(day=1),
        end=today.replace(day=last_day),
        label=f"Month {today:%Y-%m}",
    )


def period_mtd() -> Period:
    """Month-to-date: first day of the current month to today."""
    today = _today()
    return Period(start=today.replace(day=1), end=today, label="Month to date")


def period_last_month() -> Period:
    """Full previous calendar month."""
    today = _today()

    if today.month == 1:
        year = today.year - 1
        month = 12
    else:
        year = today.year
        month = today.month - 1

    last_day = monthrange(year, month)[1]
    return Period(
        start=date(year, month, 1),
        end=date(year, month, last_day),
        label="Last month",
    )


def period_next_days(days: int) -> Period:
    """Today and the following ``days - 1`` days."""
    if days < 1:
        raise ValueError("Number of days must be at least 1.")
    today = _today()
    return Period(
        start=today,
        end=today + timedelta(days=days - 1),
        label=f"Next {days} days",
    )


def determine_period_from_args(args) -> Period:
    """
    Determine the ledger period to use based on CLI args.

    Priority (highest to lowest):

        1. args.period (current-month, mtd, last-month, next-30-days)
        2. args.from_date / args.to_date (custom period; a missing bound is
           taken from the current month)
        3. current month by default
    """
    # 1) Predefined period wins over everything else
    if getattr(args, "period", None):
        p = args.period
        if p == "current-month":
            return period_current_month()
        if p == "mtd":
            return period_mtd()
        if p == "last-month":
            return period_last_month()
        if p == "next-30-days":
            return period_next_days(30)
        raise ValueError(f"Unknown period: {p!r}")

    # 2) Custom from/to dates
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        month = period_current_month()
        start = date.fromisoformat(from_raw) if from_raw else month.start
        end = date.fromisoformat(to_raw) if to_raw else month.end

        validate_period(start, end)

        label = f"Custom period ({start} → {end})"
        return Period(start=start, end=end, label=label)

    # 3) Default: current month
    return period_current_month()
