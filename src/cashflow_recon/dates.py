# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Date normalization for Cashflow Recon.

Receivable and payable rows come from a data layer that mixes plain dates
("2024-01-03"), timestamps ("2024-01-03T14:30:00+00:00") and space-separated
date-times ("2024-01-03 14:30:00"). The engine buckets movements by calendar
day, so every one of these must collapse to a single ``datetime.date``.

Two entry points are provided:

- ``parse_date(raw)`` returns a tagged result (ParsedDate or
  UnparseableDate) and never raises. Callers decide what to do with a
  failure.
- ``normalize_date(raw)`` returns a ``date`` or raises
  DateNormalizationError.

An unparseable value is never passed through as-is.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union

import pandas as pd

from .errors import DateNormalizationError

# Leading ISO calendar date, optionally followed by a time part separated by
# 'T' or a space. The time part is dropped without any timezone conversion.
_ISO_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")

# Slash or dot separated date, same optional time part.
_SEPARATED_PREFIX = re.compile(r"^(\d{1,4}[/.]\d{1,2}[/.]\d{1,4})(?:[T ].*)?$")

# Only explicit formats are accepted; day-first, as exported by the data layer.
SEPARATED_FORMATS: tuple[str, ...] = ("%Y/%m/%d", "%d/%m/%Y", "%Y.%m.%d", "%d.%m.%Y")


@dataclass(frozen=True)
class ParsedDate:
    value: date


@dataclass(frozen=True)
class UnparseableDate:
    raw: Any
    reason: str


DateParseResult = Union[ParsedDate, UnparseableDate]


def parse_date(raw: Any) -> DateParseResult:
    """Parse a raw date value into a calendar date, without raising.

    Accepted inputs:
        - ``datetime.date`` / ``datetime.datetime`` / ``pandas.Timestamp``
          (the date part is kept),
        - ``YYYY-MM-DD``, optionally followed by ``T...`` or `` ...``,
        - ``YYYY/MM/DD``, ``DD/MM/YYYY`` (or with dots), same optional time
          part.

    Anything else fails, including relative words such as "today" and
    partial dates such as "Jan".

    Args:
        raw: Value to parse.

    Returns:
        ParsedDate on success, UnparseableDate with a human-readable reason
        otherwise.
    """
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return UnparseableDate(raw, "missing date")

    # datetime (and pandas.Timestamp) are subclasses of date: check them first.
    if isinstance(raw, datetime):
        if pd.isna(raw):
            return UnparseableDate(raw, "missing date")
        return ParsedDate(raw.date())
    if isinstance(raw, date):
        return ParsedDate(raw)

    if not isinstance(raw, str):
        return UnparseableDate(raw, f"unsupported type {type(raw).__name__}")

    text = raw.strip()
    if not text:
        return UnparseableDate(raw, "empty date string")

    match = _ISO_PREFIX.match(text)
    if match:
        try:
            return ParsedDate(date.fromisoformat(match.group(1)))
        except ValueError as exc:
            return UnparseableDate(raw, str(exc))

    match = _SEPARATED_PREFIX.match(text)
    if not match:
        return UnparseableDate(raw, "unrecognized date format")

    for fmt in SEPARATED_FORMATS:
        try:
            ts = pd.to_datetime(match.group(1), format=fmt, errors="raise")
        except (ValueError, TypeError, OverflowError):
            continue
        if not pd.isna(ts):
            return ParsedDate(ts.date())

    return UnparseableDate(raw, "unrecognized date format")


def normalize_date(raw: Any) -> date:
    """Return the calendar date of ``raw`` or raise DateNormalizationError.

    Idempotent: ``normalize_date(normalize_date(x)) == normalize_date(x)``.
    """
    result = parse_date(raw)
    if isinstance(result, UnparseableDate):
        raise DateNormalizationError(result.raw, result.reason)
    return result.value
