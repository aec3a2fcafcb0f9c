# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised by the cash-flow engine.

Every error is deterministic: the same inputs always raise the same error.
All of them derive from ValueError so that callers which already guard
against invalid input with ``except ValueError`` keep working.
"""

from typing import Any


class CashFlowError(ValueError):
    """Base class for all invalid-input errors raised by the engine."""


class DateNormalizationError(CashFlowError):
    """A raw date value could not be turned into a calendar date."""

    def __init__(self, raw: Any, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Cannot normalize date {raw!r}: {reason}")


class InvalidPeriodError(CashFlowError):
    """The requested period ends before it starts."""


class InvalidMovementError(CashFlowError):
    """A receivable/payable row cannot be classified into a movement."""
