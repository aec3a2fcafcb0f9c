# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Cashflow Recon
--------------

A Python cash-flow reconciliation engine for the back office of Small and
Medium-sized Businesses. Given a date range, a set of bank accounts and raw
receivable/payable records, it produces a day-by-day ledger that separates
money that actually settled ("realized") from money still expected
("projected"), and drops overdue amounts from both views.

Main capabilities:
- date normalization with explicit failure reporting,
- classification of receivables/payables into realized, pending and
  overdue movements,
- bank account selection (empty selection = all accounts),
- opening balance, daily ledger and period totals,
- balance audit, overall and per bank account,
- CSV inputs, DataFrame views and a small command-line interface.

Cashflow Recon separates computation (engine), configuration (TOML), and
presentation (CLI), making it suitable for scripting and automation.


Version: 0.1.0

Usage:
    python -m cashflow_recon.cli --help
"""

__all__ = ["engine", "classifier", "dates", "views", "io"]

__version__ = "0.1.0"
