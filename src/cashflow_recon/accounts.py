# Cashflow Recon - Daily cash-flow reconciliation engine for SMB back offices
# Copyright (c) 2025 Cashflow Recon contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Bank account utilities for Cashflow Recon.

Responsibilities:
- Restrict account snapshots and movements to a user selection of bank
  accounts.
- An empty selection means "all accounts", never "no data".
- Movements not attached to any bank account cannot be attributed to a
  selected account, so they are dropped whenever a selection is active.
"""

import logging
from collections.abc import Iterable, Sequence

from .models import BankAccountSnapshot, MovementRecord

logger = logging.getLogger(__name__)


def filter_by_accounts(
    snapshots: Sequence[BankAccountSnapshot],
    movements: Sequence[MovementRecord],
    selected_ids: Iterable[str] = (),
) -> tuple[list[BankAccountSnapshot], list[MovementRecord]]:
    """Keep only snapshots and movements belonging to the selected accounts.

    Args:
        snapshots: Bank account snapshots from the account registry.
        movements: Classified movements.
        selected_ids: Selected bank account ids. Empty selects everything.

    Returns:
        A (snapshots, movements) tuple of new lists. Input order is kept.
    """
    selected = {str(i) for i in selected_ids}
    if not selected:
        return list(snapshots), list(movements)

    known = {s.id for s in snapshots}
    unknown = sorted(selected - known)
    if unknown:
        logger.warning("Selected bank accounts not found: %s", ", ".join(unknown))

    kept_snapshots = [s for s in snapshots if s.id in selected]
    kept_movements = [
        m
        for m in movements
        if m.bank_account_id is not None and m.bank_account_id in selected
    ]
    return kept_snapshots, kept_movements
