from datetime import date, timedelta
from decimal import Decimal

import pytest

import cashflow_recon.engine as engine
from cashflow_recon.engine import (
    aggregate_ledger,
    build_daily_ledger,
    compute_cash_flow,
    compute_opening_balance,
)
from cashflow_recon.errors import InvalidPeriodError
from cashflow_recon.models import (
    BankAccountSnapshot,
    OverdueMovement,
    PendingMovement,
    RealizedMovement,
)

D = Decimal

ACCOUNT_A = BankAccountSnapshot("A", D("1000"), date(2024, 1, 1))


def by_date(result, day: date):
    entry = next((e for e in result.daily_ledger if e.date == day), None)
    assert entry is not None, f"No ledger entry for {day}"
    return entry


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------


def test_reference_scenario_realized_and_projected() -> None:
    """Realized flows move the balance; pending flows only the projection."""
    movements = [
        RealizedMovement(D("500"), "inflow", date(2024, 1, 3), "A"),
        PendingMovement(D("200"), "outflow", date(2024, 1, 5), "A"),
    ]

    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 5),
        [ACCOUNT_A],
        movements,
        today=date(2024, 1, 1),
    )

    assert result.opening_balance_period == D("1000")
    assert len(result.daily_ledger) == 5

    for day in (date(2024, 1, 1), date(2024, 1, 2)):
        e = by_date(result, day)
        assert e.opening_balance == D("1000")
        assert e.closing_realized_balance == D("1000")

    day3 = by_date(result, date(2024, 1, 3))
    assert day3.realized_inflow == D("500")
    assert day3.closing_realized_balance == D("1500")

    day4 = by_date(result, date(2024, 1, 4))
    assert day4.opening_balance == D("1500")
    assert day4.closing_realized_balance == D("1500")

    day5 = by_date(result, date(2024, 1, 5))
    assert day5.projected_outflow == D("200")
    assert day5.closing_realized_balance == D("1500")
    assert day5.closing_projected_balance == D("1300")

    assert result.closing_realized_balance == D("1500")
    assert result.closing_projected_balance == D("1300")


def test_reference_scenario_overdue_pending_is_dropped() -> None:
    """A pending movement due before today is not projected."""
    movements = [
        RealizedMovement(D("500"), "inflow", date(2024, 1, 3), "A"),
        PendingMovement(D("200"), "outflow", date(2024, 1, 5), "A"),
    ]

    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 5),
        [ACCOUNT_A],
        movements,
        today=date(2024, 1, 10),
    )

    day5 = by_date(result, date(2024, 1, 5))
    assert day5.projected_outflow == D("0")
    assert day5.closing_projected_balance == day5.closing_realized_balance == D("1500")
    assert result.totals.projected_outflow == D("0")


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


def _mixed_movements() -> list:
    return [
        RealizedMovement(D("120.50"), "inflow", date(2023, 12, 28), "A"),
        RealizedMovement(D("40"), "outflow", date(2024, 1, 2), "A"),
        RealizedMovement(D("300"), "inflow", date(2024, 1, 2), "A"),
        PendingMovement(D("75"), "inflow", date(2024, 1, 4), "A"),
        PendingMovement(D("90"), "outflow", date(2024, 1, 6), "A"),
        PendingMovement(D("60"), "outflow", date(2024, 1, 1), "A"),  # lapsed
        OverdueMovement(D("999"), "inflow", date(2024, 1, 5), "A"),
        RealizedMovement(D("10"), "outflow", date(2024, 1, 9), "A"),
        RealizedMovement(D("5000"), "inflow", date(2024, 2, 1), "A"),  # after end
    ]


def test_continuity_and_coverage() -> None:
    """One entry per day, each opening on the previous realized close."""
    start, end = date(2024, 1, 1), date(2024, 1, 10)
    result = compute_cash_flow(
        start, end, [ACCOUNT_A], _mixed_movements(), today=date(2024, 1, 3)
    )

    ledger = result.daily_ledger
    assert len(ledger) == (end - start).days + 1
    assert [e.date for e in ledger] == [
        start + timedelta(days=i) for i in range(len(ledger))
    ]
    assert ledger[0].opening_balance == result.opening_balance_period
    for prev, cur in zip(ledger, ledger[1:]):
        assert cur.opening_balance == prev.closing_realized_balance


def test_totals_match_ledger_sums() -> None:
    """Period totals are the sums of the daily ledger columns."""
    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 10),
        [ACCOUNT_A],
        _mixed_movements(),
        today=date(2024, 1, 3),
    )

    for field in (
        "realized_inflow",
        "realized_outflow",
        "projected_inflow",
        "projected_outflow",
    ):
        expected = sum((getattr(e, field) for e in result.daily_ledger), D("0"))
        assert getattr(result.totals, field) == expected

    assert result.totals.realized_inflow == D("300")
    assert result.totals.realized_outflow == D("50")
    assert result.totals.projected_inflow == D("75")
    assert result.totals.projected_outflow == D("90")
    assert result.opening_balance_period == D("1120.50")
    assert result.closing_realized_balance == D("1370.50")


def test_overdue_movements_contribute_nothing() -> None:
    """Overdue and lapsed pending movements inside the range change nothing."""
    base = [RealizedMovement(D("100"), "inflow", date(2024, 1, 2), "A")]
    noise = [
        OverdueMovement(D("999"), "inflow", date(2024, 1, 2), "A"),
        OverdueMovement(D("888"), "outflow", date(2023, 12, 1), "A"),
        PendingMovement(D("777"), "outflow", date(2024, 1, 3), "A"),
    ]
    kwargs = dict(
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 5),
        snapshots=[ACCOUNT_A],
        today=date(2024, 1, 4),
    )

    clean = compute_cash_flow(movements=base, **kwargs)
    noisy = compute_cash_flow(movements=base + noise, **kwargs)

    assert noisy == clean


def test_projection_does_not_compound() -> None:
    """A day's projection never carries into the next day."""
    movements = [
        PendingMovement(D("400"), "inflow", date(2024, 1, 2), "A"),
        PendingMovement(D("150"), "outflow", date(2024, 1, 3), "A"),
    ]

    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 4),
        [ACCOUNT_A],
        movements,
        today=date(2024, 1, 1),
    )

    day2 = by_date(result, date(2024, 1, 2))
    day3 = by_date(result, date(2024, 1, 3))
    day4 = by_date(result, date(2024, 1, 4))

    assert day2.closing_projected_balance == D("1400")
    assert day3.opening_balance == D("1000")
    assert day3.closing_projected_balance == D("850")
    assert day4.opening_balance == D("1000")
    assert day4.closing_projected_balance == D("1000")
    assert result.closing_projected_balance == D("1000")


def test_pending_due_today_is_still_projected() -> None:
    """A pending movement due today is still projected."""
    movements = [PendingMovement(D("50"), "inflow", date(2024, 1, 2), "A")]

    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 2),
        [ACCOUNT_A],
        movements,
        today=date(2024, 1, 2),
    )

    assert result.totals.projected_inflow == D("50")


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def test_opening_balance_uses_only_realized_movements_before_start() -> None:
    """Only realized movements dated before the start move the opening."""
    snapshots = [
        ACCOUNT_A,
        BankAccountSnapshot("B", D("-200"), date(2024, 1, 1)),
    ]
    movements = [
        RealizedMovement(D("300"), "inflow", date(2023, 12, 31), "A"),
        RealizedMovement(D("50"), "outflow", date(2023, 12, 15), "B"),
        RealizedMovement(D("70"), "inflow", date(2024, 1, 1), "A"),  # on start
        PendingMovement(D("500"), "inflow", date(2023, 12, 20), "A"),
        OverdueMovement(D("500"), "outflow", date(2023, 12, 20), "A"),
    ]

    opening = compute_opening_balance(snapshots, movements, date(2024, 1, 1))

    assert opening == D("1050")


def test_single_day_range_produces_one_entry() -> None:
    """A one-day range yields exactly one ledger entry."""
    ledger = build_daily_ledger(
        [RealizedMovement(D("10"), "outflow", date(2024, 3, 1), "A")],
        date(2024, 3, 1),
        date(2024, 3, 1),
        D("100"),
        today=date(2024, 3, 1),
    )

    assert len(ledger) == 1
    assert ledger[0].opening_balance == D("100")
    assert ledger[0].closing_realized_balance == D("90")


def test_day_without_movements_propagates_balance() -> None:
    """Quiet days carry the balance forward unchanged."""
    ledger = build_daily_ledger(
        [], date(2024, 2, 27), date(2024, 3, 1), D("42"), today=date(2024, 1, 1)
    )

    # 2024 is a leap year: 27, 28, 29 Feb and 1 Mar.
    assert len(ledger) == 4
    for e in ledger:
        assert e.realized_inflow == e.realized_outflow == D("0")
        assert e.projected_inflow == e.projected_outflow == D("0")
        assert e.opening_balance == e.closing_realized_balance == D("42")


def test_invalid_range_is_rejected() -> None:
    """An end date before the start date is an error."""
    with pytest.raises(InvalidPeriodError):
        compute_cash_flow(
            date(2024, 1, 5), date(2024, 1, 1), [ACCOUNT_A], [], today=date(2024, 1, 1)
        )

    with pytest.raises(InvalidPeriodError):
        build_daily_ledger([], date(2024, 1, 5), date(2024, 1, 1), D("0"), date.today())


def test_aggregate_empty_ledger_falls_back_to_opening_balance() -> None:
    """An empty ledger closes on the opening balance."""
    agg = aggregate_ledger([], D("321"))

    assert agg.closing_realized_balance == D("321")
    assert agg.closing_projected_balance == D("321")
    assert agg.totals.realized_inflow == D("0")


def test_selection_matching_no_account_gives_zero_ledger() -> None:
    """A selection matching no account produces an all-zero ledger."""
    result = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 3),
        [ACCOUNT_A],
        [RealizedMovement(D("10"), "inflow", date(2024, 1, 2), "A")],
        selected_ids=["nope"],
        today=date(2024, 1, 1),
    )

    assert len(result.daily_ledger) == 3
    assert result.opening_balance_period == D("0")
    assert all(e.closing_projected_balance == D("0") for e in result.daily_ledger)


def test_selected_accounts_restrict_balances() -> None:
    """Only the selected accounts and their movements are counted."""
    snapshots = [ACCOUNT_A, BankAccountSnapshot("B", D("50"), date(2024, 1, 1))]
    movements = [
        RealizedMovement(D("10"), "inflow", date(2024, 1, 2), "A"),
        RealizedMovement(D("20"), "inflow", date(2024, 1, 2), "B"),
        RealizedMovement(D("30"), "inflow", date(2024, 1, 2), None),
    ]

    all_accounts = compute_cash_flow(
        date(2024, 1, 1), date(2024, 1, 2), snapshots, movements, today=date(2024, 1, 1)
    )
    only_b = compute_cash_flow(
        date(2024, 1, 1),
        date(2024, 1, 2),
        snapshots,
        movements,
        selected_ids=["B"],
        today=date(2024, 1, 1),
    )

    assert all_accounts.closing_realized_balance == D("1110")
    assert only_b.closing_realized_balance == D("70")


def test_today_defaults_to_current_date(monkeypatch) -> None:
    """Without an explicit today the current date decides lapsing."""
    monkeypatch.setattr(engine, "_today", lambda: date(2024, 1, 6))
    movements = [PendingMovement(D("200"), "outflow", date(2024, 1, 5), "A")]

    result = compute_cash_flow(
        date(2024, 1, 1), date(2024, 1, 5), [ACCOUNT_A], movements
    )

    assert result.totals.projected_outflow == D("0")


def test_pending_movement_lapses_after_due_date() -> None:
    """Lapsing is strict: due today is live, due yesterday is lapsed."""
    pending = PendingMovement(D("10"), "inflow", date(2024, 1, 5), "A")

    assert not pending.is_lapsed(date(2024, 1, 5))
    assert pending.is_lapsed(date(2024, 1, 6))
    assert engine.counts_as_projected(pending, date(2024, 1, 5))
    assert not engine.counts_as_projected(pending, date(2024, 1, 6))
    assert engine.is_excluded(pending, date(2024, 1, 6))
