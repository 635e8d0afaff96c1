from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from qoh_ledger.domain import (
    DEFAULT_CONFIGURATION,
    ConsistencyViolationError,
    ExpenseRecord,
    LedgerWeek,
    build_entry,
    calculation_warnings,
    game_totals,
    recompute_from,
    verify_running_totals,
    verify_week_totals,
    week_totals,
)

TERMS = DEFAULT_CONFIGURATION


def _week(**fields) -> LedgerWeek:
    return LedgerWeek(id=1, game_id=1, week_number=1, start_date=date(2024, 1, 1), end_date=date(2024, 1, 7), **fields)


def _entries():
    return recompute_from(
        [
            build_entry(entry_id=1, game_id=1, week_id=1, day=date(2024, 1, 1), tickets_sold=100, terms=TERMS),
            build_entry(entry_id=2, game_id=1, week_id=1, day=date(2024, 1, 2), tickets_sold=50, terms=TERMS),
        ],
        Decimal("0"),
    )


def test_week_totals_sum_entries() -> None:
    totals = week_totals(1, _entries())

    assert totals.weekly_tickets_sold == 150
    assert totals.weekly_sales == Decimal("300.00")


def test_guarantee_shortfall_reduces_net_profit() -> None:
    # 400 in the pot, 500 paid under the guarantee
    entries = _entries()
    week = _week(
        weekly_tickets_sold=150,
        weekly_sales=Decimal("300.00"),
        weekly_payout=Decimal("500.00"),
        winner_name="Pat",
        card_selected="Queen of Hearts",
        winner_present=True,
        ending_jackpot=Decimal("0.00"),
    )

    totals = game_totals(
        terms=TERMS,
        carryover=Decimal("220.00"),
        weeks=[week],
        entries=entries,
        expenses=[ExpenseRecord(id=1, game_id=1, date=date(2024, 1, 3), amount=Decimal("10.00"), is_donation=False)],
    )

    assert totals.total_sales == Decimal("300.00")
    assert totals.total_jackpot_contributions == Decimal("180.00")
    assert totals.organization_total == Decimal("120.00")
    assert totals.final_jackpot_payout == Decimal("500.00")
    assert totals.weekly_payouts_distributed == Decimal("0.00")
    assert totals.jackpot_shortfall_covered == Decimal("100.00")
    assert totals.organization_net_profit == Decimal("10.00")
    assert totals.game_duration_weeks == 1


def test_donations_are_tracked_apart_from_expenses() -> None:
    totals = game_totals(
        terms=TERMS,
        carryover=Decimal("0"),
        weeks=[_week()],
        entries=_entries(),
        expenses=[
            ExpenseRecord(id=1, game_id=1, date=date(2024, 1, 3), amount=Decimal("20.00"), is_donation=False),
            ExpenseRecord(id=2, game_id=1, date=date(2024, 1, 3), amount=Decimal("30.00"), is_donation=True),
        ],
    )

    assert totals.total_expenses == Decimal("20.00")
    assert totals.total_donations == Decimal("30.00")
    assert totals.organization_net_profit == Decimal("70.00")


def test_negative_net_profit_is_warned() -> None:
    totals = game_totals(
        terms=TERMS,
        carryover=Decimal("0"),
        weeks=[_week()],
        entries=_entries(),
        expenses=[ExpenseRecord(id=1, game_id=1, date=date(2024, 1, 3), amount=Decimal("500.00"), is_donation=False)],
    )

    assert "organization net profit is negative" in calculation_warnings(totals)


def test_verify_running_totals_detects_tampering() -> None:
    entries = _entries()
    verify_running_totals(entries, Decimal("0"))

    tampered = [entries[0], replace(entries[1], cumulative_collected=Decimal("1.00"))]
    with pytest.raises(ConsistencyViolationError):
        verify_running_totals(tampered, Decimal("0"))


def test_verify_week_totals_detects_stale_week() -> None:
    with pytest.raises(ConsistencyViolationError):
        verify_week_totals([_week(weekly_tickets_sold=1, weekly_sales=Decimal("2.00"))], _entries())
