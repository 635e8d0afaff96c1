"""Week and game rollups, always recomputed from source rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .config import Configuration
from .errors import ConsistencyViolationError
from .ledger import LedgerEntry, recompute_from
from .money import ZERO, to_money
from .week import LedgerWeek


@dataclass(frozen=True)
class ExpenseRecord:
    id: int | None
    game_id: int
    date: date
    amount: Decimal
    is_donation: bool
    memo: str = ""


@dataclass(frozen=True)
class WeekTotals:
    weekly_tickets_sold: int
    weekly_sales: Decimal


@dataclass(frozen=True)
class GameTotals:
    total_sales: Decimal
    total_payouts: Decimal
    total_expenses: Decimal
    total_donations: Decimal
    organization_total: Decimal
    total_jackpot_contributions: Decimal
    weekly_payouts_distributed: Decimal
    final_jackpot_payout: Decimal
    jackpot_shortfall_covered: Decimal
    organization_net_profit: Decimal
    game_duration_weeks: int


def week_totals(week_id: int, entries: Sequence[LedgerEntry]) -> WeekTotals:
    in_week = [entry for entry in entries if entry.week_id == week_id]
    return WeekTotals(
        weekly_tickets_sold=sum(entry.tickets_sold for entry in in_week),
        weekly_sales=sum((entry.amount_collected for entry in in_week), ZERO),
    )


def game_totals(
    *,
    terms: Configuration,
    carryover: Decimal,
    weeks: Sequence[LedgerWeek],
    entries: Sequence[LedgerEntry],
    expenses: Sequence[ExpenseRecord],
    jackpot_contribution_to_next_game: Decimal = ZERO,
) -> GameTotals:
    total_sales = sum((week_totals(week.id, entries).weekly_sales for week in weeks), ZERO)
    total_expenses = sum((e.amount for e in expenses if not e.is_donation), ZERO)
    total_donations = sum((e.amount for e in expenses if e.is_donation), ZERO)

    closed = [week for week in weeks if week.is_closed]
    total_payouts = sum((week.weekly_payout for week in closed), ZERO)
    final_jackpot_payout = sum(
        (week.weekly_payout for week in closed if terms.is_jackpot_card(week.card_selected or "")),
        ZERO,
    )
    weekly_payouts_distributed = total_payouts - final_jackpot_payout

    organization_total = sum((entry.organization_total for entry in entries), ZERO)
    total_jackpot_contributions = sum((entry.jackpot_total for entry in entries), ZERO)

    # whatever the jackpot paid out beyond what it was funded with came from the organization
    jackpot_funds = to_money(carryover) + total_jackpot_contributions
    jackpot_outflow = total_payouts + to_money(jackpot_contribution_to_next_game)
    shortfall = max(ZERO, jackpot_outflow - jackpot_funds)

    return GameTotals(
        total_sales=total_sales,
        total_payouts=total_payouts,
        total_expenses=total_expenses,
        total_donations=total_donations,
        organization_total=organization_total,
        total_jackpot_contributions=total_jackpot_contributions,
        weekly_payouts_distributed=weekly_payouts_distributed,
        final_jackpot_payout=final_jackpot_payout,
        jackpot_shortfall_covered=shortfall,
        organization_net_profit=organization_total - total_expenses - total_donations - shortfall,
        game_duration_weeks=len(weeks),
    )


def verify_running_totals(entries: Sequence[LedgerEntry], carryover: Decimal) -> None:
    """Raise if any stored running total disagrees with a from-scratch resum."""
    expected = {entry.id: entry for entry in recompute_from(entries, carryover)}
    for entry in entries:
        rebuilt = expected[entry.id]
        for field in ("cumulative_collected", "jackpot_contributions_total"):
            stored = getattr(entry, field)
            if stored != getattr(rebuilt, field):
                raise ConsistencyViolationError(
                    f"{field} of entry {entry.id} is {stored}, expected {getattr(rebuilt, field)}",
                    game_id=entry.game_id,
                    date=entry.date.isoformat(),
                    field=field,
                )


def verify_week_totals(weeks: Sequence[LedgerWeek], entries: Sequence[LedgerEntry]) -> None:
    week_ids = {week.id for week in weeks}
    orphans = [entry for entry in entries if entry.week_id not in week_ids]
    if orphans:
        orphan = orphans[0]
        raise ConsistencyViolationError(
            f"entry {orphan.id} belongs to no week of the game",
            game_id=orphan.game_id,
            date=orphan.date.isoformat(),
            field="week_id",
        )
    for week in weeks:
        totals = week_totals(week.id, entries)
        if (week.weekly_tickets_sold, week.weekly_sales) != (totals.weekly_tickets_sold, totals.weekly_sales):
            raise ConsistencyViolationError(
                f"week {week.week_number} totals do not match its entries",
                game_id=week.game_id,
                week_number=week.week_number,
                field="weekly_sales",
            )


def calculation_warnings(totals: GameTotals) -> list[str]:
    warnings: list[str] = []
    if totals.organization_net_profit < 0:
        warnings.append("organization net profit is negative")
    if totals.jackpot_shortfall_covered > 0:
        warnings.append(f"organization covered a jackpot shortfall of {totals.jackpot_shortfall_covered}")
    return warnings
