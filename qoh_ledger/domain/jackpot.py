"""Running jackpot per week.

A week is open until its winner is recorded. Open weeks compute the jackpot
live from the last closed week (or the game carryover) plus the jackpot share
of every entry since. Closed weeks return the value frozen when they closed,
so later edits elsewhere in the game never move them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from .config import Configuration
from .errors import ConsistencyViolationError
from .ledger import LedgerEntry
from .money import ZERO, to_money
from .week import LedgerWeek


@dataclass(frozen=True)
class JackpotWeekRow:
    week_number: int
    state: str
    starting_jackpot: Decimal
    contributions: Decimal
    available_jackpot: Decimal
    payout: Decimal
    ending_jackpot: Decimal | None
    is_jackpot_card: bool
    minimum_shortfall: Decimal


def _contributions(entries: Sequence[LedgerEntry], week_ids: set[int]) -> Decimal:
    return sum((entry.jackpot_total for entry in entries if entry.week_id in week_ids), ZERO)


def _frozen(week: LedgerWeek) -> Decimal:
    if week.ending_jackpot is None:
        raise ConsistencyViolationError(
            f"closed week {week.week_number} has no ending jackpot",
            game_id=week.game_id,
            week_number=week.week_number,
            field="ending_jackpot",
        )
    return week.ending_jackpot


def displayed_jackpot(
    week: LedgerWeek,
    weeks: Sequence[LedgerWeek],
    entries: Sequence[LedgerEntry],
    carryover: Decimal,
    minimum_starting_jackpot: Decimal,
) -> Decimal:
    if week.is_closed:
        return _frozen(week)

    earlier = sorted((w for w in weeks if w.week_number < week.week_number), key=lambda w: w.week_number)
    base_week = next((w for w in reversed(earlier) if w.is_closed), None)

    if base_week is None:
        base = to_money(carryover)
        accruing = {w.id for w in earlier} | {week.id}
    else:
        base = _frozen(base_week)
        accruing = {w.id for w in earlier if w.week_number > base_week.week_number} | {week.id}

    value = base + _contributions(entries, accruing)
    if base_week is None:
        # starting guarantee: only while the game's jackpot is first being built
        value = max(value, to_money(minimum_starting_jackpot))
    return value


def current_jackpot(
    weeks: Sequence[LedgerWeek],
    entries: Sequence[LedgerEntry],
    carryover: Decimal,
    minimum_starting_jackpot: Decimal,
) -> Decimal:
    """Jackpot as it stands for the game's latest week."""
    if not weeks:
        return max(to_money(carryover), to_money(minimum_starting_jackpot))
    latest = max(weeks, key=lambda w: w.week_number)
    return displayed_jackpot(latest, weeks, entries, carryover, minimum_starting_jackpot)


def ending_after_payout(displayed: Decimal, payout: Decimal) -> Decimal:
    return max(ZERO, displayed - payout)


def jackpot_breakdown(
    terms: Configuration,
    weeks: Sequence[LedgerWeek],
    entries: Sequence[LedgerEntry],
    carryover: Decimal,
) -> list[JackpotWeekRow]:
    rows: list[JackpotWeekRow] = []
    funded = to_money(carryover)
    for week in sorted(weeks, key=lambda w: w.week_number):
        contributions = _contributions(entries, {week.id})
        available = displayed_jackpot(week, weeks, entries, carryover, terms.minimum_starting_jackpot)
        is_jackpot_card = week.is_closed and terms.is_jackpot_card(week.card_selected or "")
        if week.is_closed:
            available = week.jackpot_at_draw if week.jackpot_at_draw is not None else available + week.weekly_payout

        # funded tracks real money in the pot, without the starting guarantee
        funded += contributions
        shortfall = ZERO
        if week.is_closed:
            if is_jackpot_card:
                shortfall = max(ZERO, week.weekly_payout - funded)
                funded = ZERO
            else:
                funded = max(ZERO, funded - week.weekly_payout)

        rows.append(
            JackpotWeekRow(
                week_number=week.week_number,
                state=week.state.value,
                starting_jackpot=available - contributions,
                contributions=contributions,
                available_jackpot=available,
                payout=week.weekly_payout,
                ending_jackpot=week.ending_jackpot,
                is_jackpot_card=is_jackpot_card,
                minimum_shortfall=shortfall,
            )
        )
    return rows
