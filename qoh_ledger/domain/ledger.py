"""Daily ticket-sale entries and their running totals."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from .config import Configuration
from .errors import InvalidInputError
from .money import ZERO, percent_of, to_money


@dataclass(frozen=True)
class SaleSplit:
    amount_collected: Decimal
    organization_total: Decimal
    jackpot_total: Decimal


@dataclass(frozen=True)
class LedgerEntry:
    id: int | None
    game_id: int
    week_id: int
    date: date
    tickets_sold: int
    ticket_price: Decimal
    amount_collected: Decimal
    organization_total: Decimal
    jackpot_total: Decimal
    cumulative_collected: Decimal = ZERO
    jackpot_contributions_total: Decimal = ZERO
    ending_jackpot_total: Decimal | None = None


def validate_tickets_sold(tickets_sold: object) -> int:
    # bool is an int subclass; True tickets is a caller bug
    if isinstance(tickets_sold, bool) or not isinstance(tickets_sold, int):
        raise InvalidInputError("tickets_sold must be an integer", field="tickets_sold", value=repr(tickets_sold))
    if tickets_sold < 0:
        raise InvalidInputError("tickets_sold cannot be negative", field="tickets_sold", value=tickets_sold)
    return tickets_sold


def split_sale(tickets_sold: int, terms: Configuration) -> SaleSplit:
    """Split one day's revenue between the jackpot and the organization.

    The organization share is the remainder after the rounded jackpot share,
    so the two always add back to the amount collected.
    """
    tickets = validate_tickets_sold(tickets_sold)
    amount = to_money(terms.ticket_price * tickets)
    jackpot_total = percent_of(amount, terms.jackpot_percentage)
    return SaleSplit(
        amount_collected=amount,
        organization_total=amount - jackpot_total,
        jackpot_total=jackpot_total,
    )


def build_entry(
    *,
    entry_id: int | None,
    game_id: int,
    week_id: int,
    day: date,
    tickets_sold: int,
    terms: Configuration,
) -> LedgerEntry:
    split = split_sale(tickets_sold, terms)
    return LedgerEntry(
        id=entry_id,
        game_id=game_id,
        week_id=week_id,
        date=day,
        tickets_sold=tickets_sold,
        ticket_price=terms.ticket_price,
        amount_collected=split.amount_collected,
        organization_total=split.organization_total,
        jackpot_total=split.jackpot_total,
    )


def entry_order(entry: LedgerEntry) -> tuple[date, int, int]:
    # unsaved entries sort after saved ones on the same date
    if entry.id is None:
        return (entry.date, 1, 0)
    return (entry.date, 0, entry.id)


def recompute_from(
    entries: Iterable[LedgerEntry],
    carryover: Decimal,
    from_date: date | None = None,
) -> list[LedgerEntry]:
    """Rebuild running totals for every entry dated on or after ``from_date``.

    Returns all entries in ledger order. Entries before ``from_date`` are
    returned untouched; the running base is always summed from source
    amounts, never read back from stored totals. ``from_date=None`` rebuilds
    the whole game.
    """
    cumulative = to_money(carryover)
    contributions = to_money(carryover)
    result: list[LedgerEntry] = []
    for entry in sorted(entries, key=entry_order):
        cumulative += entry.amount_collected
        contributions += entry.jackpot_total
        if from_date is not None and entry.date < from_date:
            result.append(entry)
            continue
        result.append(
            replace(
                entry,
                cumulative_collected=cumulative,
                jackpot_contributions_total=contributions,
            )
        )
    return result


def changed_entries(before: Iterable[LedgerEntry], after: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    previous = {entry.id: entry for entry in before if entry.id is not None}
    return [entry for entry in after if entry.id is None or previous.get(entry.id) != entry]
