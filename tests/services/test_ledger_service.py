from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.domain import (
    ConsistencyViolationError,
    GameClosedError,
    InvalidDateRangeError,
    InvalidInputError,
    RecordNotFoundError,
)
from qoh_ledger.services.configuration_service import ConfigurationService
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.ledger_service import LedgerService
from qoh_ledger.storage.models import Game


ORG = "st-marys"
START = date(2024, 1, 1)


def _day(offset: int) -> date:
    return START + timedelta(days=offset)


@pytest.fixture
def open_game(games: GameService, ledger: LedgerService) -> tuple[int, int]:
    game = games.create_game(ORG, START)
    week = ledger.create_week(ORG, game.id, START)
    return game.id, week.id


def test_entries_roll_up_into_week_and_game(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, week_id = open_game

    first = ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)
    second = ledger.upsert_daily_entry(ORG, game_id, _day(1), 50)

    assert first.amount_collected == Decimal("200.00")
    assert first.jackpot_total == Decimal("120.00")
    assert first.organization_total == Decimal("80.00")
    assert second.cumulative_collected == Decimal("300.00")
    assert second.jackpot_contributions_total == Decimal("180.00")

    [week] = ledger.list_weeks(ORG, game_id)
    assert week.weekly_tickets_sold == 150
    assert week.weekly_sales == Decimal("300.00")

    game = ledger.get_game(ORG, game_id)
    assert game.totals.total_sales == Decimal("300.00")
    assert game.totals.organization_total == Decimal("120.00")
    assert game.totals.total_jackpot_contributions == Decimal("180.00")
    assert game.totals.game_duration_weeks == 1
    assert ledger.displayed_jackpot(ORG, game_id) == Decimal("500.00")
    assert ledger.displayed_jackpot(ORG, game_id, week_id) == Decimal("500.00")


def test_upsert_replaces_the_day(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game

    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 10)

    [entry] = ledger.list_entries(ORG, game_id)
    assert entry.tickets_sold == 10
    assert entry.cumulative_collected == Decimal("20.00")


def test_retroactive_edit_resums_later_days(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game
    for offset in range(3):
        ledger.upsert_daily_entry(ORG, game_id, _day(offset), 100)

    ledger.upsert_daily_entry(ORG, game_id, _day(0), 10)

    entries = ledger.list_entries(ORG, game_id)
    assert [e.cumulative_collected for e in entries] == [Decimal("20.00"), Decimal("220.00"), Decimal("420.00")]
    assert [e.jackpot_contributions_total for e in entries] == [
        Decimal("12.00"),
        Decimal("132.00"),
        Decimal("252.00"),
    ]
    ledger.reconcile_game(ORG, game_id)


def test_delete_entry_resums(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)
    ledger.upsert_daily_entry(ORG, game_id, _day(1), 100)

    ledger.delete_entry(ORG, game_id, _day(0))

    [entry] = ledger.list_entries(ORG, game_id)
    assert entry.cumulative_collected == Decimal("200.00")
    assert ledger.get_game(ORG, game_id).totals.total_sales == Decimal("200.00")
    with pytest.raises(RecordNotFoundError):
        ledger.delete_entry(ORG, game_id, _day(0))


@pytest.mark.parametrize("tickets", [-5, 2.5], ids=["negative", "fractional"])
def test_invalid_ticket_counts(ledger: LedgerService, open_game: tuple[int, int], tickets: object) -> None:
    game_id, _ = open_game

    with pytest.raises(InvalidInputError):
        ledger.upsert_daily_entry(ORG, game_id, _day(0), tickets)  # type: ignore[arg-type]


def test_entry_outside_every_week(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game

    with pytest.raises(InvalidDateRangeError):
        ledger.upsert_daily_entry(ORG, game_id, _day(7), 10)


def test_week_rules(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game

    with pytest.raises(InvalidDateRangeError):
        ledger.create_week(ORG, game_id, _day(3))
    with pytest.raises(InvalidDateRangeError):
        ledger.create_week(ORG, game_id, START - timedelta(days=7))

    second = ledger.create_week(ORG, game_id, _day(7))
    assert second.week_number == 2
    assert second.end_date == _day(13)


def test_delete_week_removes_its_entries(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game
    second = ledger.create_week(ORG, game_id, _day(7))
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)
    ledger.upsert_daily_entry(ORG, game_id, _day(7), 100)

    ledger.delete_week(ORG, game_id, second.id)

    assert len(ledger.list_weeks(ORG, game_id)) == 1
    assert [e.date for e in ledger.list_entries(ORG, game_id)] == [_day(0)]
    assert ledger.get_game(ORG, game_id).totals.total_sales == Decimal("200.00")


def test_closed_week_keeps_its_jackpot(
    ledger: LedgerService, games: GameService, open_game: tuple[int, int]
) -> None:
    game_id, week_id = open_game
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)

    draw = games.record_winner(ORG, week_id, "Pat Smith", "Joker", winner_present=True, slot_chosen=12)
    assert draw.week.jackpot_at_draw == Decimal("500.00")
    assert draw.week.weekly_payout == Decimal("50.00")
    assert draw.week.ending_jackpot == Decimal("450.00")

    second = ledger.create_week(ORG, game_id, _day(7))
    ledger.upsert_daily_entry(ORG, game_id, _day(8), 10)
    ledger.upsert_daily_entry(ORG, game_id, _day(8), 20)

    assert ledger.displayed_jackpot(ORG, game_id, week_id) == Decimal("450.00")
    assert ledger.displayed_jackpot(ORG, game_id, second.id) == Decimal("474.00")
    with pytest.raises(InvalidInputError):
        ledger.delete_week(ORG, game_id, week_id)
    ledger.reconcile_game(ORG, game_id)


def test_closed_week_days_are_frozen(
    ledger: LedgerService, games: GameService, configuration: ConfigurationService
) -> None:
    configuration.update(ORG, minimum_starting_jackpot=Decimal("0"), minimum_payout_guarantee=Decimal("0"))
    game = games.create_game(ORG, START)
    week = ledger.create_week(ORG, game.id, START)
    ledger.upsert_daily_entry(ORG, game.id, _day(0), 100)
    games.record_winner(ORG, week.id, "Pat", "2 of Hearts", winner_present=True)
    second = ledger.create_week(ORG, game.id, _day(7))

    with pytest.raises(InvalidInputError):
        ledger.upsert_daily_entry(ORG, game.id, _day(2), 50)
    with pytest.raises(InvalidInputError):
        ledger.upsert_daily_entry(ORG, game.id, _day(0), 10)
    with pytest.raises(InvalidInputError):
        ledger.delete_entry(ORG, game.id, _day(0))

    result = games.record_winner(ORG, second.id, "Sam", "Queen of Hearts", winner_present=True)

    # every jackpot dollar collected is paid out
    totals = result.game.totals
    assert result.distribution.total_jackpot == Decimal("95.00")
    assert totals.total_jackpot_contributions == Decimal("120.00")
    assert totals.total_payouts == Decimal("120.00")


def test_expenses_and_donations(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)

    expense_id = ledger.add_expense(ORG, game_id, _day(1), "15.50", memo="printing")
    ledger.add_expense(ORG, game_id, _day(1), Decimal("20"), is_donation=True)

    totals = ledger.get_game(ORG, game_id).totals
    assert totals.total_expenses == Decimal("15.50")
    assert totals.total_donations == Decimal("20.00")
    assert totals.organization_net_profit == Decimal("44.50")

    ledger.delete_expense(ORG, game_id, expense_id)
    assert ledger.get_game(ORG, game_id).totals.total_expenses == Decimal("0.00")

    with pytest.raises(InvalidInputError):
        ledger.add_expense(ORG, game_id, _day(1), 0)


def test_reconcile_flags_tampered_totals(
    ledger: LedgerService, session_factory: sessionmaker[Session], open_game: tuple[int, int]
) -> None:
    game_id, _ = open_game
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)

    with session_factory() as db, db.begin():
        db.get(Game, game_id).total_sales = Decimal("1.00")

    with pytest.raises(ConsistencyViolationError):
        ledger.reconcile_game(ORG, game_id)


def test_games_are_scoped_to_their_organization(ledger: LedgerService, open_game: tuple[int, int]) -> None:
    game_id, _ = open_game

    with pytest.raises(RecordNotFoundError):
        ledger.get_game("another-org", game_id)
    with pytest.raises(RecordNotFoundError):
        ledger.upsert_daily_entry("another-org", game_id, _day(0), 10)


def test_completed_game_rejects_writes(
    ledger: LedgerService, games: GameService, open_game: tuple[int, int]
) -> None:
    game_id, week_id = open_game
    ledger.upsert_daily_entry(ORG, game_id, _day(0), 100)
    games.record_winner(ORG, week_id, "Pat Smith", "Queen of Hearts", winner_present=True)

    with pytest.raises(GameClosedError):
        ledger.upsert_daily_entry(ORG, game_id, _day(1), 10)
    with pytest.raises(GameClosedError):
        ledger.add_expense(ORG, game_id, _day(1), 10)
    with pytest.raises(GameClosedError):
        ledger.create_week(ORG, game_id, _day(7))
