from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import fields
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.domain import (
    ConsistencyViolationError,
    GameClosedError,
    GameTotals,
    InvalidDateRangeError,
    InvalidInputError,
    LedgerEntry,
    LedgerWeek,
    RecordNotFoundError,
    build_entry,
    calculation_warnings,
    changed_entries,
    current_jackpot,
    displayed_jackpot,
    ensure_no_overlap,
    find_week_for_date,
    game_totals,
    recompute_from,
    verify_running_totals,
    verify_week_totals,
    week_end,
    week_totals,
)
from qoh_ledger.domain.ledger import validate_tickets_sold
from qoh_ledger.domain.money import to_money
from qoh_ledger.services.locks import GameLocks, game_locks
from qoh_ledger.storage.models import Game
from qoh_ledger.storage.repository import GameRow, LedgerRepository

logger = logging.getLogger(__name__)


def ensure_active(game: Game) -> None:
    if game.end_date is not None:
        raise GameClosedError(
            f"game {game.game_number} ended on {game.end_date.isoformat()}",
            game_id=game.id,
            end_date=game.end_date.isoformat(),
        )


def ensure_week_open(week: LedgerWeek) -> None:
    if week.is_closed:
        raise InvalidInputError(
            f"week {week.week_number} already has a winner; its days are frozen",
            game_id=week.game_id,
            week_id=week.id,
        )


def recompute_game(repo: LedgerRepository, game: Game, from_date: date | None = None) -> GameTotals:
    """Resum running totals from ``from_date`` and rebuild every week and game aggregate."""
    rows = repo.list_entries(game.id)
    before = [repo.entry_snapshot(row) for row in rows]
    after = recompute_from(before, game.carryover_jackpot, from_date)

    rows_by_id = {row.id: row for row in rows}
    for entry in changed_entries(before, after):
        repo.save_entry(entry, rows_by_id[entry.id])

    weeks = repo.list_weeks(game.id)
    for week in weeks:
        repo.apply_week_totals(week, week_totals(week.id, after))

    totals = game_totals(
        terms=repo.game_terms(game),
        carryover=game.carryover_jackpot,
        weeks=[repo.week_snapshot(week) for week in weeks],
        entries=after,
        expenses=[repo.expense_snapshot(expense) for expense in repo.list_expenses(game.id)],
        jackpot_contribution_to_next_game=game.jackpot_contribution_to_next_game,
    )
    repo.apply_game_totals(game, totals)
    repo.db.flush()

    for warning in calculation_warnings(totals):
        logger.warning("game %s: %s", game.id, warning)
    return totals


class LedgerService:
    def __init__(self, session_factory: sessionmaker[Session], locks: GameLocks = game_locks) -> None:
        self._session_factory = session_factory
        self._locks = locks

    @contextmanager
    def _unit_of_work(self, *game_ids: int) -> Iterator[LedgerRepository]:
        with self._locks.hold(*game_ids), self._session_factory() as db, db.begin():
            yield LedgerRepository(db)

    # reads

    def get_game(self, organization_id: str, game_id: int) -> GameRow:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            return repo.game_row(repo.get_game(organization_id, game_id))

    def list_games(self, organization_id: str) -> list[GameRow]:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            return [repo.game_row(game) for game in repo.list_games(organization_id)]

    def list_weeks(self, organization_id: str, game_id: int) -> list[LedgerWeek]:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            game = repo.get_game(organization_id, game_id)
            return [repo.week_snapshot(week) for week in repo.list_weeks(game.id)]

    def list_entries(self, organization_id: str, game_id: int) -> list[LedgerEntry]:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            game = repo.get_game(organization_id, game_id)
            return [repo.entry_snapshot(row) for row in repo.list_entries(game.id)]

    def displayed_jackpot(self, organization_id: str, game_id: int, week_id: int | None = None) -> Decimal:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            game = repo.get_game(organization_id, game_id)
            weeks = [repo.week_snapshot(week) for week in repo.list_weeks(game.id)]
            entries = [repo.entry_snapshot(row) for row in repo.list_entries(game.id)]
            if week_id is None:
                return current_jackpot(weeks, entries, game.carryover_jackpot, game.minimum_starting_jackpot)
            week = next((w for w in weeks if w.id == week_id), None)
            if week is None:
                raise RecordNotFoundError(f"week {week_id} not found", week_id=week_id)
            return displayed_jackpot(week, weeks, entries, game.carryover_jackpot, game.minimum_starting_jackpot)

    # weeks

    def create_week(self, organization_id: str, game_id: int, start_date: date) -> LedgerWeek:
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            if start_date < game.start_date:
                raise InvalidDateRangeError(
                    f"week cannot start before the game starts on {game.start_date.isoformat()}",
                    game_id=game.id,
                    start_date=start_date.isoformat(),
                )
            weeks = repo.list_weeks(game.id)
            end_date = week_end(start_date)
            ensure_no_overlap(weeks, start_date, end_date)
            week_number = max((week.week_number for week in weeks), default=0) + 1
            week = repo.add_week(game.id, week_number, start_date, end_date)
            recompute_game(repo, game)
            logger.info("game %s: created week %s (%s..%s)", game.id, week_number, start_date, end_date)
            return repo.week_snapshot(week)

    def delete_week(self, organization_id: str, game_id: int, week_id: int) -> None:
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            week = repo.get_week(organization_id, week_id)
            if week.game_id != game.id:
                raise RecordNotFoundError(f"week {week_id} not found in game {game_id}", week_id=week_id)
            if week.winner_name is not None:
                raise InvalidInputError(
                    f"week {week.week_number} already has a winner and cannot be deleted",
                    game_id=game.id,
                    week_id=week.id,
                )
            start_date = week.start_date
            repo.delete_week(week)
            recompute_game(repo, game, from_date=start_date)
            logger.info("game %s: deleted week %s", game.id, week_id)

    # daily entries

    def upsert_daily_entry(self, organization_id: str, game_id: int, day: date, tickets_sold: int) -> LedgerEntry:
        tickets = validate_tickets_sold(tickets_sold)
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            weeks = [repo.week_snapshot(week) for week in repo.list_weeks(game.id)]
            week = find_week_for_date(weeks, day)
            ensure_week_open(week)
            row = repo.get_entry_by_date(game.id, day)

            entry = build_entry(
                entry_id=row.id if row is not None else None,
                game_id=game.id,
                week_id=week.id,
                day=day,
                tickets_sold=tickets,
                terms=repo.game_terms(game),
            )
            row = repo.save_entry(entry, row)
            recompute_game(repo, game, from_date=day)

            logger.info(
                "game %s: %s tickets on %s -> collected=%s jackpot=%s organization=%s",
                game.id,
                tickets,
                day.isoformat(),
                entry.amount_collected,
                entry.jackpot_total,
                entry.organization_total,
            )
            return repo.entry_snapshot(row)

    def delete_entry(self, organization_id: str, game_id: int, day: date) -> None:
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            row = repo.get_entry_by_date(game.id, day)
            if row is None:
                raise RecordNotFoundError(f"no entry on {day.isoformat()}", game_id=game.id, date=day.isoformat())
            ensure_week_open(repo.week_snapshot(row.week))
            repo.delete_entry(row)
            recompute_game(repo, game, from_date=day)
            logger.info("game %s: deleted entry for %s", game.id, day.isoformat())

    # expenses and donations

    def add_expense(
        self,
        organization_id: str,
        game_id: int,
        day: date,
        amount: Decimal | int | str,
        is_donation: bool = False,
        memo: str = "",
    ) -> int:
        try:
            value = to_money(amount)
        except ValueError as exc:
            raise InvalidInputError(str(exc), field="amount") from exc
        if value <= 0:
            raise InvalidInputError("amount must be positive", field="amount", value=str(value))

        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            expense = repo.add_expense(game.id, day, value, is_donation, memo.strip())
            recompute_game(repo, game)
            logger.info(
                "game %s: recorded %s of %s", game.id, "donation" if is_donation else "expense", value
            )
            return expense.id

    def delete_expense(self, organization_id: str, game_id: int, expense_id: int) -> None:
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            repo.delete_expense(repo.get_expense(game.id, expense_id))
            recompute_game(repo, game)

    # reconciliation

    def reconcile_game(self, organization_id: str, game_id: int) -> GameRow:
        """Recompute every aggregate from source rows and compare with what is stored.

        Nothing is rewritten: a mismatch is a data bug and is raised.
        """
        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id)
            entries = [repo.entry_snapshot(row) for row in repo.list_entries(game.id)]
            weeks = [repo.week_snapshot(week) for week in repo.list_weeks(game.id)]
            try:
                verify_running_totals(entries, game.carryover_jackpot)
                verify_week_totals(weeks, entries)
                expected = game_totals(
                    terms=repo.game_terms(game),
                    carryover=game.carryover_jackpot,
                    weeks=weeks,
                    entries=entries,
                    expenses=[repo.expense_snapshot(e) for e in repo.list_expenses(game.id)],
                    jackpot_contribution_to_next_game=game.jackpot_contribution_to_next_game,
                )
                stored = repo.stored_totals(game)
                for field in (f.name for f in fields(expected)):
                    if getattr(stored, field) != getattr(expected, field):
                        raise ConsistencyViolationError(
                            f"game {game.game_number} {field} is {getattr(stored, field)}, "
                            f"expected {getattr(expected, field)}",
                            game_id=game.id,
                            field=field,
                        )
            except ConsistencyViolationError as exc:
                logger.error("game %s failed reconciliation: %s %s", game.id, exc.message, exc.details)
                raise
            logger.info("game %s reconciled", game.id)
            return repo.game_row(game)
