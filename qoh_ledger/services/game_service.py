"""Game lifecycle: creation with carryover seeding, winner draws and completion."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.domain import (
    DEFAULT_CONFIGURATION,
    ActiveGameExistsError,
    DuplicateGameNumberError,
    GameClosedError,
    InvalidInputError,
    LedgerWeek,
    WinnerDistribution,
    displayed_jackpot,
    distribute_jackpot,
    ending_after_payout,
    normalize_winner,
)
from qoh_ledger.domain.money import ZERO
from qoh_ledger.services.ledger_service import ensure_active, recompute_game
from qoh_ledger.services.locks import GameLocks, game_locks
from qoh_ledger.storage.models import Game, Week
from qoh_ledger.storage.repository import GameRow, LedgerRepository

logger = logging.getLogger(__name__)

SLOT_COUNT = 54


@dataclass(slots=True)
class DrawResult:
    week: LedgerWeek
    game: GameRow
    distribution: WinnerDistribution | None = None


class GameService:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        locks: GameLocks = game_locks,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks
        self._today = today

    @contextmanager
    def _unit_of_work(self, *game_ids: int) -> Iterator[LedgerRepository]:
        with self._locks.hold(*game_ids), self._session_factory() as db, db.begin():
            yield LedgerRepository(db)

    def create_game(
        self,
        organization_id: str,
        start_date: date,
        game_number: int | None = None,
        name: str | None = None,
    ) -> GameRow:
        with self._locks.hold_organization(organization_id):
            with self._session_factory() as db:
                pending_ids = {
                    g.id for g in LedgerRepository(db).completed_games_without_successor(organization_id)
                }
            with self._unit_of_work(*pending_ids) as repo:
                return self._insert_game(repo, organization_id, start_date, game_number, name, pending_ids)

    def _insert_game(
        self,
        repo: LedgerRepository,
        organization_id: str,
        start_date: date,
        game_number: int | None,
        name: str | None,
        pending_ids: set[int],
    ) -> GameRow:
        active = repo.active_game(organization_id)
        if active is not None:
            raise ActiveGameExistsError(
                f"game {active.game_number} is still active",
                organization_id=organization_id,
                game_id=active.id,
            )
        if game_number is None:
            game_number = repo.next_game_number(organization_id)
        elif game_number < 1:
            raise InvalidInputError("game_number must be positive", field="game_number")
        if repo.game_by_number(organization_id, game_number) is not None:
            raise DuplicateGameNumberError(
                f"game number {game_number} already exists",
                organization_id=organization_id,
                game_number=game_number,
            )

        terms = repo.get_configuration(organization_id) or DEFAULT_CONFIGURATION

        # completed games nobody has inherited from yet chain into this one;
        # a game completed after pending_ids was read credits the new game itself
        carryover = ZERO
        for previous in repo.completed_games_without_successor(organization_id):
            if previous.id not in pending_ids:
                continue
            if not previous.carryover_credited:
                carryover += previous.jackpot_contribution_to_next_game
            previous.successor_seeded = True
            previous.carryover_credited = True

        game = repo.create_game(
            organization_id=organization_id,
            game_number=game_number,
            name=(name or "").strip() or f"Game {game_number}",
            start_date=start_date,
            terms=terms,
            carryover_jackpot=carryover,
        )
        recompute_game(repo, game)
        logger.info(
            "organization %s: created game %s starting %s with carryover %s",
            organization_id,
            game_number,
            start_date.isoformat(),
            carryover,
        )
        return repo.game_row(game)

    def record_winner(
        self,
        organization_id: str,
        week_id: int,
        winner_name: str | None,
        card_selected: str | None,
        winner_present: bool,
        slot_chosen: int | None = None,
        authorized_signature_name: str | None = None,
    ) -> DrawResult:
        """Close a week with its draw; the jackpot card also completes the game."""
        name = normalize_winner(winner_name)
        card = (card_selected or "").strip()
        if not card:
            raise InvalidInputError("card_selected must be non-empty", field="card_selected")
        if slot_chosen is not None and not 1 <= slot_chosen <= SLOT_COUNT:
            raise InvalidInputError(f"slot_chosen must be between 1 and {SLOT_COUNT}", field="slot_chosen")
        signature = (authorized_signature_name or "").strip() or None

        with self._session_factory() as db:
            game_id = LedgerRepository(db).get_week(organization_id, week_id).game_id

        with self._unit_of_work(game_id) as repo:
            game = repo.get_game(organization_id, game_id, for_update=True)
            ensure_active(game)
            terms = repo.game_terms(game)
            weeks = repo.list_weeks(game.id)
            week = next(w for w in weeks if w.id == week_id)

            if week.winner_name is not None:
                return self._correct_winner(repo, game, week, name, card, winner_present, slot_chosen, signature)

            still_open = [w.week_number for w in weeks if w.week_number < week.week_number and w.winner_name is None]
            if still_open:
                raise InvalidInputError(
                    f"week {still_open[0]} must be drawn before week {week.week_number}",
                    game_id=game.id,
                    week_id=week.id,
                )
            if card not in terms.card_payouts:
                raise InvalidInputError(f"unknown card: {card}", field="card_selected")

            snapshots = [repo.week_snapshot(w) for w in weeks]
            entries = [repo.entry_snapshot(row) for row in repo.list_entries(game.id)]
            on_the_board = displayed_jackpot(
                repo.week_snapshot(week), snapshots, entries, game.carryover_jackpot, terms.minimum_starting_jackpot
            )

            distribution = None
            if terms.is_jackpot_card(card):
                distribution = distribute_jackpot(
                    on_the_board,
                    winner_present,
                    terms.penalty_percentage,
                    terms.minimum_payout_guarantee,
                    name,
                )
                payout = distribution.final_payout
                ending = ZERO
            else:
                payout = terms.payout_for(card)
                ending = ending_after_payout(on_the_board, payout)

            week.winner_name = name
            week.card_selected = card
            week.winner_present = winner_present
            week.slot_chosen = slot_chosen
            week.authorized_signature_name = signature
            week.weekly_payout = payout
            week.jackpot_at_draw = on_the_board
            week.ending_jackpot = ending
            for row in week.entries:
                row.ending_jackpot_total = ending
            logger.info(
                "game %s week %s: %s drew %s, jackpot %s, payout %s, ending %s",
                game.id,
                week.week_number,
                name,
                card,
                on_the_board,
                payout,
                ending,
            )

            if distribution is None:
                recompute_game(repo, game)
            else:
                self._complete_game(repo, game, distribution)
            week_snapshot = repo.week_snapshot(week)

        if distribution is not None:
            self._credit_next_game(organization_id, game_id)

        return DrawResult(week=week_snapshot, game=self.get_game(organization_id, game_id), distribution=distribution)

    def _correct_winner(
        self,
        repo: LedgerRepository,
        game: Game,
        week: Week,
        name: str,
        card: str,
        winner_present: bool,
        slot_chosen: int | None,
        signature: str | None,
    ) -> DrawResult:
        if card != week.card_selected:
            raise InvalidInputError(
                f"week {week.week_number} was drawn as {week.card_selected}; the card cannot be changed",
                field="card_selected",
                week_id=week.id,
            )
        week.winner_name = name
        week.winner_present = winner_present
        week.slot_chosen = slot_chosen
        week.authorized_signature_name = signature
        repo.db.flush()
        logger.info("game %s week %s: corrected winner details", game.id, week.week_number)
        return DrawResult(week=repo.week_snapshot(week), game=repo.game_row(game))

    def _complete_game(self, repo: LedgerRepository, game: Game, distribution: WinnerDistribution) -> None:
        # 1. bookkeeping while the game is still active
        game.jackpot_contribution_to_next_game = distribution.next_game_gets
        logger.info(
            "game %s: jackpot %s, penalty %s, winner receives %s, final payout %s, next game gets %s",
            game.id,
            distribution.total_jackpot,
            distribution.penalty_amount,
            distribution.winner_receives,
            distribution.final_payout,
            distribution.next_game_gets,
        )
        # 2. aggregate against the final payout
        recompute_game(repo, game)
        # 3. close
        game.end_date = self._today()
        repo.db.flush()
        logger.info("game %s completed on %s", game.id, game.end_date.isoformat())

    def resume_completion(self, organization_id: str, game_id: int) -> GameRow:
        """Retry crediting the next game after a completion whose last step failed."""
        game = self.get_game(organization_id, game_id)
        if game.is_active:
            raise InvalidInputError(f"game {game.game_number} is not completed", game_id=game_id)
        self._credit_next_game(organization_id, game_id)
        return self.get_game(organization_id, game_id)

    def _credit_next_game(self, organization_id: str, game_id: int) -> None:
        # 4. hand the residual to a successor that already exists
        with self._locks.hold_organization(organization_id):
            with self._session_factory() as db:
                repo = LedgerRepository(db)
                game = repo.get_game(organization_id, game_id)
                successor = repo.next_active_game(organization_id, game.game_number)
                successor_id = successor.id if successor is not None else None

            if successor_id is None:
                logger.info("game %s: no successor yet, carryover waits for the next game", game_id)
                return

            with self._unit_of_work(game_id, successor_id) as repo:
                game = repo.get_game(organization_id, game_id, for_update=True)
                if game.carryover_credited:
                    return
                successor = repo.get_game(organization_id, successor_id, for_update=True)
                if successor.end_date is not None:
                    raise GameClosedError(
                        f"game {successor.game_number} ended before carryover was credited",
                        game_id=successor.id,
                    )
                amount: Decimal = game.jackpot_contribution_to_next_game
                successor.carryover_jackpot = successor.carryover_jackpot + amount
                recompute_game(repo, successor)
                game.carryover_credited = True
                game.successor_seeded = True
                logger.info("game %s: credited %s carryover to game %s", game.id, amount, successor.id)

    def get_game(self, organization_id: str, game_id: int) -> GameRow:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            return repo.game_row(repo.get_game(organization_id, game_id))
