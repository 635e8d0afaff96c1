from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from qoh_ledger.domain import (
    Configuration,
    ExpenseRecord,
    GameTotals,
    LedgerEntry,
    LedgerWeek,
    RecordNotFoundError,
    WeekTotals,
)
from qoh_ledger.domain.config import serialize_card_payouts
from qoh_ledger.storage.models import ConfigurationRecord, Expense, Game, TicketSale, Week


@dataclass(slots=True)
class GameRow:
    id: int
    organization_id: str
    game_number: int
    name: str
    start_date: date
    end_date: date | None
    terms: Configuration
    carryover_jackpot: Decimal
    totals: GameTotals
    jackpot_contribution_to_next_game: Decimal
    carryover_credited: bool

    @property
    def is_active(self) -> bool:
        return self.end_date is None


class LedgerRepository:
    """Record access for one unit of work; the caller owns the transaction."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # configuration

    def get_configuration(self, organization_id: str) -> Configuration | None:
        record = self._configuration_record(organization_id)
        if record is None:
            return None
        return Configuration(
            ticket_price=record.ticket_price,
            organization_percentage=record.organization_percentage,
            jackpot_percentage=record.jackpot_percentage,
            penalty_percentage=record.penalty_percentage,
            minimum_starting_jackpot=record.minimum_starting_jackpot,
            minimum_payout_guarantee=record.minimum_payout_guarantee,
            card_payouts=record.card_payouts,
        )

    def save_configuration(self, organization_id: str, config: Configuration) -> None:
        record = self._configuration_record(organization_id)
        if record is None:
            record = ConfigurationRecord(organization_id=organization_id)
            self.db.add(record)
        record.ticket_price = config.ticket_price
        record.organization_percentage = config.organization_percentage
        record.jackpot_percentage = config.jackpot_percentage
        record.penalty_percentage = config.penalty_percentage
        record.minimum_starting_jackpot = config.minimum_starting_jackpot
        record.minimum_payout_guarantee = config.minimum_payout_guarantee
        record.card_payouts = serialize_card_payouts(config.card_payouts)
        self.db.flush()

    def _configuration_record(self, organization_id: str) -> ConfigurationRecord | None:
        return self.db.scalars(
            select(ConfigurationRecord).where(ConfigurationRecord.organization_id == organization_id)
        ).one_or_none()

    # games

    def create_game(
        self,
        *,
        organization_id: str,
        game_number: int,
        name: str,
        start_date: date,
        terms: Configuration,
        carryover_jackpot: Decimal,
    ) -> Game:
        game = Game(
            organization_id=organization_id,
            game_number=game_number,
            name=name,
            start_date=start_date,
            ticket_price=terms.ticket_price,
            organization_percentage=terms.organization_percentage,
            jackpot_percentage=terms.jackpot_percentage,
            penalty_percentage=terms.penalty_percentage,
            minimum_starting_jackpot=terms.minimum_starting_jackpot,
            minimum_payout_guarantee=terms.minimum_payout_guarantee,
            card_payouts=serialize_card_payouts(terms.card_payouts),
            carryover_jackpot=carryover_jackpot,
        )
        self.db.add(game)
        self.db.flush()
        return game

    def get_game(self, organization_id: str, game_id: int, *, for_update: bool = False) -> Game:
        stmt = select(Game).where(Game.id == game_id, Game.organization_id == organization_id)
        if for_update:
            stmt = stmt.with_for_update()
        game = self.db.scalars(stmt).one_or_none()
        if game is None:
            raise RecordNotFoundError(f"game {game_id} not found", game_id=game_id)
        return game

    def list_games(self, organization_id: str) -> list[Game]:
        return list(
            self.db.scalars(
                select(Game).where(Game.organization_id == organization_id).order_by(Game.game_number)
            ).all()
        )

    def game_by_number(self, organization_id: str, game_number: int) -> Game | None:
        return self.db.scalars(
            select(Game).where(Game.organization_id == organization_id, Game.game_number == game_number)
        ).one_or_none()

    def active_game(self, organization_id: str) -> Game | None:
        return self.db.scalars(
            select(Game)
            .where(Game.organization_id == organization_id, Game.end_date.is_(None))
            .order_by(Game.game_number)
        ).first()

    def next_game_number(self, organization_id: str) -> int:
        current = self.db.execute(
            select(func.max(Game.game_number)).where(Game.organization_id == organization_id)
        ).scalar_one()
        return int(current or 0) + 1

    def next_active_game(self, organization_id: str, after_game_number: int) -> Game | None:
        return self.db.scalars(
            select(Game)
            .where(
                Game.organization_id == organization_id,
                Game.end_date.is_(None),
                Game.game_number > after_game_number,
            )
            .order_by(Game.game_number)
        ).first()

    def completed_games_without_successor(self, organization_id: str) -> list[Game]:
        return list(
            self.db.scalars(
                select(Game)
                .where(
                    Game.organization_id == organization_id,
                    Game.end_date.is_not(None),
                    Game.successor_seeded.is_(False),
                )
                .order_by(Game.game_number)
            ).all()
        )

    @staticmethod
    def game_terms(game: Game) -> Configuration:
        return Configuration(
            ticket_price=game.ticket_price,
            organization_percentage=game.organization_percentage,
            jackpot_percentage=game.jackpot_percentage,
            penalty_percentage=game.penalty_percentage,
            minimum_starting_jackpot=game.minimum_starting_jackpot,
            minimum_payout_guarantee=game.minimum_payout_guarantee,
            card_payouts=game.card_payouts,
        )

    @staticmethod
    def stored_totals(game: Game) -> GameTotals:
        return GameTotals(
            total_sales=game.total_sales,
            total_payouts=game.total_payouts,
            total_expenses=game.total_expenses,
            total_donations=game.total_donations,
            organization_total=game.organization_total,
            total_jackpot_contributions=game.total_jackpot_contributions,
            weekly_payouts_distributed=game.weekly_payouts_distributed,
            final_jackpot_payout=game.final_jackpot_payout,
            jackpot_shortfall_covered=game.jackpot_shortfall_covered,
            organization_net_profit=game.organization_net_profit,
            game_duration_weeks=game.game_duration_weeks,
        )

    def game_row(self, game: Game) -> GameRow:
        return GameRow(
            id=game.id,
            organization_id=game.organization_id,
            game_number=game.game_number,
            name=game.name,
            start_date=game.start_date,
            end_date=game.end_date,
            terms=self.game_terms(game),
            carryover_jackpot=game.carryover_jackpot,
            totals=self.stored_totals(game),
            jackpot_contribution_to_next_game=game.jackpot_contribution_to_next_game,
            carryover_credited=game.carryover_credited,
        )

    @staticmethod
    def apply_game_totals(game: Game, totals: GameTotals) -> None:
        game.total_sales = totals.total_sales
        game.total_payouts = totals.total_payouts
        game.total_expenses = totals.total_expenses
        game.total_donations = totals.total_donations
        game.organization_total = totals.organization_total
        game.total_jackpot_contributions = totals.total_jackpot_contributions
        game.weekly_payouts_distributed = totals.weekly_payouts_distributed
        game.final_jackpot_payout = totals.final_jackpot_payout
        game.jackpot_shortfall_covered = totals.jackpot_shortfall_covered
        game.organization_net_profit = totals.organization_net_profit
        game.game_duration_weeks = totals.game_duration_weeks

    # weeks

    def list_weeks(self, game_id: int) -> list[Week]:
        return list(self.db.scalars(select(Week).where(Week.game_id == game_id).order_by(Week.week_number)).all())

    def get_week(self, organization_id: str, week_id: int) -> Week:
        week = self.db.scalars(
            select(Week).join(Game, Game.id == Week.game_id).where(
                Week.id == week_id, Game.organization_id == organization_id
            )
        ).one_or_none()
        if week is None:
            raise RecordNotFoundError(f"week {week_id} not found", week_id=week_id)
        return week

    def add_week(self, game_id: int, week_number: int, start_date: date, end_date: date) -> Week:
        week = Week(game_id=game_id, week_number=week_number, start_date=start_date, end_date=end_date)
        self.db.add(week)
        self.db.flush()
        return week

    def delete_week(self, week: Week) -> None:
        self.db.delete(week)
        self.db.flush()

    @staticmethod
    def week_snapshot(week: Week) -> LedgerWeek:
        return LedgerWeek(
            id=week.id,
            game_id=week.game_id,
            week_number=week.week_number,
            start_date=week.start_date,
            end_date=week.end_date,
            weekly_tickets_sold=week.weekly_tickets_sold,
            weekly_sales=week.weekly_sales,
            weekly_payout=week.weekly_payout,
            ending_jackpot=week.ending_jackpot,
            jackpot_at_draw=week.jackpot_at_draw,
            winner_name=week.winner_name,
            card_selected=week.card_selected,
            winner_present=week.winner_present,
            slot_chosen=week.slot_chosen,
            authorized_signature_name=week.authorized_signature_name,
        )

    @staticmethod
    def apply_week_totals(week: Week, totals: WeekTotals) -> None:
        week.weekly_tickets_sold = totals.weekly_tickets_sold
        week.weekly_sales = totals.weekly_sales

    # daily entries

    def list_entries(self, game_id: int) -> list[TicketSale]:
        return list(
            self.db.scalars(
                select(TicketSale).where(TicketSale.game_id == game_id).order_by(TicketSale.date, TicketSale.id)
            ).all()
        )

    def get_entry_by_date(self, game_id: int, day: date) -> TicketSale | None:
        return self.db.scalars(
            select(TicketSale).where(TicketSale.game_id == game_id, TicketSale.date == day)
        ).one_or_none()

    def save_entry(self, entry: LedgerEntry, row: TicketSale | None = None) -> TicketSale:
        if row is None:
            row = TicketSale(game_id=entry.game_id)
            self.db.add(row)
        row.week_id = entry.week_id
        row.date = entry.date
        row.tickets_sold = entry.tickets_sold
        row.ticket_price = entry.ticket_price
        row.amount_collected = entry.amount_collected
        row.organization_total = entry.organization_total
        row.jackpot_total = entry.jackpot_total
        row.cumulative_collected = entry.cumulative_collected
        row.jackpot_contributions_total = entry.jackpot_contributions_total
        row.ending_jackpot_total = entry.ending_jackpot_total
        self.db.flush()
        return row

    def delete_entry(self, row: TicketSale) -> None:
        self.db.delete(row)
        self.db.flush()

    @staticmethod
    def entry_snapshot(row: TicketSale) -> LedgerEntry:
        return LedgerEntry(
            id=row.id,
            game_id=row.game_id,
            week_id=row.week_id,
            date=row.date,
            tickets_sold=row.tickets_sold,
            ticket_price=row.ticket_price,
            amount_collected=row.amount_collected,
            organization_total=row.organization_total,
            jackpot_total=row.jackpot_total,
            cumulative_collected=row.cumulative_collected,
            jackpot_contributions_total=row.jackpot_contributions_total,
            ending_jackpot_total=row.ending_jackpot_total,
        )

    # expenses

    def list_expenses(self, game_id: int) -> list[Expense]:
        return list(self.db.scalars(select(Expense).where(Expense.game_id == game_id).order_by(Expense.id)).all())

    def add_expense(self, game_id: int, day: date, amount: Decimal, is_donation: bool, memo: str) -> Expense:
        expense = Expense(game_id=game_id, date=day, amount=amount, is_donation=is_donation, memo=memo)
        self.db.add(expense)
        self.db.flush()
        return expense

    def get_expense(self, game_id: int, expense_id: int) -> Expense:
        expense = self.db.scalars(
            select(Expense).where(Expense.id == expense_id, Expense.game_id == game_id)
        ).one_or_none()
        if expense is None:
            raise RecordNotFoundError(f"expense {expense_id} not found", expense_id=expense_id)
        return expense

    def delete_expense(self, expense: Expense) -> None:
        self.db.delete(expense)
        self.db.flush()

    @staticmethod
    def expense_snapshot(expense: Expense) -> ExpenseRecord:
        return ExpenseRecord(
            id=expense.id,
            game_id=expense.game_id,
            date=expense.date,
            amount=expense.amount,
            is_donation=expense.is_donation,
            memo=expense.memo,
        )
