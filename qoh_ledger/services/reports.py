"""Fully computed figures for the document renderer.

The renderer only lays these numbers out; it never derives a financial figure
itself, so every value here is already rounded.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from qoh_ledger.domain import InvalidInputError, current_jackpot, jackpot_breakdown
from qoh_ledger.storage.repository import LedgerRepository


class ReportService:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def game_report(self, organization_id: str, game_id: int) -> dict[str, Any]:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            game = repo.get_game(organization_id, game_id)
            row = repo.game_row(game)
            weeks = [repo.week_snapshot(week) for week in repo.list_weeks(game.id)]
            entries = [repo.entry_snapshot(entry) for entry in repo.list_entries(game.id)]
            expenses = [repo.expense_snapshot(expense) for expense in repo.list_expenses(game.id)]

        terms = row.terms
        return {
            "game": {
                "id": row.id,
                "game_number": row.game_number,
                "name": row.name,
                "start_date": row.start_date.isoformat(),
                "end_date": row.end_date.isoformat() if row.end_date else None,
                "status": "active" if row.is_active else "completed",
            },
            "terms": {
                "ticket_price": terms.ticket_price,
                "organization_percentage": terms.organization_percentage,
                "jackpot_percentage": terms.jackpot_percentage,
                "penalty_percentage": terms.penalty_percentage,
                "minimum_starting_jackpot": terms.minimum_starting_jackpot,
                "minimum_payout_guarantee": terms.minimum_payout_guarantee,
                "jackpot_card": terms.jackpot_card,
            },
            "carryover_jackpot": row.carryover_jackpot,
            "jackpot_contribution_to_next_game": row.jackpot_contribution_to_next_game,
            "current_jackpot": current_jackpot(weeks, entries, row.carryover_jackpot, terms.minimum_starting_jackpot),
            "totals": asdict(row.totals),
            "weeks": [
                {
                    "week_number": week.week_number,
                    "start_date": week.start_date.isoformat(),
                    "end_date": week.end_date.isoformat(),
                    "tickets_sold": week.weekly_tickets_sold,
                    "sales": week.weekly_sales,
                    "winner_name": week.winner_name,
                    "card_selected": week.card_selected,
                    "winner_present": week.winner_present,
                    "slot_chosen": week.slot_chosen,
                    **_breakdown_fields(breakdown),
                }
                for week, breakdown in zip(
                    sorted(weeks, key=lambda w: w.week_number),
                    jackpot_breakdown(terms, weeks, entries, row.carryover_jackpot),
                    strict=True,
                )
            ],
            "daily_entries": [
                {
                    "date": entry.date.isoformat(),
                    "tickets_sold": entry.tickets_sold,
                    "ticket_price": entry.ticket_price,
                    "amount_collected": entry.amount_collected,
                    "organization_total": entry.organization_total,
                    "jackpot_total": entry.jackpot_total,
                    "cumulative_collected": entry.cumulative_collected,
                    "jackpot_contributions_total": entry.jackpot_contributions_total,
                    "ending_jackpot_total": entry.ending_jackpot_total,
                }
                for entry in entries
            ],
            "expenses": [
                {
                    "date": expense.date.isoformat(),
                    "amount": expense.amount,
                    "is_donation": expense.is_donation,
                    "memo": expense.memo,
                }
                for expense in expenses
            ],
        }

    def payout_slip(self, organization_id: str, week_id: int) -> dict[str, Any]:
        with self._session_factory() as db:
            repo = LedgerRepository(db)
            week = repo.week_snapshot(repo.get_week(organization_id, week_id))
            game = repo.get_game(organization_id, week.game_id)
            game_number, game_name = game.game_number, game.name

        if not week.is_closed:
            raise InvalidInputError(f"week {week.week_number} has no winner yet", week_id=week_id)
        return {
            "game_number": game_number,
            "game_name": game_name,
            "week_number": week.week_number,
            "week_start": week.start_date.isoformat(),
            "week_end": week.end_date.isoformat(),
            "winner_name": week.winner_name,
            "card_selected": week.card_selected,
            "slot_chosen": week.slot_chosen,
            "winner_present": week.winner_present,
            "amount_won": week.weekly_payout,
            "authorized_signature_name": week.authorized_signature_name,
        }


def _breakdown_fields(row: Any) -> dict[str, Any]:
    return {
        "starting_jackpot": row.starting_jackpot,
        "contributions": row.contributions,
        "available_jackpot": row.available_jackpot,
        "payout": row.payout,
        "ending_jackpot": row.ending_jackpot,
        "is_jackpot_card": row.is_jackpot_card,
        "minimum_shortfall": row.minimum_shortfall,
    }
