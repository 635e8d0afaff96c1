from datetime import date
from decimal import Decimal

import pytest

from qoh_ledger.domain import InvalidInputError
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.ledger_service import LedgerService
from qoh_ledger.services.reports import ReportService

ORG = "st-marys"
START = date(2024, 1, 1)


def test_game_report_carries_computed_figures(
    games: GameService, ledger: LedgerService, reports: ReportService
) -> None:
    game = games.create_game(ORG, START)
    week = ledger.create_week(ORG, game.id, START)
    ledger.upsert_daily_entry(ORG, game.id, START, 100)
    ledger.add_expense(ORG, game.id, START, "12.00", memo="tickets")
    games.record_winner(ORG, week.id, "Pat", "Joker", winner_present=True, slot_chosen=7)

    report = reports.game_report(ORG, game.id)

    assert report["game"]["status"] == "active"
    assert report["terms"]["jackpot_card"] == "Queen of Hearts"
    assert report["current_jackpot"] == Decimal("450.00")
    assert report["totals"]["total_sales"] == Decimal("200.00")
    assert report["totals"]["organization_net_profit"] == Decimal("68.00")
    [row] = report["weeks"]
    assert row["winner_name"] == "Pat"
    assert row["available_jackpot"] == Decimal("500.00")
    assert row["payout"] == Decimal("50.00")
    assert row["ending_jackpot"] == Decimal("450.00")
    assert not row["is_jackpot_card"]
    assert [e["tickets_sold"] for e in report["daily_entries"]] == [100]
    assert report["expenses"][0]["memo"] == "tickets"


def test_payout_slip(games: GameService, ledger: LedgerService, reports: ReportService) -> None:
    game = games.create_game(ORG, START)
    week = ledger.create_week(ORG, game.id, START)

    with pytest.raises(InvalidInputError):
        reports.payout_slip(ORG, week.id)

    games.record_winner(
        ORG, week.id, "Pat", "Ace of Spades", winner_present=True, slot_chosen=9, authorized_signature_name="J. Doe"
    )
    slip = reports.payout_slip(ORG, week.id)

    assert slip["game_number"] == 1
    assert slip["week_number"] == 1
    assert slip["amount_won"] == Decimal("35.00")
    assert slip["slot_chosen"] == 9
    assert slip["authorized_signature_name"] == "J. Doe"
