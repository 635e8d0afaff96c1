from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status

from qoh_ledger.api.deps import get_game_service, get_ledger_service, get_report_service
from qoh_ledger.api.errors import domain_errors
from qoh_ledger.api.schemas import (
    CreateGameRequest,
    CreateWeekRequest,
    DailyEntryRequest,
    DailyEntryResponse,
    ExpenseRequest,
    ExpenseResponse,
    GameResponse,
    JackpotResponse,
    WeekResponse,
)
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.ledger_service import LedgerService
from qoh_ledger.services.reports import ReportService

router = APIRouter(prefix="/organizations/{organization_id}/games", tags=["games"])


@router.get("", response_model=list[GameResponse], summary="All games of the organization")
def list_games(organization_id: str, service: LedgerService = Depends(get_ledger_service)) -> list[GameResponse]:
    return [GameResponse.from_row(row) for row in service.list_games(organization_id)]


@router.post(
    "",
    response_model=GameResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a game seeded with the carryover of completed games",
)
def create_game(
    organization_id: str,
    payload: CreateGameRequest,
    service: GameService = Depends(get_game_service),
) -> GameResponse:
    with domain_errors():
        row = service.create_game(organization_id, payload.start_date, payload.game_number, payload.name)
    return GameResponse.from_row(row)


@router.get("/{game_id}", response_model=GameResponse)
def get_game(organization_id: str, game_id: int, service: LedgerService = Depends(get_ledger_service)) -> GameResponse:
    with domain_errors():
        return GameResponse.from_row(service.get_game(organization_id, game_id))


@router.get("/{game_id}/weeks", response_model=list[WeekResponse])
def list_weeks(
    organization_id: str,
    game_id: int,
    service: LedgerService = Depends(get_ledger_service),
) -> list[WeekResponse]:
    with domain_errors():
        return [WeekResponse.from_domain(week) for week in service.list_weeks(organization_id, game_id)]


@router.post("/{game_id}/weeks", response_model=WeekResponse, status_code=status.HTTP_201_CREATED)
def create_week(
    organization_id: str,
    game_id: int,
    payload: CreateWeekRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> WeekResponse:
    with domain_errors():
        return WeekResponse.from_domain(service.create_week(organization_id, game_id, payload.start_date))


@router.delete("/{game_id}/weeks/{week_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_week(
    organization_id: str,
    game_id: int,
    week_id: int,
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    with domain_errors():
        service.delete_week(organization_id, game_id, week_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{game_id}/entries", response_model=list[DailyEntryResponse])
def list_entries(
    organization_id: str,
    game_id: int,
    service: LedgerService = Depends(get_ledger_service),
) -> list[DailyEntryResponse]:
    with domain_errors():
        return [DailyEntryResponse.from_domain(entry) for entry in service.list_entries(organization_id, game_id)]


@router.put("/{game_id}/entries/{day}", response_model=DailyEntryResponse, summary="Record tickets sold on a day")
def upsert_entry(
    organization_id: str,
    game_id: int,
    day: date,
    payload: DailyEntryRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> DailyEntryResponse:
    with domain_errors():
        entry = service.upsert_daily_entry(organization_id, game_id, day, payload.tickets_sold)
    return DailyEntryResponse.from_domain(entry)


@router.delete("/{game_id}/entries/{day}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    organization_id: str,
    game_id: int,
    day: date,
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    with domain_errors():
        service.delete_entry(organization_id, game_id, day)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{game_id}/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def add_expense(
    organization_id: str,
    game_id: int,
    payload: ExpenseRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> ExpenseResponse:
    with domain_errors():
        expense_id = service.add_expense(
            organization_id,
            game_id,
            payload.date,
            payload.amount,
            is_donation=payload.is_donation,
            memo=payload.memo,
        )
        game = service.get_game(organization_id, game_id)
    return ExpenseResponse(id=expense_id, game=GameResponse.from_row(game))


@router.delete("/{game_id}/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    organization_id: str,
    game_id: int,
    expense_id: int,
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    with domain_errors():
        service.delete_expense(organization_id, game_id, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{game_id}/jackpot", response_model=JackpotResponse, summary="Jackpot shown on the board")
def get_jackpot(
    organization_id: str,
    game_id: int,
    week_id: int | None = Query(default=None, ge=1),
    service: LedgerService = Depends(get_ledger_service),
) -> JackpotResponse:
    with domain_errors():
        amount = service.displayed_jackpot(organization_id, game_id, week_id)
    return JackpotResponse(game_id=game_id, week_id=week_id, displayed_jackpot=amount)


@router.get("/{game_id}/report", summary="Computed figures for the printable game report")
def get_report(
    organization_id: str,
    game_id: int,
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    with domain_errors():
        return service.game_report(organization_id, game_id)


@router.post("/{game_id}/reconcile", response_model=GameResponse, summary="Verify stored aggregates")
def reconcile_game(
    organization_id: str,
    game_id: int,
    service: LedgerService = Depends(get_ledger_service),
) -> GameResponse:
    with domain_errors():
        return GameResponse.from_row(service.reconcile_game(organization_id, game_id))


@router.post(
    "/{game_id}/complete/resume",
    response_model=GameResponse,
    summary="Retry crediting the next game after an interrupted completion",
)
def resume_completion(
    organization_id: str,
    game_id: int,
    service: GameService = Depends(get_game_service),
) -> GameResponse:
    with domain_errors():
        return GameResponse.from_row(service.resume_completion(organization_id, game_id))
