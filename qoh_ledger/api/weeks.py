from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from qoh_ledger.api.deps import get_game_service, get_report_service
from qoh_ledger.api.errors import domain_errors
from qoh_ledger.api.schemas import DistributionResponse, GameResponse, WeekResponse, WinnerRequest, WinnerResponse
from qoh_ledger.services.game_service import GameService
from qoh_ledger.services.reports import ReportService

router = APIRouter(prefix="/organizations/{organization_id}/weeks", tags=["weeks"])


@router.post(
    "/{week_id}/winner",
    response_model=WinnerResponse,
    summary="Record the weekly draw; the jackpot card completes the game",
)
def record_winner(
    organization_id: str,
    week_id: int,
    payload: WinnerRequest,
    service: GameService = Depends(get_game_service),
) -> WinnerResponse:
    with domain_errors():
        result = service.record_winner(
            organization_id,
            week_id,
            winner_name=payload.winner_name,
            card_selected=payload.card_selected,
            winner_present=payload.winner_present,
            slot_chosen=payload.slot_chosen,
            authorized_signature_name=payload.authorized_signature_name,
        )
    return WinnerResponse(
        week=WeekResponse.from_domain(result.week),
        game=GameResponse.from_row(result.game),
        distribution=DistributionResponse.from_domain(result.distribution) if result.distribution else None,
    )


@router.get("/{week_id}/payout-slip", summary="Figures for the winner's payout slip")
def payout_slip(
    organization_id: str,
    week_id: int,
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    with domain_errors():
        return service.payout_slip(organization_id, week_id)
