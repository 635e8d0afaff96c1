from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from qoh_ledger.domain import Configuration, LedgerEntry, LedgerWeek, WinnerDistribution
from qoh_ledger.services.game_service import SLOT_COUNT
from qoh_ledger.storage.repository import GameRow


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Any | None = None


class ConfigurationResponse(BaseModel):
    ticket_price: Decimal
    organization_percentage: Decimal
    jackpot_percentage: Decimal
    penalty_percentage: Decimal
    minimum_starting_jackpot: Decimal
    minimum_payout_guarantee: Decimal
    jackpot_card: str
    card_payouts: dict[str, Decimal | str]

    @classmethod
    def from_domain(cls, config: Configuration) -> "ConfigurationResponse":
        return cls(jackpot_card=config.jackpot_card, **config.to_dict())


class ConfigurationUpdateRequest(BaseModel):
    ticket_price: Decimal | None = Field(default=None, gt=0, examples=["2.00"])
    organization_percentage: Decimal | None = Field(default=None, ge=0, le=100, examples=["40"])
    jackpot_percentage: Decimal | None = Field(default=None, ge=0, le=100, examples=["60"])
    penalty_percentage: Decimal | None = Field(default=None, ge=0, le=100, examples=["10"])
    minimum_starting_jackpot: Decimal | None = Field(default=None, ge=0, examples=["500.00"])
    minimum_payout_guarantee: Decimal | None = Field(default=None, ge=0, examples=["500.00"])
    card_payouts: dict[str, Decimal | str] | None = Field(
        default=None,
        description="Fixed payout per card; exactly one card maps to the string 'jackpot'",
    )


class CreateGameRequest(BaseModel):
    start_date: date
    game_number: int | None = Field(default=None, ge=1)
    name: str | None = Field(default=None, max_length=120)


class GameTotalsResponse(BaseModel):
    total_sales: Decimal
    total_payouts: Decimal
    total_expenses: Decimal
    total_donations: Decimal
    organization_total: Decimal
    total_jackpot_contributions: Decimal
    weekly_payouts_distributed: Decimal
    final_jackpot_payout: Decimal
    jackpot_shortfall_covered: Decimal
    organization_net_profit: Decimal
    game_duration_weeks: int


class GameResponse(BaseModel):
    id: int
    organization_id: str
    game_number: int
    name: str
    start_date: date
    end_date: date | None = None
    status: str
    carryover_jackpot: Decimal
    jackpot_contribution_to_next_game: Decimal
    carryover_credited: bool
    terms: ConfigurationResponse
    totals: GameTotalsResponse

    @classmethod
    def from_row(cls, row: GameRow) -> "GameResponse":
        return cls(
            id=row.id,
            organization_id=row.organization_id,
            game_number=row.game_number,
            name=row.name,
            start_date=row.start_date,
            end_date=row.end_date,
            status="active" if row.is_active else "completed",
            carryover_jackpot=row.carryover_jackpot,
            jackpot_contribution_to_next_game=row.jackpot_contribution_to_next_game,
            carryover_credited=row.carryover_credited,
            terms=ConfigurationResponse.from_domain(row.terms),
            totals=GameTotalsResponse.model_validate(row.totals, from_attributes=True),
        )


class CreateWeekRequest(BaseModel):
    start_date: date


class WeekResponse(BaseModel):
    id: int
    game_id: int
    week_number: int
    start_date: date
    end_date: date
    state: str
    weekly_tickets_sold: int
    weekly_sales: Decimal
    weekly_payout: Decimal
    jackpot_at_draw: Decimal | None = None
    ending_jackpot: Decimal | None = None
    winner_name: str | None = None
    card_selected: str | None = None
    winner_present: bool | None = None
    slot_chosen: int | None = None
    authorized_signature_name: str | None = None

    @classmethod
    def from_domain(cls, week: LedgerWeek) -> "WeekResponse":
        return cls(
            id=week.id,
            game_id=week.game_id,
            week_number=week.week_number,
            start_date=week.start_date,
            end_date=week.end_date,
            state=week.state.value,
            weekly_tickets_sold=week.weekly_tickets_sold,
            weekly_sales=week.weekly_sales,
            weekly_payout=week.weekly_payout,
            jackpot_at_draw=week.jackpot_at_draw,
            ending_jackpot=week.ending_jackpot,
            winner_name=week.winner_name,
            card_selected=week.card_selected,
            winner_present=week.winner_present,
            slot_chosen=week.slot_chosen,
            authorized_signature_name=week.authorized_signature_name,
        )


class DailyEntryRequest(BaseModel):
    tickets_sold: int = Field(..., ge=0, examples=[100])

    @field_validator("tickets_sold", mode="before")
    @classmethod
    def reject_non_integers(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("tickets_sold must be a whole number")
        return value


class DailyEntryResponse(BaseModel):
    id: int
    game_id: int
    week_id: int
    date: date
    tickets_sold: int
    ticket_price: Decimal
    amount_collected: Decimal
    organization_total: Decimal
    jackpot_total: Decimal
    cumulative_collected: Decimal
    jackpot_contributions_total: Decimal
    ending_jackpot_total: Decimal | None = None

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "DailyEntryResponse":
        return cls.model_validate(entry, from_attributes=True)


class ExpenseRequest(BaseModel):
    date: date
    amount: Decimal = Field(..., gt=0, examples=["25.00"])
    is_donation: bool = False
    memo: str = Field(default="", max_length=500)


class ExpenseResponse(BaseModel):
    id: int
    game: GameResponse


class WinnerRequest(BaseModel):
    winner_name: str = Field(..., examples=["Pat Smith"])
    card_selected: str = Field(..., examples=["Queen of Hearts"])
    winner_present: bool
    slot_chosen: int | None = Field(default=None, ge=1, le=SLOT_COUNT)
    authorized_signature_name: str | None = None


class DistributionResponse(BaseModel):
    total_jackpot: Decimal
    winner_present: bool
    penalty_percentage: Decimal
    penalty_amount: Decimal
    winner_receives: Decimal
    next_game_gets: Decimal
    minimum_guarantee: Decimal
    final_payout: Decimal
    shortfall: Decimal

    @classmethod
    def from_domain(cls, distribution: WinnerDistribution) -> "DistributionResponse":
        return cls.model_validate(distribution, from_attributes=True)


class WinnerResponse(BaseModel):
    week: WeekResponse
    game: GameResponse
    distribution: DistributionResponse | None = None


class JackpotResponse(BaseModel):
    game_id: int
    week_id: int | None = None
    displayed_jackpot: Decimal
