from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from .money import ZERO


class WeekState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class LedgerWeek:
    id: int
    game_id: int
    week_number: int
    start_date: date
    end_date: date
    weekly_tickets_sold: int = 0
    weekly_sales: Decimal = ZERO
    weekly_payout: Decimal = ZERO
    ending_jackpot: Decimal | None = None
    jackpot_at_draw: Decimal | None = None
    winner_name: str | None = None
    card_selected: str | None = None
    winner_present: bool | None = None
    slot_chosen: int | None = None
    authorized_signature_name: str | None = None

    @property
    def state(self) -> WeekState:
        return WeekState.OPEN if self.winner_name is None else WeekState.CLOSED

    @property
    def is_closed(self) -> bool:
        return self.state is WeekState.CLOSED
