"""Domain logic for distributing the jackpot when the jackpot card is drawn."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .errors import InvalidInputError, InvalidJackpotAmountError, MissingWinnerInfoError
from .money import HUNDRED, ZERO, percent_of, to_money, to_percentage


@dataclass(frozen=True)
class WinnerDistribution:
    total_jackpot: Decimal
    winner_present: bool
    penalty_percentage: Decimal
    penalty_amount: Decimal
    winner_receives: Decimal
    next_game_gets: Decimal
    minimum_guarantee: Decimal
    final_payout: Decimal

    @property
    def shortfall(self) -> Decimal:
        """Amount the organization adds on top of the jackpot to honour the guarantee."""
        return self.final_payout - self.winner_receives


def normalize_winner(name: str | None) -> str:
    value = (name or "").strip()
    if not value:
        raise MissingWinnerInfoError("winner name must be non-empty", field="winner_name")
    return value


def distribute_jackpot(
    total_jackpot: Decimal,
    winner_present: bool,
    penalty_percentage: Decimal,
    minimum_guarantee: Decimal,
    winner_name: str | None,
) -> WinnerDistribution:
    normalize_winner(winner_name)
    total = to_money(total_jackpot)
    if total <= 0:
        raise InvalidJackpotAmountError(
            "cannot distribute a non-positive jackpot", field="total_jackpot", value=str(total)
        )
    penalty_pct = to_percentage(penalty_percentage)
    if penalty_pct < 0 or penalty_pct > HUNDRED:
        raise InvalidInputError("penalty_percentage must be between 0 and 100", field="penalty_percentage")

    penalty_amount = ZERO if winner_present else percent_of(total, penalty_pct)
    winner_receives = total - penalty_amount
    guarantee = to_money(minimum_guarantee)

    return WinnerDistribution(
        total_jackpot=total,
        winner_present=winner_present,
        penalty_percentage=penalty_pct,
        penalty_amount=penalty_amount,
        winner_receives=winner_receives,
        next_game_gets=penalty_amount,
        minimum_guarantee=guarantee,
        final_payout=max(guarantee, winner_receives),
    )
