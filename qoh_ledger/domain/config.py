from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .errors import InvalidInputError
from .money import CENT, HUNDRED, to_money, to_percentage

JACKPOT = "jackpot"
DEFAULT_JACKPOT_CARD = "Queen of Hearts"

_SUITS = ("Hearts", "Diamonds", "Clubs", "Spades")
_FACE_PAYOUTS = {"Jack": 30, "Queen": 40, "King": 30, "Ace": 35}


def _default_card_payouts() -> dict[str, Decimal | str]:
    payouts: dict[str, Decimal | str] = {}
    for suit in _SUITS:
        for rank in range(2, 11):
            payouts[f"{rank} of {suit}"] = Decimal("25.00")
        for face, amount in _FACE_PAYOUTS.items():
            payouts[f"{face} of {suit}"] = to_money(amount)
    payouts["Joker"] = Decimal("50.00")
    payouts[DEFAULT_JACKPOT_CARD] = JACKPOT
    return payouts


@dataclass(frozen=True)
class Configuration:
    """Per-organization constants, snapshotted onto every game at creation."""

    ticket_price: Decimal = Decimal("2.00")
    organization_percentage: Decimal = Decimal("40")
    jackpot_percentage: Decimal = Decimal("60")
    penalty_percentage: Decimal = Decimal("10")
    minimum_starting_jackpot: Decimal = Decimal("500.00")
    minimum_payout_guarantee: Decimal = Decimal("500.00")
    card_payouts: Mapping[str, Decimal | str] = field(default_factory=_default_card_payouts)

    def __post_init__(self) -> None:
        try:
            price = to_money(self.ticket_price)
            org_pct = to_percentage(self.organization_percentage)
            jackpot_pct = to_percentage(self.jackpot_percentage)
            penalty_pct = to_percentage(self.penalty_percentage)
            minimum_start = to_money(self.minimum_starting_jackpot)
            guarantee = to_money(self.minimum_payout_guarantee)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        if price <= 0:
            raise InvalidInputError("ticket_price must be positive", field="ticket_price")
        for name, pct in (
            ("organization_percentage", org_pct),
            ("jackpot_percentage", jackpot_pct),
            ("penalty_percentage", penalty_pct),
        ):
            if pct < 0 or pct > HUNDRED:
                raise InvalidInputError(f"{name} must be between 0 and 100", field=name)
            # stored with two decimal places
            if pct != pct.quantize(CENT):
                raise InvalidInputError(f"{name} allows at most two decimal places", field=name)
        if org_pct + jackpot_pct != HUNDRED:
            raise InvalidInputError(
                "organization_percentage and jackpot_percentage must sum to 100",
                field="organization_percentage",
            )
        if minimum_start < 0:
            raise InvalidInputError("minimum_starting_jackpot cannot be negative", field="minimum_starting_jackpot")
        if guarantee < 0:
            raise InvalidInputError("minimum_payout_guarantee cannot be negative", field="minimum_payout_guarantee")

        object.__setattr__(self, "ticket_price", price)
        object.__setattr__(self, "organization_percentage", org_pct.quantize(CENT))
        object.__setattr__(self, "jackpot_percentage", jackpot_pct.quantize(CENT))
        object.__setattr__(self, "penalty_percentage", penalty_pct.quantize(CENT))
        object.__setattr__(self, "minimum_starting_jackpot", minimum_start)
        object.__setattr__(self, "minimum_payout_guarantee", guarantee)
        object.__setattr__(self, "card_payouts", normalize_card_payouts(self.card_payouts))

    @property
    def jackpot_card(self) -> str:
        return next(card for card, payout in self.card_payouts.items() if payout == JACKPOT)

    def is_jackpot_card(self, card: str) -> bool:
        return self.card_payouts.get(card) == JACKPOT

    def payout_for(self, card: str) -> Decimal:
        """Fixed payout for a non-jackpot card."""
        if card not in self.card_payouts:
            raise InvalidInputError(f"unknown card: {card}", field="card_selected")
        payout = self.card_payouts[card]
        if payout == JACKPOT:
            raise InvalidInputError(f"{card} pays the jackpot, not a fixed amount", field="card_selected")
        return payout  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticket_price": self.ticket_price,
            "organization_percentage": self.organization_percentage,
            "jackpot_percentage": self.jackpot_percentage,
            "penalty_percentage": self.penalty_percentage,
            "minimum_starting_jackpot": self.minimum_starting_jackpot,
            "minimum_payout_guarantee": self.minimum_payout_guarantee,
            "card_payouts": dict(self.card_payouts),
        }


def normalize_card_payouts(card_payouts: Mapping[str, Any]) -> dict[str, Decimal | str]:
    normalized: dict[str, Decimal | str] = {}
    for card, payout in card_payouts.items():
        name = card.strip()
        if not name:
            raise InvalidInputError("card name must be non-empty", field="card_payouts")
        if payout == JACKPOT:
            normalized[name] = JACKPOT
            continue
        try:
            amount = to_money(payout)
        except ValueError as exc:
            raise InvalidInputError(f"invalid payout for {name}: {payout!r}", field="card_payouts") from exc
        if amount < 0:
            raise InvalidInputError(f"payout for {name} cannot be negative", field="card_payouts")
        normalized[name] = amount

    jackpot_cards = [card for card, payout in normalized.items() if payout == JACKPOT]
    if len(jackpot_cards) != 1:
        raise InvalidInputError("exactly one card must pay the jackpot", field="card_payouts")
    return normalized


def serialize_card_payouts(card_payouts: Mapping[str, Decimal | str]) -> dict[str, str]:
    return {card: payout if payout == JACKPOT else str(payout) for card, payout in card_payouts.items()}


DEFAULT_CONFIGURATION = Configuration()
