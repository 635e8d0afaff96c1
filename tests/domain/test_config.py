from decimal import Decimal

import pytest

from qoh_ledger.domain import DEFAULT_CONFIGURATION, JACKPOT, Configuration, InvalidInputError


def test_default_terms() -> None:
    config = DEFAULT_CONFIGURATION

    assert config.ticket_price == Decimal("2.00")
    assert config.organization_percentage + config.jackpot_percentage == 100
    assert config.jackpot_card == "Queen of Hearts"
    assert config.payout_for("Joker") == Decimal("50.00")
    assert config.payout_for("King of Spades") == Decimal("30.00")
    assert config.payout_for("7 of Clubs") == Decimal("25.00")
    assert len(config.card_payouts) == 53


def test_jackpot_card_has_no_fixed_payout() -> None:
    with pytest.raises(InvalidInputError):
        DEFAULT_CONFIGURATION.payout_for("Queen of Hearts")


def test_unknown_card_is_rejected() -> None:
    with pytest.raises(InvalidInputError):
        DEFAULT_CONFIGURATION.payout_for("Queen of Swords")


@pytest.mark.parametrize(
    "changes",
    [
        {"ticket_price": Decimal("0")},
        {"organization_percentage": Decimal("50")},
        {"organization_percentage": Decimal("-10"), "jackpot_percentage": Decimal("110")},
        {"penalty_percentage": Decimal("101")},
        {"minimum_starting_jackpot": Decimal("-1")},
        {"minimum_payout_guarantee": Decimal("-1")},
        {"ticket_price": "two dollars"},
        {"organization_percentage": Decimal("66.665"), "jackpot_percentage": Decimal("33.335")},
    ],
    ids=[
        "zero-price",
        "percentages-not-summing-to-100",
        "negative-percentage",
        "penalty-above-100",
        "negative-minimum-start",
        "negative-guarantee",
        "non-numeric-price",
        "percentage-beyond-cents",
    ],
)
def test_invalid_terms_are_rejected(changes: dict) -> None:
    with pytest.raises(InvalidInputError):
        Configuration(**changes)


def test_card_table_needs_exactly_one_jackpot_card() -> None:
    with pytest.raises(InvalidInputError):
        Configuration(card_payouts={"Joker": "50"})
    with pytest.raises(InvalidInputError):
        Configuration(card_payouts={"Joker": JACKPOT, "Queen of Hearts": JACKPOT})


def test_card_payouts_are_normalized_to_cents() -> None:
    config = Configuration(card_payouts={" Joker ": 50, "Ace of Spades": JACKPOT})

    assert config.card_payouts == {"Joker": Decimal("50.00"), "Ace of Spades": JACKPOT}
    assert config.jackpot_card == "Ace of Spades"
