from datetime import date
from decimal import Decimal

import pytest

from qoh_ledger.domain import DEFAULT_CONFIGURATION, JACKPOT, InvalidInputError
from qoh_ledger.services.configuration_service import ConfigurationService
from qoh_ledger.services.game_service import GameService

ORG = "st-marys"


def test_defaults_until_saved(configuration: ConfigurationService) -> None:
    assert configuration.get(ORG) == DEFAULT_CONFIGURATION


def test_update_persists_per_organization(configuration: ConfigurationService) -> None:
    configuration.update(ORG, penalty_percentage=Decimal("20"), card_payouts={"Joker": "75", "Ace of Hearts": JACKPOT})

    saved = configuration.get(ORG)
    assert saved.penalty_percentage == Decimal("20")
    assert saved.jackpot_card == "Ace of Hearts"
    assert saved.payout_for("Joker") == Decimal("75.00")
    assert configuration.get("another-org") == DEFAULT_CONFIGURATION


@pytest.mark.parametrize(
    "changes",
    [
        {"jackpot_percentage": Decimal("70")},
        {"ticket_price": Decimal("-2")},
        {"house_edge": Decimal("5")},
    ],
    ids=["percentages-off-100", "negative-price", "unknown-field"],
)
def test_invalid_updates_are_rejected(configuration: ConfigurationService, changes: dict) -> None:
    with pytest.raises(InvalidInputError):
        configuration.update(ORG, **changes)

    assert configuration.get(ORG) == DEFAULT_CONFIGURATION


def test_fractional_percentages_survive_storage(configuration: ConfigurationService, games: GameService) -> None:
    configuration.update(ORG, organization_percentage=Decimal("66.67"), jackpot_percentage=Decimal("33.33"))

    saved = configuration.get(ORG)
    game = games.create_game(ORG, date(2024, 1, 1))

    assert saved.organization_percentage == Decimal("66.67")
    assert game.terms.jackpot_percentage == Decimal("33.33")


def test_percentages_finer_than_cents_are_rejected(configuration: ConfigurationService, games: GameService) -> None:
    with pytest.raises(InvalidInputError):
        configuration.update(ORG, organization_percentage=Decimal("66.665"), jackpot_percentage=Decimal("33.335"))

    assert configuration.get(ORG) == DEFAULT_CONFIGURATION
    assert games.create_game(ORG, date(2024, 1, 1)).terms == DEFAULT_CONFIGURATION
