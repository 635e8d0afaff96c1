from decimal import Decimal

import pytest

from qoh_ledger.domain import InvalidJackpotAmountError, MissingWinnerInfoError, distribute_jackpot


def test_absent_winner_pays_penalty_into_next_game() -> None:
    result = distribute_jackpot(Decimal("1000"), False, Decimal("10"), Decimal("500"), "Pat Smith")

    assert result.penalty_amount == Decimal("100.00")
    assert result.winner_receives == Decimal("900.00")
    assert result.final_payout == Decimal("900.00")
    assert result.next_game_gets == Decimal("100.00")
    assert result.shortfall == Decimal("0.00")


def test_guarantee_tops_up_small_jackpot() -> None:
    result = distribute_jackpot(Decimal("400"), True, Decimal("10"), Decimal("500"), "Pat Smith")

    assert result.penalty_amount == Decimal("0.00")
    assert result.winner_receives == Decimal("400.00")
    assert result.final_payout == Decimal("500.00")
    assert result.next_game_gets == Decimal("0.00")
    assert result.shortfall == Decimal("100.00")


@pytest.mark.parametrize(
    ("total", "present", "penalty"),
    [
        (Decimal("1000"), False, Decimal("10")),
        (Decimal("0.03"), False, Decimal("33.33")),
        (Decimal("1234.57"), False, Decimal("12.5")),
        (Decimal("777.77"), True, Decimal("50")),
    ],
    ids=["round", "tiny", "odd-cents", "present"],
)
def test_receives_plus_penalty_equals_total(total: Decimal, present: bool, penalty: Decimal) -> None:
    result = distribute_jackpot(total, present, penalty, Decimal("0"), "Pat")

    assert result.winner_receives + result.penalty_amount == result.total_jackpot


@pytest.mark.parametrize("name", ["", "   ", None], ids=["empty", "blank", "missing"])
def test_winner_name_required(name: str | None) -> None:
    with pytest.raises(MissingWinnerInfoError):
        distribute_jackpot(Decimal("1000"), True, Decimal("10"), Decimal("500"), name)


@pytest.mark.parametrize("total", [Decimal("0"), Decimal("-5")], ids=["zero", "negative"])
def test_non_positive_jackpot_rejected(total: Decimal) -> None:
    with pytest.raises(InvalidJackpotAmountError):
        distribute_jackpot(total, True, Decimal("10"), Decimal("500"), "Pat")
