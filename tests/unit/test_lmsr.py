"""Tests for the LMSR pricing engine and the share solver."""

import pytest

from src.pm_common.enums import ShareSide
from src.pm_common.errors import (
    ArithmeticUnderflowError,
    InsufficientSharesError,
    InvalidBParameterError,
)
from src.pm_clearing.domain.invariants import calculate_max_loss
from src.pm_math import lmsr
from src.pm_math.fixed_point import PRECISION, mul
from src.pm_math.transcendental import ln

B = 1000 * PRECISION


class TestPrices:
    def test_even_market_is_half(self) -> None:
        assert lmsr.price_yes(0, 0, B) == PRECISION // 2
        assert lmsr.price_no(0, 0, B) == PRECISION // 2

    @pytest.mark.parametrize(
        "q_yes,q_no",
        [(0, 0), (20 * PRECISION, 0), (0, 35 * PRECISION), (123 * PRECISION, 45 * PRECISION)],
    )
    def test_prices_sum_to_one(self, q_yes: int, q_no: int) -> None:
        assert lmsr.price_yes(q_yes, q_no, B) + lmsr.price_no(q_yes, q_no, B) == PRECISION

    def test_more_yes_raises_yes_price(self) -> None:
        assert lmsr.price_yes(20 * PRECISION, 0, B) > PRECISION // 2
        assert lmsr.price_yes(0, 20 * PRECISION, B) < PRECISION // 2

    def test_b_below_minimum_rejected(self) -> None:
        with pytest.raises(InvalidBParameterError):
            lmsr.price_yes(0, 0, lmsr.MIN_B - 1)


class TestCost:
    def test_empty_market_cost(self) -> None:
        assert lmsr.cost(0, 0, B) == mul(B, ln(2 * PRECISION))

    def test_cost_increases_with_shares(self) -> None:
        assert lmsr.cost(PRECISION, 0, B) > lmsr.cost(0, 0, B)

    def test_b_below_minimum_rejected(self) -> None:
        with pytest.raises(InvalidBParameterError):
            lmsr.cost(0, 0, PRECISION)


class TestBuyCost:
    def test_buys_about_two_shares_per_unit_at_even_odds(self) -> None:
        actual, shares = lmsr.buy_cost(0, 0, B, ShareSide.YES, PRECISION)
        assert 19 * PRECISION // 10 < shares < 21 * PRECISION // 10
        assert abs(actual - PRECISION) < PRECISION // 100

    def test_buy_moves_price_toward_side(self) -> None:
        _, shares = lmsr.buy_cost(0, 0, B, ShareSide.YES, PRECISION)
        assert lmsr.price_yes(shares, 0, B) > PRECISION // 2

    def test_no_side_mirrors_yes(self) -> None:
        _, yes_shares = lmsr.buy_cost(0, 0, B, ShareSide.YES, PRECISION)
        _, no_shares = lmsr.buy_cost(0, 0, B, ShareSide.NO, PRECISION)
        assert yes_shares == no_shares

    def test_dust_target_buys_nothing(self) -> None:
        with pytest.raises(ArithmeticUnderflowError):
            lmsr.buy_cost(0, 0, B, ShareSide.YES, 1)


class TestPriceResponse:
    @pytest.mark.parametrize("lead", [0, 2, 4, 10, 18])
    def test_buy_raises_price_from_any_lead(self, lead: int) -> None:
        b = lmsr.MIN_B
        q_yes = lead * b
        before = lmsr.price_yes(q_yes, 0, b)
        actual, shares = lmsr.buy_cost(q_yes, 0, b, ShareSide.YES, 10 * PRECISION)
        after = lmsr.price_yes(q_yes + shares, 0, b)
        assert after > before

        proceeds = lmsr.sell_proceeds(q_yes + shares, 0, b, ShareSide.YES, shares)
        assert 0 < proceeds <= actual

    def test_heavy_lead_prices_near_certainty(self) -> None:
        b = lmsr.MIN_B
        assert lmsr.price_yes(10 * b, 0, b) > 999_900_000
        assert lmsr.price_no(10 * b, 0, b) < 100_000


class TestSellProceeds:
    def test_round_trip_never_profits(self) -> None:
        actual, shares = lmsr.buy_cost(0, 0, B, ShareSide.YES, PRECISION)
        proceeds = lmsr.sell_proceeds(shares, 0, B, ShareSide.YES, shares)
        assert 0 < proceeds <= actual

    def test_more_than_outstanding_rejected(self) -> None:
        with pytest.raises(InsufficientSharesError):
            lmsr.sell_proceeds(PRECISION, 0, B, ShareSide.YES, 2 * PRECISION)

    def test_no_side_checks_no_supply(self) -> None:
        with pytest.raises(InsufficientSharesError):
            lmsr.sell_proceeds(5 * PRECISION, 0, B, ShareSide.NO, PRECISION)


class TestBForMaxLoss:
    def test_inverts_max_loss(self) -> None:
        assert lmsr.b_for_max_loss(calculate_max_loss(B)) == B

    def test_clamped_to_minimum(self) -> None:
        assert lmsr.b_for_max_loss(0) == lmsr.MIN_B

    def test_clamped_to_maximum(self) -> None:
        assert lmsr.b_for_max_loss(10**30) == lmsr.MAX_B
