"""
Тесты для Fixed-Point арифметики цен аукциона

Проверяет:
1. mul_div с округлением FLOOR/CEIL
2. bid_amount всегда округляет в пользу фонда
3. price_in_range на границах
4. Защиту от деления на ноль и отрицательных операндов
"""

import pytest

from src.core.math.fixed_point import (
    D27,
    Rounding,
    bid_amount,
    mul_div,
    price_in_range,
)


# =============================================================================
# MUL_DIV
# =============================================================================


class TestMulDiv:
    """Тесты mul_div"""

    def test_floor_rounding(self):
        """10 * 3 / 4 = 7.5 → 7"""
        assert mul_div(10, 3, 4) == 7

    def test_ceil_rounding(self):
        """10 * 3 / 4 = 7.5 → 8"""
        assert mul_div(10, 3, 4, Rounding.CEIL) == 8

    def test_ceil_exact_division_not_rounded_up(self):
        """Точное деление не округляется вверх"""
        assert mul_div(8, 2, 4, Rounding.CEIL) == 4

    def test_no_precision_loss_on_large_values(self):
        """Промежуточное произведение больше 2**256 не теряет точность"""
        x = 10**40
        assert mul_div(x, D27, D27) == x
        assert mul_div(x, 3 * 10**18, 10**18) == 3 * x

    def test_zero_denominator_raises(self):
        with pytest.raises(ValueError, match="division by zero"):
            mul_div(1, 1, 0)

    @pytest.mark.parametrize("x, y, d", [(-1, 1, 1), (1, -1, 1), (1, 1, -1)])
    def test_negative_operands_raise(self, x, y, d):
        with pytest.raises(ValueError, match="non-negative"):
            mul_div(x, y, d)


# =============================================================================
# BID AMOUNT
# =============================================================================


class TestBidAmount:
    """Тесты bid_amount: ceil(sell * price / D27)"""

    def test_unit_price(self):
        """Цена 1:1 → buy == sell"""
        assert bid_amount(10**18, D27) == 10**18

    def test_rounds_up_in_favour_of_fund(self):
        """3 * 0.5 = 1.5 → 2"""
        assert bid_amount(3, D27 // 2) == 2

    def test_tiny_price_still_owes_one_unit(self):
        """Любая ненулевая цена требует минимум 1 единицу"""
        assert bid_amount(1, 1) == 1

    def test_zero_sell_amount_owes_nothing(self):
        assert bid_amount(0, D27) == 0

    def test_decimals_conversion(self):
        """1 WETH (18 dec) по цене 3000 USDC (6 dec) → 3000 * 10**6"""
        price = 3000 * 10**6 * D27 // 10**18
        assert bid_amount(10**18, price) == 3000 * 10**6


# =============================================================================
# PRICE RANGE
# =============================================================================


class TestPriceInRange:
    """Тесты price_in_range: end <= price <= start"""

    @pytest.mark.parametrize(
        "price, expected",
        [
            (5, True),
            (10, True),  # start включительно
            (1, True),  # end включительно
            (11, False),
            (0, False),
        ],
    )
    def test_bounds(self, price, expected):
        assert price_in_range(price, start=10, end=1) is expected
