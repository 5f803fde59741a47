"""
Fixed-Point — целочисленная арифметика цен аукциона

Все количества токенов — неотрицательные целые (минимальные единицы токена).
Цены аукциона выражены в D27{buyTok/sellTok}.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никаких float в расчётах количеств
2. Округление всегда в пользу фонда (CEIL для суммы, которую должен бидер)
3. Деление на ноль запрещено (ValueError)
"""

from enum import Enum
from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# 27-значная точность (цены аукциона)
D27: Final[int] = 10**27


class Rounding(str, Enum):
    """Направление округления."""

    FLOOR = "floor"
    CEIL = "ceil"


# =============================================================================
# БАЗОВЫЕ ОПЕРАЦИИ
# =============================================================================


def mul_div(x: int, y: int, d: int, rounding: Rounding = Rounding.FLOOR) -> int:
    """
    Вычисление x * y / d без потери точности.

    Args:
        x: Множитель (>= 0)
        y: Множитель (>= 0)
        d: Делитель (> 0)
        rounding: FLOOR или CEIL

    Returns:
        Целый результат с заданным округлением

    Raises:
        ValueError: При отрицательных аргументах или d == 0

    Examples:
        >>> mul_div(10, 3, 4)
        7
        >>> mul_div(10, 3, 4, Rounding.CEIL)
        8
    """
    if d == 0:
        raise ValueError("mul_div: division by zero")
    if x < 0 or y < 0 or d < 0:
        raise ValueError(f"mul_div expects non-negative operands, got {x}, {y}, {d}")

    quotient, remainder = divmod(x * y, d)
    if rounding == Rounding.CEIL and remainder:
        quotient += 1
    return quotient


def bid_amount(sell_amount: int, price_d27: int) -> int:
    """
    Количество buy-токена, которое бидер обязан вернуть за sell_amount.

    buy = ceil(sell_amount * price / D27)

    Округление вверх: фонд никогда не округляет в пользу контрагента.
    """
    return mul_div(sell_amount, price_d27, D27, Rounding.CEIL)


def price_in_range(price_d27: int, start: int, end: int) -> bool:
    """Проверка end <= price <= start (цена аукциона убывает от start к end)."""
    return end <= price_d27 <= start
