"""
Mathematical primitives.

Integer fixed-point arithmetic for auction prices and token amounts.
"""

from src.core.math.fixed_point import (
    D27,
    Rounding,
    bid_amount,
    mul_div,
    price_in_range,
)

__all__ = [
    "D27",
    "Rounding",
    "mul_div",
    "bid_amount",
    "price_in_range",
]
