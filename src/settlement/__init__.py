"""Settlement — атомарный расчёт по биду с callback недоверенного контрагента."""

from .bidders import (
    Bidder,
    DishonestBidder,
    DonatingBidder,
    HonestBidder,
    ReentrantBidder,
)
from .engine import SettlementConfig, SettlementEngine, SettlementResult

__all__ = [
    "SettlementEngine",
    "SettlementConfig",
    "SettlementResult",
    "Bidder",
    "HonestBidder",
    "DishonestBidder",
    "DonatingBidder",
    "ReentrantBidder",
]
