"""
Domain models and value objects.

Contains fundamental domain entities like Trade, BalanceSnapshot, FundState, Role.
"""

from src.core.domain.fund_state import FUND_STATE_SCHEMA_VERSION, FundState
from src.core.domain.roles import Role
from src.core.domain.trade import AuctionPrices, BalanceSnapshot, Trade, TradeStatus
from src.core.domain.units import (
    ZERO_ADDRESS,
    derive_address,
    is_address,
    validate_address,
    validate_amount,
    validate_version,
)

__all__ = [
    # Units module
    "ZERO_ADDRESS",
    "derive_address",
    "is_address",
    "validate_address",
    "validate_amount",
    "validate_version",
    # Roles
    "Role",
    # Trade model
    "Trade",
    "TradeStatus",
    "AuctionPrices",
    "BalanceSnapshot",
    # Fund state
    "FundState",
    "FUND_STATE_SCHEMA_VERSION",
]
