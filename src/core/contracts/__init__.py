"""
Contract Validation Module

Формальные JSON контракты на границе доверия: входящие биды и экспорт состояния фонда.
"""

from .validators import (
    ContractValidator,
    FundStateValidator,
    SchemaLoader,
    TradeValidator,
    check_trade,
    default_loader,
    format_error,
    validate_fund_state,
    validate_trade,
)

__all__ = [
    # Loader
    "SchemaLoader",
    "default_loader",
    # Validators
    "ContractValidator",
    "TradeValidator",
    "FundStateValidator",
    # Functions
    "validate_trade",
    "validate_fund_state",
    "check_trade",
    "format_error",
]
