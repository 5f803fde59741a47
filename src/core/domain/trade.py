"""
Trade — Модель сделки по аукционному биду

Immutable Pydantic модель. Trade создаётся, когда бидер забирает слот
открытого аукциона, и потребляется settlement engine ровно один раз.
После settlement (успешного или отменённого) сам Trade не хранится,
остаётся только флаг потребления.
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.contracts.validators import check_trade
from src.core.domain.units import validate_address
from src.core.errors import InvalidTrade
from src.core.math.fixed_point import bid_amount, price_in_range


# =============================================================================
# ENUMS
# =============================================================================


class TradeStatus(str, Enum):
    """Фаза сделки в settlement engine"""

    OPEN = "OPEN"  # Зарегистрирована, ожидает settle
    SETTLING = "SETTLING"  # Внутри settle (callback в процессе)
    SETTLED = "SETTLED"  # Потреблена


# =============================================================================
# AUCTION PRICES
# =============================================================================


class AuctionPrices(BaseModel):
    """
    Границы цены аукциона D27{buyTok/sellTok}.

    Цена убывает от start к end, поэтому start >= end.
    """

    start: int = Field(..., gt=0, strict=True, description="Начальная (максимальная) цена")
    end: int = Field(..., gt=0, strict=True, description="Конечная (минимальная) цена")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_start_above_end(self) -> "AuctionPrices":
        if self.start < self.end:
            raise ValueError(f"start price {self.start} below end price {self.end}")
        return self


# =============================================================================
# TRADE MODEL
# =============================================================================


class Trade(BaseModel):
    """
    Модель сделки: фонд отдаёт sell_amount sell_token, бидер обязан
    вернуть минимум min_buy_amount buy_token в том же вызове.

    Immutable модель (frozen=True).
    """

    # Идентификация
    trade_id: str = Field(..., min_length=1, description="Уникальный идентификатор сделки")
    bidder: str = Field(..., description="Адрес бидера, забравшего слот")

    # Пара
    sell_token: str = Field(..., description="Токен, который отдаёт фонд")
    buy_token: str = Field(..., description="Токен, который получает фонд")

    # Количества (минимальные единицы токена)
    sell_amount: int = Field(..., gt=0, strict=True, description="Сколько отдаёт фонд")
    min_buy_amount: int = Field(..., ge=0, strict=True, description="Минимум, который должен вернуть бидер")

    # Цена, по которой бид был сформирован (если известна)
    price_d27: int | None = Field(None, gt=0, strict=True, description="Цена D27{buyTok/sellTok}")

    model_config = {"frozen": True}

    @field_validator("bidder", "sell_token", "buy_token")
    @classmethod
    def validate_addresses(cls, v: str) -> str:
        return validate_address(v)

    @model_validator(mode="after")
    def validate_distinct_tokens(self) -> "Trade":
        """Продажа токена за самого себя не имеет смысла и ломает учёт дельты"""
        if self.sell_token == self.buy_token:
            raise ValueError(f"sell_token and buy_token must differ, got {self.sell_token}")
        return self

    @property
    def buy_amount(self) -> int:
        """Количество, которое бидер обязан вернуть по согласованной цене."""
        return self.min_buy_amount

    @classmethod
    def from_auction(
        cls,
        trade_id: str,
        bidder: str,
        sell_token: str,
        buy_token: str,
        sell_amount: int,
        price_d27: int,
        prices: AuctionPrices,
    ) -> "Trade":
        """
        Построение сделки по результату аукциона.

        Args:
            trade_id: Идентификатор сделки
            bidder: Адрес бидера
            sell_token: Токен, который отдаёт фонд
            buy_token: Токен, который получает фонд
            sell_amount: Количество sell_token
            price_d27: Текущая цена аукциона D27{buyTok/sellTok}
            prices: Границы цены аукциона

        Returns:
            Trade с min_buy_amount = ceil(sell_amount * price / D27)

        Raises:
            InvalidTrade: Если цена вне диапазона аукциона
        """
        if not price_in_range(price_d27, prices.start, prices.end):
            raise InvalidTrade(
                f"price {price_d27} outside auction range [{prices.end}, {prices.start}]"
            )
        return cls(
            trade_id=trade_id,
            bidder=bidder,
            sell_token=sell_token,
            buy_token=buy_token,
            sell_amount=sell_amount,
            min_buy_amount=bid_amount(sell_amount, price_d27),
            price_d27=price_d27,
        )

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Trade":
        """
        Построение сделки из недоверенного payload.

        Сначала проверяется JSON контракт 'trade', затем модель.

        Raises:
            InvalidTrade: Если payload нарушает контракт (все нарушения в сообщении)
            pydantic.ValidationError: Если модель не проходит проверки
        """
        check_trade(payload)
        fields = {k: v for k, v in payload.items() if k != "schema_version"}
        return cls(**fields)


# =============================================================================
# BALANCE SNAPSHOT
# =============================================================================


class BalanceSnapshot(BaseModel):
    """
    Снапшот баланса держателя до/после callback.

    Транзиентное состояние проверки, не сохраняется.
    """

    token: str = Field(..., description="Адрес токена")
    holder: str = Field(..., description="Адрес держателя")
    amount: int = Field(..., ge=0, strict=True, description="Баланс")

    model_config = {"frozen": True}

    def delta(self, after: "BalanceSnapshot") -> int:
        """
        Изменение баланса между двумя снапшотами одного держателя.

        Raises:
            ValueError: Если снапшоты относятся к разным token/holder
        """
        if (after.token, after.holder) != (self.token, self.holder):
            raise ValueError(
                f"snapshot mismatch: {self.token}/{self.holder} vs {after.token}/{after.holder}"
            )
        return after.amount - self.amount
