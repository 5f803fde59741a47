"""Bidders — реализации bidder capability.

Bidder — недоверенный контрагент: фонд вызывает его callback посреди
settlement. Варианты:
- HonestBidder: возвращает ровно buy_amount (плюс необязательный surplus)
- DishonestBidder: возвращает фиксированное количество (обычно меньше)
- DonatingBidder: возвращает buy_amount (или меньше) и дополнительно
  дарит фонду посторонний токен
- ReentrantBidder: из callback пытается повторно войти в settlement
"""

from typing import TYPE_CHECKING, Dict, Iterable, Optional, Protocol

from src.core.domain.units import validate_address
from src.core.errors import FolioError
from src.ledger.token import ValueTransfer

if TYPE_CHECKING:
    from src.settlement.engine import SettlementEngine


class Bidder(Protocol):
    """Интерфейс контрагента settlement."""

    address: str

    def on_bid_fulfilled(self, caller: str, buy_token: str, buy_amount: int, data: bytes) -> None:
        """
        Callback после получения sell_token.

        Args:
            caller: Адрес фонда, вызвавшего callback (получатель buy_token)
            buy_token: Адрес токена, который фонд ожидает
            buy_amount: Количество, которое бидер обязан вернуть
            data: Непрозрачные данные из settle
        """
        ...


class _WalletBidder:
    """База для бидеров, переводящих токены из собственного кошелька."""

    def __init__(self, address: str, tokens: Iterable[ValueTransfer]):
        self.address = validate_address(address)
        self._wallet: Dict[str, ValueTransfer] = {token.address: token for token in tokens}
        self.calls = 0

    def _pay(self, to: str, token: str, amount: int) -> None:
        if amount > 0:
            self._wallet[token].transfer(self.address, to, amount)


class HonestBidder(_WalletBidder):
    """Возвращает ровно buy_amount + surplus."""

    def __init__(self, address: str, tokens: Iterable[ValueTransfer], surplus: int = 0):
        super().__init__(address, tokens)
        self.surplus = surplus

    def on_bid_fulfilled(self, caller: str, buy_token: str, buy_amount: int, data: bytes) -> None:
        self.calls += 1
        self._pay(caller, buy_token, buy_amount + self.surplus)


class DishonestBidder(_WalletBidder):
    """Забирает sell_token и возвращает deliver (по умолчанию ничего)."""

    def __init__(self, address: str, tokens: Iterable[ValueTransfer], deliver: int = 0):
        super().__init__(address, tokens)
        self.deliver = deliver

    def on_bid_fulfilled(self, caller: str, buy_token: str, buy_amount: int, data: bytes) -> None:
        self.calls += 1
        self._pay(caller, buy_token, self.deliver)


class DonatingBidder(_WalletBidder):
    """Возвращает buy_amount - shortfall и дарит donation_amount donation_token."""

    def __init__(
        self,
        address: str,
        tokens: Iterable[ValueTransfer],
        donation_token: str,
        donation_amount: int,
        shortfall: int = 0,
    ):
        super().__init__(address, tokens)
        self.donation_token = donation_token
        self.donation_amount = donation_amount
        self.shortfall = shortfall

    def on_bid_fulfilled(self, caller: str, buy_token: str, buy_amount: int, data: bytes) -> None:
        self.calls += 1
        self._pay(caller, self.donation_token, self.donation_amount)
        self._pay(caller, buy_token, max(buy_amount - self.shortfall, 0))


class ReentrantBidder(_WalletBidder):
    """
    Из callback пытается повторно вызвать settle для reentry_trade_id.

    swallow_reentry_error=True: ошибка повторного входа перехватывается,
    после чего бидер честно платит. Иначе ошибка пробрасывается наружу.
    """

    def __init__(
        self,
        address: str,
        tokens: Iterable[ValueTransfer],
        engine: "SettlementEngine",
        reentry_trade_id: str,
        swallow_reentry_error: bool = False,
    ):
        super().__init__(address, tokens)
        self.engine = engine
        self.reentry_trade_id = reentry_trade_id
        self.swallow_reentry_error = swallow_reentry_error
        self.reentry_error: Optional[FolioError] = None

    def on_bid_fulfilled(self, caller: str, buy_token: str, buy_amount: int, data: bytes) -> None:
        self.calls += 1
        try:
            self.engine.settle(self, self.reentry_trade_id, data)
        except FolioError as exc:
            self.reentry_error = exc
            if not self.swallow_reentry_error:
                raise
        self._pay(caller, buy_token, buy_amount)
