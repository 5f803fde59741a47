"""Settlement Engine — атомарный swap фонда с недоверенным бидером.

Порядок settle (одна транзакция Journal.atomic):
1. Снапшот баланса buy_token фонда
2. Перевод sell_amount sell_token бидеру (до проверки)
3. Callback бидера on_bid_fulfilled(buy_token, buy_amount, data)
4. Снапшот баланса buy_token фонда
5. Проверка дельты: after - before >= min_buy_amount
6. Нехватка → SettlementShortfall, откат всей транзакции (включая шаг 2)
7. Успех → сделка потреблена, повторный settle → AlreadySettled

Защита от re-entrancy:
- non_reentrant lock фонда держится с шага 1 по шаг 7, поэтому callback
  не может ни повторно войти в settle, ни вывести доставленное из фонда
- open_trade берёт тот же lock: callback не может регистрировать сделки
- фаза сделки OPEN → SETTLING → SETTLED проверяется при входе
- решение принимается только по дельте buy_token; балансы других токенов
  (donation) на решение не влияют

Сделки регистрирует только держатель AUCTION_LAUNCHER или REBALANCE_MANAGER
(SettlementConfig.opener_roles).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set, Tuple

from src.core.domain.roles import Role
from src.core.domain.trade import BalanceSnapshot, Trade, TradeStatus
from src.core.errors import (
    AlreadySettled,
    InvalidTrade,
    ReentrantCall,
    SettlementShortfall,
    TransferFailed,
    Unauthorized,
    UnknownTrade,
)
from src.ledger.journal import Journal
from src.ledger.token import ValueTransfer
from src.settlement.bidders import Bidder
from src.vault.fund import Fund

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class SettlementConfig:
    """Конфигурация settlement engine.

    - min_sell_amount: минимальный sell_amount (защита от dust-сделок)
    - allow_zero_min_buy: разрешить сделки с min_buy_amount == 0
      (фонд отдаёт токены даром — по умолчанию запрещено)
    - opener_roles: роли fund.registry, держателю любой из которых
      разрешено регистрировать сделки
    """
    min_sell_amount: int = 1
    allow_zero_min_buy: bool = False
    opener_roles: Tuple[str, ...] = (Role.AUCTION_LAUNCHER.value, Role.REBALANCE_MANAGER.value)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class SettlementResult:
    """Результат успешного settlement."""

    trade_id: str
    bidder: str

    sell_token: str
    buy_token: str
    sell_amount: int
    min_buy_amount: int

    # Наблюдаемая дельта buy_token фонда и превышение над минимумом
    buy_delta: int
    surplus: int

    # Детали
    details: str


# =============================================================================
# ENGINE
# =============================================================================


class SettlementEngine:
    """Settlement engine фонда.

    Хранит только книгу открытых сделок и флаги потребления:
    сам Trade после settlement не хранится.
    """

    def __init__(
        self,
        journal: Journal,
        fund: Fund,
        tokens: Iterable[ValueTransfer],
        config: Optional[SettlementConfig] = None,
    ):
        """
        Args:
            journal: Журнал транзакций
            fund: Фонд, от имени которого идут переводы
            tokens: Токены корзины, с которыми разрешены сделки
            config: Конфигурация engine

        Raises:
            InvariantViolation: Если фонд или токены корзины живут в другом журнале
        """
        tokens = list(tokens)
        journal.require(fund, *tokens)
        self.journal = journal
        self.fund = fund
        self.config = config or SettlementConfig()
        self._tokens: Dict[str, ValueTransfer] = {token.address: token for token in tokens}

        self._open: Dict[str, Trade] = {}
        self._phase: Dict[str, TradeStatus] = {}
        self._settled: Set[str] = set()
        journal.register(self)

    # -------------------------------------------------------------------------
    # Trade book
    # -------------------------------------------------------------------------

    def open_trade(self, caller: str, trade: Trade) -> None:
        """
        Регистрация сделки, заявленной бидером.

        Args:
            caller: Держатель одной из config.opener_roles на фонде
            trade: Заявленная сделка

        Raises:
            Unauthorized: Если caller не держит ни одной из opener_roles
            ReentrantCall: Если вызван из settlement callback
            AlreadySettled: Если сделка с этим id уже потреблена
            InvalidTrade: Если id уже открыт, токен неизвестен
                или количества нарушают конфигурацию
        """
        with self.journal.atomic(f"open:{trade.trade_id}"):
            with self.fund.non_reentrant():
                self._require_opener(caller)

                if trade.trade_id in self._settled:
                    raise AlreadySettled(trade.trade_id)
                if trade.trade_id in self._open:
                    raise InvalidTrade(f"trade {trade.trade_id!r} already open")

                for token in (trade.sell_token, trade.buy_token):
                    if token not in self._tokens:
                        raise InvalidTrade(f"token {token} is not in the fund basket")

                if trade.sell_amount < self.config.min_sell_amount:
                    raise InvalidTrade(
                        f"sell_amount {trade.sell_amount} below minimum {self.config.min_sell_amount}"
                    )
                if trade.min_buy_amount == 0 and not self.config.allow_zero_min_buy:
                    raise InvalidTrade(f"trade {trade.trade_id!r} has zero min_buy_amount")

                self._open[trade.trade_id] = trade
                self._phase[trade.trade_id] = TradeStatus.OPEN
                logger.debug("trade %s opened by %s for bidder %s", trade.trade_id, caller, trade.bidder)

    def _require_opener(self, caller: str) -> None:
        registry = self.fund.registry
        if not any(registry.has_role(role, caller) for role in self.config.opener_roles):
            logger.warning("trade registration rejected for %s", caller)
            raise Unauthorized(caller, "must hold one of " + ", ".join(self.config.opener_roles))

    def trade_status(self, trade_id: str) -> TradeStatus:
        """
        Raises:
            UnknownTrade: Если сделка не регистрировалась
        """
        if trade_id in self._settled:
            return TradeStatus.SETTLED
        if trade_id in self._phase:
            return self._phase[trade_id]
        raise UnknownTrade(trade_id)

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def settle(self, bidder: Bidder, trade_id: str, data: bytes = b"") -> SettlementResult:
        """
        Исполнение сделки с callback бидера.

        Args:
            bidder: Контрагент (caller); bidder.address должен совпадать с trade.bidder
            trade_id: Идентификатор открытой сделки
            data: Непрозрачные данные, передаваемые в callback

        Returns:
            SettlementResult

        Raises:
            UnknownTrade: Сделка не регистрировалась
            AlreadySettled: Сделка уже потреблена
            ReentrantCall: Вызов из callback другой сделки
            Unauthorized: Caller не является бидером сделки
            TransferFailed: Токен вернул False
            SettlementShortfall: Дельта buy_token меньше min_buy_amount
        """
        with self.journal.atomic(f"settle:{trade_id}"):
            with self.fund.non_reentrant():
                trade = self._begin(bidder, trade_id)
                sell_token = self._tokens[trade.sell_token]
                buy_token = self._tokens[trade.buy_token]

                # 1. Снапшот до callback
                before = self._snapshot(buy_token)

                # 2. Отдаём sell_token до проверки
                self._push(sell_token, bidder.address, trade.sell_amount)

                # 3. Callback: единственная точка входа недоверенного кода
                bidder.on_bid_fulfilled(self.fund.address, buy_token.address, trade.buy_amount, data)

                # 4-5. Проверка дельты
                after = self._snapshot(buy_token)
                delta = before.delta(after)
                if delta < trade.min_buy_amount:
                    logger.warning(
                        "trade %s shortfall: delivered %d of %s, required %d",
                        trade_id, delta, buy_token.symbol, trade.min_buy_amount,
                    )
                    raise SettlementShortfall(trade_id, trade.min_buy_amount, delta)

                # 7. Потребление
                self._consume(trade_id)

        surplus = delta - trade.min_buy_amount
        logger.info(
            "trade %s settled: %d %s -> %s, received %d %s (surplus %d)",
            trade_id, trade.sell_amount, sell_token.symbol, bidder.address,
            delta, buy_token.symbol, surplus,
        )
        return SettlementResult(
            trade_id=trade_id,
            bidder=bidder.address,
            sell_token=trade.sell_token,
            buy_token=trade.buy_token,
            sell_amount=trade.sell_amount,
            min_buy_amount=trade.min_buy_amount,
            buy_delta=delta,
            surplus=surplus,
            details=(
                f"SETTLED: sold {trade.sell_amount} {sell_token.symbol}, "
                f"received {delta} {buy_token.symbol} (min {trade.min_buy_amount})"
            ),
        )

    def _begin(self, bidder: Bidder, trade_id: str) -> Trade:
        if trade_id in self._settled:
            raise AlreadySettled(trade_id)
        if trade_id not in self._open:
            raise UnknownTrade(trade_id)
        if self._phase[trade_id] != TradeStatus.OPEN:
            raise ReentrantCall(f"trade {trade_id!r} is already settling")

        trade = self._open[trade_id]
        if bidder.address != trade.bidder:
            raise Unauthorized(bidder.address, f"not the bidder of trade {trade_id!r}")

        self._phase[trade_id] = TradeStatus.SETTLING
        return trade

    def _consume(self, trade_id: str) -> None:
        del self._open[trade_id]
        del self._phase[trade_id]
        self._settled.add(trade_id)

    def _snapshot(self, token: ValueTransfer) -> BalanceSnapshot:
        return BalanceSnapshot(
            token=token.address,
            holder=self.fund.address,
            amount=token.balance_of(self.fund.address),
        )

    def _push(self, token: ValueTransfer, to: str, amount: int) -> None:
        # False трактуется как revert
        if not token.transfer(self.fund.address, to, amount):
            raise TransferFailed(token.symbol, to, amount)

    # -------------------------------------------------------------------------
    # Journal
    # -------------------------------------------------------------------------

    def snapshot(self) -> Tuple[Dict[str, Trade], Dict[str, TradeStatus], Set[str]]:
        return dict(self._open), dict(self._phase), set(self._settled)

    def restore(self, state: Tuple[Dict[str, Trade], Dict[str, TradeStatus], Set[str]]) -> None:
        open_trades, phase, settled = state
        self._open = dict(open_trades)
        self._phase = dict(phase)
        self._settled = set(settled)
