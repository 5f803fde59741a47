"""Token — value-transfer capability.

Непрозрачный интерфейс токена: transfer и balance_of. Вызывающий передаётся
явно первым аргументом (caller), как и во всех мутирующих операциях ledger.

Контракт transfer: либо полностью успешен (True), либо revert (исключение),
либо False. Ядро обязано трактовать False как revert.
"""

from typing import Dict, Protocol

from src.core.domain.units import derive_address, validate_address, validate_amount
from src.core.errors import InsufficientBalance
from src.ledger.journal import Journal


class ValueTransfer(Protocol):
    """Интерфейс токена, от которого зависит ядро."""

    address: str
    symbol: str

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        ...

    def balance_of(self, holder: str) -> int:
        ...


class InMemoryToken:
    """Токен с балансами в памяти, участник Journal."""

    def __init__(self, journal: Journal, symbol: str, address: str | None = None):
        self.symbol = symbol
        self.address = validate_address(address or derive_address(f"token:{symbol}"))
        self._balances: Dict[str, int] = {}
        journal.register(self)

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol})"

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def mint(self, to: str, amount: int) -> None:
        """Эмиссия (настройка сценариев, вне trust boundary)."""
        validate_address(to)
        validate_amount(amount)
        self._balances[to] = self._balances.get(to, 0) + amount

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        """
        Перевод amount от caller к to.

        Raises:
            InvalidAddress: Если to нулевой или неверный
            InsufficientBalance: Если у caller не хватает баланса
        """
        validate_address(to)
        validate_amount(amount)

        balance = self.balance_of(caller)
        if balance < amount:
            raise InsufficientBalance(self.symbol, caller, balance, amount)

        self._balances[caller] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        return True

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)

    def restore(self, state: Dict[str, int]) -> None:
        self._balances = dict(state)
