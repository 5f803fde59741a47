"""Fund — версионированный vault с корзиной токенов.

Фонд:
- держит токены (балансы живут в токенах под адресом фонда)
- хранит задекларированную версию (до/после миграции)
- принимает upgrade только от своего proxy admin
- держит non-reentrant lock, общий для всех мутирующих точек входа
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from src.core.domain.fund_state import FundState
from src.core.domain.units import validate_address, validate_version
from src.core.errors import ReentrantCall, Unauthorized
from src.ledger.journal import Journal
from src.ledger.proxy_admin import ProxyAdmin
from src.ledger.registry import RoleRegistry
from src.ledger.token import ValueTransfer

logger = logging.getLogger(__name__)


class Fund:
    """Фонд (vault) за upgradeable proxy."""

    def __init__(
        self,
        journal: Journal,
        address: str,
        registry: RoleRegistry,
        proxy_admin: ProxyAdmin,
        version: str = "2.0.0",
    ):
        """
        Args:
            journal: Журнал транзакций; settlement и миграция фонда откатываются им
            address: Адрес фонда
            registry: Access-control registry фонда
            proxy_admin: Proxy admin, управляющий upgrade
            version: Начальная задекларированная версия (MAJOR.MINOR.PATCH)

        Raises:
            InvariantViolation: Если registry или proxy admin живут в другом журнале
        """
        journal.require(registry, proxy_admin)
        self.journal = journal
        self.address = validate_address(address)
        self.registry = registry
        self.proxy_admin = proxy_admin
        self._version = validate_version(version)
        self._locked = False
        journal.register(self)

    def __repr__(self) -> str:
        return f"Fund({self.address}, version={self._version})"

    def version(self) -> str:
        return self._version

    def balance_of(self, token: ValueTransfer) -> int:
        return token.balance_of(self.address)

    @property
    def locked(self) -> bool:
        return self._locked

    @contextmanager
    def non_reentrant(self) -> Iterator[None]:
        """
        Lock на время мутирующей операции.

        Raises:
            ReentrantCall: Если фонд уже внутри мутирующей операции
        """
        if self._locked:
            raise ReentrantCall(f"fund {self.address} re-entered while locked")
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    def upgrade_to(self, caller: str, new_version: str) -> None:
        """
        Upgrade hook: смена задекларированной версии.

        Raises:
            Unauthorized: Если caller не proxy admin фонда
            ReentrantCall: Если вызван во время settlement callback
            ValueError: Если new_version не MAJOR.MINOR.PATCH
        """
        if caller != self.proxy_admin.address:
            raise Unauthorized(caller, "only the proxy admin can upgrade")
        validate_version(new_version)

        with self.non_reentrant():
            logger.info("fund %s upgraded %s -> %s", self.address, self._version, new_version)
            self._version = new_version

    def state(self, tokens: Iterable[ValueTransfer] = ()) -> FundState:
        """Снапшот версии, governance и балансов по заданным токенам."""
        return FundState(
            fund=self.address,
            version=self._version,
            proxy_owner=self.proxy_admin.owner(),
            roles=self.registry.roles(),
            balances={token.address: self.balance_of(token) for token in tokens},
        )

    def snapshot(self) -> str:
        return self._version

    def restore(self, state: str) -> None:
        self._version = state
