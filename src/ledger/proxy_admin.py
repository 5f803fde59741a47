"""Proxy Admin — единственный владелец права upgrade фонда.

Инвариант: владелец никогда не нулевой адрес. Сам механизм замены кода
непрозрачен: upgrade_and_call лишь вызывает upgrade hook фонда.
"""

import logging
from typing import Protocol

from src.core.domain.units import validate_address
from src.core.errors import Unauthorized
from src.ledger.journal import Journal

logger = logging.getLogger(__name__)


class Upgradeable(Protocol):
    """Фонд с upgrade hook, принимающим вызовы только от своего proxy admin."""

    def upgrade_to(self, caller: str, new_version: str) -> None:
        ...


class ProxyAdmin:
    """Ownable proxy admin."""

    def __init__(self, journal: Journal, address: str, owner: str):
        self.address = validate_address(address)
        self._owner = validate_address(owner)
        journal.register(self)

    def __repr__(self) -> str:
        return f"ProxyAdmin({self.address})"

    def owner(self) -> str:
        return self._owner

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise Unauthorized(caller, "caller is not the proxy admin owner")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """
        Raises:
            Unauthorized: Если caller не владелец
            InvalidAddress: Если new_owner нулевой
        """
        self._require_owner(caller)
        validate_address(new_owner)
        logger.info("proxy admin %s ownership %s -> %s", self.address, self._owner, new_owner)
        self._owner = new_owner

    def upgrade_and_call(self, caller: str, fund: Upgradeable, new_version: str) -> None:
        """Upgrade фонда до new_version (только владелец)."""
        self._require_owner(caller)
        fund.upgrade_to(self.address, new_version)

    def snapshot(self) -> str:
        return self._owner

    def restore(self, state: str) -> None:
        self._owner = state
