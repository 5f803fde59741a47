"""Migration Spell — одноразовая привилегированная миграция фонда.

Жизненный цикл:
- UNUSED: сконструирован без привилегий
- (governance выдаёт spell роль ADMIN и владение proxy admin)
- cast: ровно один раз, атомарно
- CAST: инертен, привилегий не держит

cast(caller, fund, proxy_admin):
0. Spell, fund, registry и proxy admin в одном журнале (InvariantViolation)
1. Guard состояния (AlreadyCast)
2. Авторизация: spell держит ADMIN и владеет proxy admin,
   caller — действующий ADMIN фонда (не сам spell)
3. Проверка версии (AlreadyMigrated / UnsupportedVersion)
4. Upgrade версии через proxy admin
5. Remap ролей source → destination с проверкой равенства множеств
6. Возврат привилегий caller: renounce ADMIN, transfer ownership
7. Пост-условия single-admin (InvariantViolation)
8. Переход в CAST
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.core.domain.roles import Role
from src.core.domain.units import validate_address, validate_version
from src.core.errors import (
    AlreadyCast,
    AlreadyMigrated,
    InvariantViolation,
    Unauthorized,
    UnsupportedVersion,
)
from src.ledger.journal import Journal
from src.ledger.proxy_admin import ProxyAdmin
from src.ledger.registry import role_key
from src.vault.fund import Fund

logger = logging.getLogger(__name__)


class SpellState(str, Enum):
    """Состояние spell."""
    UNUSED = "UNUSED"
    CAST = "CAST"


@dataclass(frozen=True)
class MigrationConfig:
    """Конфигурация миграции.

    - target_version: версия фонда после cast
    - supported_version_prefix: префикс версий, с которых разрешена миграция
    - source_role / destination_role: роль, членство которой переносится
    - revoke_source_role: отозвать source_role у всех членов после переноса
    """
    target_version: str = "3.0.0"
    supported_version_prefix: str = "2."
    source_role: str = Role.AUCTION_APPROVER.value
    destination_role: str = Role.REBALANCE_MANAGER.value
    revoke_source_role: bool = False

    def __post_init__(self):
        validate_version(self.target_version)


@dataclass(frozen=True)
class MigrationResult:
    """Результат успешного cast."""

    fund: str
    previous_version: str
    new_version: str

    # Перенесённые члены (в порядке перечисления source_role)
    migrated_members: Tuple[str, ...]
    source_role: str
    destination_role: str

    # Кому возвращены привилегии
    admin: str

    # Детали
    details: str


class MigrationSpell:
    """Одноразовый spell: upgrade версии + remap ролей + возврат админки."""

    def __init__(self, journal: Journal, address: str, config: Optional[MigrationConfig] = None):
        """
        Args:
            journal: Журнал транзакций; должен совпадать с журналом мигрируемого фонда
            address: Адрес spell
            config: Конфигурация миграции
        """
        self.journal = journal
        self.address = validate_address(address)
        self.config = config or MigrationConfig()
        self._state = SpellState.UNUSED
        journal.register(self)

    def __repr__(self) -> str:
        return f"MigrationSpell({self.address}, {self._state.value})"

    @property
    def state(self) -> SpellState:
        return self._state

    def cast(self, caller: str, fund: Fund, proxy_admin: ProxyAdmin) -> MigrationResult:
        """
        Применение миграции.

        Args:
            caller: Вызывающий; должен быть действующим ADMIN фонда
            fund: Мигрируемый фонд
            proxy_admin: Proxy admin фонда

        Returns:
            MigrationResult

        Raises:
            AlreadyCast: Spell уже применён
            Unauthorized: Spell не держит привилегий или caller не ADMIN
            AlreadyMigrated: Фонд уже на целевой версии
            UnsupportedVersion: Версия фонда не поддерживается
            InvariantViolation: Пост-условия single-admin нарушены, либо
                spell, registry или proxy admin не в журнале фонда
        """
        # Откат должен покрывать всё, что cast меняет
        journal = fund.journal
        journal.require(fund, fund.registry, proxy_admin, self)

        with journal.atomic(f"cast:{self.address}"):
            # 1. Guard состояния
            if self._state == SpellState.CAST:
                raise AlreadyCast(f"spell {self.address} already cast")

            # 2. Авторизация (fail closed)
            self._authorize(caller, fund, proxy_admin)

            # 3. Версия
            previous_version = fund.version()
            self._check_version(previous_version)

            # 4. Upgrade через механизм фонда
            proxy_admin.upgrade_and_call(self.address, fund, self.config.target_version)

            # 5. Remap ролей
            migrated = self._remap_roles(fund)

            # 6. Возврат привилегий
            registry = fund.registry
            registry.renounce_role(self.address, Role.ADMIN, self.address)
            proxy_admin.transfer_ownership(self.address, caller)

            # 7. Пост-условия
            self._check_single_admin(caller, fund, proxy_admin)

            # 8. Spell инертен
            self._state = SpellState.CAST

        logger.info(
            "spell %s cast on fund %s: %s -> %s, %d members %s -> %s, admin %s",
            self.address, fund.address, previous_version, self.config.target_version,
            len(migrated), self.config.source_role, self.config.destination_role, caller,
        )
        return MigrationResult(
            fund=fund.address,
            previous_version=previous_version,
            new_version=fund.version(),
            migrated_members=migrated,
            source_role=self.config.source_role,
            destination_role=self.config.destination_role,
            admin=caller,
            details=(
                f"CAST: {previous_version} -> {fund.version()}, "
                f"{len(migrated)} members {self.config.source_role} -> {self.config.destination_role}"
            ),
        )

    def _authorize(self, caller: str, fund: Fund, proxy_admin: ProxyAdmin) -> None:
        registry = fund.registry
        if fund.proxy_admin is not proxy_admin:
            raise Unauthorized(caller, f"proxy admin {proxy_admin.address} does not control fund {fund.address}")
        if not registry.has_role(Role.ADMIN, self.address):
            logger.warning("spell %s cast without %s on fund %s", self.address, Role.ADMIN.value, fund.address)
            raise Unauthorized(self.address, f"spell does not hold {Role.ADMIN.value}")
        if proxy_admin.owner() != self.address:
            logger.warning("spell %s cast without proxy admin ownership", self.address)
            raise Unauthorized(self.address, "spell does not own the proxy admin")
        if caller == self.address or not registry.has_role(Role.ADMIN, caller):
            logger.warning("spell %s cast rejected for caller %s", self.address, caller)
            raise Unauthorized(caller, f"caller must hold {Role.ADMIN.value} on fund {fund.address}")

    def _check_version(self, version: str) -> None:
        if version == self.config.target_version:
            raise AlreadyMigrated(version)
        if not version.startswith(self.config.supported_version_prefix):
            raise UnsupportedVersion(version, self.config.supported_version_prefix)

    def _remap_roles(self, fund: Fund) -> Tuple[str, ...]:
        registry = fund.registry
        source = role_key(self.config.source_role)
        destination = role_key(self.config.destination_role)

        members = registry.get_role_members(source)
        before = set(registry.get_role_members(destination))
        for member in members:
            registry.grant_role(self.address, destination, member)

        after = set(registry.get_role_members(destination))
        if after != before | set(members):
            raise InvariantViolation(
                f"role remap {source} -> {destination} produced {len(after)} members, "
                f"expected {len(before | set(members))}"
            )

        if self.config.revoke_source_role:
            for member in members:
                registry.revoke_role(self.address, source, member)
        return members

    def _check_single_admin(self, admin: str, fund: Fund, proxy_admin: ProxyAdmin) -> None:
        admins = fund.registry.get_role_members(Role.ADMIN)
        if admins != (admin,):
            raise InvariantViolation(f"expected single admin {admin}, found {list(admins)}")
        if proxy_admin.owner() != admin:
            raise InvariantViolation(f"proxy admin owned by {proxy_admin.owner()}, expected {admin}")

    def snapshot(self) -> SpellState:
        return self._state

    def restore(self, state: SpellState) -> None:
        self._state = state
