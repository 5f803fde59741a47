"""Role Registry — роль -> упорядоченное множество адресов.

Семантика enumerable-set:
- членство без дубликатов, порядок добавления сохраняется
- удаление через swap-and-pop (последний элемент встаёт на место удалённого)

Все роли администрируются ролью ADMIN. Мутации разрешены только
держателям ADMIN (renounce — только самому члену).
"""

import logging
from enum import Enum
from typing import Dict, List, Tuple

from src.core.domain.roles import Role
from src.core.domain.units import validate_address
from src.core.errors import Unauthorized
from src.ledger.journal import Journal

logger = logging.getLogger(__name__)


def role_key(role: str) -> str:
    """Нормализация идентификатора роли к обычной строке."""
    return role.value if isinstance(role, Enum) else str(role)


class RoleRegistry:
    """Access-control registry фонда."""

    def __init__(self, journal: Journal, admin: str):
        """
        Args:
            journal: Журнал транзакций
            admin: Начальный единственный держатель ADMIN
        """
        self._members: Dict[str, List[str]] = {role_key(Role.ADMIN): [validate_address(admin)]}
        journal.register(self)

    def __repr__(self) -> str:
        return f"RoleRegistry(roles={len(self.roles())})"

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def has_role(self, role: str, who: str) -> bool:
        return who in self._members.get(role_key(role), [])

    def get_role_member_count(self, role: str) -> int:
        return len(self._members.get(role_key(role), []))

    def get_role_member(self, role: str, index: int) -> str:
        """
        Raises:
            IndexError: Если index вне [0, count)
        """
        members = self._members.get(role_key(role), [])
        if not 0 <= index < len(members):
            raise IndexError(f"role {role_key(role)}: index {index} out of bounds ({len(members)})")
        return members[index]

    def get_role_members(self, role: str) -> Tuple[str, ...]:
        return tuple(self._members.get(role_key(role), []))

    def roles(self) -> Dict[str, Tuple[str, ...]]:
        """Непустые роли с их членами."""
        return {role: tuple(members) for role, members in self._members.items() if members}

    # -------------------------------------------------------------------------
    # Мутации
    # -------------------------------------------------------------------------

    def _require_admin(self, caller: str) -> None:
        if not self.has_role(Role.ADMIN, caller):
            raise Unauthorized(caller, f"missing role {Role.ADMIN.value}")

    def grant_role(self, caller: str, role: str, who: str) -> bool:
        """
        Выдача роли.

        Returns:
            True если членство изменилось, False если who уже член

        Raises:
            Unauthorized: Если caller не ADMIN
            InvalidAddress: Если who нулевой или неверный
        """
        self._require_admin(caller)
        validate_address(who)

        members = self._members.setdefault(role_key(role), [])
        if who in members:
            return False
        members.append(who)
        logger.debug("role %s granted to %s by %s", role_key(role), who, caller)
        return True

    def revoke_role(self, caller: str, role: str, who: str) -> bool:
        """
        Отзыв роли.

        Returns:
            True если членство изменилось
        """
        self._require_admin(caller)
        return self._remove(role_key(role), who)

    def renounce_role(self, caller: str, role: str, who: str) -> bool:
        """Отказ от собственной роли (caller должен совпадать с who)."""
        if caller != who:
            raise Unauthorized(caller, "can only renounce roles for self")
        return self._remove(role_key(role), who)

    def _remove(self, role: str, who: str) -> bool:
        members = self._members.get(role, [])
        if who not in members:
            return False
        index = members.index(who)
        last = members.pop()
        if index < len(members):
            members[index] = last
        logger.debug("role %s removed from %s", role, who)
        return True

    # -------------------------------------------------------------------------
    # Journal
    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, List[str]]:
        return {role: list(members) for role, members in self._members.items()}

    def restore(self, state: Dict[str, List[str]]) -> None:
        self._members = {role: list(members) for role, members in state.items()}
