"""
FundState — Снапшот состояния фонда

Immutable Pydantic модель: версия, владелец proxy admin, членство ролей,
балансы. Используется для сравнения состояния до/после операции и
экспортируется через JSON контракт (contracts/schema/fund_state.json).
"""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

from src.core.domain.roles import Role

# Версия контракта fund_state.json
FUND_STATE_SCHEMA_VERSION = "1"


class FundState(BaseModel):
    """
    Снапшот фонда.

    Сравнение двух снапшотов (==) отвечает на вопрос
    "изменила ли операция хоть что-то".
    """

    fund: str = Field(..., description="Адрес фонда")
    version: str = Field(..., min_length=1, description="Задекларированная версия фонда")
    proxy_owner: str = Field(..., description="Владелец proxy admin")

    # Роль -> упорядоченные члены
    roles: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    # Адрес токена -> баланс фонда
    balances: Dict[str, int] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def role_members(self, role: str) -> Tuple[str, ...]:
        return self.roles.get(role, ())

    @property
    def admins(self) -> Tuple[str, ...]:
        return self.role_members(Role.ADMIN.value)

    def has_single_admin(self, admin: str) -> bool:
        """Инвариант single-admin: ровно один админ, и это admin."""
        return self.admins == (admin,)

    def to_contract(self) -> Dict[str, Any]:
        """
        Сериализация в формат контракта fund_state.

        Returns:
            dict, валидный против fund_state.json
        """
        return {
            "schema_version": FUND_STATE_SCHEMA_VERSION,
            "fund": self.fund,
            "version": self.version,
            "proxy_owner": self.proxy_owner,
            "roles": {role: list(members) for role, members in self.roles.items()},
            "balances": dict(self.balances),
        }
