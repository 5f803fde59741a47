"""Ledger — in-process модель цепочки: атомарность, токены, роли, proxy admin.

Внешние capability ядра описаны здесь только на уровне интерфейса
(ValueTransfer, RoleRegistry, ProxyAdmin) и in-memory реализаций.
"""

from .journal import Journal, Stateful
from .proxy_admin import ProxyAdmin, Upgradeable
from .registry import RoleRegistry, role_key
from .token import InMemoryToken, ValueTransfer

__all__ = [
    "Journal",
    "Stateful",
    "InMemoryToken",
    "ValueTransfer",
    "RoleRegistry",
    "role_key",
    "ProxyAdmin",
    "Upgradeable",
]
