"""
Units — адреса участников и количества токенов

Единственный допустимый способ:
- проверить адрес (формат 0x + 40 hex, не нулевой)
- проверить количество токена (целое, неотрицательное)
- получить детерминированный адрес по метке (для участников in-process модели)
- проверить версию фонда (MAJOR.MINOR.PATCH)

ЗАПРЕЩЕНО передавать float как количество токена.
"""

import hashlib
import re
from typing import Final

from src.core.errors import InvalidAddress

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Нулевой адрес: никогда не может быть владельцем или членом роли
ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

_ADDRESS_RE: Final = re.compile(r"^0x[0-9a-f]{40}$")

# Та же форма, что в fund_state.json
_VERSION_RE: Final = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


# =============================================================================
# АДРЕСА
# =============================================================================


def derive_address(label: str) -> str:
    """
    Детерминированный адрес по текстовой метке.

    Args:
        label: Метка участника (например, 'timelock', 'bidder-1')

    Returns:
        Адрес вида 0x + 40 hex (lowercase)
    """
    if not label:
        raise ValueError("label must be non-empty")
    digest = hashlib.sha256(label.encode("utf-8")).hexdigest()
    return "0x" + digest[:40]


def is_address(value: object) -> bool:
    """Синтаксическая проверка адреса (нулевой адрес допустим)."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def validate_address(value: object, allow_zero: bool = False) -> str:
    """
    Проверка адреса.

    Args:
        value: Проверяемое значение
        allow_zero: Разрешить ZERO_ADDRESS

    Returns:
        Адрес без изменений

    Raises:
        InvalidAddress: Если формат неверный или адрес нулевой
    """
    if not is_address(value):
        raise InvalidAddress(f"malformed address: {value!r}")
    if not allow_zero and value == ZERO_ADDRESS:
        raise InvalidAddress("zero address not allowed")
    return value  # type: ignore[return-value]


# =============================================================================
# КОЛИЧЕСТВА
# =============================================================================


def validate_amount(value: object, name: str = "amount") -> int:
    """
    Проверка количества токена.

    Args:
        value: Количество в минимальных единицах токена
        name: Имя параметра для сообщения об ошибке

    Returns:
        Количество без изменений

    Raises:
        ValueError: Если не int или отрицательное (bool тоже отклоняется)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


# =============================================================================
# ВЕРСИИ
# =============================================================================


def validate_version(value: object) -> str:
    """
    Проверка задекларированной версии фонда.

    Raises:
        ValueError: Если версия не в форме MAJOR.MINOR.PATCH
    """
    if not isinstance(value, str) or not _VERSION_RE.fullmatch(value):
        raise ValueError(f"malformed version: {value!r} (expected MAJOR.MINOR.PATCH)")
    return value
