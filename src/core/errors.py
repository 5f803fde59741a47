"""
Errors — иерархия исключений trust boundary фонда

Каждая ошибка прерывает всю объемлющую транзакцию (Journal.atomic
откатывает состояние). Частичного успеха не бывает.

Таксономия:
- Unauthorized: у вызывающего нет роли/владения
- SettlementError: ошибки расчёта по биду
- MigrationError: ошибки migration spell
- InvariantViolation: нарушение инварианта, индикатор дефекта
"""

from typing import Optional


class FolioError(Exception):
    """Базовое исключение для всех ошибок ядра."""


class Unauthorized(FolioError):
    """Вызывающий не обладает требуемой ролью или владением."""

    def __init__(self, caller: str, requirement: str):
        self.caller = caller
        self.requirement = requirement
        super().__init__(f"{caller} is not authorized: {requirement}")


class InvalidAddress(FolioError, ValueError):
    """Нулевой или синтаксически неверный адрес."""


class InsufficientBalance(FolioError):
    """Перевод больше баланса отправителя."""

    def __init__(self, token: str, holder: str, balance: int, amount: int):
        self.token = token
        self.holder = holder
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"{token}: {holder} holds {balance}, cannot transfer {amount}"
        )


class InvariantViolation(FolioError):
    """Нарушен инвариант, который не должен нарушаться при атомарных шагах."""


# =============================================================================
# SETTLEMENT
# =============================================================================


class SettlementError(FolioError):
    """Базовая ошибка settlement engine."""


class InvalidTrade(SettlementError):
    """Параметры сделки не проходят проверки."""


class UnknownTrade(SettlementError):
    """Сделка с таким идентификатором не зарегистрирована."""

    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(f"unknown trade {trade_id!r}")


class AlreadySettled(SettlementError):
    """Сделка уже потреблена."""

    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(f"trade {trade_id!r} already settled")


class ReentrantCall(SettlementError):
    """Повторный вход в фонд во время callback."""


class TransferFailed(SettlementError):
    """Токен вернул False на transfer."""

    def __init__(self, token: str, to: str, amount: int):
        self.token = token
        self.to = to
        self.amount = amount
        super().__init__(f"{token}: transfer of {amount} to {to} returned false")


class SettlementShortfall(SettlementError):
    """Callback не обеспечил требуемую дельту баланса buy-токена."""

    def __init__(self, trade_id: str, required: int, delivered: int):
        self.trade_id = trade_id
        self.required = required
        self.delivered = delivered
        super().__init__(
            f"trade {trade_id!r}: delivered {delivered}, required {required}"
        )


# =============================================================================
# MIGRATION
# =============================================================================


class MigrationError(FolioError):
    """Базовая ошибка migration spell."""


class AlreadyCast(MigrationError):
    """Spell уже был применён."""


class AlreadyMigrated(MigrationError):
    """Фонд уже на целевой версии."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"fund already at version {version}")


class UnsupportedVersion(MigrationError):
    """Версия фонда не поддерживается spell."""

    def __init__(self, version: str, expected_prefix: Optional[str] = None):
        self.version = version
        self.expected_prefix = expected_prefix
        super().__init__(
            f"unsupported fund version {version} (expected {expected_prefix}*)"
        )
