"""
Roles — идентификаторы ролей фонда

Роли — непрозрачные теги. Registry принимает любую строку,
здесь перечислены роли, известные ядру.
"""

from enum import Enum


class Role(str, Enum):
    """
    Роли фонда.

    AUCTION_APPROVER — имя роли в версиях 2.x,
    REBALANCE_MANAGER — её преемник начиная с 3.0.0.
    AUCTION_LAUNCHER — регистрирует сделки в settlement engine.
    """

    ADMIN = "ADMIN"
    AUCTION_APPROVER = "AUCTION_APPROVER"
    REBALANCE_MANAGER = "REBALANCE_MANAGER"
    AUCTION_LAUNCHER = "AUCTION_LAUNCHER"
