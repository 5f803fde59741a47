"""Vault — фонд с корзиной токенов за upgradeable proxy."""

from .fund import Fund

__all__ = ["Fund"]
