"""Migration — одноразовый spell передачи управления фондом при upgrade.

- Upgrade задекларированной версии через proxy admin
- Перенос членства роли AUCTION_APPROVER → REBALANCE_MANAGER
- Возврат ADMIN и владения proxy admin единственному админу
"""

from .spell import (
    MigrationConfig,
    MigrationResult,
    MigrationSpell,
    SpellState,
)

__all__ = [
    "MigrationSpell",
    "MigrationConfig",
    "MigrationResult",
    "SpellState",
]
