"""Journal — атомарность транзакций in-process ledger.

Модель исполнения: однопоточная, строго последовательная. Каждый объект
с состоянием (токен, registry, proxy admin, фонд, engine, spell)
регистрируется в общем Journal и умеет snapshot()/restore().

Journal.atomic():
- при входе снимает checkpoint со всех участников
- при любом исключении восстанавливает всех участников и пробрасывает ошибку
- вложенные atomic() имеют собственный checkpoint: откат внутреннего
  фрейма, перехваченный снаружи, не трогает внешний фрейм
- require() проверяет, что все участники операции живут в этом журнале;
  иначе откат был бы частичным
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Protocol, Tuple

from src.core.errors import InvariantViolation

logger = logging.getLogger(__name__)


class Stateful(Protocol):
    """Участник журнала."""

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...


class Journal:
    """Журнал участников транзакции с all-or-nothing семантикой."""

    def __init__(self):
        self._participants: List[Stateful] = []
        self._depth = 0

    def register(self, participant: Stateful) -> None:
        """Регистрация участника. Повторная регистрация игнорируется."""
        if self.is_registered(participant):
            return
        self._participants.append(participant)

    def is_registered(self, participant: Stateful) -> bool:
        return any(p is participant for p in self._participants)

    def require(self, *participants: Stateful) -> None:
        """
        Все участники операции должны откатываться этим журналом.

        Raises:
            InvariantViolation: Если хотя бы один участник зарегистрирован в другом журнале
        """
        missing = [p for p in participants if not self.is_registered(p)]
        if missing:
            raise InvariantViolation(
                "participants not registered in the transaction journal: "
                + ", ".join(repr(p) for p in missing)
            )

    def checkpoint(self) -> List[Tuple[Stateful, Any]]:
        return [(p, p.snapshot()) for p in self._participants]

    def rollback(self, checkpoint: List[Tuple[Stateful, Any]]) -> None:
        for participant, state in checkpoint:
            participant.restore(state)

    @contextmanager
    def atomic(self, label: str = "tx") -> Iterator[None]:
        """
        Транзакция: либо все изменения внутри блока, либо ни одного.

        Args:
            label: Метка для логов
        """
        checkpoint = self.checkpoint()
        self._depth += 1
        logger.debug("begin %s (depth=%d, participants=%d)", label, self._depth, len(checkpoint))
        try:
            yield
        except BaseException as exc:
            self.rollback(checkpoint)
            logger.debug("revert %s: %s: %s", label, type(exc).__name__, exc)
            raise
        finally:
            self._depth -= 1
