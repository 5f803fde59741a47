"""Тесты для Journal (all-or-nothing транзакции).

Coverage:
- Commit сохраняет изменения
- Исключение откатывает всех участников и пробрасывается
- Вложенные транзакции с собственным checkpoint
- Регистрация участников и проверка принадлежности журналу
"""

import pytest

from src.core.errors import InvariantViolation
from src.ledger.journal import Journal


class Counter:
    """Минимальный участник журнала."""

    def __init__(self, journal: Journal, value: int = 0):
        self.value = value
        journal.register(self)

    def snapshot(self) -> int:
        return self.value

    def restore(self, state: int) -> None:
        self.value = state


class TestJournal:
    """Тесты Journal."""

    def test_commit_keeps_changes(self):
        journal = Journal()
        counter = Counter(journal)

        with journal.atomic():
            counter.value = 5

        assert counter.value == 5

    def test_exception_rolls_back_and_propagates(self):
        journal = Journal()
        a = Counter(journal, 1)
        b = Counter(journal, 2)

        with pytest.raises(RuntimeError, match="boom"):
            with journal.atomic():
                a.value = 10
                b.value = 20
                raise RuntimeError("boom")

        assert (a.value, b.value) == (1, 2)

    def test_nested_inner_revert_caught_keeps_outer_changes(self):
        """Откат внутреннего фрейма не трогает изменения внешнего."""
        journal = Journal()
        counter = Counter(journal)

        with journal.atomic("outer"):
            counter.value = 1
            try:
                with journal.atomic("inner"):
                    counter.value = 2
                    raise ValueError("inner failure")
            except ValueError:
                pass
            assert counter.value == 1

        assert counter.value == 1

    def test_outer_revert_undoes_committed_inner(self):
        journal = Journal()
        counter = Counter(journal)

        with pytest.raises(KeyError):
            with journal.atomic("outer"):
                with journal.atomic("inner"):
                    counter.value = 7
                raise KeyError("outer failure")

        assert counter.value == 0

    def test_nesting_depth_logged(self, caplog):
        journal = Journal()

        with caplog.at_level("DEBUG", logger="src.ledger.journal"):
            with journal.atomic("outer"):
                with journal.atomic("inner"):
                    pass
            with journal.atomic("after"):
                pass

        assert "begin inner (depth=2" in caplog.text
        assert "begin after (depth=1" in caplog.text

    def test_depth_restored_after_failure(self, caplog):
        journal = Journal()

        with pytest.raises(RuntimeError):
            with journal.atomic("failing"):
                raise RuntimeError()

        with caplog.at_level("DEBUG", logger="src.ledger.journal"):
            with journal.atomic("next"):
                pass

        assert "begin next (depth=1" in caplog.text

    def test_duplicate_registration_ignored(self):
        journal = Journal()
        counter = Counter(journal)
        journal.register(counter)

        assert len(journal.checkpoint()) == 1

    def test_is_registered(self):
        journal = Journal()
        counter = Counter(journal)

        assert journal.is_registered(counter)
        assert not journal.is_registered(Counter(Journal()))

    def test_require_passes_for_own_participants(self):
        journal = Journal()
        journal.require(Counter(journal), Counter(journal))

    def test_require_rejects_foreign_participant(self):
        """Участник другого журнала не откатился бы этим журналом"""
        journal = Journal()
        foreign = Counter(Journal())

        with pytest.raises(InvariantViolation, match="not registered"):
            journal.require(Counter(journal), foreign)
