"""Unit тесты для RoleRegistry.

Coverage:
- Начальный единственный ADMIN
- grant/revoke/renounce и их авторизация
- Enumerable-set семантика (порядок, swap-and-pop)
- Эквивалентность Role enum и строковых тегов
"""

import pytest

from src.core.domain.roles import Role
from src.core.domain.units import ZERO_ADDRESS, derive_address
from src.core.errors import InvalidAddress, Unauthorized
from src.ledger.journal import Journal
from src.ledger.registry import RoleRegistry, role_key

TIMELOCK = derive_address("timelock")
A = derive_address("member-a")
B = derive_address("member-b")
C = derive_address("member-c")


@pytest.fixture
def journal():
    return Journal()


@pytest.fixture
def registry(journal):
    return RoleRegistry(journal, admin=TIMELOCK)


# =============================================================================
# READ
# =============================================================================


def test_initial_single_admin(registry):
    assert registry.get_role_member_count(Role.ADMIN) == 1
    assert registry.get_role_member(Role.ADMIN, 0) == TIMELOCK
    assert registry.has_role(Role.ADMIN, TIMELOCK)


def test_role_enum_and_string_equivalent(registry):
    assert registry.has_role("ADMIN", TIMELOCK)
    assert role_key(Role.ADMIN) == "ADMIN"
    assert role_key("CUSTOM_ROLE") == "CUSTOM_ROLE"


def test_get_role_member_out_of_bounds(registry):
    with pytest.raises(IndexError):
        registry.get_role_member(Role.ADMIN, 1)
    with pytest.raises(IndexError):
        registry.get_role_member(Role.REBALANCE_MANAGER, 0)


def test_roles_omits_empty(registry):
    registry.grant_role(TIMELOCK, Role.AUCTION_LAUNCHER, A)
    registry.revoke_role(TIMELOCK, Role.AUCTION_LAUNCHER, A)

    assert registry.roles() == {"ADMIN": (TIMELOCK,)}


# =============================================================================
# GRANT
# =============================================================================


def test_grant_preserves_order(registry):
    for member in (A, B, C):
        assert registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, member) is True

    assert registry.get_role_members(Role.AUCTION_APPROVER) == (A, B, C)


def test_duplicate_grant_is_noop(registry):
    registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, A)

    assert registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, A) is False
    assert registry.get_role_member_count(Role.AUCTION_APPROVER) == 1


def test_grant_requires_admin(registry):
    with pytest.raises(Unauthorized) as exc_info:
        registry.grant_role(A, Role.AUCTION_APPROVER, B)

    assert exc_info.value.caller == A
    assert registry.get_role_member_count(Role.AUCTION_APPROVER) == 0


def test_grant_zero_address_rejected(registry):
    with pytest.raises(InvalidAddress):
        registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, ZERO_ADDRESS)


# =============================================================================
# REVOKE / RENOUNCE
# =============================================================================


def test_revoke_swap_and_pop(registry):
    """Удаление первого: последний встаёт на его место."""
    for member in (A, B, C):
        registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, member)

    assert registry.revoke_role(TIMELOCK, Role.AUCTION_APPROVER, A) is True
    assert registry.get_role_members(Role.AUCTION_APPROVER) == (C, B)


def test_revoke_last_member(registry):
    for member in (A, B):
        registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, member)

    registry.revoke_role(TIMELOCK, Role.AUCTION_APPROVER, B)
    assert registry.get_role_members(Role.AUCTION_APPROVER) == (A,)


def test_revoke_non_member_is_noop(registry):
    assert registry.revoke_role(TIMELOCK, Role.AUCTION_APPROVER, A) is False


def test_revoke_requires_admin(registry):
    registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, A)

    with pytest.raises(Unauthorized):
        registry.revoke_role(B, Role.AUCTION_APPROVER, A)


def test_renounce_self(registry):
    registry.grant_role(TIMELOCK, Role.ADMIN, A)

    assert registry.renounce_role(A, Role.ADMIN, A) is True
    assert registry.get_role_members(Role.ADMIN) == (TIMELOCK,)


def test_renounce_for_other_rejected(registry):
    registry.grant_role(TIMELOCK, Role.ADMIN, A)

    with pytest.raises(Unauthorized, match="renounce"):
        registry.renounce_role(TIMELOCK, Role.ADMIN, A)


# =============================================================================
# JOURNAL
# =============================================================================


def test_grants_rolled_back(journal, registry):
    with pytest.raises(RuntimeError):
        with journal.atomic():
            registry.grant_role(TIMELOCK, Role.AUCTION_APPROVER, A)
            registry.grant_role(TIMELOCK, Role.ADMIN, B)
            raise RuntimeError("revert")

    assert registry.get_role_member_count(Role.AUCTION_APPROVER) == 0
    assert registry.get_role_members(Role.ADMIN) == (TIMELOCK,)
