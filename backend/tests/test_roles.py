import pytest

from learnhub.roles import (
    MANAGEMENT_LADDER,
    PROMOTION_LADDER,
    Permission,
    Role,
    next_role,
    parse_role,
    permissions_for,
)


@pytest.mark.parametrize("raw, expected", [
    ("student", Role.STUDENT),
    (" Admin ", Role.ADMIN),
    ("CEO", Role.CEO),
    (Role.MODERATOR, Role.MODERATOR),
    ("wizard", None),
    ("", None),
    (None, None),
])
def test_parse_role(raw, expected):
    assert parse_role(raw) is expected


def test_promotion_ladder_is_one_step_up():
    assert next_role("student") is Role.INSTRUCTOR
    assert next_role(Role.INSTRUCTOR) is Role.MODERATOR
    assert next_role("moderator") is Role.ADMIN


def test_admin_and_ceo_have_no_next_role():
    assert next_role(Role.ADMIN) is None
    assert next_role(Role.CEO) is None
    assert next_role("nonsense") is None


def test_ladders_order_moderator_and_instructor_differently():
    assert MANAGEMENT_LADDER[Role.MODERATOR] < MANAGEMENT_LADDER[Role.INSTRUCTOR]
    assert PROMOTION_LADDER[Role.INSTRUCTOR] is Role.MODERATOR
    assert Role.CEO not in MANAGEMENT_LADDER


def test_every_role_has_permissions():
    for role in Role:
        assert isinstance(permissions_for(role), frozenset)


def test_permission_sets():
    assert Permission.MANAGE_ROLES in permissions_for(Role.CEO)
    assert Permission.MANAGE_USERS in permissions_for(Role.ADMIN)
    assert Permission.MANAGE_ROLES not in permissions_for(Role.ADMIN)
    assert permissions_for(Role.INSTRUCTOR) == {Permission.MANAGE_QUIZZES, Permission.MANAGE_RESOURCES}
    assert permissions_for(Role.MODERATOR) == {Permission.MANAGE_COMMUNITY}
    assert permissions_for(Role.STUDENT) == frozenset()


def test_permissions_for_unknown_role_raises():
    with pytest.raises(ValueError):
        permissions_for("wizard")
