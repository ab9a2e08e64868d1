"""Tests for roles and the ownership predicate."""

from uuid import uuid4

import pytest

from inkpress.auth.permissions import Actor, UserRole, can_manage, parse_role


class TestParseRole:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("admin", UserRole.ADMIN),
            ("user", UserRole.USER),
            (UserRole.ADMIN, UserRole.ADMIN),
            (None, UserRole.USER),
            ("editor", UserRole.USER),
        ],
    )
    def test_values(self, raw, expected: UserRole) -> None:
        assert parse_role(raw) == expected


class TestCanManage:
    def test_owner(self) -> None:
        actor = Actor(id=uuid4())
        assert can_manage(actor, actor.id)

    def test_other_user(self) -> None:
        assert not can_manage(Actor(id=uuid4()), uuid4())

    def test_admin_manages_everything(self) -> None:
        assert can_manage(Actor(id=uuid4(), role=UserRole.ADMIN), uuid4())

    def test_anonymous(self) -> None:
        assert not can_manage(None, uuid4())
