"""Unit tests for the user administration service (mocked repository)."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bk_common.errors import (
    InsufficientRoleError,
    InvalidRoleError,
    RoleEscalationError,
    SelfDeletionError,
    UserNotFoundError,
)
from src.bk_gateway.auth.gate import Actor
from src.bk_gateway.user.db_models import UserModel
from src.bk_gateway.user.service import UserService


def _make_user(role: str = "user", user_id: uuid.UUID | None = None) -> UserModel:
    user = UserModel()
    user.id = user_id or uuid.uuid4()
    user.email = "marie@example.com"
    user.name = "Marie Tremblay"
    user.role = role
    user.is_active = True
    return user


@pytest.fixture
def mock_db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def repo() -> MagicMock:
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.list_users = AsyncMock(return_value=([], 0))
    repo.search = AsyncMock(return_value=[])
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def service(repo: MagicMock) -> UserService:
    return UserService(repo=repo)


ADMIN = Actor(id=str(uuid.uuid4()), role="admin")


class TestQueries:
    async def test_get_missing_user(self, service: UserService, mock_db: AsyncMock) -> None:
        with pytest.raises(UserNotFoundError):
            await service.get_user(mock_db, "nope")

    async def test_get_user_includes_role_display(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.get_by_id.return_value = _make_user("customerService")
        resp = await service.get_user(mock_db, "x")
        assert resp.role_display == "Customer Service"

    async def test_list_users_pages(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.list_users.return_value = ([_make_user(), _make_user()], 12)
        resp = await service.list_users(mock_db, page=2, limit=5)
        repo.list_users.assert_awaited_once_with(mock_db, 5, 5)
        assert resp.total == 12
        assert resp.total_pages == 3
        assert len(resp.items) == 2

    async def test_search(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.search.return_value = [_make_user()]
        found = await service.search_users(mock_db, "marie")
        assert found[0].email == "marie@example.com"


class TestUpdateUser:
    async def test_rename_and_demote(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        user = _make_user("staff")
        repo.get_by_id.return_value = user
        resp = await service.update_user(mock_db, ADMIN, str(user.id), "Marie T.", "user")
        assert resp.name == "Marie T."
        assert resp.role == "user"
        mock_db.commit.assert_awaited_once()

    async def test_unknown_role(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.get_by_id.return_value = _make_user()
        with pytest.raises(InvalidRoleError):
            await service.update_user(mock_db, ADMIN, "x", None, "owner")
        mock_db.commit.assert_not_awaited()

    async def test_cannot_grant_own_level(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.get_by_id.return_value = _make_user()
        with pytest.raises(RoleEscalationError):
            await service.update_user(mock_db, ADMIN, "x", None, "admin")

    async def test_lower_actor_cannot_touch_higher_target(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.get_by_id.return_value = _make_user("admin")
        staff = Actor(id="s", role="staff")
        with pytest.raises(InsufficientRoleError):
            await service.update_user(mock_db, staff, "x", "New name", None)

    async def test_commit_failure_rolls_back(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        repo.get_by_id.return_value = _make_user()
        mock_db.commit = AsyncMock(side_effect=RuntimeError("db down"))
        with pytest.raises(RuntimeError):
            await service.update_user(mock_db, ADMIN, "x", "New", None)
        mock_db.rollback.assert_awaited_once()


class TestUpdateProfile:
    async def test_renames_caller_only(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        me = _make_user("staff", uuid.UUID(ADMIN.id))
        repo.get_by_id.return_value = me
        resp = await service.update_profile(mock_db, ADMIN, "Marie T.")
        repo.get_by_id.assert_awaited_once_with(mock_db, ADMIN.id)
        assert resp.name == "Marie T."
        assert resp.role == "staff"
        mock_db.commit.assert_awaited_once()

    async def test_unknown_caller(self, service: UserService, mock_db: AsyncMock) -> None:
        with pytest.raises(UserNotFoundError):
            await service.update_profile(mock_db, ADMIN, "Ghost")
        mock_db.commit.assert_not_awaited()


class TestDeleteUser:
    async def test_self_deletion_refused(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        me = _make_user("admin", uuid.UUID(ADMIN.id))
        repo.get_by_id.return_value = me
        with pytest.raises(SelfDeletionError):
            await service.delete_user(mock_db, ADMIN, ADMIN.id)
        repo.delete.assert_not_awaited()

    async def test_admin_deletes_other_admin(
        self, service: UserService, repo: MagicMock, mock_db: AsyncMock
    ) -> None:
        other = _make_user("admin")
        repo.get_by_id.return_value = other
        await service.delete_user(mock_db, ADMIN, str(other.id))
        repo.delete.assert_awaited_once_with(mock_db, other)
        mock_db.commit.assert_awaited_once()

    async def test_delete_missing(self, service: UserService, mock_db: AsyncMock) -> None:
        with pytest.raises(UserNotFoundError):
            await service.delete_user(mock_db, ADMIN, "nope")
