"""User administration service.

Profiles are provisioned by the identity provider. Here administrators can
rename, re-role and delete accounts, subject to the role hierarchy:
  - the target's level must not exceed the actor's (equal is allowed),
  - a new role must be strictly below the actor's own level,
  - nobody deletes their own account.
"""

import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.errors import InvalidRoleError, UserNotFoundError
from src.bk_gateway.auth.gate import (
    Actor,
    ensure_can_assign_role,
    ensure_can_delete_user,
    ensure_can_manage_user,
)
from src.bk_gateway.auth.roles import is_valid_role
from src.bk_gateway.user.repository import UserRepository, UserRepositoryProtocol
from src.bk_gateway.user.schemas import UserListResponse, UserResponse

logger = logging.getLogger(__name__)

_SEARCH_LIMIT = 20


class UserService:
    """Stateless service; instantiate once, reuse across requests."""

    def __init__(self, repo: UserRepositoryProtocol | None = None) -> None:
        self._repo: UserRepositoryProtocol = repo or UserRepository()

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResponse.from_model(user)

    async def list_users(self, db: AsyncSession, page: int, limit: int) -> UserListResponse:
        users, total = await self._repo.list_users(db, (page - 1) * limit, limit)
        return UserListResponse(
            items=[UserResponse.from_model(u) for u in users],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    async def search_users(self, db: AsyncSession, query: str) -> list[UserResponse]:
        users = await self._repo.search(db, query, _SEARCH_LIMIT)
        return [UserResponse.from_model(u) for u in users]

    async def update_profile(self, db: AsyncSession, actor: Actor, name: str) -> UserResponse:
        """Self-service rename; role changes go through update_user."""
        user = await self._repo.get_by_id(db, actor.id)
        if user is None:
            raise UserNotFoundError(actor.id)

        try:
            user.name = name
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("User %s renamed their profile", actor.id)
        return UserResponse.from_model(user)

    async def update_user(
        self,
        db: AsyncSession,
        actor: Actor,
        user_id: str,
        name: str | None,
        role: str | None,
    ) -> UserResponse:
        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        ensure_can_manage_user(actor, user.role)
        if role is not None:
            if not is_valid_role(role):
                raise InvalidRoleError(role)
            ensure_can_assign_role(actor, role)

        try:
            if name is not None:
                user.name = name
            if role is not None:
                user.role = role
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("User %s updated by %s (role=%s)", user_id, actor.id, user.role)
        return UserResponse.from_model(user)

    async def delete_user(self, db: AsyncSession, actor: Actor, user_id: str) -> None:
        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        ensure_can_delete_user(actor, str(user.id), user.role)

        try:
            await self._repo.delete(db, user)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("User %s deleted by %s", user_id, actor.id)
