"""UserRepository — ORM queries over the users table.

Transaction ownership stays with the caller (service commits/rolls back).
"""

import uuid
from typing import Protocol

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_gateway.user.db_models import UserModel


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: str) -> UserModel | None: ...

    async def list_users(
        self, db: AsyncSession, offset: int, limit: int
    ) -> tuple[list[UserModel], int]: ...

    async def search(self, db: AsyncSession, query: str, limit: int) -> list[UserModel]: ...

    async def delete(self, db: AsyncSession, user: UserModel) -> None: ...


def _escape_like(value: str) -> str:
    """Make % and _ in user input match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_uuid(user_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(user_id)
    except ValueError:
        return None


class UserRepository:
    async def get_by_id(self, db: AsyncSession, user_id: str) -> UserModel | None:
        key = _as_uuid(user_id)
        if key is None:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == key))
        return result.scalar_one_or_none()

    async def list_users(
        self, db: AsyncSession, offset: int, limit: int
    ) -> tuple[list[UserModel], int]:
        rows = await db.execute(
            select(UserModel).order_by(UserModel.created_at.desc()).offset(offset).limit(limit)
        )
        total = await db.execute(select(func.count()).select_from(UserModel))
        return list(rows.scalars().all()), int(total.scalar_one())

    async def search(self, db: AsyncSession, query: str, limit: int) -> list[UserModel]:
        pattern = f"%{_escape_like(query)}%"
        result = await db.execute(
            select(UserModel)
            .where(
                or_(
                    UserModel.name.ilike(pattern, escape="\\"),
                    UserModel.email.ilike(pattern, escape="\\"),
                )
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, user: UserModel) -> None:
        await db.execute(delete(UserModel).where(UserModel.id == user.id))
