"""Pydantic request/response schemas for user administration."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.bk_gateway.auth.roles import role_display_name
from src.bk_gateway.user.db_models import UserModel


class UpdateUserRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    role: str | None = None


class UpdateProfileRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    user_id: str
    email: str
    name: str
    role: str
    role_display: str
    is_active: bool
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user: UserModel) -> "UserResponse":
        return cls(
            user_id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            role_display=role_display_name(user.role),
            is_active=user.is_active,
            created_at=user.created_at,
        )


class UserListResponse(BaseModel):
    items: list[UserResponse]
    page: int
    limit: int
    total: int
    total_pages: int
