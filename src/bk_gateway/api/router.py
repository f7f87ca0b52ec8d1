"""User administration API.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_current_actor, require_admin
from src.bk_gateway.auth.gate import Actor
from src.bk_gateway.user.schemas import UpdateProfileRequest, UpdateUserRequest
from src.bk_gateway.user.service import UserService

router = APIRouter(prefix="/users", tags=["users"])
_service = UserService()


def get_user_service() -> UserService:
    return _service


def _wrap(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/me", response_model=ApiResponse, summary="Current user profile")
async def get_me(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = await service.get_user(db, actor.id)
    return _wrap(request, data.model_dump(mode="json"))


@router.put("/me", response_model=ApiResponse, summary="Update current user profile")
async def update_me(
    request: Request,
    body: UpdateProfileRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = await service.update_profile(db, actor, body.name)
    return _wrap(request, data.model_dump(mode="json"), "Profile updated successfully")


@router.get("/search", response_model=ApiResponse, summary="Search users by name or e-mail")
async def search_users(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
    q: str = Query(..., min_length=1, description="Name or e-mail fragment"),
) -> ApiResponse:
    data = await service.search_users(db, q)
    return _wrap(request, [u.model_dump(mode="json") for u in data])


@router.get("", response_model=ApiResponse, summary="List users (admin)")
async def list_users(
    request: Request,
    actor: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    data = await service.list_users(db, page, limit)
    return _wrap(request, data.model_dump(mode="json"))


@router.get("/{user_id}", response_model=ApiResponse, summary="User by id")
async def get_user(
    request: Request,
    user_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = await service.get_user(db, user_id)
    return _wrap(request, data.model_dump(mode="json"))


@router.patch("/{user_id}", response_model=ApiResponse, summary="Update user (admin)")
async def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    actor: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    data = await service.update_user(db, actor, user_id, body.name, body.role)
    return _wrap(request, data.model_dump(mode="json"), "User updated successfully")


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Delete user (admin)",
)
async def delete_user(
    request: Request,
    user_id: str,
    actor: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    await service.delete_user(db, actor, user_id)
    return _wrap(request, None, "User deleted successfully")
