"""FastAPI dependencies: get_current_actor and role guards.

Usage in any protected router:
    from src.bk_gateway.auth.dependencies import get_current_actor

    @router.get("/protected")
    async def protected(actor: Actor = Depends(get_current_actor)):
        ...
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.errors import AccountDisabledError, InvalidTokenError
from src.bk_gateway.auth.gate import Actor, ensure_min_role
from src.bk_gateway.auth.jwt_handler import decode_access_token
from src.bk_gateway.auth.roles import Role
from src.bk_gateway.user.repository import UserRepository

# auto_error=False: a missing header becomes InvalidTokenError (our envelope), not a bare 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_users = UserRepository()


async def get_current_actor(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Actor:
    """Validate the Bearer token and resolve the caller's current role.

    The role is read from the users table on every request, so a demotion
    takes effect without waiting for token expiry.

    Raises UnauthorizedError (401) if the token is missing, invalid, expired
    or points at an unknown user; ForbiddenError (403) if the account is disabled.
    """
    if not token:
        raise InvalidTokenError()
    user_id = decode_access_token(token)

    user = await _users.get_by_id(db, user_id)
    if user is None:
        raise InvalidTokenError()
    if not user.is_active:
        raise AccountDisabledError()

    return Actor(id=str(user.id), role=user.role)


def require_min_role(role: Role) -> Callable[..., Awaitable[Actor]]:
    """Dependency factory: require_min_role(Role.STAFF) admits staff and above."""

    async def _guard(actor: Actor = Depends(get_current_actor)) -> Actor:
        ensure_min_role(actor, role, f"access {role.value} resources")
        return actor

    return _guard


require_admin = require_min_role(Role.ADMIN)
