"""JWT access token handling.

Tokens are issued by the identity provider; this service only verifies them
and reads ``sub`` (user id). HS256 with a shared JWT_SECRET.

``create_access_token`` exists for local tooling and tests that need a
signed token without running the identity provider.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import get_settings
from src.bk_common.errors import InvalidTokenError


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + (expires_in or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def decode_access_token(token: str) -> str:
    """Validate an access token and return its subject (user id).

    Raises:
        InvalidTokenError: signature/expiry invalid, wrong type, or no subject.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidTokenError() from None

    if payload.get("type") != "access":
        raise InvalidTokenError()

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError()
    return str(subject)
