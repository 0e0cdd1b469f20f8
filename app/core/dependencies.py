from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.database import get_db
from app.core.security import TOKEN_TYPE, decode_access_token
from app.models.user import User, UserRole

bearer = HTTPBearer(auto_error=False)


def _not_authenticated_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    not_authenticated = _not_authenticated_exception()

    if not credentials:
        raise not_authenticated

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload["sub"])

        if payload.get("type") != TOKEN_TYPE:
            raise not_authenticated

    except (JWTError, KeyError, ValueError):
        raise not_authenticated

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise not_authenticated

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This account has been deactivated",
        )

    return user


async def get_current_coordinator(
    user: User = Depends(get_current_user),
) -> User:
    """Coordinator-only guard (lists, students, reports, user management)."""
    if user.role != UserRole.COORDINATOR:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized as coordinator",
        )
    return user
