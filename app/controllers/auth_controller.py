import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token, hash_password, verify_and_update_password
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse, UserCreate, UserInfo

logger = logging.getLogger(__name__)


async def login(payload: LoginRequest, db: AsyncSession) -> LoginResponse:
    """
    Staff login (coordinators and monitors).

    1. A bcrypt verify runs even when the email is unknown, so response
       time does not reveal which emails exist.
    2. Same error for wrong email and wrong password.
    3. is_active is checked only after the password.
    4. On success last_login_at is stamped and an outdated hash is replaced.
    """
    email = str(payload.email).strip().lower()

    result = await db.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()

    password_ok, new_hash = verify_and_update_password(
        payload.password,
        user.password_hash if user else None,
    )

    if not user or not password_ok:
        logger.warning("Login failed for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        logger.warning("Login refused for deactivated account %s", email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated. Contact the coordinator.",
        )

    if new_hash:
        user.password_hash = new_hash
    user.last_login_at = datetime.now(timezone.utc)
    db.add(user)
    await db.flush()

    token = create_access_token(user.id, user.email, user.role.value)
    logger.info("Login ok for %s (%s)", user.email, user.role.value)

    return LoginResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserInfo.model_validate(user),
    )


async def get_me(user: User) -> MeResponse:
    """No DB call needed, the dependency already loaded the user."""
    return MeResponse.model_validate(user)


async def list_users(db: AsyncSession) -> list[User]:
    res = await db.execute(select(User).order_by(User.name.asc()))
    return list(res.scalars().all())


async def create_user(db: AsyncSession, payload: UserCreate) -> User:
    email = str(payload.email).strip().lower()

    existing = await db.execute(select(User).where(func.lower(User.email) == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    user = User(
        name=payload.name.strip(),
        email=email,
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Created %s account %s", user.role.value, user.email)
    return user
