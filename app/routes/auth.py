from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.auth_controller import create_user, get_me, list_users, login
from app.core.database import get_db
from app.core.dependencies import get_current_coordinator, get_current_user
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse, UserCreate, UserInfo

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="""
Authenticate with email + password (coordinators and monitors).
Returns a JWT Bearer token to use in all other requests.

**How to use the token:**
Add to request headers: `Authorization: Bearer <your_token>`
    """,
)
async def user_login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    return await login(payload, db)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get Current User",
    description="Returns the authenticated user's profile. Requires Bearer token in header.",
)
async def me(
    current_user: User = Depends(get_current_user),
) -> MeResponse:
    return await get_me(current_user)


@router.post(
    "/logout",
    summary="Logout",
    description="""
JWT tokens are stateless: the server has no session to destroy.
To logout: delete the token from your frontend (sessionStorage/localStorage).
    """,
)
async def logout() -> dict:
    return {"detail": "Logged out. Delete your token on the client side."}


# ─────────────────────────────────────────────────────────────
# User management (coordinator only)
# ─────────────────────────────────────────────────────────────
users_router = APIRouter(prefix="/users", tags=["Users"])


@users_router.get("", response_model=list[UserInfo])
async def get_users(
    db: AsyncSession = Depends(get_db),
    coordinator: User = Depends(get_current_coordinator),
):
    return await list_users(db)


@users_router.post("", response_model=UserInfo, status_code=201)
async def add_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    coordinator: User = Depends(get_current_coordinator),
):
    return await create_user(db, payload)
