from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole


# ── Request Body ──────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "coordinator@escola.edu.br",
                "password": "YourPassword123",
            }
        }
    }


# ── Response Bodies ───────────────────────────────────────────────────
class UserInfo(BaseModel):
    """
    Safe user info sent to the frontend after login.
    password_hash is never included here.
    """
    id: int
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds; frontend uses this to know when token expires
    user: UserInfo


class MeResponse(BaseModel):
    """Full profile, returned by GET /auth/me"""
    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── User management (coordinator) ─────────────────────────────────────
class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.MONITOR
