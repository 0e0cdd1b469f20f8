import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class UserRole(str, enum.Enum):
    COORDINATOR = "COORDINATOR"
    MONITOR = "MONITOR"


class User(Base):
    """
    Staff account that can sign in.

    Coordinators manage lists and students and see reports; monitors log
    activities for students. Both can log, edit and delete activities.
    """
    __tablename__ = "users"

    id:            Mapped[int]             = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    name:          Mapped[str]             = mapped_column(String(150), nullable=False)
    email:         Mapped[str]             = mapped_column(String(255), unique=True, index=True, nullable=False)
    role:          Mapped[UserRole]        = mapped_column(
        SAEnum(UserRole, name="user_role_enum"),
        nullable=False,
        default=UserRole.MONITOR,
    )
    password_hash: Mapped[str]             = mapped_column(Text, nullable=False)
    is_active:     Mapped[bool]            = mapped_column(Boolean, default=True, nullable=False, server_default="1")
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at:    Mapped[datetime]        = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def is_coordinator(self) -> bool:
        return self.role == UserRole.COORDINATOR

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
