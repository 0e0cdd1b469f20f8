# app/models/student_list.py
from __future__ import annotations

from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, func, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.student import Student


class StudentList(Base):
    __tablename__ = "student_lists"

    __table_args__ = (
        CheckConstraint("total_hours_required > 0", name="ck_student_lists_total_positive"),
        CheckConstraint("max_hours_per_category > 0", name="ck_student_lists_cap_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    # --------------------------------------------------
    # HOUR RULES (read on every aggregation, never copied onto students)
    # --------------------------------------------------

    total_hours_required: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=150,
        server_default="150",
    )

    max_hours_per_category: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=50,
        server_default="50",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    students: Mapped[List["Student"]] = relationship(
        "Student",
        back_populates="student_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
