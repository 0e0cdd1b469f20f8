from __future__ import annotations

from typing import List, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    func,
    UniqueConstraint,
    Index,
    ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.student_list import StudentList
    from app.models.activity import Activity


class Student(Base):
    """
    A student enrolled in one activity list.

    There is deliberately no total hours / status column here: both are
    derived from the student's activities and the list rules on every read
    (see app.services.hour_aggregator).
    """
    __tablename__ = "students"

    __table_args__ = (
        UniqueConstraint("list_id", "cpf", name="uq_students_list_cpf"),
        Index("ix_students_list_name", "list_id", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    list_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("student_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    cpf: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    course: Mapped[str] = mapped_column(String(150), nullable=False, default="", server_default="")
    class_name: Mapped[str] = mapped_column(String(50), nullable=False, default="", server_default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    student_list: Mapped["StudentList"] = relationship(
        "StudentList",
        back_populates="students",
    )

    activities: Mapped[List["Activity"]] = relationship(
        "Activity",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
