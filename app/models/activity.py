from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, ForeignKey, Numeric, Text, func, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.services.hour_aggregator import ActivityCategory


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    category = Column(Enum(ActivityCategory, name="activity_category_enum"), nullable=False)
    hours = Column(Numeric(7, 2), nullable=False)
    occurred_on = Column(Date, nullable=False)

    # display name of whoever logged it, not a foreign key
    recorded_by = Column(String(150), nullable=False)

    # opaque reference to the supporting document (filename / blob key)
    document_ref = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    student = relationship("Student", back_populates="activities")

Index("ix_activities_student_category", Activity.student_id, Activity.category)
