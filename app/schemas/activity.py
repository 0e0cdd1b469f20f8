from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.services.hour_aggregator import ActivityCategory


class ActivityIn(BaseModel):
    """Create and edit share one body: an edit replaces every field."""
    category: ActivityCategory
    hours: Decimal = Field(..., gt=0, le=1000, max_digits=7, decimal_places=2)
    occurred_on: date
    document_ref: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("occurred_on")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("occurred_on cannot be later than today")
        return v

    @field_validator("document_ref", "notes")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ActivityOut(BaseModel):
    id: int
    student_id: int
    category: ActivityCategory
    hours: float
    occurred_on: date
    recorded_by: str
    document_ref: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def document_missing(self) -> bool:
        return not self.document_ref
