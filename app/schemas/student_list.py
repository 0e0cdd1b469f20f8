# app/schemas/student_list.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class StudentListCreate(BaseModel):
    title: str = Field(min_length=2, max_length=200)
    # omitted -> DEFAULT_TOTAL_HOURS / DEFAULT_MAX_HOURS_PER_CATEGORY from settings
    total_hours_required: Optional[int] = Field(default=None, gt=0)
    max_hours_per_category: Optional[int] = Field(default=None, gt=0)


class StudentListUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=200)
    total_hours_required: Optional[int] = Field(default=None, gt=0)
    max_hours_per_category: Optional[int] = Field(default=None, gt=0)


class StudentListOut(BaseModel):
    id: int
    title: str
    total_hours_required: int
    max_hours_per_category: int
    student_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
