from pydantic import BaseModel
from typing import List

from app.services.hour_aggregator import CompletionStatus


class CategoryProgressOut(BaseModel):
    category: str
    raw_hours: float
    capped_hours: float
    is_capped: bool


class StudentProgressOut(BaseModel):
    student_id: int
    list_id: int

    total_hours_required: int
    max_hours_per_category: int

    valid_total_hours: float
    remaining_hours: float
    completion_percent: float
    status: CompletionStatus
    is_completed: bool

    breakdown: List[CategoryProgressOut]
