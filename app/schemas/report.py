from datetime import date, datetime
from typing import List

from pydantic import BaseModel

from app.schemas.student import StudentOut
from app.schemas.student_list import StudentListOut
from app.services.hour_aggregator import CompletionStatus


class ReportActivityOut(BaseModel):
    category: str
    hours: float
    occurred_on: date


class ReportStudentOut(BaseModel):
    student: StudentOut
    activities: List[ReportActivityOut]
    valid_total_hours: float
    status: CompletionStatus


class ListReportOut(BaseModel):
    student_list: StudentListOut
    generated_at: datetime
    students: List[ReportStudentOut]


class ListSummaryOut(BaseModel):
    id: int
    title: str
    total_hours_required: int
    student_count: int
    completed_count: int


class DashboardStatsOut(BaseModel):
    total_lists: int
    total_students: int
    completed_students: int
    total_activities: int
    lists: List[ListSummaryOut]
