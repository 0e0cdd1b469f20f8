from datetime import datetime
from typing import Annotated
from pydantic import BaseModel, StringConstraints

from app.services.hour_aggregator import CompletionStatus


NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=150)]
CPFStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=20)]
CourseStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=150)]
ClassStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


class StudentCreate(BaseModel):
    name: NameStr
    cpf: CPFStr
    course: CourseStr = ""
    class_name: ClassStr = ""


class StudentUpdate(BaseModel):
    name: NameStr | None = None
    cpf: CPFStr | None = None
    course: CourseStr | None = None
    class_name: ClassStr | None = None


class StudentOut(BaseModel):
    id: int
    list_id: int
    name: str
    cpf: str
    course: str
    class_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentWithHoursOut(StudentOut):
    # computed from current activities + list rules, never stored
    valid_total_hours: float
    status: CompletionStatus


class BulkUploadResult(BaseModel):
    total_rows: int
    inserted: int
    skipped_duplicates: int
    invalid_rows: int
    errors: list[str] = []
