from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity import Activity
from app.models.student import Student
from app.models.student_list import StudentList
from app.services.hour_aggregator import (
    ActivityCategory,
    AggregationResult,
    CategoryHours,
    aggregate,
    to_decimal,
)

_ZERO = Decimal(0)


def display_hours(value: Decimal) -> float:
    # rounding happens here, after exact summation
    return float(round(value, 2))


def category_label(category: ActivityCategory | str) -> str:
    if isinstance(category, ActivityCategory):
        return category.value
    return str(category)


async def load_activities_by_student(
    db: AsyncSession,
    student_ids: Sequence[int],
) -> dict[int, list[Activity]]:
    """Every activity of every given student, in one query."""
    grouped: dict[int, list[Activity]] = defaultdict(list)
    if not student_ids:
        return grouped

    res = await db.execute(
        select(Activity)
        .where(Activity.student_id.in_(list(student_ids)))
        .order_by(Activity.occurred_on.asc(), Activity.id.asc())
    )
    for row in res.scalars().all():
        grouped[row.student_id].append(row)
    return grouped


def breakdown_rows(result: AggregationResult, all_categories: bool = False) -> list[dict]:
    """
    Per-category rows for display.

    With all_categories, every category in ActivityCategory gets a row,
    zero-hour ones included; the aggregation itself only reports
    categories that have records.
    """
    per_category: dict = dict(result.per_category)

    if all_categories:
        for category in ActivityCategory:
            per_category.setdefault(
                category,
                CategoryHours(raw_hours=_ZERO, capped_hours=_ZERO, is_capped=False),
            )
        enum_order = list(ActivityCategory)
        ordered = sorted(
            per_category,
            key=lambda c: (0, enum_order.index(c), "") if isinstance(c, ActivityCategory) else (1, 0, str(c)),
        )
    else:
        ordered = list(per_category)

    return [
        {
            "category": category_label(category),
            "raw_hours": display_hours(per_category[category].raw_hours),
            "capped_hours": display_hours(per_category[category].capped_hours),
            "is_capped": per_category[category].is_capped,
        }
        for category in ordered
    ]


def build_progress(
    student: Student,
    student_list: StudentList,
    activities: Iterable[Activity],
    *,
    all_categories: bool = False,
) -> dict:
    result = aggregate(activities, student_list)

    required = to_decimal(student_list.total_hours_required)
    valid = result.valid_total_hours
    remaining = max(_ZERO, required - valid)
    percent = min(Decimal(100), valid / required * 100)

    return {
        "student_id": student.id,
        "list_id": student_list.id,
        "total_hours_required": int(student_list.total_hours_required),
        "max_hours_per_category": int(student_list.max_hours_per_category),
        "valid_total_hours": display_hours(valid),
        "remaining_hours": display_hours(remaining),
        "completion_percent": display_hours(percent),
        "status": result.completion_status,
        "is_completed": result.is_complete,
        "breakdown": breakdown_rows(result, all_categories=all_categories),
    }


async def get_student_progress(
    db: AsyncSession,
    student_id: int,
    *,
    all_categories: bool = False,
) -> dict:
    res = await db.execute(
        select(Student, StudentList)
        .join(StudentList, StudentList.id == Student.list_id)
        .where(Student.id == student_id)
    )
    row = res.first()
    if not row:
        raise HTTPException(status_code=404, detail="Student not found")
    student, student_list = row

    # the complete record set; a partial set would undercount
    activities = (await load_activities_by_student(db, [student.id]))[student.id]

    return build_progress(student, student_list, activities, all_categories=all_categories)
