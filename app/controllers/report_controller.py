import csv
import io
import re
from datetime import date, datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.progress_controller import (
    category_label,
    display_hours,
    load_activities_by_student,
)
from app.controllers.student_list_controller import get_list_or_404
from app.models.activity import Activity
from app.models.student import Student
from app.models.student_list import StudentList
from app.schemas.student import StudentOut
from app.schemas.student_list import StudentListOut
from app.services.hour_aggregator import CompletionStatus, aggregate

STUDENTS_CSV_HEADERS = ["Name", "CPF", "Course", "Class", "Valid Hours", "Status"]
REPORT_CSV_HEADERS = [
    "Student Name", "CPF", "Course", "Class",
    "Activity Type", "Hours", "Date", "Total Hours",
]


def sanitize_filename(value: str) -> str:
    value = re.sub(r"\s+", "_", (value or "").lower())
    return re.sub(r"[^a-z0-9_-]", "", value) or "lista"


def report_filename(title: str, ext: str, *, full: bool = False, today: date | None = None) -> str:
    stamp = (today or date.today()).strftime("%Y%m%d")
    prefix = "relatorio_completo" if full else "relatorio"
    return f"{prefix}_{sanitize_filename(title)}_{stamp}.{ext}"


def format_date_br(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def _fmt_hours(value: float) -> str:
    return f"{value:g}"


async def build_list_report(db: AsyncSession, list_id: int) -> dict:
    """
    Every student in the list with their activities and computed totals.

    Totals and status come from the aggregator on the current records and
    current list rules; nothing here re-derives them.
    """
    student_list = await get_list_or_404(db, list_id)

    students = list(
        (
            await db.execute(
                select(Student)
                .where(Student.list_id == list_id)
                .order_by(Student.name.asc(), Student.id.asc())
            )
        ).scalars().all()
    )
    activities = await load_activities_by_student(db, [s.id for s in students])

    rows = []
    for s in students:
        acts = activities.get(s.id, [])
        result = aggregate(acts, student_list)
        rows.append(
            {
                "student": StudentOut.model_validate(s),
                "activities": [
                    {
                        "category": category_label(a.category),
                        "hours": display_hours(a.hours),
                        "occurred_on": a.occurred_on,
                    }
                    for a in acts
                ],
                "valid_total_hours": display_hours(result.valid_total_hours),
                "status": result.completion_status,
            }
        )

    return {
        "student_list": StudentListOut(
            id=student_list.id,
            title=student_list.title,
            total_hours_required=student_list.total_hours_required,
            max_hours_per_category=student_list.max_hours_per_category,
            student_count=len(students),
            created_at=student_list.created_at,
        ),
        "generated_at": datetime.now(timezone.utc),
        "students": rows,
    }


def _csv_bytes(header: list[str], rows: list[list[str]]) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    # BOM so spreadsheet apps pick up UTF-8
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


def students_csv(report: dict) -> bytes:
    rows = []
    for entry in report["students"]:
        s = entry["student"]
        rows.append([
            s.name,
            s.cpf,
            s.course,
            s.class_name,
            _fmt_hours(entry["valid_total_hours"]),
            CompletionStatus(entry["status"]).value,
        ])
    return _csv_bytes(STUDENTS_CSV_HEADERS, rows)


def full_report_csv(report: dict) -> bytes:
    """
    One row per activity; the student's valid total only on their first
    row. Students with no activities still get one row.
    """
    rows = []
    for entry in report["students"]:
        s = entry["student"]
        identity = [s.name, s.cpf, s.course, s.class_name]
        total = _fmt_hours(entry["valid_total_hours"])

        if not entry["activities"]:
            rows.append(identity + ["", "", "", total])
            continue

        for index, act in enumerate(entry["activities"]):
            rows.append(identity + [
                act["category"],
                _fmt_hours(act["hours"]),
                format_date_br(act["occurred_on"]),
                total if index == 0 else "",
            ])
    return _csv_bytes(REPORT_CSV_HEADERS, rows)


async def dashboard_stats(db: AsyncSession) -> dict:
    lists = list((await db.execute(select(StudentList).order_by(StudentList.title.asc()))).scalars().all())
    students = list((await db.execute(select(Student))).scalars().all())
    total_activities = (await db.execute(select(func.count(Activity.id)))).scalar() or 0

    activities = await load_activities_by_student(db, [s.id for s in students])
    lists_by_id = {sl.id: sl for sl in lists}

    per_list = {sl.id: {"student_count": 0, "completed_count": 0} for sl in lists}
    completed_students = 0

    for s in students:
        result = aggregate(activities.get(s.id, []), lists_by_id[s.list_id])
        per_list[s.list_id]["student_count"] += 1
        if result.is_complete:
            per_list[s.list_id]["completed_count"] += 1
            completed_students += 1

    return {
        "total_lists": len(lists),
        "total_students": len(students),
        "completed_students": completed_students,
        "total_activities": int(total_activities),
        "lists": [
            {
                "id": sl.id,
                "title": sl.title,
                "total_hours_required": sl.total_hours_required,
                **per_list[sl.id],
            }
            for sl in lists
        ],
    }
