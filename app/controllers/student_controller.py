import csv
import io
import logging
from typing import List, Tuple

from fastapi import HTTPException
from sqlalchemy import select, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.progress_controller import display_hours, load_activities_by_student
from app.controllers.student_list_controller import get_list_or_404
from app.models.activity import Activity
from app.models.student import Student
from app.schemas.student import StudentCreate, StudentUpdate, StudentOut, StudentWithHoursOut
from app.services.hour_aggregator import CompletionStatus, aggregate

logger = logging.getLogger(__name__)

# normalized header -> field; Portuguese headers come from the original sheet
CSV_HEADER_ALIASES = {
    "nome": "name",
    "name": "name",
    "cpf": "cpf",
    "curso": "course",
    "course": "course",
    "turma": "class_name",
    "class": "class_name",
    "class_name": "class_name",
}
CSV_REQUIRED_FIELDS = ("name", "cpf", "course", "class_name")

CSV_TEMPLATE_ROWS = [
    ("Nome", "CPF", "Curso", "Turma"),
    ("João da Silva", "123.456.789-00", "Engenharia Civil", "2024.1"),
    ("Maria Santos", "234.567.890-11", "Engenharia Mecânica", "2024.1"),
    ("Pedro Oliveira", "345.678.901-22", "Engenharia Elétrica", "2024.2"),
]


def _clean(v: str | None) -> str:
    return (v or "").strip()


def _normalize_csv_headers(fieldnames: list[str] | None) -> dict[str, str]:
    """
    Returns field -> original header for every recognised column.
    Headers are matched case-insensitively.
    """
    if not fieldnames:
        return {}
    field_map: dict[str, str] = {}
    for header in fieldnames:
        if not header:
            continue
        key = header.strip().lower()
        target = CSV_HEADER_ALIASES.get(key)
        if target and target not in field_map:
            field_map[target] = header
    return field_map


async def get_student_or_404(db: AsyncSession, student_id: int) -> Student:
    res = await db.execute(select(Student).where(Student.id == student_id))
    student = res.scalar_one_or_none()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


async def _ensure_cpf_free(db: AsyncSession, list_id: int, cpf: str, exclude_id: int | None = None) -> None:
    stmt = select(Student.id).where(Student.list_id == list_id, Student.cpf == cpf)
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise HTTPException(status_code=409, detail=f"Duplicate CPF in this list: {cpf}")


async def list_students_with_hours(
    db: AsyncSession,
    list_id: int,
    *,
    q: str | None = None,
    status: CompletionStatus | None = None,
) -> list[StudentWithHoursOut]:
    student_list = await get_list_or_404(db, list_id)

    stmt = select(Student).where(Student.list_id == list_id)
    if q and q.strip():
        like = f"%{q.strip()}%"
        stmt = stmt.where(or_(Student.name.ilike(like), Student.cpf.ilike(like)))
    stmt = stmt.order_by(Student.name.asc(), Student.id.asc())

    students = list((await db.execute(stmt)).scalars().all())
    activities = await load_activities_by_student(db, [s.id for s in students])

    out: list[StudentWithHoursOut] = []
    for s in students:
        result = aggregate(activities.get(s.id, []), student_list)
        if status is not None and result.completion_status != status:
            continue
        out.append(
            StudentWithHoursOut(
                **StudentOut.model_validate(s).model_dump(),
                valid_total_hours=display_hours(result.valid_total_hours),
                status=result.completion_status,
            )
        )
    return out


async def create_student(db: AsyncSession, list_id: int, payload: StudentCreate) -> Student:
    await get_list_or_404(db, list_id)

    cpf = payload.cpf.strip()
    await _ensure_cpf_free(db, list_id, cpf)

    s = Student(
        list_id=list_id,
        name=payload.name.strip(),
        cpf=cpf,
        course=payload.course.strip(),
        class_name=payload.class_name.strip(),
    )
    db.add(s)
    await db.commit()
    await db.refresh(s)

    logger.info("Enrolled student %s in list %s", s.id, list_id)
    return s


async def update_student(db: AsyncSession, student_id: int, payload: StudentUpdate) -> Student:
    s = await get_student_or_404(db, student_id)

    if payload.cpf is not None and payload.cpf != s.cpf:
        await _ensure_cpf_free(db, s.list_id, payload.cpf, exclude_id=s.id)
        s.cpf = payload.cpf

    if payload.name is not None:
        s.name = payload.name
    if payload.course is not None:
        s.course = payload.course
    if payload.class_name is not None:
        s.class_name = payload.class_name

    await db.commit()
    await db.refresh(s)
    return s


async def delete_student(db: AsyncSession, student_id: int) -> None:
    s = await get_student_or_404(db, student_id)
    await db.execute(delete(Activity).where(Activity.student_id == s.id))
    await db.execute(delete(Student).where(Student.id == s.id))
    await db.commit()
    logger.info("Deleted student %s from list %s", student_id, s.list_id)


async def create_students_from_csv(
    db: AsyncSession,
    list_id: int,
    csv_bytes: bytes,
    skip_duplicates: bool = True,
) -> Tuple[int, int, int, int, List[str]]:
    """
    CSV headers expected (case-insensitive):
      Nome, CPF, Curso, Turma   (or name, cpf, course, class)

    Rows without a name or CPF are counted as invalid.
    Returns (total_rows, inserted, skipped, invalid, errors).
    """
    await get_list_or_404(db, list_id)

    errors: List[str] = []
    inserted = 0
    skipped = 0
    invalid = 0

    try:
        text = csv_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = csv_bytes.decode("utf-8", errors="replace")

    reader = csv.DictReader(io.StringIO(text))

    if not reader.fieldnames:
        return (0, 0, 0, 0, ["CSV has no headers. Required: Nome, CPF, Curso, Turma"])

    field_map = _normalize_csv_headers(reader.fieldnames)

    missing = [f for f in CSV_REQUIRED_FIELDS if f not in field_map]
    if missing:
        return (0, 0, 0, 0, ["CSV must contain the columns: Nome, CPF, Curso, Turma"])

    rows = list(reader)
    total_rows = len(rows)

    existing_rows = (await db.execute(select(Student.cpf).where(Student.list_id == list_id))).all()
    existing_cpfs = {r[0] for r in existing_rows if r[0]}

    for idx, row in enumerate(rows, start=2):
        name = _clean(row.get(field_map["name"]))
        cpf = _clean(row.get(field_map["cpf"]))
        course = _clean(row.get(field_map["course"]))
        class_name = _clean(row.get(field_map["class_name"]))

        if not name or not cpf:
            invalid += 1
            errors.append(f"Row {idx}: name and CPF are required")
            continue

        if len(name) > 150 or len(cpf) > 20 or len(course) > 150 or len(class_name) > 50:
            invalid += 1
            errors.append(f"Row {idx}: value too long")
            continue

        if cpf in existing_cpfs:
            if skip_duplicates:
                skipped += 1
            else:
                invalid += 1
                errors.append(f"Row {idx}: duplicate CPF in this list: {cpf}")
            continue

        db.add(
            Student(
                list_id=list_id,
                name=name,
                cpf=cpf,
                course=course,
                class_name=class_name,
            )
        )
        inserted += 1

        # later rows in the same file see this CPF as taken
        existing_cpfs.add(cpf)

    await db.commit()

    logger.info(
        "CSV import into list %s: %s rows, %s inserted, %s skipped, %s invalid",
        list_id, total_rows, inserted, skipped, invalid,
    )
    return (total_rows, inserted, skipped, invalid, errors)


def build_csv_template() -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(CSV_TEMPLATE_ROWS)
    return ("\ufeff" + buf.getvalue()).encode("utf-8")
