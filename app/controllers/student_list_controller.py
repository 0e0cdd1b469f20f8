import logging

from fastapi import HTTPException
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.activity import Activity
from app.models.student import Student
from app.models.student_list import StudentList
from app.schemas.student_list import StudentListCreate, StudentListUpdate, StudentListOut

logger = logging.getLogger(__name__)


def _to_out(row: StudentList, student_count: int) -> StudentListOut:
    return StudentListOut(
        id=row.id,
        title=row.title,
        total_hours_required=row.total_hours_required,
        max_hours_per_category=row.max_hours_per_category,
        student_count=int(student_count or 0),
        created_at=row.created_at,
    )


async def _count_students(db: AsyncSession, list_id: int) -> int:
    res = await db.execute(select(func.count(Student.id)).where(Student.list_id == list_id))
    return int(res.scalar() or 0)


async def get_list_or_404(db: AsyncSession, list_id: int) -> StudentList:
    res = await db.execute(select(StudentList).where(StudentList.id == list_id))
    row = res.scalar_one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Activity list not found")
    return row


async def list_student_lists(db: AsyncSession, q: str | None = None) -> list[StudentListOut]:
    counts_sq = (
        select(
            Student.list_id.label("list_id"),
            func.count(Student.id).label("student_count"),
        )
        .group_by(Student.list_id)
        .subquery()
    )

    stmt = (
        select(StudentList, func.coalesce(counts_sq.c.student_count, 0))
        .outerjoin(counts_sq, counts_sq.c.list_id == StudentList.id)
    )

    if q and q.strip():
        stmt = stmt.where(StudentList.title.ilike(f"%{q.strip()}%"))

    stmt = stmt.order_by(StudentList.created_at.desc(), StudentList.id.desc())

    rows = (await db.execute(stmt)).all()
    return [_to_out(row, count) for row, count in rows]


async def get_student_list(db: AsyncSession, list_id: int) -> StudentListOut:
    row = await get_list_or_404(db, list_id)
    return _to_out(row, await _count_students(db, list_id))


async def create_student_list(db: AsyncSession, payload: StudentListCreate) -> StudentListOut:
    row = StudentList(
        title=payload.title.strip(),
        total_hours_required=payload.total_hours_required or settings.DEFAULT_TOTAL_HOURS,
        max_hours_per_category=payload.max_hours_per_category or settings.DEFAULT_MAX_HOURS_PER_CATEGORY,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)

    logger.info(
        "Created list %s %r (total=%s, cap=%s)",
        row.id, row.title, row.total_hours_required, row.max_hours_per_category,
    )
    return _to_out(row, 0)


async def update_student_list(db: AsyncSession, list_id: int, payload: StudentListUpdate) -> StudentListOut:
    row = await get_list_or_404(db, list_id)

    if payload.title is not None:
        row.title = payload.title.strip()

    # Rule changes apply retroactively: progress is always computed
    # against the current values.
    rules_before = (row.total_hours_required, row.max_hours_per_category)

    if payload.total_hours_required is not None:
        row.total_hours_required = payload.total_hours_required

    if payload.max_hours_per_category is not None:
        row.max_hours_per_category = payload.max_hours_per_category

    rules_after = (row.total_hours_required, row.max_hours_per_category)
    if rules_after != rules_before:
        logger.info("List %s rules changed %s -> %s", row.id, rules_before, rules_after)

    await db.commit()
    await db.refresh(row)
    return _to_out(row, await _count_students(db, list_id))


async def delete_student_list(db: AsyncSession, list_id: int) -> None:
    row = await get_list_or_404(db, list_id)

    student_ids = select(Student.id).where(Student.list_id == list_id)
    await db.execute(delete(Activity).where(Activity.student_id.in_(student_ids)))
    await db.execute(delete(Student).where(Student.list_id == list_id))
    await db.execute(delete(StudentList).where(StudentList.id == row.id))
    await db.commit()

    logger.info("Deleted list %s %r", list_id, row.title)
