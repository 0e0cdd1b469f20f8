import logging
from datetime import date

from fastapi import HTTPException
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.student_controller import get_student_or_404
from app.models.activity import Activity
from app.models.user import User
from app.schemas.activity import ActivityIn
from app.services.hour_aggregator import ActivityCategory

logger = logging.getLogger(__name__)


def month_bounds(month: str) -> tuple[date, date]:
    """'2024-03' -> (2024-03-01, 2024-04-01); end is exclusive."""
    try:
        year_s, month_s = month.split("-")
        start = date(int(year_s), int(month_s), 1)
    except ValueError:
        raise ValueError(f"Invalid month {month!r}, expected YYYY-MM")
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


async def get_activity_or_404(db: AsyncSession, activity_id: int) -> Activity:
    res = await db.execute(select(Activity).where(Activity.id == activity_id))
    row = res.scalar_one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Activity not found")
    return row


async def list_student_activities(
    db: AsyncSession,
    student_id: int,
    *,
    category: ActivityCategory | None = None,
    month: str | None = None,
) -> list[Activity]:
    await get_student_or_404(db, student_id)

    stmt = select(Activity).where(Activity.student_id == student_id)

    if category is not None:
        stmt = stmt.where(Activity.category == category)

    if month:
        start, end = month_bounds(month)
        stmt = stmt.where(Activity.occurred_on >= start, Activity.occurred_on < end)

    stmt = stmt.order_by(Activity.occurred_on.desc(), Activity.id.desc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def create_activity(
    db: AsyncSession,
    student_id: int,
    payload: ActivityIn,
    recorded_by: User,
) -> Activity:
    student = await get_student_or_404(db, student_id)

    row = Activity(
        student_id=student.id,
        category=payload.category,
        hours=payload.hours,
        occurred_on=payload.occurred_on,
        recorded_by=recorded_by.name,
        document_ref=payload.document_ref,
        notes=payload.notes,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)

    if not row.document_ref:
        logger.warning("Activity %s for student %s logged without a document", row.id, student.id)
    logger.info(
        "Logged %s h of %s for student %s by %s",
        row.hours, row.category.value, student.id, recorded_by.email,
    )
    return row


async def update_activity(
    db: AsyncSession,
    activity_id: int,
    payload: ActivityIn,
    edited_by: User,
) -> Activity:
    """Wholesale replacement; recorded_by keeps the original author."""
    row = await get_activity_or_404(db, activity_id)

    row.category = payload.category
    row.hours = payload.hours
    row.occurred_on = payload.occurred_on
    row.document_ref = payload.document_ref
    row.notes = payload.notes

    await db.commit()
    await db.refresh(row)

    logger.info("Activity %s edited by %s", row.id, edited_by.email)
    return row


async def delete_activity(db: AsyncSession, activity_id: int, deleted_by: User) -> None:
    row = await get_activity_or_404(db, activity_id)
    await db.execute(delete(Activity).where(Activity.id == row.id))
    await db.commit()
    logger.info("Activity %s of student %s deleted by %s", activity_id, row.student_id, deleted_by.email)
