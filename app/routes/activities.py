from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.activity_controller import (
    create_activity,
    delete_activity,
    get_activity_or_404,
    list_student_activities,
    update_activity,
)
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.activity import ActivityIn, ActivityOut
from app.services.hour_aggregator import ActivityCategory

# ─────────────────────────────────────────────────────────────
# Activities of one student (monitors + coordinators)
# ─────────────────────────────────────────────────────────────
student_activities_router = APIRouter(prefix="/students/{student_id}/activities", tags=["Activities"])


@student_activities_router.get("", response_model=list[ActivityOut])
async def list_activities(
    student_id: int,
    category: ActivityCategory | None = Query(None, description="Filter by activity type"),
    month: str | None = Query(None, pattern=r"^\d{4}-\d{2}$", description="Filter by month, YYYY-MM"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        return await list_student_activities(db, student_id, category=category, month=month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@student_activities_router.post("", response_model=ActivityOut, status_code=201)
async def log_activity(
    student_id: int,
    payload: ActivityIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await create_activity(db, student_id, payload, recorded_by=user)


router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("/{activity_id}", response_model=ActivityOut)
async def get_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await get_activity_or_404(db, activity_id)


@router.put("/{activity_id}", response_model=ActivityOut)
async def edit_activity(
    activity_id: int,
    payload: ActivityIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await update_activity(db, activity_id, payload, edited_by=user)


@router.delete("/{activity_id}")
async def remove_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await delete_activity(db, activity_id, deleted_by=user)
    return {"ok": True}
