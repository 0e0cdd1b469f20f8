# app/routes/student_lists.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.student_list_controller import (
    create_student_list,
    delete_student_list,
    get_student_list,
    list_student_lists,
    update_student_list,
)
from app.core.database import get_db
from app.core.dependencies import get_current_coordinator, get_current_user
from app.schemas.student_list import StudentListCreate, StudentListOut, StudentListUpdate

router = APIRouter(prefix="/lists", tags=["Activity Lists"])


@router.get("", response_model=list[StudentListOut])
async def get_lists(
    q: str | None = Query(None, description="Search by title"),
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await list_student_lists(db, q)


@router.get("/{list_id}", response_model=StudentListOut)
async def get_list(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_student_list(db, list_id)


@router.post("", response_model=StudentListOut, status_code=201)
async def create_list(
    payload: StudentListCreate,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    return await create_student_list(db, payload)


@router.put("/{list_id}", response_model=StudentListOut)
async def update_list(
    list_id: int,
    payload: StudentListUpdate,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    return await update_student_list(db, list_id, payload)


@router.delete("/{list_id}")
async def delete_list(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    await delete_student_list(db, list_id)
    return {"ok": True}
