# app/routes/students.py

from fastapi import APIRouter, Depends, File, Query, UploadFile, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.progress_controller import get_student_progress
from app.controllers.student_controller import (
    build_csv_template,
    create_student,
    create_students_from_csv,
    delete_student,
    get_student_or_404,
    list_students_with_hours,
    update_student,
)
from app.core.database import get_db
from app.core.dependencies import get_current_coordinator, get_current_user
from app.schemas.progress import StudentProgressOut
from app.schemas.student import (
    BulkUploadResult,
    StudentCreate,
    StudentOut,
    StudentUpdate,
    StudentWithHoursOut,
)
from app.services.hour_aggregator import CompletionStatus

MAX_CSV_BYTES = 5 * 1024 * 1024


# ─────────────────────────────────────────────────────────────
# Students inside a list
# ─────────────────────────────────────────────────────────────
list_students_router = APIRouter(prefix="/lists/{list_id}/students", tags=["Students"])


@list_students_router.get("", response_model=list[StudentWithHoursOut])
async def list_students(
    list_id: int,
    q: str | None = Query(None, description="Optional search. Matches name or CPF."),
    status: CompletionStatus | None = Query(None, description="Optional filter: complete / in progress"),
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await list_students_with_hours(db, list_id, q=q, status=status)


@list_students_router.post("", response_model=StudentOut, status_code=201)
async def add_student(
    list_id: int,
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    return await create_student(db, list_id, payload)


@list_students_router.post("/import", response_model=BulkUploadResult)
async def import_students(
    list_id: int,
    file: UploadFile = File(...),
    skip_duplicates: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="File must be a CSV")

    content = await file.read()
    if len(content) > MAX_CSV_BYTES:
        raise HTTPException(status_code=400, detail="CSV too large. Maximum size: 5MB")

    total, inserted, skipped, invalid, errors = await create_students_from_csv(
        db, list_id, content, skip_duplicates=skip_duplicates
    )
    return BulkUploadResult(
        total_rows=total,
        inserted=inserted,
        skipped_duplicates=skipped,
        invalid_rows=invalid,
        errors=errors,
    )


# ─────────────────────────────────────────────────────────────
# Single student
# ─────────────────────────────────────────────────────────────
router = APIRouter(prefix="/students", tags=["Students"])


# declared before /{student_id} so the literal path wins
@router.get("/import-template")
async def import_template(user=Depends(get_current_user)):
    return Response(
        content=build_csv_template(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="modelo_importacao_estudantes.csv"'},
    )


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_student_or_404(db, student_id)


@router.patch("/{student_id}", response_model=StudentOut)
async def patch_student(
    student_id: int,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    return await update_student(db, student_id, payload)


@router.delete("/{student_id}")
async def remove_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    await delete_student(db, student_id)
    return {"ok": True}


@router.get("/{student_id}/progress", response_model=StudentProgressOut)
async def student_progress(
    student_id: int,
    all_categories: bool = Query(False, description="Include zero-hour entries for every activity type"),
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_student_progress(db, student_id, all_categories=all_categories)
