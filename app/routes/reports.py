from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.report_controller import (
    build_list_report,
    full_report_csv,
    report_filename,
    students_csv,
)
from app.core.database import get_db
from app.core.dependencies import get_current_coordinator
from app.core.report_pdf import build_list_report_pdf
from app.schemas.report import ListReportOut

router = APIRouter(prefix="/lists/{list_id}", tags=["Reports"])


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/report", response_model=ListReportOut)
async def list_report(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    return await build_list_report(db, list_id)


@router.get("/report.csv")
async def list_report_csv(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    report = await build_list_report(db, list_id)
    filename = report_filename(report["student_list"].title, "csv", full=True)
    return _attachment(full_report_csv(report), "text/csv; charset=utf-8", filename)


@router.get("/students.csv")
async def list_students_csv(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    report = await build_list_report(db, list_id)
    filename = report_filename(report["student_list"].title, "csv")
    return _attachment(students_csv(report), "text/csv; charset=utf-8", filename)


@router.get("/report.pdf")
async def list_report_pdf(
    list_id: int,
    db: AsyncSession = Depends(get_db),
    coordinator=Depends(get_current_coordinator),
):
    report = await build_list_report(db, list_id)
    filename = report_filename(report["student_list"].title, "pdf")
    return _attachment(build_list_report_pdf(report), "application/pdf", filename)
