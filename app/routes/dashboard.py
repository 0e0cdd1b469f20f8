from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.report_controller import dashboard_stats
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.schemas.report import DashboardStatsOut

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsOut)
async def stats(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await dashboard_stats(db)
