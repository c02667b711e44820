from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.database import get_db
from way2pg.modules.auth.dependencies import AuthContext, require_admin
from way2pg.schemas.admin import DashboardStats
from way2pg.services.user_service import user_service

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Counts shown on the admin dashboard"""
    return await user_service.dashboard_stats(db)
