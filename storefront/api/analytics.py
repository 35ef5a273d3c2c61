"""Admin analytics endpoint"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth import require_admin
from storefront.database import get_db
from storefront.models.user import User
from storefront.schemas.analytics import AnalyticsResponse
from storefront.services.analytics import build_analytics

router = APIRouter()


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    time_range: str = "7days",
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Revenue, order counts and best sellers for 7days, 30days or 90days"""
    return await build_analytics(db, time_range)
