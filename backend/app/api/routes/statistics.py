"""Statistics Routes — dashboard aggregates."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetimes import utc_now
from app.core.statistics import bucket_by_month, month_window_start
from app.infrastructure.database import get_db
from app.models.listing import Listing

router = APIRouter(prefix="/api/v1/statistics", tags=["statistics"])


@router.get("/listings-by-month")
async def listings_by_month(db: AsyncSession = Depends(get_db)):
    since = month_window_start(utc_now(), months=6)
    result = await db.execute(
        select(Listing.created_at).where(Listing.created_at >= since)
    )
    return {
        "message": "Statistics fetched",
        "statistics": bucket_by_month(list(result.scalars())),
    }
