from datetime import date

from fastapi import APIRouter, Depends, Query

from supermarket.core.deps import get_statistics_service
from supermarket.core.exceptions import ValidationError
from supermarket.schemas.statistics import StatisticsReport
from supermarket.services.statistics_service import StatisticsService

router = APIRouter(
    prefix="/statistics",
    tags=["Statistics"],
)


@router.get("/report", response_model=StatisticsReport)
async def statistics_report(
    start: date,
    end: date,
    product_id: str | None = Query(None, alias="productId"),
    top: int | None = Query(None, ge=1),
    service: StatisticsService = Depends(get_statistics_service),
):
    """Summary, daily trend, top sellers, category split and hourly split for a date range."""
    if start > end:
        raise ValidationError("start must not be after end")
    return await service.build_report(start, end, product_id=product_id, top_limit=top)
