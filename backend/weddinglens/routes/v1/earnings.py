# backend/weddinglens/routes/v1/earnings.py
"""
Earnings routes - API v1

Endpoints:
    GET /           → Dashboard figures and records, platform-wide or per photographer
    GET /analytics  → Monthly revenue series
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.services import get_earnings_service
from ...core.constants import DEFAULT_ANALYTICS_MONTHS, MAX_ANALYTICS_MONTHS
from ...core.exceptions import DomainException
from ...schemas.earnings import (
    EarningsAnalyticsResponse,
    EarningsDashboardResponse,
    EarningsRecordResponse,
    EarningsSummaryResponse,
    MonthlyEarnings,
)
from ...services.earnings_service import EarningsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["earnings-v1"])


@router.get("", response_model=EarningsDashboardResponse)
async def get_earnings(
    photographer_id: Optional[int] = Query(None, gt=0),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> EarningsDashboardResponse:
    def _load():
        return (
            earnings_service.dashboard(photographer_id),
            earnings_service.list_earnings(photographer_id),
        )

    try:
        summary, records = await asyncio.to_thread(_load)
    except DomainException as e:
        raise e.to_http_exception()

    return EarningsDashboardResponse(
        photographer_id=photographer_id,
        summary=EarningsSummaryResponse(**summary),
        records=[EarningsRecordResponse.model_validate(r) for r in records],
    )


@router.get("/analytics", response_model=EarningsAnalyticsResponse)
async def get_earnings_analytics(
    photographer_id: Optional[int] = Query(None, gt=0),
    months: int = Query(DEFAULT_ANALYTICS_MONTHS, ge=1, le=MAX_ANALYTICS_MONTHS),
    earnings_service: EarningsService = Depends(get_earnings_service),
) -> EarningsAnalyticsResponse:
    try:
        series = await asyncio.to_thread(
            earnings_service.monthly_analytics, photographer_id, months
        )
    except DomainException as e:
        raise e.to_http_exception()
    return EarningsAnalyticsResponse(
        photographer_id=photographer_id,
        months=[MonthlyEarnings(**row) for row in series],
    )


__all__ = ["router"]
