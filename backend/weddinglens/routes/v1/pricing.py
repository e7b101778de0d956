# backend/weddinglens/routes/v1/pricing.py
"""
Pricing routes - API v1

Endpoints:
    POST /quote → Server-side price for a package or service selection (public)
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.services import get_pricing_service
from ...core.exceptions import DomainException
from ...schemas.pricing import QuoteRequest, QuoteResponse
from ...services.pricing_service import PricingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pricing-v1"])


@router.post("/quote", response_model=QuoteResponse)
async def quote_price(
    payload: QuoteRequest,
    pricing_service: PricingService = Depends(get_pricing_service),
) -> QuoteResponse:
    try:
        quote = await asyncio.to_thread(
            pricing_service.quote, payload.package_id, payload.services
        )
    except DomainException as e:
        raise e.to_http_exception()
    return QuoteResponse.from_quote(quote)


__all__ = ["router"]
