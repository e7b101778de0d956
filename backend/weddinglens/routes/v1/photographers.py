# backend/weddinglens/routes/v1/photographers.py
"""
Photographer catalog routes - API v1

Endpoints:
    GET /                  → List photographers (public)
    GET /{photographer_id} → Profile with portfolio and testimonials (public)
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies.services import get_catalog_service
from ...core.exceptions import DomainException
from ...schemas.catalog import (
    PhotographerProfileResponse,
    PhotographerResponse,
    PortfolioItemResponse,
    TestimonialResponse,
)
from ...services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["photographers-v1"])


@router.get("", response_model=List[PhotographerResponse])
async def list_photographers(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[PhotographerResponse]:
    photographers = await asyncio.to_thread(catalog_service.list_photographers)
    return [PhotographerResponse.model_validate(p) for p in photographers]


@router.get(
    "/{photographer_id}",
    response_model=PhotographerProfileResponse,
    responses={404: {"description": "Photographer not found"}},
)
async def get_photographer(
    photographer_id: int = Path(..., gt=0),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PhotographerProfileResponse:
    """Photographer detail page."""
    try:
        profile = await asyncio.to_thread(
            catalog_service.get_photographer_profile, photographer_id
        )
    except DomainException as e:
        raise e.to_http_exception()

    return PhotographerProfileResponse(
        photographer=PhotographerResponse.model_validate(profile["photographer"]),
        portfolio=[PortfolioItemResponse.model_validate(item) for item in profile["portfolio"]],
        testimonials=[TestimonialResponse.model_validate(t) for t in profile["testimonials"]],
    )


__all__ = ["router"]
