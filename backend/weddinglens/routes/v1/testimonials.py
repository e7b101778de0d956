# backend/weddinglens/routes/v1/testimonials.py
"""Testimonial routes - API v1 (public)."""

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.services import get_catalog_service
from ...schemas.catalog import TestimonialResponse
from ...services.catalog_service import CatalogService

router = APIRouter(tags=["testimonials-v1"])


@router.get("", response_model=List[TestimonialResponse])
async def list_testimonials(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[TestimonialResponse]:
    testimonials = await asyncio.to_thread(catalog_service.list_testimonials)
    return [TestimonialResponse.model_validate(t) for t in testimonials]


__all__ = ["router"]
