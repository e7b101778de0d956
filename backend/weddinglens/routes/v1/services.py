# backend/weddinglens/routes/v1/services.py
"""
Service catalog routes - API v1

Endpoints:
    GET /categories    → All service categories (public)
    GET /              → Services, optionally filtered by category (public)
    GET /{service_id}  → One service (public)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from ...api.dependencies.services import get_catalog_service
from ...core.exceptions import DomainException
from ...schemas.catalog import ServiceCategoryResponse, ServiceResponse
from ...services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["services-v1"])


@router.get("/categories", response_model=List[ServiceCategoryResponse])
async def get_service_categories(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[ServiceCategoryResponse]:
    categories = await asyncio.to_thread(catalog_service.list_categories)
    return [ServiceCategoryResponse.model_validate(c) for c in categories]


@router.get("", response_model=List[ServiceResponse])
async def list_services(
    category_id: Optional[int] = Query(None, gt=0),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[ServiceResponse]:
    services = await asyncio.to_thread(catalog_service.list_services, category_id)
    return [ServiceResponse.model_validate(s) for s in services]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int = Path(..., gt=0),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(catalog_service.get_service, service_id)
    except DomainException as e:
        raise e.to_http_exception()
    return ServiceResponse.model_validate(service)


__all__ = ["router"]
