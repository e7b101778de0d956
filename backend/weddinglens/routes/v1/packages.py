# backend/weddinglens/routes/v1/packages.py
"""
Package routes - API v1

Endpoints:
    GET /              → All packages (public)
    GET /{package_id}  → One package (public)
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies.services import get_catalog_service
from ...core.exceptions import DomainException
from ...schemas.catalog import PackageResponse
from ...services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["packages-v1"])


@router.get("", response_model=List[PackageResponse])
async def list_packages(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[PackageResponse]:
    packages = await asyncio.to_thread(catalog_service.list_packages)
    return [PackageResponse.model_validate(p) for p in packages]


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: int = Path(..., gt=0),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(catalog_service.get_package, package_id)
    except DomainException as e:
        raise e.to_http_exception()
    return PackageResponse.model_validate(package)


__all__ = ["router"]
