# backend/weddinglens/services/catalog_service.py
"""
Catalog Service for WeddingLens

Read-only lookups over photographers, service categories, services and
packages, plus the YAML seeding used to populate an empty database.
"""

from decimal import Decimal
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session
import yaml

from ..core.exceptions import NotFoundException
from ..models.catalog import (
    Package,
    Photographer,
    PortfolioItem,
    Service,
    ServiceCategory,
    Testimonial,
)
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).resolve().parent.parent / "seed_data" / "catalog.yaml"


class CatalogService(BaseService):
    """Lookups over catalog reference data."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.photographer_repository = RepositoryFactory.create_photographer_repository(db)
        self.category_repository = RepositoryFactory.create_service_category_repository(db)
        self.service_repository = RepositoryFactory.create_service_repository(db)
        self.package_repository = RepositoryFactory.create_package_repository(db)
        self.testimonial_repository = RepositoryFactory.create_testimonial_repository(db)

    def get_photographer(self, photographer_id: int) -> Photographer:
        photographer = self.photographer_repository.get_by_id(
            photographer_id, load_relationships=False
        )
        if not photographer:
            raise NotFoundException(
                f"Photographer {photographer_id} not found",
                details={"photographer_id": photographer_id},
            )
        return photographer

    @BaseService.measure_operation("get_photographer_profile")
    def get_photographer_profile(self, photographer_id: int) -> Dict[str, Any]:
        """Photographer with portfolio and testimonials, as the detail page shows it."""
        photographer = self.photographer_repository.get_by_id(photographer_id)
        if not photographer:
            raise NotFoundException(
                f"Photographer {photographer_id} not found",
                details={"photographer_id": photographer_id},
            )
        return {
            "photographer": photographer,
            "portfolio": list(photographer.portfolio_items),
            "testimonials": list(photographer.testimonials),
        }

    def list_photographers(self) -> List[Photographer]:
        return self.photographer_repository.get_all(limit=None)

    def get_package(self, package_id: int) -> Package:
        package = self.package_repository.get_by_id(package_id)
        if not package:
            raise NotFoundException(
                f"Package {package_id} not found", details={"package_id": package_id}
            )
        return package

    def list_packages(self) -> List[Package]:
        return self.package_repository.get_all(limit=None)

    def get_service(self, service_id: int) -> Service:
        service = self.service_repository.get_by_id(service_id)
        if not service:
            raise NotFoundException(
                f"Service {service_id} not found", details={"service_id": service_id}
            )
        return service

    def list_services(self, category_id: Optional[int] = None) -> List[Service]:
        return self.service_repository.list_services(category_id)

    def get_services(self, service_ids: List[int]) -> Dict[int, Service]:
        """Resolve service ids, raising NotFoundException naming any that are unknown."""
        found = {service.id: service for service in self.service_repository.get_many(service_ids)}
        missing = sorted(set(service_ids) - set(found))
        if missing:
            raise NotFoundException(
                f"Unknown service ids: {', '.join(str(i) for i in missing)}",
                details={"service_ids": missing},
            )
        return found

    def list_categories(self) -> List[ServiceCategory]:
        return self.category_repository.get_all(limit=None)

    def list_testimonials(self) -> List[Testimonial]:
        return self.testimonial_repository.get_all(limit=None)

    def is_empty(self) -> bool:
        return self.photographer_repository.count() == 0

    @BaseService.measure_operation("seed_catalog")
    def seed_from_yaml(self, path: Optional[Union[str, Path]] = None) -> Dict[str, int]:
        """
        Load catalog YAML into the database.

        Existing rows (matched by id) are left untouched, so re-running is safe.

        Returns:
            Number of rows created per section.
        """
        seed_path = Path(path) if path else DEFAULT_SEED_PATH
        with open(seed_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        stats = {
            "photographers": 0,
            "categories": 0,
            "services": 0,
            "packages": 0,
            "portfolio_items": 0,
            "testimonials": 0,
        }
        with self.transaction():
            for row in data.get("photographers", []):
                if self.db.get(Photographer, row["id"]) is None:
                    self.db.add(Photographer(**row))
                    stats["photographers"] += 1
            for row in data.get("categories", []):
                if self.db.get(ServiceCategory, row["id"]) is None:
                    self.db.add(ServiceCategory(**row))
                    stats["categories"] += 1
            self.db.flush()
            for row in data.get("services", []):
                if self.db.get(Service, row["id"]) is None:
                    self.db.add(Service(**{**row, "price": Decimal(str(row["price"]))}))
                    stats["services"] += 1
            for row in data.get("packages", []):
                if self.db.get(Package, row["id"]) is None:
                    self.db.add(Package(**{**row, "price": Decimal(str(row["price"]))}))
                    stats["packages"] += 1
            self.db.flush()
            # Portfolio and testimonials carry no ids; only seed them alongside a fresh catalog.
            if stats["photographers"]:
                for row in data.get("portfolio_items", []):
                    self.db.add(PortfolioItem(**row))
                    stats["portfolio_items"] += 1
                for row in data.get("testimonials", []):
                    self.db.add(Testimonial(**row))
                    stats["testimonials"] += 1

        self.logger.info("Catalog seeded from %s: %s", seed_path, stats)
        return stats


def seed_catalog(db: Session, path: Optional[Union[str, Path]] = None) -> Dict[str, int]:
    """Seed the catalog into ``db`` if it is empty. Returns creation counts."""
    service = CatalogService(db)
    if not service.is_empty():
        logger.info("Catalog already present, skipping seed")
        return {}
    return service.seed_from_yaml(path)
