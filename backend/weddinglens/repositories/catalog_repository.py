# backend/weddinglens/repositories/catalog_repository.py
"""Read-side repositories for catalog reference data."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Query, Session, selectinload

from ..models.catalog import (
    Package,
    Photographer,
    Service,
    ServiceCategory,
    Testimonial,
)
from .base_repository import BaseRepository


class PhotographerRepository(BaseRepository[Photographer]):
    def __init__(self, db: Session):
        super().__init__(db, Photographer)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            selectinload(Photographer.portfolio_items),
            selectinload(Photographer.testimonials),
        )


class ServiceCategoryRepository(BaseRepository[ServiceCategory]):
    def __init__(self, db: Session):
        super().__init__(db, ServiceCategory)


class ServiceRepository(BaseRepository[Service]):
    def __init__(self, db: Session):
        super().__init__(db, Service)

    def list_services(self, category_id: Optional[int] = None) -> List[Service]:
        query = self._build_query()
        if category_id is not None:
            query = query.filter(Service.category_id == category_id)
        return self._execute_query(query.order_by(Service.id))

    def get_many(self, service_ids: Iterable[int]) -> List[Service]:
        ids = list(service_ids)
        if not ids:
            return []
        query = self._build_query().filter(Service.id.in_(ids)).order_by(Service.id)
        return self._execute_query(query)


class PackageRepository(BaseRepository[Package]):
    def __init__(self, db: Session):
        super().__init__(db, Package)


class TestimonialRepository(BaseRepository[Testimonial]):
    __test__ = False  # not a pytest class

    def __init__(self, db: Session):
        super().__init__(db, Testimonial)
