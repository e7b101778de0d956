"""Response schemas for the read-only photographer and service catalog."""

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class PortfolioItemResponse(StrictModel):
    id: int
    image_url: str
    title: str
    category: str
    description: Optional[str] = None


class TestimonialResponse(StrictModel):
    __test__ = False

    id: int
    photographer_id: int
    client_name: str
    client_image: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: str
    event_type: str


class PhotographerResponse(StrictModel):
    id: int
    name: str
    bio: str
    profile_image: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    experience: int
    location: str


class PhotographerProfileResponse(StrictModel):
    """Photographer detail page: profile, portfolio and reviews."""

    photographer: PhotographerResponse
    portfolio: List[PortfolioItemResponse] = Field(default_factory=list)
    testimonials: List[TestimonialResponse] = Field(default_factory=list)


class ServiceCategoryResponse(StrictModel):
    id: int
    name: str
    description: str
    image_url: Optional[str] = None


class ServiceResponse(StrictModel):
    id: int
    name: str
    description: str
    category_id: int
    price: Decimal
    duration_hours: int
    image_url: Optional[str] = None


class PackageResponse(StrictModel):
    id: int
    name: str
    description: str
    price: Decimal
    service_ids: List[int] = Field(default_factory=list)
    image_url: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    popular: bool = False
